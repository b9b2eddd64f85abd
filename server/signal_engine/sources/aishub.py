"""
AISHub Vessel Position Source

Requires AISHUB_USERNAME (free registration, data sharing account).
Returns the last known position of every vessel inside a bounding box.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from signal_engine.core.types import SourceUnavailableError
from signal_engine.models.maritime import VesselPosition
from signal_engine.sources.base import HttpSourceClient

SOURCE_NAME = "aishub"

# AIS "not available" sentinels
HEADING_UNAVAILABLE = 511
COURSE_UNAVAILABLE = 360


@dataclass(frozen=True)
class BoundingBox:
    name: str
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_lat <= latitude <= self.max_lat
            and self.min_lon <= longitude <= self.max_lon
        )

    def __str__(self) -> str:
        return self.name


def vessel_type_from_code(code: Any) -> str:
    """Map an AIS ship-type code onto a coarse class name."""
    try:
        value = int(code)
    except (TypeError, ValueError):
        return "other"
    if value == 30:
        return "fishing"
    if value == 35:
        return "military"
    if 60 <= value <= 69:
        return "passenger"
    if 70 <= value <= 79:
        return "cargo"
    if 80 <= value <= 89:
        return "tanker"
    return "other"


def _parse_time(value: Any) -> datetime:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).replace(" GMT", "").strip()
    return datetime.strptime(text, "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)


def _dimension(row: dict[str, Any], a: str, b: str) -> Optional[float]:
    total = float(row.get(a) or 0) + float(row.get(b) or 0)
    return total or None


def normalize_vessel(row: dict[str, Any]) -> VesselPosition:
    course = float(row.get("COG") or 0)
    if course >= COURSE_UNAVAILABLE:
        course = 0.0
    heading = float(row.get("HEADING") or 0)
    if heading >= HEADING_UNAVAILABLE:
        heading = course

    return VesselPosition(
        mmsi=str(row["MMSI"]),
        name=(row.get("NAME") or "").strip() or f"MMSI {row['MMSI']}",
        vessel_type=vessel_type_from_code(row.get("TYPE")),
        latitude=float(row["LATITUDE"]),
        longitude=float(row["LONGITUDE"]),
        course=course,
        speed=float(row.get("SOG") or 0),
        heading=heading,
        timestamp=_parse_time(row["TIME"]),
        destination=(row.get("DEST") or "").strip(),
        length=_dimension(row, "A", "B"),
        width=_dimension(row, "C", "D"),
    )


def normalize_vessels(payload: Any) -> list[VesselPosition]:
    """
    Transform an AISHub ``[header, records]`` response.

    Raises:
        SourceUnavailableError: the header reports an error
    """
    if not isinstance(payload, list) or not payload:
        raise ValueError("unexpected AISHub payload shape")
    header = payload[0]
    if not isinstance(header, dict):
        raise ValueError("unexpected AISHub header")
    if header.get("ERROR"):
        raise SourceUnavailableError(
            f"AISHub error: {header.get('ERROR_MESSAGE', 'unknown')}", source=SOURCE_NAME
        )
    records = payload[1] if len(payload) > 1 else []
    return [normalize_vessel(row) for row in records]


class AISHubClient(HttpSourceClient[BoundingBox, list[VesselPosition]]):
    name = SOURCE_NAME
    action = "vessels"
    base_url = "https://data.aishub.net"
    requires_credential = True

    async def _fetch(self, key: BoundingBox) -> list[VesselPosition]:
        payload = await self._get_json(
            f"{self.base_url}/ws.php",
            params={
                "username": self._credential,
                "format": 1,
                "output": "json",
                "compress": 0,
                "latmin": key.min_lat,
                "latmax": key.max_lat,
                "lonmin": key.min_lon,
                "lonmax": key.max_lon,
            },
        )
        return normalize_vessels(payload)
