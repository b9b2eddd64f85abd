"""
Maritime Monitor

Vessel positions, traffic summaries and shipping disruption events for
strategic waterways. Built only from live AIS data: when no source answers,
positions are empty, traffic is None and no events are raised.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from signal_engine.core.types import InvalidInputError
from signal_engine.fetch.fallback import FallbackFetcher
from signal_engine.models.maritime import (
    CongestionLevel,
    MaritimeEvent,
    MaritimeEventType,
    VesselPosition,
    VesselTraffic,
)
from signal_engine.sources.aishub import BoundingBox
from signal_engine.sources.base import SourceClient

logger = logging.getLogger(__name__)

REGION_BOUNDS: dict[str, BoundingBox] = {
    "suez_canal": BoundingBox("suez_canal", 29.5, 31.5, 32.0, 34.0),
    "strait_of_hormuz": BoundingBox("strait_of_hormuz", 25.5, 27.0, 55.0, 57.5),
    "gibraltar": BoundingBox("gibraltar", 35.5, 36.5, -6.0, -4.5),
    "malacca": BoundingBox("malacca", 1.0, 6.0, 99.0, 104.0),
    "panama_canal": BoundingBox("panama_canal", 8.5, 9.5, -80.0, -79.0),
    "global": BoundingBox("global", -60.0, 70.0, -180.0, 180.0),
}

STRATEGIC_REGIONS = ("suez_canal", "strait_of_hormuz", "gibraltar", "malacca")
DEFAULT_REGION = "strait_of_hormuz"
DEFAULT_VESSEL_TYPES = ("cargo", "tanker", "military")

# (medium, high, critical) vessel counts
CONGESTION_THRESHOLDS: dict[str, tuple[int, int, int]] = {
    "suez_canal": (15, 25, 40),
    "strait_of_hormuz": (20, 35, 50),
    "gibraltar": (25, 40, 60),
    "malacca": (30, 50, 80),
    "panama_canal": (10, 20, 30),
}
DEFAULT_THRESHOLDS = CONGESTION_THRESHOLDS["suez_canal"]

COMMERCIAL_TYPES = frozenset({"cargo", "container", "bulk"})
MILITARY_TYPES = frozenset({"military", "naval", "warship"})
MILITARY_ACTIVITY_THRESHOLD = 5


def congestion_level(vessel_count: int, region: str) -> CongestionLevel:
    medium, high, critical = CONGESTION_THRESHOLDS.get(region, DEFAULT_THRESHOLDS)
    if vessel_count >= critical:
        return CongestionLevel.CRITICAL
    if vessel_count >= high:
        return CongestionLevel.HIGH
    if vessel_count >= medium:
        return CongestionLevel.MEDIUM
    return CongestionLevel.LOW


def summarize_traffic(
    region: str, vessels: Sequence[VesselPosition], timestamp: datetime
) -> VesselTraffic:
    types = [v.vessel_type.lower() for v in vessels]
    return VesselTraffic(
        region=region,
        total_vessels=len(vessels),
        congestion_level=congestion_level(len(vessels), region),
        commercial_vessels=sum(1 for t in types if t in COMMERCIAL_TYPES),
        military_vessels=sum(1 for t in types if t in MILITARY_TYPES),
        cargo_vessels=sum(1 for t in types if "cargo" in t),
        tanker_vessels=sum(1 for t in types if "tanker" in t),
        timestamp=timestamp,
    )


def detect_events(traffic: VesselTraffic) -> list[MaritimeEvent]:
    """Congestion at HIGH/CRITICAL and unusual military activity."""
    events: list[MaritimeEvent] = []
    stamp = int(traffic.timestamp.timestamp())
    place = traffic.region.replace("_", " ")

    if traffic.congestion_level in (CongestionLevel.HIGH, CongestionLevel.CRITICAL):
        critical = traffic.congestion_level is CongestionLevel.CRITICAL
        events.append(
            MaritimeEvent(
                id=f"congestion_{traffic.region}_{stamp}",
                event_type=MaritimeEventType.CONGESTION,
                region=traffic.region,
                description=f"High vessel congestion detected in {place}",
                impact_score=0.9 if critical else 0.7,
                vessels_affected=traffic.total_vessels,
                economic_impact="HIGH" if critical else "MEDIUM",
                timestamp=traffic.timestamp,
            )
        )

    if traffic.military_vessels > MILITARY_ACTIVITY_THRESHOLD:
        events.append(
            MaritimeEvent(
                id=f"military_{traffic.region}_{stamp}",
                event_type=MaritimeEventType.MILITARY_MOVEMENT,
                region=traffic.region,
                description=f"Increased military vessel activity in {place}",
                impact_score=0.8,
                vessels_affected=traffic.military_vessels,
                economic_impact="MEDIUM",
                timestamp=traffic.timestamp,
            )
        )

    return events


def region_bounds(region: str) -> BoundingBox:
    try:
        return REGION_BOUNDS[region]
    except KeyError:
        raise InvalidInputError(
            f"Unknown region: {region}",
            field="region",
            value=region,
            context={"available": ", ".join(REGION_BOUNDS)},
        ) from None


class MaritimeMonitor:
    def __init__(
        self,
        sources: Sequence[SourceClient],
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._fetcher = FallbackFetcher[list[VesselPosition]](sources, resource="vessels")
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def source_names(self) -> tuple[str, ...]:
        return self._fetcher.source_names

    async def _vessels(self, box: BoundingBox) -> Optional[list[VesselPosition]]:
        outcome = await self._fetcher.fetch(box)
        return outcome.value if outcome.ok else None

    async def positions(
        self,
        region: str = DEFAULT_REGION,
        types: Optional[Sequence[str]] = None,
    ) -> list[VesselPosition]:
        """Vessels in *region* whose class is in *types* (cargo, tanker, military by default)."""
        box = region_bounds(region)
        wanted = {t.strip().lower() for t in (types or DEFAULT_VESSEL_TYPES) if t.strip()}
        vessels = await self._vessels(box) or []
        return [v for v in vessels if v.vessel_type.lower() in wanted]

    async def traffic(self, region: str = DEFAULT_REGION) -> Optional[VesselTraffic]:
        """Traffic summary over every vessel class, or None when there is no data."""
        box = region_bounds(region)
        vessels = await self._vessels(box)
        if vessels is None:
            return None
        return summarize_traffic(region, vessels, self._clock())

    async def events(
        self, regions: Sequence[str] = STRATEGIC_REGIONS
    ) -> list[MaritimeEvent]:
        """
        Disruption events across strategic regions.

        One global snapshot is fetched and split by region bounds, so a
        single upstream request covers every region. No data, no events.
        """
        boxes = [region_bounds(r) for r in regions]
        vessels = await self._vessels(REGION_BOUNDS["global"])
        if vessels is None:
            logger.warning("No vessel data, skipping maritime event detection")
            return []

        now = self._clock()
        events: list[MaritimeEvent] = []
        for box in boxes:
            in_region = [v for v in vessels if box.contains(v.latitude, v.longitude)]
            events.extend(detect_events(summarize_traffic(box.name, in_region, now)))
        logger.info(
            f"Detected {len(events)} maritime events across {len(boxes)} regions",
            extra={"count": len(events), "vessels": len(vessels)},
        )
        return events

    def health(self) -> dict:
        return {
            "status": "operational" if self._fetcher.sources else "unconfigured",
            "sources": list(self.source_names),
            "regions": [r for r in REGION_BOUNDS if r != "global"],
        }
