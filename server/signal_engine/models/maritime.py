"""
Maritime Data Models

Vessel positions from AIS feeds and the traffic summaries derived from them.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class CongestionLevel(str, Enum):
    """Traffic density in a strategic waterway."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class MaritimeEventType(str, Enum):
    CONGESTION = "CONGESTION"
    MILITARY_MOVEMENT = "MILITARY_MOVEMENT"


@dataclass(frozen=True)
class VesselPosition:
    """Last reported AIS position of one vessel."""

    mmsi: str
    name: str
    vessel_type: str
    latitude: float
    longitude: float
    course: float
    speed: float
    heading: float
    timestamp: datetime
    destination: str = ""
    length: Optional[float] = None
    width: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.mmsi:
            raise ValueError("mmsi must be non-empty")
        if not (-90.0 <= self.latitude <= 90.0):
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not (-180.0 <= self.longitude <= 180.0):
            raise ValueError(f"longitude out of range: {self.longitude}")
        if self.timestamp.tzinfo is None:
            raise ValueError("timestamp must be timezone-aware")


@dataclass(frozen=True)
class VesselTraffic:
    """Counts by vessel class for one region at one point in time."""

    region: str
    total_vessels: int
    congestion_level: CongestionLevel
    commercial_vessels: int
    military_vessels: int
    cargo_vessels: int
    tanker_vessels: int
    timestamp: datetime


@dataclass(frozen=True)
class MaritimeEvent:
    """Shipping disruption signal derived from a traffic summary."""

    id: str
    event_type: MaritimeEventType
    region: str
    description: str
    impact_score: float
    vessels_affected: int
    economic_impact: str
    timestamp: datetime

    def __post_init__(self) -> None:
        if not (0.0 <= self.impact_score <= 1.0):
            raise ValueError(f"impact_score must be in [0.0, 1.0], got {self.impact_score}")
