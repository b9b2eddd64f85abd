"""
Signal Engine Data Models

Frozen dataclasses with validation. Every model is a value object produced
fresh per request and never mutated after it is returned.
"""
from signal_engine.models.contracts import (
    ContractAward,
    DefenseContract,
    ImpactedEntity,
    MarketImpact,
)
from signal_engine.models.events import GeopoliticalEvent, ImpactLevel
from signal_engine.models.maritime import (
    CongestionLevel,
    MaritimeEvent,
    MaritimeEventType,
    VesselPosition,
    VesselTraffic,
)
from signal_engine.models.market import (
    HistoricalBar,
    MarketIndicator,
    MarketState,
    Quote,
    compute_change,
)

__all__ = [
    "CongestionLevel",
    "ContractAward",
    "DefenseContract",
    "GeopoliticalEvent",
    "HistoricalBar",
    "ImpactLevel",
    "ImpactedEntity",
    "MaritimeEvent",
    "MaritimeEventType",
    "MarketImpact",
    "MarketIndicator",
    "MarketState",
    "Quote",
    "VesselPosition",
    "VesselTraffic",
    "compute_change",
]
