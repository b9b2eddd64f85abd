"""
Aggregation: cross-source events, news search, enriched contracts and
maritime traffic.
"""
from signal_engine.aggregation.contracts import ContractService, total_value
from signal_engine.aggregation.events import EventAggregator
from signal_engine.aggregation.maritime import (
    REGION_BOUNDS,
    MaritimeMonitor,
    congestion_level,
    detect_events,
)
from signal_engine.aggregation.news import NewsSearchResult, NewsSearchService

__all__ = [
    "ContractService",
    "EventAggregator",
    "MaritimeMonitor",
    "NewsSearchResult",
    "NewsSearchService",
    "REGION_BOUNDS",
    "congestion_level",
    "detect_events",
    "total_value",
]
