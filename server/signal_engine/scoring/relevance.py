"""
Relevance Scorer

Keyword relevance and impact classification applied to every news item at
normalization time, plus the final ranking scalar EventAggregator sorts by.

All functions are pure given the clock passed to RelevanceScorer.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable, Optional

from signal_engine.models.events import GeopoliticalEvent, ImpactLevel

GEOPOLITICAL_KEYWORDS: tuple[str, ...] = (
    "geopolitics", "international relations", "diplomacy", "sanctions",
    "trade war", "military conflict", "defense", "NATO", "UN Security Council",
    "election", "government", "policy", "treaty", "summit", "crisis",
    "China US relations", "Russia Ukraine", "Middle East", "European Union",
    "trade agreement", "oil prices", "currency", "cybersecurity",
    "terrorism", "peacekeeping", "humanitarian", "refugee",
)

HIGH_IMPACT_KEYWORDS: tuple[str, ...] = (
    "war", "invasion", "nuclear", "sanctions", "crisis", "attack", "conflict",
    "military", "defense", "treaty", "agreement", "summit", "election",
)

MEDIUM_IMPACT_KEYWORDS: tuple[str, ...] = (
    "trade", "diplomatic", "policy", "government", "international", "relations",
    "economy", "market", "currency", "oil", "energy",
)

RECENCY_WINDOW_HOURS = 48.0
RECENCY_MAX_BOOST = 5.0

IMPACT_BOOSTS: dict[ImpactLevel, float] = {
    ImpactLevel.HIGH: 10.0,
    ImpactLevel.MEDIUM: 5.0,
    ImpactLevel.LOW: 0.0,
}


def keyword_score(title: str, description: str, vocabulary: tuple[str, ...] = GEOPOLITICAL_KEYWORDS) -> int:
    """
    Sum of word counts of every vocabulary entry found in the text.

    Matching is a case-insensitive substring test; multi-word phrases weigh
    more. An entry counts once no matter how often it appears.
    """
    text = f"{title} {description}".lower()
    return sum(len(entry.split()) for entry in vocabulary if entry.lower() in text)


def assess_geopolitical_impact(text: str) -> ImpactLevel:
    """Two high-impact hits -> high; one high or three medium -> medium; else low."""
    lowered = text.lower()
    high = sum(1 for kw in HIGH_IMPACT_KEYWORDS if kw in lowered)
    medium = sum(1 for kw in MEDIUM_IMPACT_KEYWORDS if kw in lowered)

    if high >= 2:
        return ImpactLevel.HIGH
    if high >= 1 or medium >= 3:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


def recency_boost(age_hours: float) -> float:
    """5.0 at age 0, linear down to 0.0 at 48h and beyond. Future items count as age 0."""
    age = max(0.0, age_hours)
    return max(0.0, RECENCY_WINDOW_HOURS - age) / RECENCY_WINDOW_HOURS * RECENCY_MAX_BOOST


def impact_boost(impact: ImpactLevel) -> float:
    return IMPACT_BOOSTS[impact]


def engagement_boost(engagement: Optional[int]) -> float:
    if engagement is None:
        return 0.0
    return math.log10(engagement + 1)


class RelevanceScorer:
    """
    Ranking scalar for aggregated events.

    score = keyword score + recency boost + impact boost + log10(engagement + 1)
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def age_hours(self, event: GeopoliticalEvent) -> float:
        return (self._clock() - event.published_at).total_seconds() / 3600.0

    def rank(self, event: GeopoliticalEvent) -> float:
        return (
            event.relevance_score
            + recency_boost(self.age_hours(event))
            + impact_boost(event.impact)
            + engagement_boost(event.engagement)
        )
