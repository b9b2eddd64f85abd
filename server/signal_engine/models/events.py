"""
Event Data Models

News and geopolitical events after provider normalization.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ImpactLevel(str, Enum):
    """Coarse expected market significance."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class GeopoliticalEvent:
    """
    A single news item from one provider.

    ``relevance_score`` is the keyword score assigned at normalization time;
    ``rank_score`` is the final ranking scalar filled in by EventAggregator.
    """

    id: str
    title: str
    description: str
    url: str
    published_at: datetime
    source_name: str
    category: str
    impact: ImpactLevel
    relevance_score: float

    # Optional provider extras
    engagement: Optional[int] = None
    comments: Optional[int] = None
    sentiment: Optional[float] = None
    image_url: str = ""

    rank_score: float = 0.0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id must be non-empty string")
        if not self.title:
            raise ValueError("title must be non-empty string")
        if self.published_at.tzinfo is None:
            raise ValueError("published_at must be timezone-aware")
        if self.engagement is not None and self.engagement < 0:
            raise ValueError(f"engagement must be non-negative, got {self.engagement}")
