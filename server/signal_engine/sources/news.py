"""
Shared pieces for news event sources.

Every news client normalizes its provider items through build_event so
impact and keyword relevance are assigned the same way for all of them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from signal_engine.models.events import GeopoliticalEvent
from signal_engine.scoring.relevance import (
    GEOPOLITICAL_KEYWORDS,
    assess_geopolitical_impact,
    keyword_score,
)

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 200
MAX_EVENT_DAYS = 30
MAX_SEARCH_LENGTH = 200

# Search terms sent to providers per category. Scoring always uses the full
# geopolitical vocabulary regardless of category.
CATEGORY_TERMS: dict[str, tuple[str, ...]] = {
    "geopolitical": GEOPOLITICAL_KEYWORDS[:5],
    "defense": ("defense contract", "military", "Pentagon", "NATO", "missile defense"),
    "energy": ("oil prices", "OPEC", "energy security", "natural gas", "sanctions"),
    "trade": ("trade war", "tariffs", "trade agreement", "export controls", "currency"),
}

DEFAULT_CATEGORY = "geopolitical"


@dataclass(frozen=True)
class EventQuery:
    """
    Key for news sources.

    ``search`` replaces the category's provider terms with free text; the
    category still labels the resulting events.
    """

    category: str = DEFAULT_CATEGORY
    days: int = 7
    search: str = ""

    def __post_init__(self) -> None:
        if self.category not in CATEGORY_TERMS:
            raise ValueError(f"Unknown category: {self.category}")
        if not (1 <= self.days <= MAX_EVENT_DAYS):
            raise ValueError(f"days must be in [1, {MAX_EVENT_DAYS}], got {self.days}")
        if len(self.search) > MAX_SEARCH_LENGTH:
            raise ValueError(f"search must be at most {MAX_SEARCH_LENGTH} characters")

    @property
    def terms(self) -> tuple[str, ...]:
        if self.search:
            return (self.search,)
        return CATEGORY_TERMS[self.category]

    def __str__(self) -> str:
        if self.search:
            return f'"{self.search}"/{self.days}d'
        return f"{self.category}/{self.days}d"


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO 8601 string or epoch seconds into an aware UTC datetime.

    Naive timestamps are taken as UTC.
    """
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not value:
        raise ValueError("timestamp is empty")

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def truncate(text: Optional[str], limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    if not text:
        return ""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def build_event(
    *,
    event_id: str,
    title: str,
    body: str,
    url: str,
    published_at: datetime,
    source_name: str,
    category: str,
    engagement: Optional[int] = None,
    comments: Optional[int] = None,
    sentiment: Optional[float] = None,
    image_url: str = "",
) -> GeopoliticalEvent:
    """
    Build a GeopoliticalEvent, scoring the full body before truncating it.
    """
    title = (title or "").strip()
    body = body or ""
    return GeopoliticalEvent(
        id=str(event_id),
        title=title,
        description=truncate(body),
        url=url or "",
        published_at=published_at,
        source_name=source_name,
        category=category,
        impact=assess_geopolitical_impact(f"{title} {body}"),
        relevance_score=float(keyword_score(title, body)),
        engagement=engagement,
        comments=comments,
        sentiment=sentiment,
        image_url=image_url or "",
    )


def normalize_items(
    source: str,
    items: Iterable[Any],
    normalize: Callable[[Any], Optional[GeopoliticalEvent]],
) -> list[GeopoliticalEvent]:
    """
    Apply *normalize* to every item, skipping the ones that do not parse.

    *normalize* returns None for items that are valid but filtered out.
    """
    events: list[GeopoliticalEvent] = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(
                f"Skipping non-object {source} item: {type(item).__name__}",
                extra={"source": source},
            )
            continue
        try:
            event = normalize(item)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                f"Skipping malformed {source} item: {e}",
                extra={"source": source},
            )
            continue
        if event is not None:
            events.append(event)
    return events
