"""
News Search

Free-text article search over the news sources as an ordered fallback
chain: the requested provider first, then the rest in priority order. The
first provider that answers serves the whole result.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from signal_engine.aggregation.events import MAX_EVENT_LIMIT
from signal_engine.core.types import InvalidInputError
from signal_engine.fetch.fallback import FallbackFetcher
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.scoring.relevance import RelevanceScorer
from signal_engine.sources.base import SourceClient
from signal_engine.sources.news import MAX_EVENT_DAYS, MAX_SEARCH_LENGTH, EventQuery

logger = logging.getLogger(__name__)

DEFAULT_SEARCH = "defense stocks military technology"


@dataclass(frozen=True)
class NewsSearchResult:
    """Ranked articles plus the provider that served them ("" when none did)."""

    query: str
    events: list[GeopoliticalEvent]
    source: str
    attempts: tuple[str, ...]


class NewsSearchService:
    def __init__(
        self,
        sources: Sequence[SourceClient],
        scorer: Optional[RelevanceScorer] = None,
    ) -> None:
        self._sources = tuple(sources)
        self._scorer = scorer or RelevanceScorer()

    @property
    def source_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self._sources)

    def chain_for(self, requested: Optional[str] = None) -> list[SourceClient]:
        if not requested:
            return list(self._sources)
        requested = requested.strip().lower()
        by_name = {s.name: s for s in self._sources}
        if requested not in by_name:
            raise InvalidInputError(
                f"Unknown news source: {requested}",
                field="source",
                value=requested,
                context={"available": ", ".join(by_name)},
            )
        return [by_name[requested]] + [s for s in self._sources if s.name != requested]

    async def search(
        self,
        text: str = DEFAULT_SEARCH,
        source: Optional[str] = None,
        days: int = 7,
        limit: int = 20,
    ) -> NewsSearchResult:
        """
        Search articles matching *text*.

        Results are ranked by ``rank_score`` descending and hold at most
        ``limit`` events. When every provider fails the result is empty with
        ``source == ""``.
        """
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Search text is required", field="q")
        if len(text) > MAX_SEARCH_LENGTH:
            raise InvalidInputError(
                f"Search text must be at most {MAX_SEARCH_LENGTH} characters", field="q"
            )
        if not (1 <= days <= MAX_EVENT_DAYS):
            raise InvalidInputError(
                f"days must be between 1 and {MAX_EVENT_DAYS}", field="days", value=days
            )
        if not (1 <= limit <= MAX_EVENT_LIMIT):
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_EVENT_LIMIT}", field="limit", value=limit
            )

        fetcher = FallbackFetcher[list[GeopoliticalEvent]](self.chain_for(source), resource="news")
        outcome = await fetcher.fetch(EventQuery(days=days, search=text))

        ranked = [
            dataclasses.replace(event, rank_score=self._scorer.rank(event))
            for event in outcome.value or []
        ]
        ranked.sort(key=lambda e: e.rank_score, reverse=True)
        logger.info(
            f"News search {text!r} returned {min(limit, len(ranked))} articles",
            extra={"source": outcome.source, "attempts": list(outcome.attempts)},
        )
        return NewsSearchResult(
            query=text,
            events=ranked[:limit],
            source=outcome.source,
            attempts=outcome.attempts,
        )
