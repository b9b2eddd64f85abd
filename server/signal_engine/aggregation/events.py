"""
Event Aggregator

Fans out to every registered news source, merges what comes back, drops
duplicate ids (first source in fan-out order wins), ranks and truncates.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Optional, Sequence

from signal_engine.core.types import InvalidInputError
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.scoring.relevance import RelevanceScorer
from signal_engine.sources.base import SourceClient
from signal_engine.sources.news import CATEGORY_TERMS, MAX_EVENT_DAYS, EventQuery

logger = logging.getLogger(__name__)

MAX_EVENT_LIMIT = 100


class EventAggregator:
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

    def build_query(self, category: str, days: int) -> EventQuery:
        if category not in CATEGORY_TERMS:
            raise InvalidInputError(
                f"Unknown category: {category}",
                field="category",
                value=category,
                context={"available": ", ".join(CATEGORY_TERMS)},
            )
        if not (1 <= days <= MAX_EVENT_DAYS):
            raise InvalidInputError(
                f"days must be between 1 and {MAX_EVENT_DAYS}", field="days", value=days
            )
        return EventQuery(category=category, days=days)

    async def aggregate(
        self,
        category: str = "geopolitical",
        days: int = 7,
        limit: int = 20,
    ) -> list[GeopoliticalEvent]:
        """
        Ranked events across all sources.

        A failing source contributes nothing. The result is sorted by
        ``rank_score`` descending (stable, so fan-out order breaks ties) and
        holds at most ``limit`` events.
        """
        if not (1 <= limit <= MAX_EVENT_LIMIT):
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_EVENT_LIMIT}", field="limit", value=limit
            )
        query = self.build_query(category, days)

        outcomes = await asyncio.gather(*(s.fetch(query) for s in self._sources))

        merged: list[GeopoliticalEvent] = []
        seen: set[str] = set()
        for source, outcome in zip(self._sources, outcomes):
            if not outcome.ok:
                logger.warning(
                    f"Event source {source.name} contributed nothing: {outcome.reason}",
                    extra={"source": source.name, "reason": outcome.reason},
                )
                continue

            added = 0
            for event in outcome.value:
                if event.id in seen:
                    continue
                seen.add(event.id)
                merged.append(
                    dataclasses.replace(event, rank_score=self._scorer.rank(event))
                )
                added += 1
            logger.debug(
                f"Event source {source.name} contributed {added} events",
                extra={"source": source.name, "count": added},
            )

        merged.sort(key=lambda e: e.rank_score, reverse=True)
        logger.info(
            f"Aggregated {len(merged)} events for {query}, returning {min(limit, len(merged))}",
            extra={"category": category, "days": days, "total": len(merged)},
        )
        return merged[:limit]
