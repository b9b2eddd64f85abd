"""
Fallback Fetcher

Tries an ordered chain of sources for one key and returns the first
success. When every source fails the result is an explicit "no data"
outcome; nothing is ever synthesized in its place.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Generic, Sequence, TypeVar

from signal_engine.core.types import FetchOutcome
from signal_engine.sources.base import SourceClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_SOURCES_REASON = "no sources configured"


class FallbackFetcher(Generic[T]):
    """
    Ordered-fallback over SourceClients.

    The returned outcome's ``source`` is the client that actually answered
    and ``attempts`` lists every client tried, in order.
    """

    def __init__(self, sources: Sequence[SourceClient], resource: str = "resource") -> None:
        self._sources = tuple(sources)
        self._resource = resource

    @property
    def sources(self) -> tuple[SourceClient, ...]:
        return self._sources

    @property
    def source_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self._sources)

    async def fetch(self, key: Any) -> FetchOutcome[T]:
        attempts: list[str] = []
        reasons: list[str] = []

        for source in self._sources:
            attempts.append(source.name)
            logger.debug(
                f"Trying {source.name} for {self._resource} {key}",
                extra={"source": source.name, "key": str(key)},
            )

            outcome = await source.fetch(key)
            if outcome.ok:
                if len(attempts) > 1:
                    logger.info(
                        f"{self._resource} {key} served by fallback {source.name}",
                        extra={"source": source.name, "attempts": attempts},
                    )
                return FetchOutcome(
                    source=outcome.source,
                    value=outcome.value,
                    attempts=tuple(attempts),
                )

            reasons.append(f"{source.name}: {outcome.reason}")
            logger.warning(
                f"{source.name} failed for {self._resource} {key}: {outcome.reason}",
                extra={"source": source.name, "key": str(key), "reason": outcome.reason},
            )

        reason = "; ".join(reasons) if reasons else NO_SOURCES_REASON
        logger.warning(
            f"No data for {self._resource} {key} after {len(attempts)} sources",
            extra={"key": str(key), "attempts": attempts},
        )
        return FetchOutcome(source="", value=None, reason=reason, attempts=tuple(attempts))

    async def fetch_many(self, keys: Sequence[Any]) -> list[FetchOutcome[T]]:
        """Fetch every key concurrently. Results line up with *keys*."""
        if not keys:
            return []
        return list(await asyncio.gather(*(self.fetch(key) for key in keys)))
