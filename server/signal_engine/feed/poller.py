"""
Feed Poller

Refreshes watchlist quotes, ranked events and enriched contracts on a fixed
interval and publishes them through SignalPublisher. A failed refresh or
publish is logged and the loop carries on with the next cycle.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from signal_engine.feed.publisher import PublisherError, SignalPublisher
from signal_engine.feed.serializer import SerializationError

if TYPE_CHECKING:
    from signal_engine.engine import SignalEngine

logger = logging.getLogger(__name__)

# Bound on remembered event/contract ids before the set is reset
MAX_SEEN_IDS = 5000


@dataclass
class PollerStats:
    cycles: int = 0
    quotes_published: int = 0
    events_published: int = 0
    contracts_published: int = 0
    publish_failures: int = 0


class FeedPoller:
    """
    Periodic refresh-and-publish loop.

    Quotes are republished every cycle. Events and contracts are published
    once per id.
    """

    def __init__(
        self,
        engine: SignalEngine,
        publisher: SignalPublisher,
        watchlist: Sequence[str],
        refresh_seconds: float = 30.0,
    ) -> None:
        self._engine = engine
        self._publisher = publisher
        self._watchlist = list(watchlist)
        self._refresh_seconds = refresh_seconds
        self._seen_events: set[str] = set()
        self._seen_contracts: set[str] = set()
        self._stats = PollerStats()

    @property
    def stats(self) -> PollerStats:
        return self._stats

    async def _publish(self, kind: str, coro) -> bool:
        try:
            await coro
            return True
        except (PublisherError, SerializationError) as e:
            self._stats.publish_failures += 1
            logger.error(f"Failed to publish {kind}: {e}", extra={"kind": kind})
            return False

    async def refresh_once(self) -> None:
        """Run one refresh cycle."""
        self._stats.cycles += 1

        quotes = await self._engine.quotes.batch(self._watchlist) if self._watchlist else []
        for quote in quotes:
            if await self._publish("quote", self._publisher.publish_quote(quote)):
                self._stats.quotes_published += 1

        if len(self._seen_events) > MAX_SEEN_IDS:
            self._seen_events.clear()
        for event in await self._engine.events.aggregate():
            if event.id in self._seen_events:
                continue
            if await self._publish("event", self._publisher.publish_event(event)):
                self._seen_events.add(event.id)
                self._stats.events_published += 1

        if len(self._seen_contracts) > MAX_SEEN_IDS:
            self._seen_contracts.clear()
        for contract in await self._engine.contracts.contracts():
            if contract.id in self._seen_contracts:
                continue
            if await self._publish("contract", self._publisher.publish_contract(contract)):
                self._seen_contracts.add(contract.id)
                self._stats.contracts_published += 1

        logger.info(
            f"Feed cycle {self._stats.cycles}: {len(quotes)} quotes, "
            f"{self._stats.events_published} events and "
            f"{self._stats.contracts_published} contracts published so far"
        )

    async def run(self, shutdown: Optional[asyncio.Event] = None) -> None:
        """Loop until *shutdown* is set."""
        while shutdown is None or not shutdown.is_set():
            try:
                await self.refresh_once()
            except Exception:
                logger.exception("Feed refresh cycle failed")

            try:
                if shutdown:
                    await asyncio.wait_for(shutdown.wait(), timeout=self._refresh_seconds)
                    break
                else:
                    await asyncio.sleep(self._refresh_seconds)
            except asyncio.TimeoutError:
                pass
