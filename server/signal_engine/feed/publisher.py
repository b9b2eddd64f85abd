"""
Feed Publisher

FeedPublisher is the Redis pub/sub primitive: explicit channels, plain dict
payloads. SignalPublisher wraps it with the engine's models, serializing
each one and fanning it out to every channel it belongs on.

Usage:
    async with SignalPublisher(redis_url="redis://localhost:6379/0") as pub:
        await pub.publish_quote(quote)
        await pub.publish_event(event)
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from signal_engine.feed.channels import (
    channels_for_contract,
    channels_for_event,
    channels_for_quote,
)
from signal_engine.feed.serializer import (
    contract_to_dict,
    event_to_dict,
    quote_to_dict,
    serialize,
)
from signal_engine.models.contracts import DefenseContract
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.models.market import Quote

logger = logging.getLogger(__name__)


class PublisherError(Exception):
    """Raised when a publish operation fails."""


class FeedPublisher:
    """Publishes JSON-serializable dicts to Redis pub/sub channels."""

    def __init__(self, redis_url: str) -> None:
        self._redis_url = redis_url
        self._redis: Optional[Redis] = None

    @property
    def connected(self) -> bool:
        return self._redis is not None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """Open the Redis connection."""
        self._redis = Redis.from_url(self._redis_url, decode_responses=False)
        try:
            await self._redis.ping()
            logger.info("FeedPublisher connected to Redis")
        except RedisError as exc:
            self._redis = None
            raise PublisherError(f"Cannot connect to Redis: {exc}") from exc

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("FeedPublisher disconnected from Redis")

    async def __aenter__(self) -> FeedPublisher:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    # ── Publish ───────────────────────────────────────────────────────────────

    async def publish(self, channel: str, data: dict[str, Any]) -> int:
        """
        Publish data to a single channel.

        Returns:
            Number of subscribers that received the message.

        Raises:
            PublisherError: If not connected or Redis returns an error.
            SerializationError: If data cannot be serialized.
        """
        if self._redis is None:
            raise PublisherError("FeedPublisher is not connected, call connect() first")

        payload = serialize(channel, data)
        try:
            deliveries: int = await self._redis.publish(channel, payload)
        except RedisError as exc:
            raise PublisherError(f"Redis publish failed on channel '{channel}'") from exc

        logger.debug(f"Published to '{channel}', reached {deliveries} subscriber(s)")
        return deliveries

    async def publish_many(self, channels: list[str], data: dict[str, Any]) -> int:
        """Publish the same dict to every channel. Returns total deliveries."""
        if self._redis is None:
            raise PublisherError("FeedPublisher is not connected, call connect() first")

        total = 0
        for channel in channels:
            total += await self.publish(channel, data)
        return total


class SignalPublisher(FeedPublisher):
    """Model-aware publisher used by the feed poller."""

    async def publish_quote(self, quote: Quote) -> int:
        return await self.publish_many(channels_for_quote(quote), quote_to_dict(quote))

    async def publish_event(self, event: GeopoliticalEvent) -> int:
        return await self.publish_many(channels_for_event(event), event_to_dict(event))

    async def publish_contract(self, contract: DefenseContract) -> int:
        return await self.publish_many(
            channels_for_contract(contract), contract_to_dict(contract)
        )
