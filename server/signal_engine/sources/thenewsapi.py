"""
The News API Source

Requires THE_NEWS_API_KEY.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from signal_engine.models.events import GeopoliticalEvent
from signal_engine.sources.base import HttpSourceClient, expect_object
from signal_engine.sources.news import EventQuery, build_event, normalize_items, parse_timestamp

SOURCE_NAME = "thenewsapi"
DISPLAY_NAME = "The News API"
PAGE_SIZE = 10


def normalize_articles(payload: dict[str, Any], category: str) -> list[GeopoliticalEvent]:
    """Transform /v1/news/all ``data`` into events. A missing ``data`` key means nothing found."""

    def to_event(article: dict[str, Any]) -> GeopoliticalEvent:
        publisher = article.get("source")
        return build_event(
            event_id=article["uuid"],
            title=article["title"],
            body=article.get("description") or article.get("snippet") or "",
            url=article.get("url", ""),
            published_at=parse_timestamp(article["published_at"]),
            source_name=f"{DISPLAY_NAME} - {publisher}" if publisher else DISPLAY_NAME,
            category=category,
            image_url=article.get("image_url") or "",
        )

    payload = expect_object(payload, SOURCE_NAME)
    return normalize_items(SOURCE_NAME, payload.get("data") or [], to_event)


class TheNewsApiClient(HttpSourceClient[EventQuery, list[GeopoliticalEvent]]):
    name = SOURCE_NAME
    action = "events"
    base_url = "https://api.thenewsapi.com"
    requires_credential = True

    async def _fetch(self, key: EventQuery) -> list[GeopoliticalEvent]:
        published_after = datetime.now(timezone.utc) - timedelta(days=key.days)
        payload = await self._get_json(
            f"{self.base_url}/v1/news/all",
            params={
                "api_token": self._credential,
                "search": key.search or " | ".join(f'"{term}"' for term in key.terms),
                "language": "en",
                "published_after": published_after.strftime("%Y-%m-%dT%H:%M:%S"),
                "limit": PAGE_SIZE,
            },
        )
        return normalize_articles(payload, key.category)
