"""
World News API Source

Requires WORLD_NEWS_API_KEY. Carries the provider's own sentiment value
through untouched.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from signal_engine.models.events import GeopoliticalEvent
from signal_engine.sources.base import HttpSourceClient, expect_object
from signal_engine.sources.news import EventQuery, build_event, normalize_items, parse_timestamp

SOURCE_NAME = "worldnews"
DISPLAY_NAME = "World News API"
PAGE_SIZE = 10


def normalize_news(payload: dict[str, Any], category: str) -> list[GeopoliticalEvent]:
    def to_event(article: dict[str, Any]) -> GeopoliticalEvent:
        country = article.get("source_country")
        sentiment = article.get("sentiment")
        return build_event(
            event_id=article["id"],
            title=article["title"],
            body=article.get("text") or "",
            url=article.get("url", ""),
            published_at=parse_timestamp(article["publish_date"]),
            source_name=f"{DISPLAY_NAME} - {country}" if country else DISPLAY_NAME,
            category=category,
            sentiment=float(sentiment) if sentiment is not None else None,
            image_url=article.get("image") or "",
        )

    payload = expect_object(payload, SOURCE_NAME)
    return normalize_items(SOURCE_NAME, payload.get("news") or [], to_event)


class WorldNewsClient(HttpSourceClient[EventQuery, list[GeopoliticalEvent]]):
    name = SOURCE_NAME
    action = "events"
    base_url = "https://api.worldnewsapi.com"
    requires_credential = True

    async def _fetch(self, key: EventQuery) -> list[GeopoliticalEvent]:
        earliest = (datetime.now(timezone.utc) - timedelta(days=key.days)).date()
        payload = await self._get_json(
            f"{self.base_url}/search-news",
            params={
                "text": " OR ".join(key.terms[:3]),
                "earliest-publish-date": earliest.isoformat(),
                "language": "en",
                "number": PAGE_SIZE,
            },
            headers={"x-api-key": self._credential},
        )
        return normalize_news(payload, key.category)
