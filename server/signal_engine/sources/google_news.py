"""
Google News RSS Source

Free search feed, no credential. Parsed with feedparser; HTML in item
descriptions is stripped with BeautifulSoup.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Any, Optional

import feedparser
from bs4 import BeautifulSoup

from signal_engine.core.types import SourceUnavailableError
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.sources.base import HttpSourceClient
from signal_engine.sources.news import EventQuery, build_event, normalize_items

SOURCE_NAME = "google_news"
DISPLAY_NAME = "Google News"


def strip_html(text: str) -> str:
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text(separator=" ", strip=True)


def build_search_query(query: EventQuery) -> str:
    return " OR ".join(query.terms[:3]) + f" when:{query.days}d"


def _entry_to_event(entry: Any, category: str) -> Optional[GeopoliticalEvent]:
    link = entry.get("link")
    title = entry.get("title")
    if not link or not title:
        return None
    # Undated items cannot be ranked for recency
    published = entry.get("published_parsed") or entry.get("updated_parsed")
    if published is None:
        return None

    publisher = (entry.get("source") or {}).get("title")
    return build_event(
        event_id=link,
        title=title,
        body=strip_html(entry.get("summary", "")),
        url=link,
        published_at=datetime.fromtimestamp(calendar.timegm(published), tz=timezone.utc),
        source_name=f"{DISPLAY_NAME} - {publisher}" if publisher else DISPLAY_NAME,
        category=category,
    )


def parse_feed(xml_text: str, category: str) -> list[GeopoliticalEvent]:
    """Parse a Google News RSS document into events."""
    feed = feedparser.parse(xml_text)
    if feed.bozo and not feed.entries:
        raise SourceUnavailableError(
            f"Unparseable RSS: {feed.get('bozo_exception')}", source=SOURCE_NAME
        )
    return normalize_items(SOURCE_NAME, feed.entries, lambda e: _entry_to_event(e, category))


class GoogleNewsClient(HttpSourceClient[EventQuery, list[GeopoliticalEvent]]):
    name = SOURCE_NAME
    action = "events"
    base_url = "https://news.google.com"

    async def _fetch(self, key: EventQuery) -> list[GeopoliticalEvent]:
        xml_text = await self._get_text(
            f"{self.base_url}/rss/search",
            params={
                "q": build_search_query(key),
                "hl": "en-US",
                "gl": "US",
                "ceid": "US:en",
            },
            headers={"Accept": "application/rss+xml, application/xml"},
        )
        return parse_feed(xml_text, key.category)
