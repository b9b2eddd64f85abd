"""
Reddit Hot Posts Source

Public JSON listings, no credential. Only posts above the score floor and
inside the requested window are kept; the score becomes the event's
engagement metric.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import aiohttp

from signal_engine.core.types import SourceUnavailableError
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.sources.base import HttpSourceClient, expect_object
from signal_engine.sources.news import EventQuery, build_event, normalize_items

logger = logging.getLogger(__name__)

SOURCE_NAME = "reddit"
SUBREDDITS = ("geopolitics", "worldnews")
MIN_SCORE = 100
POSTS_PER_SUBREDDIT = 5


def normalize_listing(
    payload: dict[str, Any],
    subreddit: str,
    query: EventQuery,
    now: Optional[datetime] = None,
) -> list[GeopoliticalEvent]:
    """Transform a hot.json listing, keeping posts with score > 100 and age <= days."""
    now = now or datetime.now(timezone.utc)
    listing = expect_object(payload, SOURCE_NAME).get("data")
    children = (listing.get("children") if isinstance(listing, dict) else None) or []

    def to_event(child: dict[str, Any]) -> Optional[GeopoliticalEvent]:
        post = child["data"]
        score = int(post.get("score") or 0)
        created = datetime.fromtimestamp(float(post["created_utc"]), tz=timezone.utc)
        age_days = (now - created).total_seconds() / 86400
        if score <= MIN_SCORE or age_days > query.days:
            return None

        return build_event(
            event_id=post["id"],
            title=post["title"],
            body=post.get("selftext") or "",
            url=f"https://reddit.com{post.get('permalink', '')}",
            published_at=created,
            source_name=f"Reddit r/{subreddit}",
            category=query.category,
            engagement=score,
            comments=int(post.get("num_comments") or 0),
        )

    return normalize_items(SOURCE_NAME, children, to_event)


class RedditClient(HttpSourceClient[EventQuery, list[GeopoliticalEvent]]):
    name = SOURCE_NAME
    action = "events"
    base_url = "https://www.reddit.com"

    def __init__(self, *args: Any, subreddits: tuple[str, ...] = SUBREDDITS, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._subreddits = subreddits

    async def _fetch(self, key: EventQuery) -> list[GeopoliticalEvent]:
        events: list[GeopoliticalEvent] = []
        failures = 0
        for subreddit in self._subreddits:
            try:
                payload = await self._get_json(
                    f"{self.base_url}/r/{subreddit}/hot.json",
                    params={"limit": POSTS_PER_SUBREDDIT},
                )
                events.extend(normalize_listing(payload, subreddit, key))
            except (SourceUnavailableError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                failures += 1
                logger.warning(
                    f"r/{subreddit} unavailable: {e!r}",
                    extra={"source": SOURCE_NAME, "subreddit": subreddit},
                )

        if failures == len(self._subreddits):
            raise SourceUnavailableError("All subreddits failed", source=SOURCE_NAME)
        return events
