"""
Signal Engine

Wires source clients, the shared RateLimiter and the aggregation services
into one object the HTTP API and the feed poller call into.

Usage:
    async with aiohttp.ClientSession() as session:
        engine = SignalEngine.from_settings(settings, session)
        quote = await engine.quotes.quote("LMT")
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import aiohttp

from signal_engine.aggregation.contracts import ContractService
from signal_engine.aggregation.events import EventAggregator
from signal_engine.aggregation.maritime import MaritimeMonitor
from signal_engine.aggregation.news import NewsSearchService
from signal_engine.config import Settings
from signal_engine.core.types import RateLimitedError
from signal_engine.fetch.quotes import QuoteService
from signal_engine.ratelimit import RateLimiter
from signal_engine.scoring.relevance import RelevanceScorer
from signal_engine.sources import (
    AISHubClient,
    GoogleNewsClient,
    IEXQuoteClient,
    PolygonHistoryClient,
    PolygonQuoteClient,
    RedditClient,
    TheNewsApiClient,
    USASpendingClient,
    WorldNewsClient,
    YahooHistoryClient,
    YahooQuoteClient,
)

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "api"


class SignalEngine:
    """
    Facade over every engine operation.

    ``admit`` guards inbound requests with the same limiter instance that
    throttles outbound provider calls; inbound keys live under ``api:``.
    """

    def __init__(
        self,
        quotes: QuoteService,
        events: EventAggregator,
        contracts: ContractService,
        maritime: MaritimeMonitor,
        news: NewsSearchService,
        limiter: RateLimiter,
        api_requests_per_minute: int = 60,
    ) -> None:
        self.quotes = quotes
        self.events = events
        self.contracts = contracts
        self.maritime = maritime
        self.news = news
        self._limiter = limiter
        self._api_limit = api_requests_per_minute

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: aiohttp.ClientSession,
        *,
        limiter: Optional[RateLimiter] = None,
        scorer: Optional[RelevanceScorer] = None,
    ) -> SignalEngine:
        limiter = limiter or RateLimiter()
        creds = settings.credentials
        limits = settings.rate_limits

        def build(client_cls, credential: str = "", **kwargs: Any):
            return client_cls(
                session,
                limiter=limiter,
                limit=limits.limit_for(client_cls.name),
                timeout_seconds=settings.http.timeout_seconds,
                user_agent=settings.http.user_agent,
                credential=credential,
                **kwargs,
            )

        # Priority order matters: it is the fallback and fan-out order
        quotes = QuoteService(
            quote_sources=[
                build(YahooQuoteClient),
                build(PolygonQuoteClient, creds.polygon_api_key),
                build(IEXQuoteClient, creds.iex_api_key),
            ],
            history_sources=[
                build(YahooHistoryClient),
                build(PolygonHistoryClient, creds.polygon_api_key),
            ],
        )
        google_news = build(GoogleNewsClient)
        the_news_api = build(TheNewsApiClient, creds.the_news_api_key)
        world_news = build(WorldNewsClient, creds.world_news_api_key)
        events = EventAggregator(
            sources=[google_news, the_news_api, world_news, build(RedditClient)],
            scorer=scorer,
        )
        # Keyed providers first, the free RSS search last
        news = NewsSearchService(sources=[the_news_api, world_news, google_news], scorer=scorer)
        contracts = ContractService(sources=[build(USASpendingClient)])
        maritime = MaritimeMonitor(sources=[build(AISHubClient, creds.aishub_username)])

        logger.info(
            "SignalEngine initialized",
            extra={
                "polygon": bool(creds.polygon_api_key),
                "iex": bool(creds.iex_api_key),
                "thenewsapi": bool(creds.the_news_api_key),
                "worldnews": bool(creds.world_news_api_key),
                "aishub": bool(creds.aishub_username),
            },
        )
        return cls(
            quotes=quotes,
            events=events,
            contracts=contracts,
            maritime=maritime,
            news=news,
            limiter=limiter,
            api_requests_per_minute=limits.api_requests_per_minute,
        )

    def admit(self, action: str, subject: str = "") -> None:
        """
        Count one inbound request for ``action:subject``.

        Raises:
            RateLimitedError: the key exceeded its per-minute quota
        """
        key = f"{API_KEY_PREFIX}:{action}:{subject}"
        if not self._limiter.allow(key, self._api_limit):
            raise RateLimitedError(
                f"Rate limit exceeded for {action}",
                key=key,
                limit=self._api_limit,
            )

    def health(self) -> dict[str, Any]:
        return {
            "status": "operational",
            "quoteSources": list(self.quotes.source_names),
            "historySources": list(self.quotes.history_source_names),
            "eventSources": list(self.events.source_names),
            "newsSources": list(self.news.source_names),
            "contractSources": list(self.contracts.source_names),
            "vesselSources": list(self.maritime.source_names),
            "trackedKeys": len(self._limiter),
        }
