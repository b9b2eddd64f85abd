"""
signal engine server: top-level orchestrator

Runs all services in a single async event loop:
  - HTTP API: quotes, history, indicators, events, contracts, vessels
  - feed poller: watchlist quotes + new events/contracts -> Redis pub/sub

Usage:
    cd server
    python main.py              # API + Redis feed (feed only when REDIS_URL is set)
    python main.py --no-feed    # API only
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal

import aiohttp
from dotenv import load_dotenv

load_dotenv(".env")

from signal_engine.api import ApiServer  # noqa: E402
from signal_engine.config import settings  # noqa: E402
from signal_engine.engine import SignalEngine  # noqa: E402
from signal_engine.feed import FeedPoller, PublisherError, SignalPublisher  # noqa: E402

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
)
logger = logging.getLogger("signal_engine")


async def run(*, use_feed: bool = True) -> None:
    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown_event.set)

    async with aiohttp.ClientSession() as session:
        engine = SignalEngine.from_settings(settings, session)

        # ── HTTP API ───────────────────────────────────────────────────
        api_server = ApiServer(
            engine,
            host=settings.api_server.host,
            port=settings.api_server.port,
        )
        await api_server.start()

        # ── Feed ───────────────────────────────────────────────────────
        publisher = None
        poller = None
        feed_task = None

        if use_feed and settings.feed.enabled:
            publisher = SignalPublisher(settings.feed.redis_url)
            try:
                await publisher.connect()
            except PublisherError as e:
                logger.error(f"Feed disabled: {e}")
                publisher = None
            else:
                poller = FeedPoller(
                    engine,
                    publisher,
                    watchlist=settings.feed.watchlist,
                    refresh_seconds=settings.feed.refresh_seconds,
                )
                feed_task = asyncio.create_task(poller.run(shutdown_event))
                logger.info(
                    f"Feed poller started, {len(settings.feed.watchlist)} tickers "
                    f"every {settings.feed.refresh_seconds:.0f}s"
                )
        elif use_feed:
            logger.info("REDIS_URL not set, feed publishing disabled")

        # ── Wait for shutdown ──────────────────────────────────────────
        await shutdown_event.wait()

        # ── Teardown ───────────────────────────────────────────────────
        logger.info("Shutting down...")

        if feed_task and not feed_task.done():
            feed_task.cancel()
            try:
                await feed_task
            except asyncio.CancelledError:
                pass

        await api_server.stop()

        if publisher is not None:
            await publisher.close()

        if poller is not None:
            stats = poller.stats
            logger.info(
                f"Final: cycles: {stats.cycles}, "
                f"quotes: {stats.quotes_published}, "
                f"events: {stats.events_published}, "
                f"contracts: {stats.contracts_published}, "
                f"publish failures: {stats.publish_failures}"
            )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="signal engine server")
    parser.add_argument("--no-feed", action="store_true", help="Serve the HTTP API without the Redis feed")
    args = parser.parse_args()
    asyncio.run(run(use_feed=not args.no_feed))
