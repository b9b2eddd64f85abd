"""
HTTP API

aiohttp.web application exposing the engine's operations. Handlers only
parse parameters, call the engine and serialize; fallback, throttling and
scoring all live in the engine.

Every response is a JSON envelope:
  {"success": true,  "data": ...}
  {"success": false, "error": "..."}
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from aiohttp import web

from signal_engine.aggregation.contracts import total_value
from signal_engine.aggregation.maritime import DEFAULT_REGION, DEFAULT_VESSEL_TYPES
from signal_engine.aggregation.news import DEFAULT_SEARCH
from signal_engine.api.params import get_float, get_int, get_list, get_str, require_str
from signal_engine.core.types import InvalidInputError, RateLimitedError
from signal_engine.engine import SignalEngine
from signal_engine.feed.serializer import (
    bar_to_dict,
    contract_to_dict,
    event_to_dict,
    indicator_to_dict,
    maritime_event_to_dict,
    quote_to_dict,
    traffic_to_dict,
    vessel_to_dict,
)

logger = logging.getLogger(__name__)

ENGINE_KEY = web.AppKey("engine", SignalEngine)

MARKET_ACTIONS = ("quote", "batch", "indicators", "historical", "health")
VESSEL_ACTIONS = ("positions", "traffic", "events", "health")


def success(data: Any, **extra: Any) -> web.Response:
    return web.json_response({"success": True, "data": data, **extra})


def failure(message: str, status: int, headers: Optional[dict[str, str]] = None) -> web.Response:
    return web.json_response(
        {"success": False, "error": message}, status=status, headers=headers
    )


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Map engine errors onto the envelope: 400, 429, or 500 for anything unexpected."""
    try:
        return await handler(request)
    except InvalidInputError as e:
        return failure(e.message, 400)
    except RateLimitedError as e:
        window = request.app[ENGINE_KEY].limiter.window_seconds
        return failure(e.message, 429, headers={"Retry-After": str(int(window))})
    except web.HTTPException:
        raise
    except Exception:
        logger.exception(f"Unhandled error on {request.path}")
        return failure("Internal server error", 500)


def _engine(request: web.Request) -> SignalEngine:
    return request.app[ENGINE_KEY]


def _unknown_action(action: str, allowed: tuple[str, ...]) -> InvalidInputError:
    return InvalidInputError(
        f"Invalid action. Available: {', '.join(allowed)}", field="action", value=action
    )


# ── Market data ───────────────────────────────────────────────────────────────

async def market_data(request: web.Request) -> web.Response:
    engine = _engine(request)
    action = get_str(request, "action", "quote").lower()
    source = get_str(request, "source") or None

    if action not in MARKET_ACTIONS:
        raise _unknown_action(action, MARKET_ACTIONS)

    if action == "health":
        return success(engine.health())

    if action == "quote":
        ticker = require_str(request, "ticker")
        engine.admit("quote", ticker.upper())
        quote = await engine.quotes.quote(ticker, source)
        return success(quote_to_dict(quote) if quote else None)

    if action == "batch":
        tickers = get_list(request, "tickers")
        engine.admit("batch")
        if not tickers:
            return success([], count=0)
        quotes = await engine.quotes.batch(tickers, source)
        return success([quote_to_dict(q) for q in quotes], count=len(quotes))

    if action == "indicators":
        engine.admit("indicators")
        indicators = await engine.quotes.indicators()
        return success([indicator_to_dict(i) for i in indicators])

    ticker = require_str(request, "ticker")
    days = get_int(request, "days", 30, minimum=1)
    engine.admit("historical", ticker.upper())
    bars = await engine.quotes.historical(ticker, days)
    return success([bar_to_dict(b) for b in bars], ticker=ticker.upper(), count=len(bars))


async def realtime_price(request: web.Request) -> web.Response:
    """Canonical-first quotes for ``symbol`` or comma-separated ``symbols``."""
    engine = _engine(request)
    symbols = get_list(request, "symbols")
    symbol = get_str(request, "symbol")

    if symbols:
        engine.admit("realtime-batch")
        quotes = await engine.quotes.batch(symbols)
        return success([quote_to_dict(q) for q in quotes], count=len(quotes))
    if symbol:
        engine.admit("realtime", symbol.upper())
        quote = await engine.quotes.quote(symbol)
        return success(quote_to_dict(quote) if quote else None, symbol=symbol.upper())

    raise InvalidInputError("Symbol or symbols parameter required", field="symbol")


# ── Events and contracts ──────────────────────────────────────────────────────

async def geopolitical_events(request: web.Request) -> web.Response:
    engine = _engine(request)
    category = get_str(request, "category", "geopolitical").lower()
    days = get_int(request, "days", 7)
    limit = get_int(request, "limit", 20)

    engine.admit("events", category)
    events = await engine.events.aggregate(category=category, days=days, limit=limit)
    return success(
        [event_to_dict(e) for e in events],
        category=category,
        timeframe=f"{days}d",
        count=len(events),
        sources=list(engine.events.source_names),
    )


async def news(request: web.Request) -> web.Response:
    """Free-text article search served by the first news provider that answers."""
    engine = _engine(request)
    text = get_str(request, "q", DEFAULT_SEARCH)
    source = get_str(request, "source") or None
    days = get_int(request, "days", 7)
    limit = get_int(request, "limit", 20)

    engine.admit("news", text.lower())
    result = await engine.news.search(text, source=source, days=days, limit=limit)
    return success(
        [event_to_dict(e) for e in result.events],
        query=result.query,
        source=result.source or None,
        attempts=list(result.attempts),
        count=len(result.events),
    )


async def defense_contracts(request: web.Request) -> web.Response:
    engine = _engine(request)
    days = get_int(request, "days", 30)
    min_amount = get_float(request, "minAmount", 1_000_000, minimum=0)
    limit = get_int(request, "limit", 20)

    engine.admit("contracts")
    contracts = await engine.contracts.contracts(days=days, min_amount=min_amount, limit=limit)
    return success(
        [contract_to_dict(c) for c in contracts],
        timeframe=f"{days}d",
        count=len(contracts),
        totalValue=total_value(contracts),
    )


# ── Vessels ───────────────────────────────────────────────────────────────────

async def vessels(request: web.Request) -> web.Response:
    engine = _engine(request)
    action = get_str(request, "action", "positions").lower()
    region = get_str(request, "region", DEFAULT_REGION).lower()

    if action not in VESSEL_ACTIONS:
        raise _unknown_action(action, VESSEL_ACTIONS)

    if action == "health":
        return success(engine.maritime.health())

    engine.admit(f"vessels-{action}", region)

    if action == "positions":
        types = get_list(request, "types") or list(DEFAULT_VESSEL_TYPES)
        positions = await engine.maritime.positions(region, types)
        return success([vessel_to_dict(v) for v in positions], region=region, count=len(positions))

    if action == "traffic":
        traffic = await engine.maritime.traffic(region)
        return success(traffic_to_dict(traffic), region=region)

    events = await engine.maritime.events()
    return success([maritime_event_to_dict(e) for e in events], count=len(events))


# ── Application ───────────────────────────────────────────────────────────────

def create_app(engine: SignalEngine) -> web.Application:
    app = web.Application(middlewares=[error_middleware])
    app[ENGINE_KEY] = engine
    app.router.add_get("/api/market-data", market_data)
    app.router.add_get("/api/realtime-price", realtime_price)
    app.router.add_get("/api/geopolitical-events", geopolitical_events)
    app.router.add_get("/api/news", news)
    app.router.add_get("/api/defense-contracts", defense_contracts)
    app.router.add_get("/api/vessels", vessels)
    return app


class ApiServer:
    """Runs the application on host:port inside an existing event loop."""

    def __init__(self, engine: SignalEngine, host: str = "0.0.0.0", port: int = 8080) -> None:
        self._app = create_app(engine)
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> None:
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()
        logger.info(f"API server listening on http://{self._host}:{self._port}")

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("API server stopped")
