"""
Polygon.io Aggregates Source

Previous-day aggregate as a quote, daily range aggregates as history.
Requires POLYGON_API_KEY.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from signal_engine.core.types import SourceUnavailableError
from signal_engine.models.market import HistoricalBar, MarketState, Quote, compute_change
from signal_engine.sources.base import HttpSourceClient, expect_object
from signal_engine.sources.history import HistoryRequest, finalize_bars

SOURCE_NAME = "polygon"


def _results(payload: dict[str, Any], what: str) -> list[dict[str, Any]]:
    payload = expect_object(payload, SOURCE_NAME)
    results = payload.get("results") or []
    if not results:
        raise SourceUnavailableError(
            f"Polygon returned no {what}",
            source=SOURCE_NAME,
            context={"status": payload.get("status", "")},
        )
    return results


def normalize_prev_quote(ticker: str, payload: dict[str, Any]) -> Quote:
    """
    Transform a /prev aggregate into a Quote.

    The bar's open is the reference price, so day_change is the session move.
    """
    bar = _results(payload, "quote data")[0]
    current_price = float(bar["c"])
    previous_close = float(bar.get("o") or current_price)
    change, percent = compute_change(current_price, previous_close)

    timestamp_ms = bar.get("t")
    last_update = (
        datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
        if timestamp_ms
        else datetime.now(timezone.utc)
    )

    return Quote(
        ticker=ticker,
        name=ticker,
        current_price=current_price,
        previous_close=previous_close,
        day_change=change,
        day_change_percent=percent,
        volume=int(bar.get("v") or 0),
        market_cap=0.0,
        currency="USD",
        exchange="",
        market_state=MarketState.CLOSED,
        last_update=last_update,
        data_source=SOURCE_NAME,
    )


def normalize_range_bars(payload: dict[str, Any]) -> list[HistoricalBar]:
    bars = [
        HistoricalBar(
            timestamp=datetime.fromtimestamp(item["t"] / 1000, tz=timezone.utc),
            open=float(item["o"]),
            high=float(item["h"]),
            low=float(item["l"]),
            close=float(item["c"]),
            volume=int(item.get("v") or 0),
        )
        for item in _results(payload, "bars")
    ]
    return finalize_bars(bars)


class PolygonQuoteClient(HttpSourceClient[str, Quote]):
    name = SOURCE_NAME
    action = "quote"
    base_url = "https://api.polygon.io"
    requires_credential = True

    async def _fetch(self, key: str) -> Quote:
        payload = await self._get_json(
            f"{self.base_url}/v2/aggs/ticker/{key}/prev",
            params={"adjusted": "true", "apiKey": self._credential},
        )
        return normalize_prev_quote(key, payload)


class PolygonHistoryClient(HttpSourceClient[HistoryRequest, list[HistoricalBar]]):
    name = SOURCE_NAME
    action = "history"
    base_url = "https://api.polygon.io"
    requires_credential = True

    async def _fetch(self, key: HistoryRequest) -> list[HistoricalBar]:
        end = datetime.now(timezone.utc).date()
        start = end - timedelta(days=key.days)
        payload = await self._get_json(
            f"{self.base_url}/v2/aggs/ticker/{key.ticker}/range/1/day/"
            f"{start.isoformat()}/{end.isoformat()}",
            params={
                "adjusted": "true",
                "sort": "asc",
                "limit": 5000,
                "apiKey": self._credential,
            },
        )
        return normalize_range_bars(payload)
