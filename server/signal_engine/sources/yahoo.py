"""
Yahoo Finance Chart Source

The canonical real-time quote provider and the primary history provider.
No credential required.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from signal_engine.core.types import SourceUnavailableError
from signal_engine.models.market import HistoricalBar, MarketState, Quote, compute_change
from signal_engine.sources.base import HttpSourceClient, expect_object
from signal_engine.sources.history import HistoryRequest, finalize_bars

logger = logging.getLogger(__name__)

SOURCE_NAME = "yahoo"


def _chart_result(payload: dict[str, Any]) -> dict[str, Any]:
    """Unwrap chart.result[0], raising when Yahoo reports an error or nothing."""
    chart = expect_object(payload, SOURCE_NAME).get("chart") or {}
    error = chart.get("error")
    if error:
        description = error.get("description") if isinstance(error, dict) else error
        raise SourceUnavailableError(
            f"Yahoo chart error: {description}", source=SOURCE_NAME
        )
    results = chart.get("result") or []
    if not results:
        raise SourceUnavailableError("Yahoo chart returned no result", source=SOURCE_NAME)
    return results[0]


def _last_present(values: list[Optional[float]]) -> tuple[Optional[int], Optional[float]]:
    """Index and value of the last non-null entry."""
    for index in range(len(values) - 1, -1, -1):
        if values[index] is not None:
            return index, values[index]
    return None, None


def normalize_chart_quote(ticker: str, payload: dict[str, Any]) -> Quote:
    """
    Transform a v8 chart payload into a Quote.

    The most recent non-null intraday close wins over meta.regularMarketPrice.

    Raises:
        SourceUnavailableError: Yahoo returned an error or an empty result
        KeyError / ValueError: payload is missing required fields
    """
    result = _chart_result(payload)
    meta = result["meta"]
    timestamps = result.get("timestamp") or []
    quote_block = (result.get("indicators", {}).get("quote") or [{}])[0]
    closes = quote_block.get("close") or []
    volumes = quote_block.get("volume") or []

    index, last_close = _last_present(closes)
    current_price = last_close if last_close is not None else meta.get("regularMarketPrice")
    if current_price is None:
        raise ValueError(f"No price available for {ticker}")
    current_price = float(current_price)

    previous_close = meta.get("previousClose") or meta.get("chartPreviousClose")
    if previous_close is None:
        raise ValueError(f"No previous close for {ticker}")
    previous_close = float(previous_close)
    change, percent = compute_change(current_price, previous_close)

    if index is not None and index < len(timestamps):
        last_update = datetime.fromtimestamp(timestamps[index], tz=timezone.utc)
    elif meta.get("regularMarketTime"):
        last_update = datetime.fromtimestamp(meta["regularMarketTime"], tz=timezone.utc)
    else:
        last_update = datetime.now(timezone.utc)

    volume = meta.get("regularMarketVolume")
    if volume is None and index is not None and index < len(volumes):
        volume = volumes[index]

    return Quote(
        ticker=ticker,
        name=meta.get("longName") or meta.get("shortName") or ticker,
        current_price=current_price,
        previous_close=previous_close,
        day_change=change,
        day_change_percent=percent,
        volume=int(volume or 0),
        market_cap=float(meta.get("marketCap") or 0),
        currency=meta.get("currency") or "USD",
        exchange=meta.get("exchangeName") or "",
        market_state=MarketState.from_string(meta.get("marketState")),
        last_update=last_update,
        data_source=SOURCE_NAME,
    )


def normalize_chart_bars(payload: dict[str, Any]) -> list[HistoricalBar]:
    """
    Transform a v8 chart payload into ascending daily bars.

    Intervals where any of open/high/low/close is null are dropped.
    """
    result = _chart_result(payload)
    timestamps = result.get("timestamp") or []
    quote_block = (result.get("indicators", {}).get("quote") or [{}])[0]

    bars: list[HistoricalBar] = []
    for index, ts in enumerate(timestamps):
        ohlc = [
            (quote_block.get(field) or [None] * len(timestamps))[index]
            for field in ("open", "high", "low", "close")
        ]
        if any(value is None for value in ohlc):
            continue
        volume = (quote_block.get("volume") or [0] * len(timestamps))[index]
        bars.append(
            HistoricalBar(
                timestamp=datetime.fromtimestamp(ts, tz=timezone.utc),
                open=float(ohlc[0]),
                high=float(ohlc[1]),
                low=float(ohlc[2]),
                close=float(ohlc[3]),
                volume=int(volume or 0),
            )
        )
    return finalize_bars(bars)


class YahooQuoteClient(HttpSourceClient[str, Quote]):
    """Real-time quote from the 1-minute intraday chart, including pre/post market."""

    name = SOURCE_NAME
    action = "quote"
    base_url = "https://query1.finance.yahoo.com"

    async def _fetch(self, key: str) -> Quote:
        payload = await self._get_json(
            f"{self.base_url}/v8/finance/chart/{key}",
            params={
                "region": "US",
                "lang": "en-US",
                "includePrePost": "true",
                "interval": "1m",
                "range": "1d",
            },
        )
        return normalize_chart_quote(key, payload)


class YahooHistoryClient(HttpSourceClient[HistoryRequest, list[HistoricalBar]]):
    """Daily bars covering the last N days."""

    name = SOURCE_NAME
    action = "history"
    base_url = "https://query1.finance.yahoo.com"

    async def _fetch(self, key: HistoryRequest) -> list[HistoricalBar]:
        payload = await self._get_json(
            f"{self.base_url}/v8/finance/chart/{key.ticker}",
            params={
                "region": "US",
                "lang": "en-US",
                "includePrePost": "false",
                "interval": "1d",
                "range": f"{key.days}d",
            },
        )
        bars = normalize_chart_bars(payload)
        if not bars:
            raise SourceUnavailableError(
                f"Yahoo returned no bars for {key.ticker}", source=SOURCE_NAME
            )
        return bars
