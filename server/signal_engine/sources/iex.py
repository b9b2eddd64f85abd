"""
IEX Cloud Quote Source

Requires IEX_API_KEY.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from signal_engine.models.market import MarketState, Quote, compute_change
from signal_engine.sources.base import HttpSourceClient, expect_object

SOURCE_NAME = "iex"


def normalize_iex_quote(ticker: str, payload: dict[str, Any]) -> Quote:
    """
    Transform a /stock/{symbol}/quote payload into a Quote.

    IEX's own change fields are ignored; change is recomputed from prices.
    """
    payload = expect_object(payload, SOURCE_NAME)
    current_price = float(payload["latestPrice"])
    previous_close = payload.get("previousClose")
    if previous_close is None:
        raise ValueError(f"No previous close for {ticker}")
    previous_close = float(previous_close)
    change, percent = compute_change(current_price, previous_close)

    latest_update = payload.get("latestUpdate")
    last_update = (
        datetime.fromtimestamp(latest_update / 1000, tz=timezone.utc)
        if latest_update
        else datetime.now(timezone.utc)
    )

    return Quote(
        ticker=ticker,
        name=payload.get("companyName") or ticker,
        current_price=current_price,
        previous_close=previous_close,
        day_change=change,
        day_change_percent=percent,
        volume=int(payload.get("latestVolume") or 0),
        market_cap=float(payload.get("marketCap") or 0),
        currency=payload.get("currency") or "USD",
        exchange=payload.get("primaryExchange") or "",
        market_state=MarketState.REGULAR if payload.get("isUSMarketOpen") else MarketState.CLOSED,
        last_update=last_update,
        data_source=SOURCE_NAME,
    )


class IEXQuoteClient(HttpSourceClient[str, Quote]):
    name = SOURCE_NAME
    action = "quote"
    base_url = "https://cloud.iexapis.com/stable"
    requires_credential = True

    async def _fetch(self, key: str) -> Quote:
        payload = await self._get_json(
            f"{self.base_url}/stock/{key}/quote",
            params={"token": self._credential},
        )
        return normalize_iex_quote(key, payload)
