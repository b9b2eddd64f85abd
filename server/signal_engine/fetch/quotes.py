"""
Quote Service

Market data operations on top of FallbackFetcher: single quotes with the
canonical-last fallback rule, concurrent batches, headline indicators and
historical bars.
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from signal_engine.core.types import InvalidInputError
from signal_engine.fetch.fallback import FallbackFetcher
from signal_engine.models.market import HistoricalBar, MarketIndicator, Quote
from signal_engine.sources.base import SourceClient
from signal_engine.sources.history import MAX_HISTORY_DAYS, HistoryRequest

logger = logging.getLogger(__name__)

CANONICAL_SOURCE = "yahoo"
MAX_BATCH_SIZE = 50

TICKER_PATTERN = re.compile(r"^[A-Z0-9^][A-Z0-9.\-=^]{0,14}$")

# (display name, provider ticker)
INDICATORS: tuple[tuple[str, str], ...] = (
    ("VIX", "^VIX"),
    ("S&P 500", "SPY"),
    ("Oil (USO)", "USO"),
    ("Gold (GLD)", "GLD"),
)


def normalize_ticker(raw: Optional[str]) -> str:
    ticker = (raw or "").strip().upper()
    if not ticker:
        raise InvalidInputError("Ticker is required", field="ticker")
    if not TICKER_PATTERN.match(ticker):
        raise InvalidInputError(f"Invalid ticker: {raw}", field="ticker", value=raw)
    return ticker


class QuoteService:
    """
    Args:
        quote_sources: quote clients in priority order
        history_sources: history clients in priority order
        canonical: name of the real-time source tried last when another
            source was requested
    """

    def __init__(
        self,
        quote_sources: Sequence[SourceClient],
        history_sources: Sequence[SourceClient],
        canonical: str = CANONICAL_SOURCE,
    ) -> None:
        self._quote_sources = tuple(quote_sources)
        self._history = FallbackFetcher[list[HistoricalBar]](history_sources, resource="history")
        self._canonical = canonical

    @property
    def source_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self._quote_sources)

    @property
    def history_source_names(self) -> tuple[str, ...]:
        return self._history.source_names

    def chain_for(self, requested: Optional[str] = None) -> list[SourceClient]:
        """
        Fallback order for a quote request.

        ``[requested, other non-canonical sources in priority order, canonical]``;
        with no preference (or the canonical one) the canonical source goes first.
        """
        requested = (requested or self._canonical).strip().lower()
        by_name = {s.name: s for s in self._quote_sources}
        if requested not in by_name:
            raise InvalidInputError(
                f"Unknown quote source: {requested}",
                field="source",
                value=requested,
                context={"available": ", ".join(by_name)},
            )

        canonical = by_name.get(self._canonical)
        others = [
            s for s in self._quote_sources
            if s.name != requested and s is not canonical
        ]
        chain = [by_name[requested]] + others
        if canonical is not None and requested != self._canonical:
            chain.append(canonical)
        return chain

    async def quote(self, ticker: str, source: Optional[str] = None) -> Optional[Quote]:
        """Best available quote, or None when every source failed."""
        symbol = normalize_ticker(ticker)
        fetcher = FallbackFetcher[Quote](self.chain_for(source), resource="quote")
        outcome = await fetcher.fetch(symbol)
        return outcome.value

    async def batch(self, tickers: Sequence[str], source: Optional[str] = None) -> list[Quote]:
        """
        Quotes for many tickers, fetched concurrently.

        Only successes are returned, in input order. Blank or malformed tickers
        and tickers with no data are left out rather than represented by an
        error entry.
        """
        symbols = []
        for raw in tickers:
            ticker = (raw or "").strip().upper()
            if not ticker:
                continue
            if not TICKER_PATTERN.match(ticker):
                logger.debug(f"Dropping malformed ticker {raw!r} from batch", extra={"ticker": raw})
                continue
            symbols.append(ticker)
        if len(symbols) > MAX_BATCH_SIZE:
            raise InvalidInputError(
                f"At most {MAX_BATCH_SIZE} tickers per batch",
                field="tickers",
                context={"count": len(symbols)},
            )

        fetcher = FallbackFetcher[Quote](self.chain_for(source), resource="quote")
        outcomes = await fetcher.fetch_many(symbols)
        quotes = [o.value for o in outcomes if o.ok]
        logger.info(
            f"Batch resolved {len(quotes)}/{len(symbols)} tickers",
            extra={"requested": len(symbols), "resolved": len(quotes)},
        )
        return quotes

    async def indicators(self) -> list[MarketIndicator]:
        """VIX, S&P 500, oil and gold; indicators with no data are omitted."""
        names = {symbol: name for name, symbol in INDICATORS}
        quotes = await self.batch([symbol for _, symbol in INDICATORS])
        return [MarketIndicator.from_quote(names[q.ticker], q) for q in quotes]

    async def historical(self, ticker: str, days: int = 30) -> list[HistoricalBar]:
        """Ascending daily bars, or an empty list when no source has data."""
        symbol = normalize_ticker(ticker)
        if not (1 <= days <= MAX_HISTORY_DAYS):
            raise InvalidInputError(
                f"days must be between 1 and {MAX_HISTORY_DAYS}", field="days", value=days
            )
        outcome = await self._history.fetch(HistoryRequest(ticker=symbol, days=days))
        return outcome.value or []
