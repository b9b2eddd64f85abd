"""
Market Data Models

Quotes, historical bars and headline indicators.
All models use frozen dataclasses with __post_init__ validation.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

# Tolerance for the day_change == current - previous invariant
CHANGE_TOLERANCE = 1e-6


class MarketState(str, Enum):
    """Trading session a quote was taken in."""

    REGULAR = "REGULAR"
    PRE = "PRE"
    POST = "POST"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "MarketState":
        """Map provider strings (PREPRE, POSTPOST, ...) onto the enum, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        v = value.strip().upper()
        for member in cls:
            if member.value == v:
                return member
        if v.startswith("PRE"):
            return cls.PRE
        if v.startswith("POST"):
            return cls.POST
        return cls.UNKNOWN


def compute_change(current_price: float, previous_close: float) -> tuple[float, float]:
    """Return (day_change, day_change_percent), percent is 0 when previous_close <= 0."""
    change = current_price - previous_close
    percent = (change / previous_close) * 100 if previous_close > 0 else 0.0
    return change, percent


@dataclass(frozen=True)
class Quote:
    """
    Point-in-time price for one ticker from exactly one provider.

    ``data_source`` is the provider that actually answered, after fallback.
    """

    ticker: str
    name: str
    current_price: float
    previous_close: float
    day_change: float
    day_change_percent: float
    volume: int
    market_cap: float
    currency: str
    exchange: str
    market_state: MarketState
    last_update: datetime
    data_source: str

    def __post_init__(self) -> None:
        if not self.ticker or self.ticker != self.ticker.upper():
            raise ValueError(f"ticker must be non-empty uppercase, got {self.ticker!r}")
        for name in ("current_price", "previous_close", "day_change", "day_change_percent"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        if self.current_price <= 0:
            raise ValueError(f"current_price must be positive, got {self.current_price}")
        expected = self.current_price - self.previous_close
        if abs(self.day_change - expected) > CHANGE_TOLERANCE:
            raise ValueError(
                f"day_change {self.day_change} != current_price - previous_close ({expected})"
            )
        if self.last_update.tzinfo is None:
            raise ValueError("last_update must be timezone-aware")
        if not self.data_source:
            raise ValueError("data_source must be non-empty")


@dataclass(frozen=True)
class HistoricalBar:
    """One OHLCV bar for a single trading interval."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            raise ValueError("timestamp must be timezone-aware")
        for name in ("open", "high", "low", "close"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")


@dataclass(frozen=True)
class MarketIndicator:
    """Headline indicator (VIX, S&P 500, ...) derived from a Quote."""

    name: str
    ticker: str
    value: float
    change: float
    change_percent: float
    timestamp: datetime

    @classmethod
    def from_quote(cls, name: str, quote: Quote) -> MarketIndicator:
        return cls(
            name=name,
            ticker=quote.ticker,
            value=round(quote.current_price, 2),
            change=round(quote.day_change, 2),
            change_percent=round(quote.day_change_percent, 2),
            timestamp=quote.last_update,
        )
