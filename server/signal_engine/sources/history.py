"""
Shared pieces for historical bar sources.
"""
from __future__ import annotations

from dataclasses import dataclass

from signal_engine.models.market import HistoricalBar

MAX_HISTORY_DAYS = 3650


@dataclass(frozen=True)
class HistoryRequest:
    """Key for history sources: ticker plus lookback in calendar days."""

    ticker: str
    days: int

    def __post_init__(self) -> None:
        if not self.ticker:
            raise ValueError("ticker must be non-empty")
        if not (1 <= self.days <= MAX_HISTORY_DAYS):
            raise ValueError(f"days must be in [1, {MAX_HISTORY_DAYS}], got {self.days}")

    def __str__(self) -> str:
        return f"{self.ticker}/{self.days}d"


def finalize_bars(bars: list[HistoricalBar]) -> list[HistoricalBar]:
    """Sort ascending by timestamp and keep the first bar seen per timestamp."""
    seen = set()
    ordered: list[HistoricalBar] = []
    for bar in sorted(bars, key=lambda b: b.timestamp):
        if bar.timestamp in seen:
            continue
        seen.add(bar.timestamp)
        ordered.append(bar)
    return ordered
