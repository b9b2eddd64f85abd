"""
Ordered-fallback fetching and the market data operations built on it.
"""
from signal_engine.fetch.fallback import FallbackFetcher
from signal_engine.fetch.quotes import INDICATORS, QuoteService, normalize_ticker

__all__ = ["FallbackFetcher", "INDICATORS", "QuoteService", "normalize_ticker"]
