"""
Tests for the Yahoo, Polygon and IEX payload normalizers and market models.

Pure unit tests, payloads trimmed from real provider responses.
"""
from datetime import datetime, timezone

import pytest

from signal_engine.core.types import SourceUnavailableError
from signal_engine.models.market import MarketState, Quote
from signal_engine.sources.iex import normalize_iex_quote
from signal_engine.sources.polygon import normalize_prev_quote, normalize_range_bars
from signal_engine.sources.yahoo import normalize_chart_bars, normalize_chart_quote


def chart(meta=None, timestamps=None, quote=None, error=None):
    if error:
        return {"chart": {"result": None, "error": {"code": "Not Found", "description": error}}}
    return {
        "chart": {
            "result": [
                {
                    "meta": meta or {},
                    "timestamp": timestamps or [],
                    "indicators": {"quote": [quote or {}]},
                }
            ],
            "error": None,
        }
    }


# ── Yahoo ─────────────────────────────────────────────────────────────────────

class TestYahooQuote:
    def test_last_non_null_close_wins(self):
        payload = chart(
            meta={
                "regularMarketPrice": 450.0,
                "previousClose": 440.0,
                "longName": "Lockheed Martin Corporation",
                "currency": "USD",
                "exchangeName": "NYQ",
                "marketState": "POSTPOST",
                "regularMarketVolume": 1200000,
            },
            timestamps=[1760870000, 1760870060, 1760870120],
            quote={"close": [451.0, 452.5, None], "volume": [10, 20, None]},
        )

        quote = normalize_chart_quote("LMT", payload)

        assert quote.current_price == 452.5
        assert quote.previous_close == 440.0
        assert quote.day_change == pytest.approx(12.5)
        assert quote.day_change_percent == pytest.approx(12.5 / 440.0 * 100)
        assert quote.last_update == datetime.fromtimestamp(1760870060, tz=timezone.utc)
        assert quote.market_state is MarketState.POST
        assert quote.name == "Lockheed Martin Corporation"
        assert quote.volume == 1200000
        assert quote.data_source == "yahoo"

    def test_falls_back_to_meta_price(self):
        payload = chart(
            meta={"regularMarketPrice": 25.0, "chartPreviousClose": 20.0, "regularMarketTime": 1760870000},
            quote={"close": [None, None]},
            timestamps=[1, 2],
        )
        quote = normalize_chart_quote("PLTR", payload)
        assert quote.current_price == 25.0
        assert quote.day_change == 5.0
        assert quote.name == "PLTR"
        assert quote.market_state is MarketState.UNKNOWN

    def test_chart_error_is_source_unavailable(self):
        with pytest.raises(SourceUnavailableError, match="No data found"):
            normalize_chart_quote("ZZZZ", chart(error="No data found, symbol may be delisted"))

    def test_no_price_at_all_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_chart_quote("LMT", chart(meta={}, quote={"close": []}))

    def test_missing_previous_close_is_value_error(self):
        payload = chart(meta={"regularMarketPrice": 25.0}, quote={"close": [25.0]}, timestamps=[1])
        with pytest.raises(ValueError, match="previous close"):
            normalize_chart_quote("PLTR", payload)


def test_yahoo_bars_drop_incomplete_rows_and_sort():
    payload = chart(
        timestamps=[1760745600, 1760572800, 1760659200],
        quote={
            "open": [3.0, 1.0, None],
            "high": [3.5, 1.5, 2.5],
            "low": [2.5, 0.5, 1.5],
            "close": [3.2, 1.2, 2.2],
            "volume": [300, 100, 200],
        },
    )

    bars = normalize_chart_bars(payload)

    assert [b.close for b in bars] == [1.2, 3.2]
    assert bars[0].timestamp < bars[1].timestamp


# ── Polygon ───────────────────────────────────────────────────────────────────

def test_polygon_prev_uses_open_as_reference():
    payload = {
        "status": "OK",
        "results": [{"T": "LMT", "o": 440.0, "h": 455.0, "l": 438.0, "c": 450.0, "v": 900000, "t": 1760731200000}],
    }

    quote = normalize_prev_quote("LMT", payload)

    assert quote.current_price == 450.0
    assert quote.previous_close == 440.0
    assert quote.day_change == 10.0
    assert quote.market_state is MarketState.CLOSED
    assert quote.data_source == "polygon"
    assert quote.last_update == datetime.fromtimestamp(1760731200, tz=timezone.utc)


def test_polygon_empty_results_is_source_unavailable():
    with pytest.raises(SourceUnavailableError, match="no quote data"):
        normalize_prev_quote("ZZZZ", {"status": "OK", "resultsCount": 0})


def test_polygon_range_bars_are_deduplicated():
    rows = [
        {"t": 1760659200000, "o": 2, "h": 3, "l": 1, "c": 2.5, "v": 20},
        {"t": 1760572800000, "o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 10},
        {"t": 1760659200000, "o": 9, "h": 9, "l": 9, "c": 9, "v": 99},
    ]

    bars = normalize_range_bars({"results": rows})

    assert [b.close for b in bars] == [1.5, 2.5]


# ── IEX ───────────────────────────────────────────────────────────────────────

def test_iex_quote_recomputes_change():
    payload = {
        "symbol": "RTX",
        "companyName": "RTX Corp",
        "latestPrice": 120.0,
        "previousClose": 118.0,
        "change": 999,
        "latestVolume": 5000,
        "marketCap": 1.6e11,
        "primaryExchange": "NEW YORK STOCK EXCHANGE",
        "isUSMarketOpen": True,
        "latestUpdate": 1760870000000,
    }

    quote = normalize_iex_quote("RTX", payload)

    assert quote.day_change == 2.0
    assert quote.market_state is MarketState.REGULAR
    assert quote.name == "RTX Corp"
    assert quote.data_source == "iex"


def test_iex_quote_without_previous_close_is_value_error():
    with pytest.raises(ValueError, match="previous close"):
        normalize_iex_quote("RTX", {"latestPrice": 120.0, "previousClose": None})


# ── Models ────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("REGULAR", MarketState.REGULAR),
        ("prepre", MarketState.PRE),
        ("POSTPOST", MarketState.POST),
        ("", MarketState.UNKNOWN),
        (None, MarketState.UNKNOWN),
        ("HALTED", MarketState.UNKNOWN),
    ],
)
def test_market_state_from_string(raw, expected):
    assert MarketState.from_string(raw) is expected


def test_quote_rejects_inconsistent_change():
    with pytest.raises(ValueError, match="day_change"):
        Quote(
            ticker="LMT",
            name="LMT",
            current_price=100.0,
            previous_close=90.0,
            day_change=5.0,
            day_change_percent=5.0,
            volume=0,
            market_cap=0.0,
            currency="USD",
            exchange="",
            market_state=MarketState.UNKNOWN,
            last_update=datetime(2026, 10, 19, tzinfo=timezone.utc),
            data_source="yahoo",
        )
