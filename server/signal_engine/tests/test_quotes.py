"""
Tests for signal_engine.fetch.quotes

Quote sources are FakeSources keyed by ticker.
"""
from datetime import timedelta

import pytest

from signal_engine.core.types import InvalidInputError
from signal_engine.fetch.quotes import MAX_BATCH_SIZE, QuoteService, normalize_ticker
from signal_engine.models.market import HistoricalBar
from signal_engine.sources.history import HistoryRequest


@pytest.fixture
def yahoo(fake_source, make_quote):
    known = {"AAPL", "LMT", "^VIX", "SPY", "GLD"}
    return fake_source(
        "yahoo",
        answer=lambda t: make_quote(t, source="yahoo") if t in known else None,
        reason="Yahoo chart error: No data found",
    )


@pytest.fixture
def polygon(fake_source, make_quote):
    return fake_source("polygon", answer=lambda t: make_quote(t, source="polygon") if t == "USO" else None)


@pytest.fixture
def iex(fake_source):
    return fake_source("iex", reason="credential not configured")


@pytest.fixture
def service(yahoo, polygon, iex, fake_source):
    return QuoteService(quote_sources=[yahoo, polygon, iex], history_sources=[fake_source("yahoo")])


# ── normalize_ticker ──────────────────────────────────────────────────────────

def test_normalize_ticker_uppercases_and_strips():
    assert normalize_ticker("  lmt ") == "LMT"
    assert normalize_ticker("^vix") == "^VIX"
    assert normalize_ticker("brk.b") == "BRK.B"


@pytest.mark.parametrize("raw", ["", None, "   ", "A B", "LMT;DROP"])
def test_normalize_ticker_rejects_bad_input(raw):
    with pytest.raises(InvalidInputError):
        normalize_ticker(raw)


# ── chain_for() ───────────────────────────────────────────────────────────────

class TestChainFor:
    def names(self, chain):
        return [s.name for s in chain]

    def test_default_is_priority_order(self, service):
        assert self.names(service.chain_for()) == ["yahoo", "polygon", "iex"]

    def test_requested_first_canonical_last(self, service):
        assert self.names(service.chain_for("iex")) == ["iex", "polygon", "yahoo"]
        assert self.names(service.chain_for("Polygon")) == ["polygon", "iex", "yahoo"]

    def test_requesting_canonical_keeps_it_first(self, service):
        assert self.names(service.chain_for("yahoo")) == ["yahoo", "polygon", "iex"]

    def test_unknown_source_is_invalid_input(self, service):
        with pytest.raises(InvalidInputError, match="Unknown quote source"):
            service.chain_for("bloomberg")


# ── quote() / batch() ─────────────────────────────────────────────────────────

async def test_quote_served_by_canonical(service):
    quote = await service.quote("aapl")
    assert quote.ticker == "AAPL"
    assert quote.data_source == "yahoo"


async def test_quote_falls_back_past_requested_source(service, yahoo, iex):
    quote = await service.quote("LMT", source="iex")
    assert quote.data_source == "yahoo"
    assert iex.calls == ["LMT"]
    assert yahoo.calls == ["LMT"]


async def test_quote_with_no_data_is_none(service):
    assert await service.quote("ZZZZ") is None


async def test_batch_returns_only_successes_in_order(service):
    quotes = await service.batch(["LMT", "ZZZZINVALID", "AAPL"])
    assert [q.ticker for q in quotes] == ["LMT", "AAPL"]
    assert all(q.data_source == "yahoo" for q in quotes)


async def test_batch_drops_malformed_tickers_and_keeps_the_rest(service, yahoo):
    quotes = await service.batch(["AAPL", "BRK/B", "$X", "  ", " lmt "])

    assert [q.ticker for q in quotes] == ["AAPL", "LMT"]
    assert sorted(yahoo.calls) == ["AAPL", "LMT"]


async def test_batch_of_only_malformed_tickers_is_empty(service, yahoo):
    assert await service.batch(["BRK/B", "$X"]) == []
    assert yahoo.calls == []


async def test_batch_rejects_oversized_request(service):
    tickers = [f"T{i}" for i in range(MAX_BATCH_SIZE + 1)]
    with pytest.raises(InvalidInputError, match="At most"):
        await service.batch(tickers)


async def test_indicators_keep_display_names_and_skip_missing(service):
    indicators = await service.indicators()
    by_ticker = {i.ticker: i for i in indicators}

    assert by_ticker["^VIX"].name == "VIX"
    assert by_ticker["SPY"].name == "S&P 500"
    assert by_ticker["USO"].name == "Oil (USO)"
    assert by_ticker["GLD"].name == "Gold (GLD)"
    assert by_ticker["USO"].value == 100.0
    assert by_ticker["USO"].change == 2.0


# ── historical() ──────────────────────────────────────────────────────────────

async def test_historical_falls_back_to_second_source(fake_source, now):
    bars = [
        HistoricalBar(timestamp=now - timedelta(days=1), open=1, high=2, low=0.5, close=1.5, volume=10),
        HistoricalBar(timestamp=now, open=1.5, high=2, low=1, close=1.8, volume=12),
    ]
    primary = fake_source("yahoo", reason="Yahoo returned no bars for LMT")
    secondary = fake_source("polygon", answer=bars)
    service = QuoteService(quote_sources=[], history_sources=[primary, secondary])

    result = await service.historical("lmt", days=5)

    assert result == bars
    assert primary.calls == [HistoryRequest(ticker="LMT", days=5)]


async def test_historical_no_data_is_empty_list(service):
    assert await service.historical("LMT") == []


@pytest.mark.parametrize("days", [0, -1, 3651])
async def test_historical_rejects_out_of_range_days(service, days):
    with pytest.raises(InvalidInputError):
        await service.historical("LMT", days=days)
