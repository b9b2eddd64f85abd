"""
Tests for signal_engine.api

The application runs on an aiohttp TestClient over an engine built from
FakeSources, with a small inbound quota so throttling is easy to hit.
"""
import pytest
from aiohttp.test_utils import TestClient, TestServer

from signal_engine.aggregation.contracts import ContractService
from signal_engine.aggregation.events import EventAggregator
from signal_engine.aggregation.maritime import MaritimeMonitor
from signal_engine.aggregation.news import NewsSearchService
from signal_engine.api import create_app
from signal_engine.engine import SignalEngine
from signal_engine.fetch.quotes import QuoteService
from signal_engine.models.maritime import VesselPosition
from signal_engine.ratelimit import RateLimiter
from signal_engine.scoring.relevance import RelevanceScorer

API_LIMIT = 3


@pytest.fixture
def engine(fake_source, make_quote, make_event, make_award, fixed_clock, now):
    known = {"LMT", "RTX", "^VIX", "SPY", "USO", "GLD"}
    vessels = [
        VesselPosition(
            mmsi=str(i), name=f"V{i}", vessel_type=vessel_type, latitude=26.5, longitude=56.2,
            course=0.0, speed=10.0, heading=0.0, timestamp=now,
        )
        for i, vessel_type in enumerate(["cargo", "tanker", "passenger"])
    ]
    return SignalEngine(
        quotes=QuoteService(
            quote_sources=[
                fake_source("yahoo", answer=lambda t: make_quote(t) if t in known else None),
                fake_source("polygon", reason="credential not configured"),
            ],
            history_sources=[fake_source("yahoo")],
        ),
        events=EventAggregator(
            [fake_source("google_news", answer=[make_event("a", relevance=1.0), make_event("b", relevance=4.0)])],
            scorer=RelevanceScorer(clock=fixed_clock),
        ),
        contracts=ContractService(
            [fake_source("usaspending", answer=[make_award("c1", 2e6), make_award("c2", 3e8)])]
        ),
        maritime=MaritimeMonitor([fake_source("aishub", answer=vessels)], clock=fixed_clock),
        news=NewsSearchService(
            [
                fake_source("thenewsapi", reason="credential not configured"),
                fake_source("google_news", answer=[make_event("n1", relevance=2.0), make_event("n2", relevance=5.0)]),
            ],
            scorer=RelevanceScorer(clock=fixed_clock),
        ),
        limiter=RateLimiter(),
        api_requests_per_minute=API_LIMIT,
    )


@pytest.fixture
async def client(engine):
    test_client = TestClient(TestServer(create_app(engine)))
    await test_client.start_server()
    yield test_client
    await test_client.close()


async def get(client, path, status=200, **params):
    resp = await client.get(path, params=params)
    assert resp.status == status
    return await resp.json()


# ── /api/market-data ──────────────────────────────────────────────────────────

async def test_quote_envelope(client):
    body = await get(client, "/api/market-data", action="quote", ticker="lmt")

    assert body["success"] is True
    assert body["data"]["ticker"] == "LMT"
    assert body["data"]["dataSource"] == "yahoo"
    assert body["data"]["dayChange"] == 2.0


async def test_quote_without_data_is_null_not_error(client):
    body = await get(client, "/api/market-data", action="quote", ticker="ZZZZ")
    assert body == {"success": True, "data": None}


async def test_batch_skips_unknown_tickers(client):
    body = await get(client, "/api/market-data", action="batch", tickers="LMT,ZZZZINVALID,RTX")
    assert [q["ticker"] for q in body["data"]] == ["LMT", "RTX"]
    assert body["count"] == 2


async def test_empty_batch_is_empty_list(client):
    body = await get(client, "/api/market-data", action="batch", tickers="")
    assert body["data"] == []


async def test_indicators(client):
    body = await get(client, "/api/market-data", action="indicators")
    assert [i["name"] for i in body["data"]] == ["VIX", "S&P 500", "Oil (USO)", "Gold (GLD)"]


async def test_historical_without_data_is_empty(client):
    body = await get(client, "/api/market-data", action="historical", ticker="LMT", days="10")
    assert body["data"] == []
    assert body["count"] == 0


async def test_health(client):
    body = await get(client, "/api/market-data", action="health")
    assert body["data"]["status"] == "operational"
    assert body["data"]["quoteSources"] == ["yahoo", "polygon"]


@pytest.mark.parametrize(
    "params",
    [
        {"action": "bogus"},
        {"action": "quote"},
        {"action": "quote", "ticker": "A B"},
        {"action": "quote", "ticker": "LMT", "source": "bloomberg"},
        {"action": "historical", "ticker": "LMT", "days": "abc"},
    ],
)
async def test_invalid_input_is_400(client, params):
    body = await get(client, "/api/market-data", status=400, **params)
    assert body["success"] is False
    assert body["error"]


async def test_inbound_rate_limit_is_429(client):
    for _ in range(API_LIMIT):
        await get(client, "/api/market-data", action="quote", ticker="LMT")

    resp = await client.get("/api/market-data", params={"action": "quote", "ticker": "LMT"})
    assert resp.status == 429
    assert resp.headers["Retry-After"] == "60"
    body = await resp.json()
    assert body["success"] is False

    # A different ticker has its own key
    await get(client, "/api/market-data", action="quote", ticker="RTX")


# ── /api/realtime-price ───────────────────────────────────────────────────────

async def test_realtime_single_and_multi(client):
    single = await get(client, "/api/realtime-price", symbol="rtx")
    assert single["data"]["ticker"] == "RTX"

    multi = await get(client, "/api/realtime-price", symbols="LMT,RTX")
    assert multi["count"] == 2


async def test_realtime_requires_symbol(client):
    body = await get(client, "/api/realtime-price", status=400)
    assert body["error"] == "Symbol or symbols parameter required"


# ── Events / news / contracts / vessels ───────────────────────────────────────

async def test_events_are_ranked(client):
    body = await get(client, "/api/geopolitical-events", category="defense", days="3", limit="5")

    assert [e["id"] for e in body["data"]] == ["b", "a"]
    assert body["count"] == 2
    assert body["timeframe"] == "3d"
    assert body["sources"] == ["google_news"]


async def test_events_unknown_category_is_400(client):
    await get(client, "/api/geopolitical-events", status=400, category="sports")


async def test_news_search_falls_back_and_reports_source(client):
    body = await get(client, "/api/news", q="Pentagon budget", limit="5")

    assert [e["id"] for e in body["data"]] == ["n2", "n1"]
    assert body["query"] == "Pentagon budget"
    assert body["source"] == "google_news"
    assert body["attempts"] == ["thenewsapi", "google_news"]
    assert body["count"] == 2


async def test_news_search_unknown_source_is_400(client):
    body = await get(client, "/api/news", status=400, q="NATO", source="bloomberg")
    assert body["error"] == "Unknown news source: bloomberg"


async def test_news_search_with_no_answering_source_is_empty(fake_source, engine):
    engine.news = NewsSearchService([fake_source("thenewsapi"), fake_source("google_news")])
    test_client = TestClient(TestServer(create_app(engine)))
    await test_client.start_server()
    try:
        body = await get(test_client, "/api/news")
    finally:
        await test_client.close()

    assert body["data"] == []
    assert body["source"] is None
    assert body["query"] == "defense stocks military technology"


async def test_contracts_total_value(client):
    body = await get(client, "/api/defense-contracts", minAmount="1000000")

    assert [c["id"] for c in body["data"]] == ["c2", "c1"]
    assert body["totalValue"] == 3e8 + 2e6
    assert body["data"][0]["impactedStocks"][0]["symbol"] == "LMT"
    assert body["data"][0]["marketImpact"]["level"] == "medium"


async def test_contracts_negative_amount_is_400(client):
    await get(client, "/api/defense-contracts", status=400, minAmount="-5")


async def test_vessel_positions_and_traffic(client):
    positions = await get(client, "/api/vessels", action="positions", types="cargo,passenger")
    assert [v["type"] for v in positions["data"]] == ["cargo", "passenger"]

    traffic = await get(client, "/api/vessels", action="traffic", region="strait_of_hormuz")
    assert traffic["data"]["totalVessels"] == 3
    assert traffic["data"]["congestionLevel"] == "LOW"


async def test_vessel_events_and_bad_region(client):
    events = await get(client, "/api/vessels", action="events")
    assert events["data"] == []

    await get(client, "/api/vessels", status=400, action="traffic", region="atlantis")


# ── Unexpected errors ─────────────────────────────────────────────────────────

async def test_unexpected_error_is_500(fake_source, engine):
    engine.events = EventAggregator([fake_source("broken", error=RuntimeError("boom"))])
    test_client = TestClient(TestServer(create_app(engine)))
    await test_client.start_server()
    try:
        body = await get(test_client, "/api/geopolitical-events", status=500)
    finally:
        await test_client.close()

    assert body == {"success": False, "error": "Internal server error"}
