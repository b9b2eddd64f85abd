"""
Tests for signal_engine.config and SignalEngine wiring.
"""
from unittest.mock import MagicMock

import aiohttp
import pytest

from signal_engine.config import (
    DEFAULT_SOURCE_LIMITS,
    DEFAULT_WATCHLIST,
    ConfigurationError,
    Settings,
    load_settings,
)
from signal_engine.core.types import RateLimitedError
from signal_engine.engine import SignalEngine
from signal_engine.ratelimit import RateLimiter

ENV_VARS = (
    "POLYGON_API_KEY", "IEX_API_KEY", "THE_NEWS_API_KEY", "WORLD_NEWS_API_KEY",
    "AISHUB_USERNAME", "HTTP_TIMEOUT_SECONDS", "API_REQUESTS_PER_MINUTE",
    "RATE_LIMIT_YAHOO", "REDIS_URL", "FEED_WATCHLIST", "API_PORT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ── load_settings() ───────────────────────────────────────────────────────────

def test_defaults_without_environment(clean_env):
    settings = load_settings()

    assert settings.credentials.polygon_api_key == ""
    assert settings.rate_limits.limit_for("yahoo") == DEFAULT_SOURCE_LIMITS["yahoo"]
    assert settings.rate_limits.limit_for("aishub") == 1
    assert settings.rate_limits.limit_for("unknown") == 60
    assert settings.api_server.port == 8080
    assert settings.feed.watchlist == DEFAULT_WATCHLIST
    assert not settings.feed.enabled
    assert settings.log_level == "INFO"


def test_environment_overrides(clean_env):
    clean_env.setenv("POLYGON_API_KEY", "pk")
    clean_env.setenv("RATE_LIMIT_YAHOO", "25")
    clean_env.setenv("API_REQUESTS_PER_MINUTE", "5")
    clean_env.setenv("REDIS_URL", "redis://localhost:6379/0")
    clean_env.setenv("FEED_WATCHLIST", " lmt, noc ,,")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.credentials.polygon_api_key == "pk"
    assert settings.rate_limits.limit_for("yahoo") == 25
    assert settings.rate_limits.api_requests_per_minute == 5
    assert settings.feed.enabled
    assert settings.feed.watchlist == ("LMT", "NOC")
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [("API_PORT", "eighty"), ("HTTP_TIMEOUT_SECONDS", "soon"), ("HTTP_TIMEOUT_SECONDS", "0")],
)
def test_invalid_values_raise(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ConfigurationError):
        load_settings()


def test_source_limits_are_read_only():
    with pytest.raises(TypeError):
        Settings().rate_limits.source_limits["yahoo"] = 1000


# ── SignalEngine ──────────────────────────────────────────────────────────────

@pytest.fixture
def engine():
    session = MagicMock(spec=aiohttp.ClientSession)
    return SignalEngine.from_settings(Settings(), session, limiter=RateLimiter())


def test_sources_registered_in_priority_order(engine):
    assert engine.quotes.source_names == ("yahoo", "polygon", "iex")
    assert engine.quotes.history_source_names == ("yahoo", "polygon")
    assert engine.events.source_names == ("google_news", "thenewsapi", "worldnews", "reddit")
    assert engine.news.source_names == ("thenewsapi", "worldnews", "google_news")
    assert engine.contracts.source_names == ("usaspending",)
    assert engine.maritime.source_names == ("aishub",)


async def test_sources_without_credentials_fail_without_network(engine):
    polygon = engine.quotes.chain_for("polygon")[0]
    outcome = await polygon.fetch("LMT")
    assert outcome.reason == "credential not configured"


def test_admit_throttles_per_action_and_subject(engine):
    for _ in range(60):
        engine.admit("quote", "LMT")

    with pytest.raises(RateLimitedError) as exc_info:
        engine.admit("quote", "LMT")

    assert exc_info.value.key == "api:quote:LMT"
    assert exc_info.value.limit == 60
    engine.admit("quote", "RTX")


def test_health_summarises_sources(engine):
    health = engine.health()
    assert health["status"] == "operational"
    assert health["eventSources"] == ["google_news", "thenewsapi", "worldnews", "reddit"]
    assert health["newsSources"] == ["thenewsapi", "worldnews", "google_news"]
    assert health["vesselSources"] == ["aishub"]
