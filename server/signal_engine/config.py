"""
Signal Engine Configuration

Centralized configuration for the aggregation engine.
All environment variables MUST be defined here. No os.getenv() calls allowed elsewhere.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


class ConfigurationError(Exception):
    """Raised when configuration is present but invalid."""
    pass


def _optional_env(name: str, default: str = "") -> str:
    """Get an optional environment variable with a default."""
    return os.environ.get(name, default)


def _optional_env_int(name: str, default: int) -> int:
    """Get an optional integer environment variable with a default."""
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid integer value for {name}: {value}")


def _optional_env_float(name: str, default: float) -> float:
    """Get an optional float environment variable with a default."""
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid float value for {name}: {value}")


def _optional_env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Get an optional comma-separated list, stripped and without empties."""
    value = os.environ.get(name)
    if not value:
        return default
    return tuple(part.strip() for part in value.split(",") if part.strip())


# Requests per minute each upstream tolerates on its free tier.
DEFAULT_SOURCE_LIMITS: dict[str, int] = {
    "yahoo": 10,
    "polygon": 5,
    "iex": 5,
    "google_news": 3,
    "thenewsapi": 2,
    "worldnews": 2,
    "reddit": 10,
    "usaspending": 10,
    "aishub": 1,
}

DEFAULT_WATCHLIST = ("LMT", "PLTR", "COP", "CRWD", "NOC", "RTX")


@dataclass(frozen=True)
class ProviderCredentials:
    """Opaque API credentials. Empty string means the provider is unavailable."""
    polygon_api_key: str = ""
    iex_api_key: str = ""
    the_news_api_key: str = ""
    world_news_api_key: str = ""
    aishub_username: str = ""


@dataclass(frozen=True)
class HttpConfig:
    """Outbound HTTP settings shared by every source client."""
    timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; SignalEngine/1.0)"


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-source quotas plus the inbound request quota."""
    source_limits: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_SOURCE_LIMITS))
    )
    api_requests_per_minute: int = 60

    def limit_for(self, source: str) -> int:
        return self.source_limits.get(source, 60)


@dataclass(frozen=True)
class ApiServerConfig:
    """HTTP API server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass(frozen=True)
class FeedConfig:
    """Redis feed publisher configuration."""
    redis_url: str = ""
    refresh_seconds: float = 30.0
    watchlist: tuple[str, ...] = DEFAULT_WATCHLIST

    @property
    def enabled(self) -> bool:
        return bool(self.redis_url)


@dataclass(frozen=True)
class Settings:
    """Root configuration container."""
    credentials: ProviderCredentials = field(default_factory=ProviderCredentials)
    http: HttpConfig = field(default_factory=HttpConfig)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    api_server: ApiServerConfig = field(default_factory=ApiServerConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Load all settings from environment variables.

    Every credential is optional. A missing key only disables the matching
    provider, which the fallback chain then skips.
    """
    credentials = ProviderCredentials(
        polygon_api_key=_optional_env("POLYGON_API_KEY"),
        iex_api_key=_optional_env("IEX_API_KEY"),
        the_news_api_key=_optional_env("THE_NEWS_API_KEY"),
        world_news_api_key=_optional_env("WORLD_NEWS_API_KEY"),
        aishub_username=_optional_env("AISHUB_USERNAME"),
    )

    http = HttpConfig(
        timeout_seconds=_optional_env_float("HTTP_TIMEOUT_SECONDS", 10.0),
        user_agent=_optional_env("HTTP_USER_AGENT", HttpConfig.user_agent),
    )

    limits = {
        source: _optional_env_int(f"RATE_LIMIT_{source.upper()}", default)
        for source, default in DEFAULT_SOURCE_LIMITS.items()
    }
    rate_limits = RateLimitConfig(
        source_limits=MappingProxyType(limits),
        api_requests_per_minute=_optional_env_int("API_REQUESTS_PER_MINUTE", 60),
    )

    api_server = ApiServerConfig(
        host=_optional_env("API_HOST", "0.0.0.0"),
        port=_optional_env_int("API_PORT", 8080),
    )

    feed = FeedConfig(
        redis_url=_optional_env("REDIS_URL", ""),
        refresh_seconds=_optional_env_float("FEED_REFRESH_SECONDS", 30.0),
        watchlist=tuple(
            t.upper() for t in _optional_env_list("FEED_WATCHLIST", DEFAULT_WATCHLIST)
        ),
    )

    if http.timeout_seconds <= 0:
        raise ConfigurationError(
            f"HTTP_TIMEOUT_SECONDS must be positive, got {http.timeout_seconds}"
        )

    return Settings(
        credentials=credentials,
        http=http,
        rate_limits=rate_limits,
        api_server=api_server,
        feed=feed,
        log_level=_optional_env("LOG_LEVEL", "INFO").upper(),
    )


settings = load_settings()
