"""
Market signal aggregation and scoring engine.

Pulls quotes, history, news, defense contracts and vessel traffic from
multiple providers with per-source rate limits and fallback chains, scores
what it finds, and serves it over HTTP and a Redis pub/sub feed.

Public API:
    SignalEngine   facade wiring sources, limiter and services together
    Settings       environment-driven configuration
    load_settings  build Settings from the environment
"""
from signal_engine.config import Settings, load_settings
from signal_engine.engine import SignalEngine

__all__ = ["Settings", "SignalEngine", "load_settings"]
