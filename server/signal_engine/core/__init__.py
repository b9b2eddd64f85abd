"""
Signal Engine Core

Exceptions and outcome values shared by every component.
"""
from signal_engine.core.types import (
    FetchOutcome,
    InvalidInputError,
    RateLimitedError,
    SignalEngineError,
    SourceUnavailableError,
)

__all__ = [
    "FetchOutcome",
    "InvalidInputError",
    "RateLimitedError",
    "SignalEngineError",
    "SourceUnavailableError",
]
