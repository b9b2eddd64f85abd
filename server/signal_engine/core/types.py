"""
Core Type Definitions and Exceptions

Error taxonomy shared by every layer of the engine, plus the FetchOutcome
value that source clients return instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class SignalEngineError(Exception):
    """Base exception for all signal engine errors."""

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class InvalidInputError(SignalEngineError):
    """Raised when request parameters are missing or malformed."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = repr(value)[:100]  # Truncate long values
        super().__init__(message, ctx)
        self.field = field
        self.value = value


class RateLimitedError(SignalEngineError):
    """Raised when an inbound request exceeds its quota."""

    def __init__(
        self,
        message: str,
        key: str,
        limit: int,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        ctx["key"] = key
        ctx["limit"] = limit
        super().__init__(message, ctx)
        self.key = key
        self.limit = limit


class SourceUnavailableError(SignalEngineError):
    """
    Raised inside a source client when one provider cannot answer.

    Never leaves the client: HttpSourceClient.fetch() converts it into a
    failed FetchOutcome.
    """

    def __init__(
        self,
        message: str,
        source: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        ctx["source"] = source
        super().__init__(message, ctx)
        self.source = source


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    """
    Result of asking one source (or a whole chain) for one key.

    Either ``value`` is set and ``reason`` is empty, or ``value`` is None and
    ``reason`` says why. ``attempts`` lists every source tried, in order.
    """

    source: str
    value: Optional[T] = None
    reason: str = ""
    attempts: tuple[str, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def success(cls, source: str, value: T) -> FetchOutcome[T]:
        return cls(source=source, value=value, attempts=(source,))

    @classmethod
    def failure(cls, source: str, reason: str) -> FetchOutcome[T]:
        return cls(source=source, value=None, reason=reason, attempts=(source,))
