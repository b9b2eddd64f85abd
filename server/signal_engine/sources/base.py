"""
Source Client Base

Every upstream provider is wrapped in a SourceClient exposing one operation:
``fetch(key) -> FetchOutcome``. Provider quirks (wire formats, credentials,
HTTP status handling) stay behind this boundary; nothing raised inside a
client escapes it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Generic, Optional, Protocol, TypeVar, runtime_checkable

import aiohttp

from signal_engine.core.types import FetchOutcome, SourceUnavailableError
from signal_engine.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

K = TypeVar("K")
T = TypeVar("T")

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SignalEngine/1.0)"


def expect_object(payload: Any, source: str) -> dict[str, Any]:
    """Return *payload* when it is a JSON object, otherwise mark the source unavailable."""
    if not isinstance(payload, dict):
        raise SourceUnavailableError(
            f"Unexpected {source} payload: {type(payload).__name__}",
            source=source,
        )
    return payload


@runtime_checkable
class SourceClient(Protocol):
    """One upstream provider for one kind of resource."""

    name: str

    async def fetch(self, key: Any) -> FetchOutcome[Any]:
        """
        Fetch the resource identified by *key*.

        Returns a successful outcome carrying the normalized value, or a
        failed outcome carrying the reason. Never raises for provider errors.
        """
        ...


class HttpSourceClient(Generic[K, T]):
    """
    aiohttp-backed SourceClient.

    Subclasses set ``name`` / ``action`` and implement ``_fetch``. The base
    class gates each call on credentials and the shared RateLimiter, applies
    the per-call timeout, and converts every provider failure into a failed
    FetchOutcome.
    """

    name: str = ""
    action: str = "fetch"
    base_url: str = ""
    requires_credential: bool = False

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        limiter: Optional[RateLimiter] = None,
        limit: int = 60,
        timeout_seconds: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        credential: str = "",
        base_url: Optional[str] = None,
    ) -> None:
        self._session = session
        self._limiter = limiter
        self._limit = limit
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._user_agent = user_agent
        self._credential = credential
        if base_url is not None:
            self.base_url = base_url.rstrip("/")

    @property
    def rate_limit_key(self) -> str:
        return f"{self.name}:{self.action}"

    @property
    def available(self) -> bool:
        """False when a required credential is missing."""
        return not self.requires_credential or bool(self._credential)

    async def fetch(self, key: K) -> FetchOutcome[T]:
        if not self.available:
            return self._fail(key, "credential not configured")

        if self._limiter is not None and not self._limiter.allow(
            self.rate_limit_key, self._limit
        ):
            return self._fail(key, "rate limited")

        try:
            value = await self._fetch(key)
        except SourceUnavailableError as exc:
            return self._fail(key, exc.message)
        except asyncio.TimeoutError:
            return self._fail(key, f"timed out after {self._timeout.total}s")
        except aiohttp.ClientError as exc:
            return self._fail(key, f"network error: {exc}")
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            return self._fail(key, f"malformed payload: {exc!r}")

        logger.debug(
            f"{self.name} answered for {key}",
            extra={"source": self.name, "key": str(key)},
        )
        return FetchOutcome.success(self.name, value)

    async def _fetch(self, key: K) -> T:
        raise NotImplementedError

    def _fail(self, key: K, reason: str) -> FetchOutcome[T]:
        logger.debug(
            f"{self.name} failed for {key}: {reason}",
            extra={"source": self.name, "key": str(key), "reason": reason},
        )
        return FetchOutcome.failure(self.name, reason)

    # ── HTTP helpers ──────────────────────────────────────────────────────────

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        headers = {"User-Agent": self._user_agent, "Accept": "application/json"}
        if extra:
            headers.update(extra)
        return headers

    def _check_status(self, resp: aiohttp.ClientResponse) -> None:
        if resp.status >= 300:
            raise SourceUnavailableError(
                f"HTTP {resp.status} from {self.name}",
                source=self.name,
                context={"status": resp.status, "path": resp.url.path},
            )

    async def _get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        async with self._session.get(
            url, params=params, headers=self._headers(headers), timeout=self._timeout
        ) as resp:
            self._check_status(resp)
            return await resp.json(content_type=None)

    async def _get_text(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> str:
        async with self._session.get(
            url, params=params, headers=self._headers(headers), timeout=self._timeout
        ) as resp:
            self._check_status(resp)
            return await resp.text()

    async def _post_json(
        self,
        url: str,
        body: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        async with self._session.post(
            url, json=body, headers=self._headers(headers), timeout=self._timeout
        ) as resp:
            self._check_status(resp)
            return await resp.json(content_type=None)
