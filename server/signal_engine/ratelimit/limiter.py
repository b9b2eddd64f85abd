"""
Fixed-Window Rate Limiter

In-memory request counter keyed by an arbitrary string (usually
"{source}:{action}"). Each key gets a fixed window; the first call after the
window expires starts a fresh record.

    limiter = RateLimiter()
    if limiter.allow("yahoo:quote", limit=10):
        ...

Fixed windows admit up to 2 * limit calls across a window boundary. The
quotas being protected are third-party free tiers, so that burst is tolerated.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0

Clock = Callable[[], float]


@dataclass
class RateLimitRecord:
    """Call count for one key inside its current window."""

    key: str
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window limiter with one record per key.

    - allow() is an atomic check-and-increment under a lock, so concurrent
      fan-out branches hitting the same key never over-admit.
    - Records are replaced, never merged, once their window has passed.
    - The table grows with distinct keys, not with requests.
    """

    __slots__ = ("_window", "_clock", "_records", "_lock")

    def __init__(
        self,
        window_seconds: float = WINDOW_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        self._window = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> float:
        return self._window

    def allow(self, key: str, limit: int) -> bool:
        """
        Record one call for *key* and return whether it is within *limit*.

        A limit below 1 admits nothing and leaves the table untouched.
        """
        if limit < 1:
            return False

        with self._lock:
            now = self._clock()
            record = self._records.get(key)

            if record is None or now >= record.reset_at:
                self._records[key] = RateLimitRecord(
                    key=key, count=1, reset_at=now + self._window
                )
                return True

            if record.count < limit:
                record.count += 1
                return True

        logger.debug(
            f"Rate limit reached for {key}",
            extra={"key": key, "limit": limit},
        )
        return False

    def snapshot(self, key: str) -> Optional[RateLimitRecord]:
        """Return a copy of the record for *key*, or None if never seen."""
        with self._lock:
            record = self._records.get(key)
            return replace(record) if record is not None else None

    def remaining(self, key: str, limit: int) -> int:
        """Calls still admissible for *key* in its current window."""
        with self._lock:
            record = self._records.get(key)
            if record is None or self._clock() >= record.reset_at:
                return max(limit, 0)
            return max(limit - record.count, 0)

    def __len__(self) -> int:
        return len(self._records)
