"""Per-source TTL cache with stale fallback."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStatus(str, Enum):
    """How the value returned by SourceCache.get() was obtained."""

    LIVE = "live"  # Fetched just now
    CACHED = "cached"  # Fresh value from the cache, no network access
    DEGRADED = "degraded"  # Live fetch failed, stale value served
    UNAVAILABLE = "unavailable"  # Live fetch failed, nothing cached


@dataclass(frozen=True, slots=True)
class CacheResult(Generic[T]):
    value: T | None
    status: CacheStatus
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.status is not CacheStatus.UNAVAILABLE

    @property
    def degraded(self) -> bool:
        return self.status is CacheStatus.DEGRADED


@dataclass(frozen=True, slots=True)
class _Entry(Generic[T]):
    value: T
    fetched_at: float


class SourceCache(Generic[T]):
    """Wraps one upstream fetch function with a time-to-live cache.

    A value is fresh while ``clock() - fetched_at < ttl``. Fresh values are
    served without calling ``fetch``. When a live fetch fails the last good
    value is served as DEGRADED, or None as UNAVAILABLE when there is none.

    One attempt per get(); no retries. The entry is swapped as a single object,
    so concurrent callers never observe a half-written value. Two concurrent
    callers may both fetch live; the last successful fetch wins.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        ttl: float = 0.0,
        timeout: float | None = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl < 0:
            raise ValueError("ttl must be >= 0")
        self.name = name
        self.ttl = ttl
        self._fetch = fetch
        self._timeout = timeout
        self._clock = clock
        self._entry: _Entry[T] | None = None

    async def get(self) -> CacheResult[T]:
        """Return the current value for this source, fetching live when needed."""
        entry = self._entry
        if entry is not None and self._is_fresh(entry):
            logger.debug("Returning cached %s data", self.name)
            return CacheResult(entry.value, CacheStatus.CACHED)

        try:
            if self._timeout is None:
                value = await self._fetch()
            else:
                value = await asyncio.wait_for(self._fetch(), timeout=self._timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            reason = str(e) or type(e).__name__
            if isinstance(e, asyncio.TimeoutError):
                reason = f"timed out after {self._timeout}s"
            logger.error("Failed to fetch %s: %s", self.name, reason)

            # Re-read: a concurrent caller may have stored a newer value meanwhile
            entry = self._entry
            if entry is not None:
                logger.warning("Returning stale cached %s data due to fetch failure", self.name)
                return CacheResult(entry.value, CacheStatus.DEGRADED, reason)
            logger.warning("No cached %s data available", self.name)
            return CacheResult(None, CacheStatus.UNAVAILABLE, reason)

        self._entry = _Entry(value, self._clock())
        return CacheResult(value, CacheStatus.LIVE)

    def peek(self) -> T | None:
        """Last successfully fetched value, fresh or not. Never fetches."""
        entry = self._entry
        return entry.value if entry else None

    def clear(self) -> None:
        """Drop the cached value so the next get() fetches live."""
        self._entry = None
        logger.info("%s cache cleared", self.name)

    def status(self) -> dict:
        entry = self._entry
        return {
            "hasCachedData": entry is not None,
            "cacheAge": self._clock() - entry.fetched_at if entry else None,
            "isValid": entry is not None and self._is_fresh(entry),
        }

    def _is_fresh(self, entry: _Entry[T]) -> bool:
        return self._clock() - entry.fetched_at < self.ttl
