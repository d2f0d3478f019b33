"""
Tiered Cache

Read-through cache with a fast in-process tier and an optional distributed
tier. The distributed tier only changes durability and sharing across
processes; callers see the same get/set contract with or without it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .errors import CacheUnavailable
from .models import CacheStats
from .redis_cache import RedisCache

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    value: Any
    stored_at: float
    ttl_seconds: int

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl_seconds


class TieredCache:
    """
    In-process cache backed by an optional RedisCache.

    The local map is guarded by a lock since concurrent queries read and
    write it. Expired local entries are dropped lazily on read.
    """

    def __init__(
        self,
        default_ttl_seconds: int = 3600,
        distributed: RedisCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            default_ttl_seconds: TTL reported in stats and used for backfills
                when the distributed tier does not report one
            distributed: Optional shared tier
            clock: Monotonic time source (seconds)
        """
        _validate_ttl(default_ttl_seconds)
        self.default_ttl_seconds = default_ttl_seconds
        self.distributed = distributed
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """
        Return the cached value for key, or None on a miss.

        Checks the local tier first, then the distributed tier; a distributed
        hit is copied into the local tier.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if not entry.is_expired(now):
                    return entry.value
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")

        if self.distributed is None:
            return None

        try:
            hit = self.distributed.get(key)
        except CacheUnavailable as e:
            logger.warning(f"Distributed cache read failed, using local tier only: {e}")
            return None

        if hit is None:
            return None

        value, remaining_ttl = hit
        ttl = remaining_ttl or self.default_ttl_seconds
        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock(), ttl)
        logger.debug(f"Backfilled local cache from distributed tier: {key} (ttl={ttl}s)")
        return value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Store a value in the local tier and, best-effort, the distributed tier.

        A distributed write failure is logged and never raised.

        Raises:
            ValueError: If ttl_seconds is not a positive integer
        """
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        _validate_ttl(ttl)

        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock(), ttl)

        if self.distributed is None:
            return

        try:
            self.distributed.set(key, value, ttl)
        except CacheUnavailable as e:
            logger.warning(f"Distributed cache write failed, kept local copy only: {e}")
        except TypeError as e:
            logger.error(f"Value for {key} cannot be stored in the distributed cache: {e}")

    def clear(self, prefix: str | None = None) -> int:
        """
        Remove all entries, or those whose key starts with `<prefix>:`.

        Returns:
            Number of local entries removed
        """
        with self._lock:
            if prefix is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                doomed = [key for key in self._entries if key.startswith(f"{prefix}:")]
                for key in doomed:
                    del self._entries[key]
                removed = len(doomed)

        if self.distributed is not None:
            try:
                self.distributed.clear(prefix)
            except CacheUnavailable as e:
                logger.warning(f"Distributed cache clear failed: {e}")

        logger.info(f"Cleared {removed} local cache entries (scope={prefix or 'all'})")
        return removed

    def entry_count(self) -> int:
        """Number of local entries, including expired ones not yet evicted."""
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(
            entry_count=self.entry_count(),
            ttl_seconds=self.default_ttl_seconds,
            distributed=self.distributed is not None,
        )


def _validate_ttl(ttl_seconds: Any) -> None:
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int) or ttl_seconds <= 0:
        raise ValueError(f"ttl_seconds must be a positive integer, got: {ttl_seconds!r}")
