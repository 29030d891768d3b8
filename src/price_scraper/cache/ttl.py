"""Time-bounded in-memory memoization.

Entries expire lazily: an entry older than the TTL is reported as absent
but stays in place until the next ``put`` for the same key overwrites it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from price_scraper.schemas.budget import CacheStats


if TYPE_CHECKING:
    from collections.abc import Callable, Hashable


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value and the monotonic time it was stored."""

    value: T
    stored_at: float


class ResultCache(Generic[T]):
    """TTL cache keyed by hashable composite keys such as ``(product, zip)``."""

    def __init__(
        self,
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Maximum age of a valid entry.
            clock: Monotonic clock in seconds.
        """
        if ttl_seconds <= 0:
            msg = "ttl_seconds must be positive"
            raise ValueError(msg)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[T]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> T | None:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.stored_at >= self.ttl_seconds:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def put(self, key: Hashable, value: T) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def clear(self) -> None:
        """Drop all entries and reset the counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> CacheStats:
        """Return size and hit/miss counters."""
        lookups = self._hits + self._misses
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            hit_rate=self._hits / lookups if lookups else 0.0,
        )
