"""In-memory request cache with a freshness window."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 10 * 60


class CacheEntry(NamedTuple):
    """A captured value. Entries are replaced, never mutated."""
    captured_at: float
    value: Any


def cache_key(kind: str, **shape: Any) -> str:
    """Build a collision-free key from the full shape of a request."""
    return f"{kind}:{json.dumps(shape, sort_keys=True, default=str)}"


class Cache:
    """Key/value store whose entries expire lazily after ``ttl_seconds``."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.captured_at < self.ttl_seconds

    def get(self, key: str) -> Any | None:
        """Get a cached value by key. Returns None if expired or missing."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            logger.debug("Cache miss: %s", key)
            return None
        if not self._is_fresh(entry):
            self._entries.pop(key, None)
            self._misses += 1
            logger.debug("Cache expired: %s", key)
            return None
        self._hits += 1
        logger.debug("Cache hit: %s", key)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous entry."""
        self._entries[key] = CacheEntry(captured_at=self._clock(), value=value)

    def get_or_fetch(self, key: str, fetch_fn: Callable[[], T]) -> T:
        """Get from cache or fetch and cache the result."""
        cached = self.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]
        result = fetch_fn()
        self.set(key, result)
        return result

    async def aget_or_fetch(self, key: str, fetch_fn: Callable[[], Awaitable[T]]) -> T:
        """Async variant of :meth:`get_or_fetch` for coroutine fetchers."""
        cached = self.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]
        result = await fetch_fn()
        self.set(key, result)
        return result

    def invalidate(self, key: str) -> None:
        """Remove a specific cache entry."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        expired = [key for key, entry in self._entries.items() if not self._is_fresh(entry)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> dict[str, Any]:
        """Return cache statistics."""
        total = len(self._entries)
        expired = sum(1 for entry in self._entries.values() if not self._is_fresh(entry))
        return {
            "total_entries": total,
            "expired_entries": expired,
            "active_entries": total - expired,
            "hits": self._hits,
            "misses": self._misses,
            "ttl_seconds": self.ttl_seconds,
        }
