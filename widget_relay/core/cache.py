"""In-memory lookup caches for the relay.

Provides a cachetools TTLCache wrapper with:
- Configurable TTL (time-to-live) and maxsize
- get-or-compute semantics for async factories
- Statistics tracking (hits, misses)

Caches are created once per process and injected where needed. Two
concurrent misses for the same key may both run the factory; the last
result wins, which is harmless for the lookups cached here.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default cache configuration
DEFAULT_MAXSIZE = 1024
DEFAULT_TTL = 86_400  # 1 day


class AsyncTTLCache(Generic[T]):
    """Key-value store with TTL eviction and async get-or-compute."""

    def __init__(
        self,
        name: str,
        maxsize: int = DEFAULT_MAXSIZE,
        ttl: float = DEFAULT_TTL,
    ) -> None:
        """Initialize cache with configuration.

        Args:
            name: Cache name used in log messages.
            maxsize: Maximum number of entries in the cache.
            ttl: TTL in seconds for cached entries.
        """
        self.name = name
        self._maxsize = maxsize
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._hits = 0
        self._misses = 0

    @property
    def hits(self) -> int:
        """Return the number of cache hits."""
        return self._hits

    @property
    def misses(self) -> int:
        """Return the number of cache misses."""
        return self._misses

    @property
    def size(self) -> int:
        """Return the current number of cached entries."""
        return len(self._cache)

    def get(self, key: str) -> tuple[T | None, bool]:
        """Get a value from the cache.

        Args:
            key: The cache key.

        Returns:
            Tuple of (value, found) where found indicates if the key exists.
        """
        try:
            value = self._cache[key]
        except KeyError:
            self._misses += 1
            return None, False
        self._hits += 1
        return value, True

    def set(self, key: str, value: T) -> None:
        """Set a value in the cache."""
        self._cache[key] = value

    def delete(self, key: str) -> bool:
        """Delete a key from the cache.

        Returns:
            True if the key was deleted, False if it didn't exist.
        """
        return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all entries from the cache."""
        self._cache.clear()

    async def get_or_compute(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss.

        Exceptions raised by ``factory`` propagate and nothing is cached.

        Args:
            key: The cache key.
            factory: Zero-argument coroutine function producing the value.

        Returns:
            The cached or freshly computed value.
        """
        value, found = self.get(key)
        if found:
            logger.debug("Cache hit", extra={"cache": self.name, "key": key})
            return value  # type: ignore[return-value]

        logger.debug("Cache miss", extra={"cache": self.name, "key": key})
        value = await factory()
        self._cache[key] = value
        return value

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with hits, misses, size, maxsize, hit_rate.
        """
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._cache),
            "maxsize": self._maxsize,
            "hit_rate": self._hits / total if total > 0 else 0.0,
        }
