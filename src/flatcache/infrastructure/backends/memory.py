"""In-memory cache backend implementation."""

import math
import time
from collections.abc import Callable
from datetime import timedelta
from typing import NamedTuple

from cachetools import TLRUCache  # type: ignore[import-untyped]


class _Item(NamedTuple):
    value: str
    ttl: float | None


def _time_to_use(key: str, item: _Item, now: float) -> float:
    if item.ttl is None:
        return math.inf
    return now + item.ttl


class InMemoryCacheBackend:
    """In-memory flat store using LRU with per-item TTL.

    Suitable for single-process deployments and tests. Uses
    cachetools' TLRUCache so each entry carries its own expiry.
    It has no raw query capability, so wildcard key scans against
    it return nothing.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        default_ttl: float | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache backend.

        Args:
            maxsize: Maximum number of items in the cache.
            default_ttl: Default TTL in seconds. None keeps items
                until evicted.
            timer: Clock used for expiry, in seconds.
        """
        self._maxsize = maxsize
        self._default_ttl = default_ttl
        self._cache: TLRUCache[str, _Item] = TLRUCache(
            maxsize=maxsize,
            ttu=_time_to_use,
            timer=timer,
        )

    async def get(self, key: str) -> str | None:
        """Retrieve the raw stored value.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored string, or None if not found or expired.
        """
        item = self._cache.get(key)
        return item.value if item is not None else None

    async def set(
        self,
        key: str,
        value: str,
        ttl: timedelta | None = None,
    ) -> bool:
        """Store a raw value with optional TTL.

        Args:
            key: The cache key.
            value: The serialized value.
            ttl: Optional time-to-live. If None, uses default.

        Returns:
            Always True.
        """
        seconds = ttl.total_seconds() if ttl is not None else self._default_ttl
        self._cache[key] = _Item(value, seconds)
        return True

    async def delete(self, key: str) -> bool:
        """Delete a stored value.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        try:
            del self._cache[key]
            return True
        except KeyError:
            return False

    async def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    def __len__(self) -> int:
        """Return the number of items in the cache."""
        self._cache.expire()
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the cache."""
        return self._maxsize
