"""Redis flat store backend."""

from datetime import timedelta
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from flatcache.exceptions import BackendError


class RedisCacheBackend:
    """Redis used as a plain flat key-value store.

    Only get/set/delete/clear are exposed, so CacheService emulates
    the richer commands exactly as it does for any other flat store.
    There is no raw query capability; wildcard key scans against
    this backend return nothing.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "flatcache",
        default_ttl: Optional[int] = None,
        client: Optional[redis.Redis] = None,
    ) -> None:
        """Initialize the Redis cache backend.

        Args:
            redis_url: Redis connection URL.
            key_prefix: Prefix for all stored keys.
            default_ttl: Default TTL in seconds. None means no expiry.
            client: Existing client to use instead of ``redis_url``.
        """
        self._redis: redis.Redis = client or redis.from_url(  # type: ignore
            redis_url, decode_responses=True
        )
        self._key_prefix = key_prefix
        self._default_ttl = default_ttl

    async def get(self, key: str) -> Optional[str]:
        """Retrieve the raw stored value.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored string, or None if not found or expired.
        """
        try:
            value = await self._redis.get(self._prefixed_key(key))
        except RedisError as e:
            raise BackendError(f"Failed to read {key!r}: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[timedelta] = None,
    ) -> bool:
        """Store a raw value with optional TTL.

        Args:
            key: The cache key.
            value: The serialized value.
            ttl: Optional time-to-live. If None, uses default.

        Returns:
            True if Redis acknowledged the write.
        """
        prefixed_key = self._prefixed_key(key)
        try:
            if ttl is not None:
                result = await self._redis.set(
                    prefixed_key, value, px=max(1, int(ttl.total_seconds() * 1000))
                )
            elif self._default_ttl is not None:
                result = await self._redis.set(prefixed_key, value, ex=self._default_ttl)
            else:
                result = await self._redis.set(prefixed_key, value)
        except RedisError as e:
            raise BackendError(f"Failed to write {key!r}: {e}") from e
        return bool(result)

    async def delete(self, key: str) -> bool:
        """Delete a stored value.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        try:
            result = await self._redis.delete(self._prefixed_key(key))
        except RedisError as e:
            raise BackendError(f"Failed to delete {key!r}: {e}") from e
        return result > 0

    async def clear(self) -> None:
        """Clear all values stored under our prefix.

        Note: This only clears keys with our prefix, not the entire Redis DB.
        """
        pattern = f"{self._key_prefix}:*"
        cursor = 0

        try:
            while True:
                cursor, keys = await self._redis.scan(cursor, match=pattern, count=100)
                if keys:
                    await self._redis.delete(*keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise BackendError(f"Failed to clear {pattern!r}: {e}") from e

    def _prefixed_key(self, key: str) -> str:
        """Add prefix to key.

        Args:
            key: The cache key.

        Returns:
            The key with prefix.
        """
        return f"{self._key_prefix}:{key}"

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._redis.aclose()

    async def __aenter__(self) -> "RedisCacheBackend":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.close()
