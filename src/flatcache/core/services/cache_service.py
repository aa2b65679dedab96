"""Cache service - Redis-style command surface over a flat store."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Literal, TypeVar

from flatcache.core.entities.cache_config import TTL, CacheConfig, coerce_ttl
from flatcache.core.interfaces.cache_backend import ICacheBackend
from flatcache.core.interfaces.serializer import ISerializer
from flatcache.core.services.key_scanner import WILDCARD, WildcardKeyScanner
from flatcache.exceptions import SerializationError
from flatcache.infrastructure.serializers.json import JsonSerializer

T = TypeVar("T")

OK: Literal["OK"] = "OK"


class CacheService:
    """Command-compatibility shim over a flat key-value store.

    The backend only offers get/set/delete/clear. This service adds
    existence checks, guarded writes, string length, hash fields
    (stored as ``"<hash>:<field>"`` composite keys) and prefix key
    enumeration on top of it.

    Every value is stored as canonical JSON and decoded on read, so
    ``get`` after ``set`` returns an equal value for anything JSON can
    represent. Rows that are not valid JSON are returned as raw
    strings.

    Storage errors never escape: each operation logs the failure and
    returns its "absent" result (None, 0, False or an empty list).
    ``setnx`` and ``setex`` are check-then-act and not atomic; a
    concurrent writer between the check and the write wins or loses
    by completion order.
    """

    def __init__(
        self,
        backend: ICacheBackend,
        serializer: ISerializer | None = None,
        config: CacheConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            backend: The flat store to wrap.
            serializer: Value serializer. Defaults to JsonSerializer.
            config: Optional cache configuration. Uses defaults if not provided.
            logger: Logger for storage diagnostics.
        """
        self._backend = backend
        self._serializer = serializer or JsonSerializer()
        self._config = config or CacheConfig()
        self._logger = logger or logging.getLogger(__name__)
        self._scanner = WildcardKeyScanner(
            backend,
            table=self._config.scan_table,
            prefixes=self._config.scan_prefixes,
            logger=self._logger,
        )

        # Statistics
        self._hits = 0
        self._misses = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, and total requests.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": self._hits + self._misses,
        }

    def record_hit(self) -> None:
        """Count a read-through cache hit."""
        self._hits += 1

    def record_miss(self) -> None:
        """Count a read-through cache miss."""
        self._misses += 1

    def get_client(self) -> ICacheBackend:
        """Return the wrapped flat store."""
        return self._backend

    # -- strings -----------------------------------------------------------

    async def set(self, key: str, value: Any, ttl: TTL = None) -> Literal["OK"] | None:
        """Store a value, overwriting any previous one.

        Args:
            key: The cache key.
            value: Any JSON-representable value.
            ttl: Optional TTL. Uses config default if None; zero or
                negative disables expiry.

        Returns:
            "OK" on success, None on failure or empty key.
        """
        if not key:
            return None
        try:
            data = self._serializer.serialize(value)
            effective_ttl = coerce_ttl(self._config.default_ttl if ttl is None else ttl)
            stored = await self._backend.set(key, data, effective_ttl)
        except Exception:
            self._logger.exception("Failed to set key: %s", key)
            return None
        return OK if stored else None

    async def get(self, key: str) -> Any:
        """Get a decoded value.

        Args:
            key: The cache key. Empty keys and "*" are rejected.

        Returns:
            The decoded value, or None on miss or error.
        """
        if not key or key == WILDCARD:
            return None
        try:
            raw = await self._backend.get(key)
        except Exception:
            self._logger.exception("Failed to get key: %s", key)
            return None
        return self._decode(raw)

    async def delete(self, keys: str | Sequence[str]) -> int:
        """Delete one key or a list of keys.

        A "*" key is never expanded; it is skipped.

        Args:
            keys: A key or a list of keys.

        Returns:
            The number of keys actually removed.
        """
        if not keys or keys == WILDCARD:
            return 0
        if isinstance(keys, str):
            keys = [keys]

        targets = [key for key in keys if key and key != WILDCARD]
        if len(targets) != len(keys):
            self._logger.warning("Skipping empty or '*' keys in delete")
        if not targets:
            return 0

        results = await asyncio.gather(*(self._delete_one(key) for key in targets))
        return sum(1 for removed in results if removed)

    del_ = delete

    async def exists(self, key: str) -> int:
        """Check whether a key exists.

        Returns:
            1 if the key exists, 0 otherwise.
        """
        return 1 if await self.has_key(key) else 0

    async def has_key(self, key: str) -> bool:
        """Check whether a key exists.

        Returns:
            True if the key exists, False otherwise.
        """
        if not key or key == WILDCARD:
            return False
        try:
            return await self._backend.get(key) is not None
        except Exception:
            self._logger.exception("Failed to check key: %s", key)
            return False

    async def setnx(self, key: str, value: Any, ttl: TTL = None) -> int:
        """Set a value only if the key does not exist.

        Not atomic: existence is checked, then the value is written.

        Returns:
            1 if the key was set, 0 if it already existed or on failure.
        """
        if not key or await self.has_key(key):
            return 0
        return 1 if await self.set(key, value, ttl) == OK else 0

    async def setex(self, key: str, value: Any, ttl: TTL = None) -> Literal["OK"] | None:
        """Update a value only if the key already exists.

        Not atomic: existence is checked, then the value is written.

        Returns:
            "OK" if the key existed and was updated, None otherwise.
        """
        if not key or not await self.has_key(key):
            return None
        return await self.set(key, value, ttl)

    async def strlen(self, key: str) -> int:
        """Length of a stored value.

        Strings report their own length; other values report the
        length of their JSON encoding.

        Returns:
            The length, or 0 if the key is absent.
        """
        value = await self.get(key)
        if value is None:
            return 0
        if isinstance(value, str):
            return len(value)
        try:
            return len(self._serializer.serialize(value))
        except SerializationError:
            self._logger.exception("Failed to measure key: %s", key)
            return 0

    # -- batches -----------------------------------------------------------

    async def mget(self, keys: Sequence[str]) -> list[Any]:
        """Get several values, order preserved.

        Returns:
            One decoded value or None per key.
        """
        if not keys:
            return []
        return list(await asyncio.gather(*(self.get(key) for key in keys)))

    async def mset(self, mapping: Mapping[str, Any], ttl: TTL = None) -> list[bool]:
        """Set several values, order preserved.

        Returns:
            One success flag per key.
        """
        if not mapping:
            return []
        results = await asyncio.gather(
            *(self.set(key, value, ttl) for key, value in mapping.items())
        )
        return [result == OK for result in results]

    async def mdelete(self, keys: Sequence[str]) -> list[bool]:
        """Delete several keys, order preserved.

        Returns:
            One flag per key, True where the key was removed.
        """
        if not keys:
            return []
        return list(
            await asyncio.gather(
                *(
                    self._delete_one(key) if key and key != WILDCARD else self._false()
                    for key in keys
                )
            )
        )

    # -- hashes ------------------------------------------------------------

    def hash_key(self, key: str, field: str) -> str:
        """Build the composite key that stores one hash field."""
        return f"{key}{self._config.hash_separator}{field}"

    async def hset(
        self, key: str, field: str, value: Any, ttl: TTL = None
    ) -> Literal["OK"] | None:
        """Set a hash field.

        Returns:
            "OK" on success, None on failure.
        """
        if not key or not field:
            return None
        return await self.set(self.hash_key(key, field), value, ttl)

    async def hget(self, key: str, field: str) -> Any:
        """Get a hash field.

        Returns:
            The decoded value, or None.
        """
        if not key or not field:
            return None
        return await self.get(self.hash_key(key, field))

    async def hexists(self, key: str, field: str) -> int:
        """Check whether a hash field exists.

        Returns:
            1 if the field exists, 0 otherwise.
        """
        if not key or not field:
            return 0
        return await self.exists(self.hash_key(key, field))

    async def hdel(self, key: str, fields: str | Sequence[str]) -> int:
        """Delete one or more hash fields.

        Returns:
            The number of fields removed.
        """
        if not key or not fields:
            return 0
        if isinstance(fields, str):
            fields = [fields]
        return await self.delete([self.hash_key(key, field) for field in fields if field])

    async def hmset(self, key: str, mapping: Mapping[str, Any], ttl: TTL = None) -> int:
        """Set several hash fields in parallel.

        Returns:
            The number of fields written.
        """
        if not key or not mapping:
            return 0
        results = await self.mset(
            {self.hash_key(key, field): value for field, value in mapping.items()},
            ttl,
        )
        return sum(results)

    # -- keys --------------------------------------------------------------

    async def keys(self, pattern: str) -> list[str]:
        """Find keys by exact name or trailing-wildcard prefix.

        See WildcardKeyScanner for the supported patterns.

        Returns:
            Matching keys in unspecified order.
        """
        try:
            return await self._scanner.scan(pattern)
        except Exception:
            self._logger.exception("Failed to scan keys: %s", pattern)
            return []

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matched by ``keys(pattern)``.

        Returns:
            The number of keys removed.
        """
        matched = await self.keys(pattern)
        if not matched:
            return 0
        return await self.delete(matched)

    async def reset(self) -> int:
        """Clear the entire underlying store.

        Not scoped to a namespace and not reversible.

        Returns:
            1 on success, 0 on failure.
        """
        return 1 if await self.clear() else 0

    async def clear(self) -> bool:
        """Clear the entire underlying store and the statistics.

        Returns:
            True on success, False on failure.
        """
        try:
            await self._backend.clear()
        except Exception:
            self._logger.exception("Failed to clear cache")
            return False
        self._hits = 0
        self._misses = 0
        return True

    # -- unsupported commands ----------------------------------------------

    async def ttl(self, key: str) -> int:
        """TTL introspection is not available on flat stores."""
        return self._unsupported("ttl", -1)

    async def llen(self, key: str) -> int:
        return self._unsupported("llen", 0)

    async def lpush(self, key: str, *values: Any) -> int:
        return self._unsupported("lpush", 0)

    async def rpush(self, key: str, *values: Any) -> int:
        return self._unsupported("rpush", 0)

    async def lpop(self, key: str) -> Any:
        return self._unsupported("lpop", None)

    async def rpop(self, key: str) -> Any:
        return self._unsupported("rpop", None)

    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> list[Any]:
        return self._unsupported("lrange", [])

    async def hgetall(self, key: str) -> dict[str, Any]:
        """Hash enumeration needs a key scan; use ``keys(f"{key}:*")``."""
        return self._unsupported("hgetall", {})

    async def hkeys(self, key: str) -> list[str]:
        return self._unsupported("hkeys", [])

    async def hvals(self, key: str) -> list[Any]:
        return self._unsupported("hvals", [])

    async def hlen(self, key: str) -> int:
        return self._unsupported("hlen", 0)

    async def command_stats(self) -> dict[str, Any]:
        return self._unsupported("command_stats", {})

    async def dbsize(self) -> int:
        return self._unsupported("dbsize", 0)

    # -- helpers -----------------------------------------------------------

    def _decode(self, raw: Any) -> Any:
        if raw is None:
            return None
        try:
            return self._serializer.deserialize(raw)
        except SerializationError:
            return raw

    async def _delete_one(self, key: str) -> bool:
        try:
            return bool(await self._backend.delete(key))
        except Exception:
            self._logger.exception("Failed to delete key: %s", key)
            return False

    @staticmethod
    async def _false() -> bool:
        return False

    def _unsupported(self, command: str, sentinel: T) -> T:
        self._logger.warning("%s is not supported by the flat store backend", command)
        return sentinel

