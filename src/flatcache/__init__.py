"""flatcache - declarative caching over minimal key-value stores.

A Python library that layers two things on top of a store offering
only get/set/delete/clear:

- a Redis-style command surface (``exists``, ``setnx``, ``strlen``,
  hash fields, ``keys("prefix*")`` and friends) emulated by
  ``CacheService``;
- method-level caching decorators (read-through, write-through,
  eviction and conditional caching) driven by key templates.

Example:
    from datetime import timedelta

    from flatcache import (
        CacheConfig,
        CacheService,
        SqliteCacheBackend,
        cache_evict,
        cacheable,
        configure,
    )

    service = CacheService(
        backend=SqliteCacheBackend("cache.db", namespace="app"),
        config=CacheConfig(default_ttl=timedelta(minutes=5)),
    )
    configure(service)

    class UserService:
        @cacheable("user:", "{user_id}")
        async def get_user(self, user_id: str) -> dict:
            return await db.get_user(user_id)

        @cache_evict("user:", "{0}")
        async def delete_user(self, user_id: str) -> None:
            await db.delete_user(user_id)

Command surface:
    await service.hset("session:42", "token", "abc")
    await service.hget("session:42", "token")   # "abc"
    await service.keys("session:*")            # ["session:42:token"]
"""

from flatcache.core.entities import CacheConfig, JsonValue, KeyTemplate, coerce_ttl
from flatcache.core.interfaces import (
    ICacheBackend,
    IKeyResolver,
    IQueryableBackend,
    ISerializer,
)
from flatcache.core.services import CacheService, WildcardKeyScanner
from flatcache.decorators import (
    CacheConditional,
    CacheEvict,
    Cacheable,
    CachePut,
    cache_conditional,
    cache_evict,
    cache_put,
    cacheable,
    configure,
    get_cache_service,
)
from flatcache.exceptions import BackendError, FlatCacheError, SerializationError
from flatcache.infrastructure import (
    InMemoryCacheBackend,
    JsonSerializer,
    KeyTemplateResolver,
    SqliteCacheBackend,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheConfig",
    "KeyTemplate",
    "JsonValue",
    "coerce_ttl",
    # Core interfaces
    "ICacheBackend",
    "IQueryableBackend",
    "IKeyResolver",
    "ISerializer",
    # Core services
    "CacheService",
    "WildcardKeyScanner",
    # Infrastructure implementations
    "InMemoryCacheBackend",
    "SqliteCacheBackend",
    "KeyTemplateResolver",
    "JsonSerializer",
    # Decorators
    "cacheable",
    "cache_put",
    "cache_evict",
    "cache_conditional",
    "Cacheable",
    "CachePut",
    "CacheEvict",
    "CacheConditional",
    "configure",
    "get_cache_service",
    # Errors
    "FlatCacheError",
    "SerializationError",
    "BackendError",
]
