"""Domain entities for flatcache."""

from flatcache.core.entities.cache_config import TTL, CacheConfig, coerce_ttl
from flatcache.core.entities.key_template import JsonValue, KeyTemplate

__all__ = [
    "CacheConfig",
    "KeyTemplate",
    "JsonValue",
    "TTL",
    "coerce_ttl",
]
