"""Infrastructure layer implementations for flatcache."""

from flatcache.infrastructure.backends import InMemoryCacheBackend, SqliteCacheBackend
from flatcache.infrastructure.key_builders import KeyTemplateResolver
from flatcache.infrastructure.serializers import JsonSerializer

__all__ = [
    "InMemoryCacheBackend",
    "SqliteCacheBackend",
    "KeyTemplateResolver",
    "JsonSerializer",
]
