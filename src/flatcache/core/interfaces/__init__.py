"""Core interfaces (Protocol classes) for flatcache."""

from flatcache.core.interfaces.cache_backend import ICacheBackend, IQueryableBackend
from flatcache.core.interfaces.key_builder import IKeyResolver
from flatcache.core.interfaces.serializer import ISerializer

__all__ = [
    "ICacheBackend",
    "IQueryableBackend",
    "IKeyResolver",
    "ISerializer",
]
