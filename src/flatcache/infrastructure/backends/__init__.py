"""Flat store backends."""

from flatcache.infrastructure.backends.memory import InMemoryCacheBackend
from flatcache.infrastructure.backends.sqlite import SqliteCacheBackend

__all__ = [
    "InMemoryCacheBackend",
    "SqliteCacheBackend",
]
