"""Core domain layer for flatcache."""

from flatcache.core.entities import CacheConfig, KeyTemplate
from flatcache.core.interfaces import (
    ICacheBackend,
    IKeyResolver,
    IQueryableBackend,
    ISerializer,
)
from flatcache.core.services import CacheService, WildcardKeyScanner

__all__ = [
    # Entities
    "CacheConfig",
    "KeyTemplate",
    # Interfaces
    "ICacheBackend",
    "IQueryableBackend",
    "IKeyResolver",
    "ISerializer",
    # Services
    "CacheService",
    "WildcardKeyScanner",
]
