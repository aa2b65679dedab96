"""Core domain services."""

from flatcache.core.services.cache_service import CacheService
from flatcache.core.services.key_scanner import WildcardKeyScanner, escape_like

__all__ = [
    "CacheService",
    "WildcardKeyScanner",
    "escape_like",
]
