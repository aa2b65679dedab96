"""Redis flat store for flatcache."""

from flatcache_redis.backend import RedisCacheBackend

__all__ = ["RedisCacheBackend"]
