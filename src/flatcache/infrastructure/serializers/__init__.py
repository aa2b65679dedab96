"""Value serializers."""

from flatcache.infrastructure.serializers.json import JsonSerializer

__all__ = ["JsonSerializer"]
