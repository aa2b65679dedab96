"""Cache configuration entity."""

from dataclasses import dataclass
from datetime import timedelta

TTL = timedelta | int | float | None


def coerce_ttl(ttl: TTL) -> timedelta | None:
    """Normalize a TTL argument.

    Numbers are read as seconds. Zero, negative and ``None`` mean
    "no TTL", leaving expiry to the backend default.

    Args:
        ttl: A timedelta, a number of seconds, or None.

    Returns:
        A positive timedelta, or None.
    """
    if ttl is None:
        return None
    if isinstance(ttl, bool):
        raise TypeError("ttl must be a timedelta or a number of seconds")
    if not isinstance(ttl, timedelta):
        ttl = timedelta(seconds=ttl)
    if ttl <= timedelta(0):
        return None
    return ttl


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the facade and the caching
    decorators.

    Wildcard scanning:
        Flat stores usually encode keys before persisting them (a
        namespace, a library prefix such as ``keyv:``). ``scan_prefixes``
        lists the conventions the key scanner tries and strips when it
        recovers logical keys from raw rows.
    """

    enabled: bool = True
    default_ttl: TTL = None

    # Composite key emulation for hash commands
    hash_separator: str = ":"

    # Wildcard key scanning
    scan_prefixes: tuple[str, ...] = ("keyv:",)
    scan_table: str | None = None

    def __post_init__(self) -> None:
        """Normalize the default TTL."""
        self.default_ttl = coerce_ttl(self.default_ttl)
        self.scan_prefixes = tuple(self.scan_prefixes)
