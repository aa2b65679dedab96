"""Exception hierarchy for flatcache."""


class FlatCacheError(Exception):
    """Base class for flatcache errors."""

    pass


class SerializationError(FlatCacheError):
    """Raised when serialization or deserialization fails."""

    pass


class BackendError(FlatCacheError):
    """Raised by a backend when the underlying store fails.

    CacheService catches these at its boundary; they never reach
    callers of the facade or of decorated methods.
    """

    pass
