"""Cache backend interfaces."""

from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ICacheBackend(Protocol):
    """Contract for flat key-value stores.

    A backend only offers get/set/delete/clear on raw string values.
    Everything richer (existence, guarded writes, hash fields, key
    enumeration) is emulated by CacheService on top of these four
    methods.
    """

    async def get(self, key: str) -> str | None:
        """Retrieve the raw stored value.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored string, or None if not found or expired.
        """
        ...

    async def set(
        self,
        key: str,
        value: str,
        ttl: timedelta | None = None,
    ) -> bool:
        """Store a raw value with optional TTL.

        Args:
            key: The cache key.
            value: The serialized value.
            ttl: Optional time-to-live. If None, uses backend default.

        Returns:
            True if the store acknowledged the write.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete a stored value.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    async def clear(self) -> None:
        """Remove every entry from the store."""
        ...


@runtime_checkable
class IQueryableBackend(ICacheBackend, Protocol):
    """A flat store that also exposes its raw persistence.

    Used only by the wildcard key scanner, which issues ``LIKE``
    queries directly against the table holding one row per key.
    """

    @property
    def table(self) -> str:
        """Name of the table holding cache rows."""
        ...

    @property
    def namespace(self) -> str | None:
        """Namespace the backend prepends to stored keys, if any."""
        ...

    @property
    def param_placeholder(self) -> str:
        """Bind parameter marker for ``query`` (``?`` or ``$1``)."""
        ...

    async def query(
        self,
        sql: str,
        params: Sequence[Any] = (),
    ) -> list[Mapping[str, Any]]:
        """Run a raw SQL statement and return its rows.

        Args:
            sql: The statement to execute.
            params: Bind parameters.

        Returns:
            Result rows keyed by column name.
        """
        ...
