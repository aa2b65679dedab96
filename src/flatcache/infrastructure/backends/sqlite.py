"""SQLite cache backend implementation."""

import asyncio
import logging
import re
import time
from collections.abc import Mapping, Sequence
from datetime import timedelta
from pathlib import Path
from typing import Any

import aiosqlite

from flatcache.exceptions import BackendError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteCacheBackend:
    """Flat store persisted in a single SQLite table.

    One row per key: ``key`` (primary key), ``value`` holding the
    serialized text, and ``expires_at`` as a Unix timestamp or NULL.
    When a namespace is configured, rows are stored under
    ``"<namespace>:<key>"``; callers only ever see logical keys.

    Besides the flat get/set/delete/clear interface, it exposes
    ``query`` so the wildcard key scanner can run ``LIKE`` searches
    against the table.
    """

    param_placeholder = "?"

    def __init__(
        self,
        path: str | Path = ":memory:",
        table: str = "keyv",
        namespace: str | None = None,
        default_ttl: float | None = None,
    ) -> None:
        """Initialize the SQLite cache backend.

        Args:
            path: Database file path, or ":memory:".
            table: Table holding cache rows.
            namespace: Optional namespace prepended to stored keys.
            default_ttl: Default TTL in seconds. None means no expiry.
        """
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        self._path = str(path)
        self._table = table
        self._namespace = namespace or None
        self._default_ttl = default_ttl
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def table(self) -> str:
        """Name of the table holding cache rows."""
        return self._table

    @property
    def namespace(self) -> str | None:
        """Namespace prepended to stored keys."""
        return self._namespace

    async def connect(self) -> aiosqlite.Connection:
        """Open the connection and create the table if needed.

        Returns:
            The open connection.
        """
        async with self._lock:
            if self._db is None:
                db = await aiosqlite.connect(self._path)
                db.row_factory = aiosqlite.Row
                await db.execute(
                    f"CREATE TABLE IF NOT EXISTS {self._table} ("
                    "key TEXT PRIMARY KEY, "
                    "value TEXT NOT NULL, "
                    "expires_at REAL)"
                )
                await db.commit()
                self._db = db
                logger.debug("SQLite cache table %s ready at %s", self._table, self._path)
        return self._db

    async def get(self, key: str) -> str | None:
        """Retrieve the raw stored value.

        Expired rows are deleted on read.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored string, or None if not found or expired.
        """
        db = await self.connect()
        stored_key = self._stored_key(key)
        try:
            async with db.execute(
                f"SELECT value, expires_at FROM {self._table} WHERE key = ?",
                (stored_key,),
            ) as cursor:
                row = await cursor.fetchone()

            if row is None:
                return None

            if row["expires_at"] is not None and row["expires_at"] <= time.time():
                await db.execute(
                    f"DELETE FROM {self._table} WHERE key = ?", (stored_key,)
                )
                await db.commit()
                return None

            return row["value"]
        except aiosqlite.Error as e:
            raise BackendError(f"Failed to read {key!r}: {e}") from e

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
            ttl: Optional time-to-live. If None, uses default.

        Returns:
            True once the write is committed.
        """
        seconds = ttl.total_seconds() if ttl is not None else self._default_ttl
        expires_at = time.time() + seconds if seconds is not None else None

        db = await self.connect()
        try:
            await db.execute(
                f"INSERT INTO {self._table} (key, value, expires_at) "
                "VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET "
                "value = excluded.value, expires_at = excluded.expires_at",
                (self._stored_key(key), value, expires_at),
            )
            await db.commit()
            return True
        except aiosqlite.Error as e:
            raise BackendError(f"Failed to write {key!r}: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete a stored value.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        db = await self.connect()
        try:
            cursor = await db.execute(
                f"DELETE FROM {self._table} WHERE key = ?",
                (self._stored_key(key),),
            )
            await db.commit()
            return cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise BackendError(f"Failed to delete {key!r}: {e}") from e

    async def clear(self) -> None:
        """Remove every row from the table.

        The namespace does not scope this: the whole table is emptied.
        """
        db = await self.connect()
        try:
            await db.execute(f"DELETE FROM {self._table}")
            await db.commit()
        except aiosqlite.Error as e:
            raise BackendError(f"Failed to clear {self._table}: {e}") from e

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
            Result rows as dictionaries keyed by column name.
        """
        db = await self.connect()
        try:
            async with db.execute(sql, tuple(params)) as cursor:
                rows = await cursor.fetchall()
            return [dict(row) for row in rows]
        except aiosqlite.Error as e:
            raise BackendError(f"Query failed: {e}") from e

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> "SqliteCacheBackend":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.close()

    def _stored_key(self, key: str) -> str:
        if self._namespace:
            return f"{self._namespace}:{key}"
        return key
