"""Tests for SqliteCacheBackend."""

from collections.abc import AsyncIterator
from datetime import timedelta
from pathlib import Path

import pytest
import pytest_asyncio

from flatcache.exceptions import BackendError
from flatcache.infrastructure.backends.sqlite import SqliteCacheBackend


@pytest_asyncio.fixture
async def backend(tmp_path: Path) -> AsyncIterator[SqliteCacheBackend]:
    """Create a file-backed SQLite store for testing."""
    async with SqliteCacheBackend(tmp_path / "cache.db", table="test_cache") as store:
        yield store


class TestSqliteCacheBackend:
    """Tests for SqliteCacheBackend."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, backend: SqliteCacheBackend) -> None:
        """Test basic set and get operations."""
        assert await backend.set("key1", '{"a":1}') is True
        assert await backend.get("key1") == '{"a":1}'

    @pytest.mark.asyncio
    async def test_overwrite(self, backend: SqliteCacheBackend) -> None:
        """Test that set replaces an existing row."""
        await backend.set("key1", "1")
        await backend.set("key1", "2")

        assert await backend.get("key1") == "2"
        rows = await backend.query("SELECT COUNT(*) AS n FROM test_cache")
        assert rows[0]["n"] == 1

    @pytest.mark.asyncio
    async def test_get_missing_key(self, backend: SqliteCacheBackend) -> None:
        """Test getting a missing key returns None."""
        assert await backend.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_delete(self, backend: SqliteCacheBackend) -> None:
        """Test deleting a key."""
        await backend.set("key1", "1")

        assert await backend.delete("key1") is True
        assert await backend.get("key1") is None
        assert await backend.delete("key1") is False

    @pytest.mark.asyncio
    async def test_clear(self, backend: SqliteCacheBackend) -> None:
        """Test clearing the whole table."""
        await backend.set("key1", "1")
        await backend.set("key2", "2")

        await backend.clear()

        assert await backend.query("SELECT key FROM test_cache") == []

    @pytest.mark.asyncio
    async def test_expired_row_is_a_miss(self, backend: SqliteCacheBackend) -> None:
        """Test that an expired row reads as absent and is removed."""
        await backend.set("old", "1", ttl=timedelta(seconds=60))
        await backend.query(
            "UPDATE test_cache SET expires_at = 0 WHERE key = ?", ["old"]
        )

        assert await backend.get("old") is None
        assert await backend.query("SELECT key FROM test_cache") == []

    @pytest.mark.asyncio
    async def test_ttl_sets_expiry(self, backend: SqliteCacheBackend) -> None:
        """Test that a TTL is persisted as an expiry timestamp."""
        await backend.set("ttl", "1", ttl=timedelta(seconds=60))
        await backend.set("no-ttl", "1")

        rows = await backend.query(
            "SELECT key, expires_at FROM test_cache ORDER BY key"
        )

        assert rows[0]["key"] == "no-ttl"
        assert rows[0]["expires_at"] is None
        assert rows[1]["expires_at"] is not None

    @pytest.mark.asyncio
    async def test_namespace_prefixes_stored_keys(self, tmp_path: Path) -> None:
        """Test that the namespace is applied to raw keys only."""
        async with SqliteCacheBackend(
            tmp_path / "ns.db", table="ns_cache", namespace="app"
        ) as store:
            await store.set("user:1", '"alice"')

            assert await store.get("user:1") == '"alice"'
            rows = await store.query("SELECT key FROM ns_cache")
            assert [row["key"] for row in rows] == ["app:user:1"]
            assert store.namespace == "app"

    @pytest.mark.asyncio
    async def test_query_error_wrapped(self, backend: SqliteCacheBackend) -> None:
        """Test that driver errors surface as BackendError."""
        with pytest.raises(BackendError):
            await backend.query("SELECT * FROM missing_table")

    def test_invalid_table_name(self) -> None:
        """Test that unsafe table names are rejected."""
        with pytest.raises(ValueError):
            SqliteCacheBackend(table="cache; DROP TABLE x")

    def test_queryable_attributes(self) -> None:
        """Test the attributes used by the key scanner."""
        store = SqliteCacheBackend(table="keyv")

        assert store.table == "keyv"
        assert store.namespace is None
        assert store.param_placeholder == "?"
