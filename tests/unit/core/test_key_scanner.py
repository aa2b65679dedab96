"""Tests for WildcardKeyScanner."""

from collections.abc import AsyncIterator, Sequence
from datetime import timedelta
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from flatcache import CacheService, InMemoryCacheBackend
from flatcache.core.services.key_scanner import WildcardKeyScanner, escape_like
from flatcache.infrastructure.backends.sqlite import SqliteCacheBackend


class RecordingBackend:
    """Queryable store that records SQL and answers from a fixed key list."""

    table = "keyv"
    param_placeholder = "$1"

    def __init__(self, keys: Sequence[str], namespace: str | None = None) -> None:
        self.raw_keys = list(keys)
        self.namespace = namespace
        self.queries: list[tuple[str, list[Any]]] = []
        self.fail_on: set[str] = set()

    async def get(self, key: str) -> str | None:
        return "1" if key in self.raw_keys else None

    async def set(self, key: str, value: str, ttl: timedelta | None = None) -> bool:
        self.raw_keys.append(key)
        return True

    async def delete(self, key: str) -> bool:
        return False

    async def clear(self) -> None:
        self.raw_keys.clear()

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self.queries.append((sql, list(params)))
        like = params[0]
        if like in self.fail_on:
            raise RuntimeError("relation does not exist")
        prefix = like[:-1].replace("\\_", "_").replace("\\%", "%").replace("\\\\", "\\")
        return [{"key": key} for key in self.raw_keys if key.startswith(prefix)]


@pytest_asyncio.fixture
async def sqlite_backend(tmp_path: Path) -> AsyncIterator[SqliteCacheBackend]:
    """Create a namespaced SQLite store."""
    async with SqliteCacheBackend(
        tmp_path / "scan.db", table="keyv", namespace="app"
    ) as store:
        yield store


class TestEscapeLike:
    """Tests for escape_like."""

    def test_metacharacters_escaped(self) -> None:
        """Test that _, % and the escape char are matched literally."""
        assert escape_like("a_b%c\\d") == "a\\_b\\%c\\\\d"

    def test_plain_text_untouched(self) -> None:
        """Test ordinary text passes through."""
        assert escape_like("user:1") == "user:1"


class TestConventions:
    """Tests for candidate prefix generation."""

    def test_without_namespace(self) -> None:
        """Test bare and configured prefixes only."""
        scanner = WildcardKeyScanner(RecordingBackend([]))

        assert scanner.conventions() == ["keyv:", ""]

    def test_with_namespace_longest_first(self) -> None:
        """Test namespaced variants are tried before shorter ones."""
        scanner = WildcardKeyScanner(RecordingBackend([], namespace="app"))

        assert scanner.conventions() == ["keyv:app:", "app:"]


class TestScan:
    """Tests for pattern handling."""

    @pytest.mark.asyncio
    async def test_trailing_wildcard(self) -> None:
        """Test a prefix scan returns only keys under that prefix."""
        backend = RecordingBackend(["user:1", "user:2", "other:1"])
        scanner = WildcardKeyScanner(backend)

        assert sorted(await scanner.scan("user:*")) == ["user:1", "user:2"]

    @pytest.mark.asyncio
    async def test_uses_backend_placeholder(self) -> None:
        """Test the SQL carries the backend's parameter style."""
        backend = RecordingBackend(["user:1"])

        await WildcardKeyScanner(backend).scan("user:*")

        sql, params = backend.queries[0]
        assert sql == "SELECT key FROM keyv WHERE key LIKE $1 ESCAPE '\\'"
        assert params == ["keyv:user:%"]

    @pytest.mark.asyncio
    async def test_prefix_stripping(self) -> None:
        """Test internal prefixes are removed and foreign rows ignored."""
        backend = RecordingBackend(
            ["keyv:app:user:1", "app:user:2", "keyv:user:3", "user:4"],
            namespace="app",
        )

        result = await WildcardKeyScanner(backend).scan("user:*")

        assert sorted(result) == ["user:1", "user:2"]

    @pytest.mark.asyncio
    async def test_results_deduplicated(self) -> None:
        """Test a key found under several conventions appears once."""
        backend = RecordingBackend(["keyv:user:1", "user:1"])

        assert await WildcardKeyScanner(backend).scan("user:*") == ["user:1"]

    @pytest.mark.asyncio
    async def test_like_metacharacters_literal(self) -> None:
        """Test _ in the prefix does not match arbitrary characters."""
        backend = RecordingBackend(["a_b:1", "axb:1"])

        result = await WildcardKeyScanner(backend).scan("a_b*")

        assert result == ["a_b:1"]
        assert backend.queries[-1][1] == ["a\\_b%"]

    @pytest.mark.asyncio
    async def test_exact_key(self) -> None:
        """Test a pattern without wildcard is an existence check."""
        backend = RecordingBackend(["user:1"])
        scanner = WildcardKeyScanner(backend)

        assert await scanner.scan("user:1") == ["user:1"]
        assert await scanner.scan("user:9") == []
        assert backend.queries == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pattern", ["", "*", "*:123", "user:*:x", "user:**"])
    async def test_refused_patterns(self, pattern: str) -> None:
        """Test full scans and non-trailing wildcards return nothing."""
        backend = RecordingBackend(["user:1", "x:123"])

        assert await WildcardKeyScanner(backend).scan(pattern) == []
        assert backend.queries == []

    @pytest.mark.asyncio
    async def test_failed_candidate_skipped(self) -> None:
        """Test one failing candidate does not stop the others."""
        backend = RecordingBackend(["user:1"])
        backend.fail_on.add("keyv:user:%")

        assert await WildcardKeyScanner(backend).scan("user:*") == ["user:1"]
        assert len(backend.queries) == 2

    @pytest.mark.asyncio
    async def test_explicit_table(self) -> None:
        """Test a configured table overrides the backend's."""
        backend = RecordingBackend(["user:1"])

        await WildcardKeyScanner(backend, table="cache_rows", prefixes=()).scan("u*")

        assert backend.queries[0][0].startswith("SELECT key FROM cache_rows ")

    @pytest.mark.asyncio
    async def test_backend_without_query(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test stores without query capability degrade to empty."""
        scanner = WildcardKeyScanner(InMemoryCacheBackend())

        with caplog.at_level("WARNING"):
            assert await scanner.scan("user:*") == []

        assert not scanner.supports_prefix_scan
        assert "Prefix scan unsupported" in caplog.text


class TestSqliteScan:
    """Scans against a real SQLite store."""

    @pytest.mark.asyncio
    async def test_namespace_round_trip(self, sqlite_backend: SqliteCacheBackend) -> None:
        """Test keys written through a namespace come back logical."""
        service = CacheService(backend=sqlite_backend)
        await service.set("user:1", {"name": "a"})
        await service.set("user:2", {"name": "b"})
        await service.set("other:1", 1)

        assert sorted(await service.keys("user:*")) == ["user:1", "user:2"]

    @pytest.mark.asyncio
    async def test_namespace_not_a_logical_prefix(
        self, sqlite_backend: SqliteCacheBackend
    ) -> None:
        """Test the namespace itself never matches as a key prefix."""
        service = CacheService(backend=sqlite_backend)
        await service.set("user:1", 1)

        assert await service.keys("app:*") == []
        assert await service.delete_pattern("app:*") == 0
        assert await service.get("user:1") == 1

    @pytest.mark.asyncio
    async def test_case_sensitive(self, sqlite_backend: SqliteCacheBackend) -> None:
        """Test LIKE's case folding does not leak into results."""
        service = CacheService(backend=sqlite_backend)
        await service.set("user:1", 1)

        assert await service.keys("USER:*") == []

    @pytest.mark.asyncio
    async def test_delete_pattern(self, sqlite_backend: SqliteCacheBackend) -> None:
        """Test matched keys can be deleted as a group."""
        service = CacheService(backend=sqlite_backend)
        await service.mset({"user:1": 1, "user:2": 2, "other:1": 3})

        assert await service.delete_pattern("user:*") == 2

        assert await service.get("user:1") is None
        assert await service.get("other:1") == 3

    @pytest.mark.asyncio
    async def test_hash_fields_by_prefix(
        self, sqlite_backend: SqliteCacheBackend
    ) -> None:
        """Test hash fields are discoverable through their composite keys."""
        service = CacheService(backend=sqlite_backend)
        await service.hmset("session:9", {"token": "t", "user": 1})

        assert sorted(await service.keys("session:9:*")) == [
            "session:9:token",
            "session:9:user",
        ]
