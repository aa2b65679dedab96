"""Wildcard key scanner.

Flat stores have no pattern search. This module recovers
``keys("prefix*")`` by querying the store's persistence directly
with SQL ``LIKE`` and undoing whatever key encoding the store
applied before writing.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from flatcache.core.interfaces.cache_backend import ICacheBackend

WILDCARD = "*"
LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape ``LIKE`` metacharacters so ``text`` matches literally.

    Args:
        text: The literal text.

    Returns:
        The escaped text, for use with ``ESCAPE '\\'``.
    """
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class WildcardKeyScanner:
    """Resolve Redis-style ``KEYS`` patterns over a flat store.

    Only two shapes are supported:

    - no wildcard: an exact existence check;
    - a single trailing ``*``: a prefix search.

    An empty pattern or a bare ``*`` is refused so a full-store scan
    never happens by accident. Leading or embedded wildcards return
    an empty list rather than raising.

    Prefix searches need a backend with a ``query`` method. Because
    the raw keys may carry an internal prefix (a namespace, a
    ``keyv:`` marker, or both), every known convention is queried and
    stripped, and only keys that still start with the requested
    prefix are returned. Result order is unspecified.
    """

    def __init__(
        self,
        backend: ICacheBackend,
        table: str | None = None,
        prefixes: Iterable[str] = ("keyv:",),
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            backend: The flat store to scan.
            table: Table holding cache rows. Defaults to ``backend.table``.
            prefixes: Extra raw-key prefix conventions to try.
            logger: Logger for scan diagnostics.
        """
        self._backend = backend
        self._table = table
        self._prefixes = tuple(prefixes)
        self._logger = logger or logging.getLogger(__name__)

    @property
    def supports_prefix_scan(self) -> bool:
        """Whether the backend exposes a raw query capability."""
        return callable(getattr(self._backend, "query", None))

    def conventions(self) -> list[str]:
        """Return candidate raw-key prefixes, longest first.

        Without a namespace the bare (empty) convention is included.
        A namespaced backend only reads rows carrying its namespace,
        so only namespaced conventions are returned for it.
        """
        namespace = getattr(self._backend, "namespace", None) or None
        if namespace:
            candidates = [f"{namespace}:"]
            candidates.extend(f"{prefix}{namespace}:" for prefix in self._prefixes)
        else:
            candidates = [""]
            candidates.extend(self._prefixes)

        unique = list(dict.fromkeys(candidates))
        return sorted(unique, key=len, reverse=True)

    async def scan(self, pattern: str) -> list[str]:
        """Return logical keys matching ``pattern``.

        Args:
            pattern: An exact key, or a prefix ending in ``*``.

        Returns:
            Matching keys; empty for unsupported or refused patterns.
        """
        if not pattern or pattern == WILDCARD:
            self._logger.warning(
                "Refusing keys(%r): a full-store scan is not supported", pattern
            )
            return []

        wildcards = pattern.count(WILDCARD)
        if wildcards == 0:
            return [pattern] if await self._exists(pattern) else []

        if wildcards > 1 or not pattern.endswith(WILDCARD):
            self._logger.warning(
                "Unsupported pattern %r: only a trailing '*' is allowed", pattern
            )
            return []

        if not self.supports_prefix_scan:
            self._logger.warning(
                "Prefix scan unsupported: %s exposes no query capability",
                type(self._backend).__name__,
            )
            return []

        return await self._prefix_scan(pattern[:-1])

    async def _exists(self, key: str) -> bool:
        try:
            return await self._backend.get(key) is not None
        except Exception:
            self._logger.exception("Existence check failed for key: %s", key)
            return False

    async def _prefix_scan(self, prefix: str) -> list[str]:
        table = self._table or getattr(self._backend, "table", None)
        if not table:
            self._logger.warning("Prefix scan unsupported: backend has no table name")
            return []

        placeholder = getattr(self._backend, "param_placeholder", "?")
        sql = (
            f"SELECT key FROM {table} "
            f"WHERE key LIKE {placeholder} ESCAPE '{LIKE_ESCAPE}'"
        )
        conventions = self.conventions()

        found: set[str] = set()
        for convention in conventions:
            like = escape_like(convention + prefix) + "%"
            self._logger.debug("Scanning %s with LIKE %r", table, like)
            try:
                rows = await self._backend.query(sql, [like])  # type: ignore[attr-defined]
            except Exception as e:
                self._logger.warning("Scan candidate %r failed: %s", like, e)
                continue

            for row in rows:
                raw_key = self._row_key(row)
                if raw_key is None:
                    continue
                key = self._recover(raw_key, prefix, conventions)
                if key is not None:
                    found.add(key)

        return list(found)

    @staticmethod
    def _recover(raw_key: str, prefix: str, conventions: Sequence[str]) -> str | None:
        for convention in conventions:
            if not raw_key.startswith(convention):
                continue
            key = raw_key[len(convention):]
            if key.startswith(prefix):
                return key
        return None

    @staticmethod
    def _row_key(row: Any) -> str | None:
        if isinstance(row, str):
            return row
        if isinstance(row, Mapping):
            value = row.get("key")
        else:
            try:
                value = row[0]
            except (TypeError, IndexError, KeyError):
                return None
        return value if isinstance(value, str) else None
