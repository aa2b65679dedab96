"""Method-level cache decorators.

Four behaviours wrap any async function or method:

- ``cacheable``: read-through. Return the cached value, or call the
  function on a miss and cache its result.
- ``cache_put``: write-through. Always call the function, then
  overwrite the cached value.
- ``cache_evict``: call the function, then delete the cached value.
- ``cache_conditional``: read-through, but only cache results that
  satisfy a predicate.

Keys are ``name_prefix`` followed by ``key_template`` resolved against
the call arguments (``{0}`` by position, ``{name}`` by parameter
name). When a template cannot be resolved the call simply bypasses
the cache.

Example:
    configure(CacheService(backend=SqliteCacheBackend("cache.db")))

    class UserService:
        @cacheable("user:", "{0}", ttl=timedelta(minutes=10))
        async def get_user(self, user_id: str) -> dict:
            return await db.get_user(user_id)

        @cache_evict("user:", "{user_id}")
        async def update_user(self, user_id: str, data: dict) -> dict:
            return await db.update_user(user_id, data)
"""

import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from flatcache.core.entities.cache_config import TTL
from flatcache.core.services.cache_service import CacheService
from flatcache.core.services.key_scanner import WILDCARD
from flatcache.infrastructure.key_builders.template import KeyTemplateResolver

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

Condition = Callable[[Any, list[Any]], bool]

logger = logging.getLogger(__name__)

# Module-level cache service reference
_cache_service: CacheService | None = None
_key_resolver = KeyTemplateResolver()


def configure(cache_service: CacheService | None) -> None:
    """Configure the cache service for decorators.

    Decorated functions look the service up on every call, so this
    may run after decoration. Passing None disables caching.

    Args:
        cache_service: The cache service instance to use.

    Example:
        configure(CacheService(backend=InMemoryCacheBackend()))
    """
    global _cache_service
    _cache_service = cache_service


def get_cache_service() -> CacheService | None:
    """Get the configured cache service.

    Returns:
        The configured cache service, or None if not configured.
    """
    return _cache_service


def cacheable(
    name_prefix: str,
    key_template: str,
    ttl: TTL = None,
    *,
    param_names: Sequence[str] | None = None,
    cache_service: CacheService | None = None,
    logger: logging.Logger | None = None,
) -> Callable[[F], F]:
    """Read-through caching.

    On a hit the cached value is returned without calling the
    function. On a miss the function runs; its result is cached
    only if it returns normally. Exceptions propagate and are never
    cached. A cached ``None`` is indistinguishable from a miss.

    Args:
        name_prefix: Prefix prepended to the resolved key.
        key_template: Key template, e.g. ``"{0}"`` or ``"{user_id}"``.
        ttl: TTL for cached results. Uses config default if None.
        param_names: Explicit parameter names for ``{name}`` lookup.
        cache_service: Service to use instead of the configured one.
        logger: Logger for cache diagnostics. Defaults to the module logger.

    Returns:
        Decorator.

    Example:
        @cacheable("user:", "{0}", ttl=300)
        async def get_user(user_id: str) -> dict:
            return await db.get_user(user_id)
    """

    log, resolver = _diagnostics(logger)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            service = _service(cache_service)
            if service is None:
                return await func(*args, **kwargs)

            key = _full_key(
                resolver, func, name_prefix, key_template, args, kwargs, param_names
            )
            if key is None:
                return await func(*args, **kwargs)

            cached = await _read(service, key, log)
            if cached is not None:
                return cached

            result = await func(*args, **kwargs)
            await _write(service, key, result, ttl, log)
            return result

        return wrapper  # type: ignore

    return decorator


def cache_put(
    name_prefix: str,
    key_template: str,
    ttl: TTL = None,
    *,
    param_names: Sequence[str] | None = None,
    cache_service: CacheService | None = None,
    logger: logging.Logger | None = None,
) -> Callable[[F], F]:
    """Write-through caching.

    The function always runs. When it returns normally its result
    overwrites the cache entry.

    Args:
        name_prefix: Prefix prepended to the resolved key.
        key_template: Key template.
        ttl: TTL for the refreshed entry. Uses config default if None.
        param_names: Explicit parameter names for ``{name}`` lookup.
        cache_service: Service to use instead of the configured one.
        logger: Logger for cache diagnostics. Defaults to the module logger.

    Returns:
        Decorator.
    """

    log, resolver = _diagnostics(logger)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)

            service = _service(cache_service)
            if service is not None:
                key = _full_key(
                    resolver, func, name_prefix, key_template, args, kwargs, param_names
                )
                if key is not None:
                    await _write(service, key, result, ttl, log)

            return result

        return wrapper  # type: ignore

    return decorator


def cache_evict(
    name_prefix: str,
    key_template: str,
    *,
    param_names: Sequence[str] | None = None,
    cache_service: CacheService | None = None,
    logger: logging.Logger | None = None,
) -> Callable[[F], F]:
    """Evict a cache entry after the function succeeds.

    A template resolving to ``"*"`` is not expanded into a sweep of
    the prefix; it logs a warning and deletes nothing. Eviction
    failures are logged and never change the function's result.

    Args:
        name_prefix: Prefix prepended to the resolved key.
        key_template: Key template.
        param_names: Explicit parameter names for ``{name}`` lookup.
        cache_service: Service to use instead of the configured one.
        logger: Logger for cache diagnostics. Defaults to the module logger.

    Returns:
        Decorator.
    """

    log, resolver = _diagnostics(logger)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)

            service = _service(cache_service)
            if service is None:
                return result

            key = resolver.resolve(func, key_template, args, kwargs, param_names)
            if key == WILDCARD:
                log.warning(
                    "Wildcard eviction for %r is not supported; nothing deleted",
                    name_prefix,
                )
            elif key is not None:
                await _evict(service, f"{name_prefix}{key}", log)

            return result

        return wrapper  # type: ignore

    return decorator


def cache_conditional(
    name_prefix: str,
    key_template: str,
    condition: Condition,
    ttl: TTL = None,
    *,
    param_names: Sequence[str] | None = None,
    cache_service: CacheService | None = None,
    logger: logging.Logger | None = None,
) -> Callable[[F], F]:
    """Read-through caching gated by a predicate.

    Hits are returned without consulting the predicate. On a miss the
    function runs and ``condition(result, args)`` decides whether the
    result is cached; ``args`` is the resolved argument list. The
    result is returned either way.

    Args:
        name_prefix: Prefix prepended to the resolved key.
        key_template: Key template.
        condition: Predicate over the result and the call arguments.
        ttl: TTL for cached results. Uses config default if None.
        param_names: Explicit parameter names for ``{name}`` lookup.
        cache_service: Service to use instead of the configured one.
        logger: Logger for cache diagnostics. Defaults to the module logger.

    Returns:
        Decorator.

    Example:
        @cache_conditional("search:", "{0}", lambda result, args: bool(result))
        async def search(term: str) -> list[dict]:
            return await index.search(term)
    """

    log, resolver = _diagnostics(logger)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            service = _service(cache_service)
            if service is None:
                return await func(*args, **kwargs)

            key = _full_key(
                resolver, func, name_prefix, key_template, args, kwargs, param_names
            )
            if key is None:
                return await func(*args, **kwargs)

            cached = await _read(service, key, log)
            if cached is not None:
                return cached

            result = await func(*args, **kwargs)

            call_args = resolver.call_arguments(func, args, kwargs, param_names)
            if condition(result, call_args):
                await _write(service, key, result, ttl, log)
            else:
                log.debug("Condition rejected caching for key: %s", key)

            return result

        return wrapper  # type: ignore

    return decorator


# Aliases matching the usual annotation names
Cacheable = cacheable
CachePut = cache_put
CacheEvict = cache_evict
CacheConditional = cache_conditional


def _service(override: CacheService | None) -> CacheService | None:
    service = override or _cache_service
    if service is None or not service.config.enabled:
        return None
    return service


def _diagnostics(
    override: logging.Logger | None,
) -> tuple[logging.Logger, KeyTemplateResolver]:
    if override is None:
        return logger, _key_resolver
    return override, KeyTemplateResolver(logger=override)


def _full_key(
    resolver: KeyTemplateResolver,
    func: Callable[..., Any],
    name_prefix: str,
    key_template: str,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    param_names: Sequence[str] | None,
) -> str | None:
    key = resolver.resolve(func, key_template, args, kwargs, param_names)
    if key is None:
        return None
    return f"{name_prefix}{key}"


async def _read(service: CacheService, key: str, log: logging.Logger) -> Any:
    try:
        cached = await service.get(key)
    except Exception:
        log.exception("Cache read failed for key: %s", key)
        return None

    if cached is None:
        service.record_miss()
        log.debug("Cache miss for key: %s", key)
    else:
        service.record_hit()
        log.debug("Cache hit for key: %s", key)
    return cached


async def _write(
    service: CacheService, key: str, value: Any, ttl: TTL, log: logging.Logger
) -> None:
    try:
        if await service.set(key, value, ttl) is None:
            log.warning("Result not cached for key: %s", key)
    except Exception:
        log.exception("Cache write failed for key: %s", key)


async def _evict(service: CacheService, key: str, log: logging.Logger) -> None:
    try:
        await service.delete(key)
    except Exception:
        log.exception("Cache eviction failed for key: %s", key)
