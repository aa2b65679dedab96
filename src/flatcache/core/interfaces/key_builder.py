"""Key resolver interface."""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol


class IKeyResolver(Protocol):
    """Contract for turning a key template into a concrete cache key.

    Resolvers never raise on bad templates; they return None so the
    caller can bypass caching for that call.
    """

    def resolve(
        self,
        func: Callable[..., Any],
        template: str,
        args: Sequence[Any],
        kwargs: Mapping[str, Any] | None = None,
        param_names: Sequence[str] | None = None,
    ) -> str | None:
        """Build the cache key for one call.

        Args:
            func: The decorated function.
            template: Key template with ``{N}`` / ``{name}`` placeholders.
            args: Positional call arguments.
            kwargs: Keyword call arguments.
            param_names: Explicit parameter names, replacing introspection.

        Returns:
            The resolved key, or None when the template cannot be resolved.
        """
        ...
