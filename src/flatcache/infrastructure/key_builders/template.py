"""Template-based key resolver.

Turns a key template such as ``"user:{0}"`` or ``"order:{order_id}"``
into a concrete cache key using the arguments of one call.
"""

import inspect
import logging
import weakref
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from flatcache.core.entities.key_template import KeyTemplate
from flatcache.core.interfaces.serializer import ISerializer
from flatcache.exceptions import SerializationError
from flatcache.infrastructure.serializers.json import JsonSerializer


_BOUND_NAMES = ("self", "cls")
_SCALARS = (str, int, float, bool)


class KeyTemplateResolver:
    """Resolve ``{N}`` and ``{name}`` placeholders from call arguments.

    Positional placeholders index the call's argument list. Named
    placeholders are looked up in the function's parameter list, and
    the matched position is used as the index. If any placeholder
    cannot be resolved the whole template is unresolvable and
    ``resolve`` returns None; partial keys are never produced.

    Parameter names come from ``inspect.signature`` and are memoized
    per function. A leading ``self``/``cls`` parameter is not part of
    the argument list, so ``{0}`` is the first real argument of a
    method.
    """

    def __init__(
        self,
        serializer: ISerializer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            serializer: Encoder for non-scalar arguments.
                Defaults to JsonSerializer.
            logger: Logger for resolution diagnostics.
        """
        self._serializer = serializer or JsonSerializer()
        self._logger = logger or logging.getLogger(__name__)
        self._names: weakref.WeakKeyDictionary[Callable[..., Any], tuple[str, ...]] = (
            weakref.WeakKeyDictionary()
        )
        self._templates: dict[str, KeyTemplate] = {}

    def parameter_names(self, func: Callable[..., Any]) -> tuple[str, ...]:
        """Return the ordered, named parameters of a function.

        ``self``/``cls`` in first position, ``*args`` and ``**kwargs``
        are excluded.

        Args:
            func: The function to inspect.

        Returns:
            Tuple of parameter names.
        """
        func = inspect.unwrap(func)
        try:
            return self._names[func]
        except (KeyError, TypeError):
            pass

        names = tuple(p.name for p in self._named_parameters(func))
        try:
            self._names[func] = names
        except TypeError:
            # Not weak-referenceable (some builtins); skip memoization.
            pass
        return names

    def call_arguments(
        self,
        func: Callable[..., Any],
        args: Sequence[Any],
        kwargs: Mapping[str, Any] | None = None,
        param_names: Sequence[str] | None = None,
    ) -> list[Any] | None:
        """Flatten one call into a positional argument list.

        Named parameters come first in declared order (defaults
        applied), followed by any extra ``*args`` values.

        Args:
            func: The decorated function.
            args: Positional call arguments.
            kwargs: Keyword call arguments.
            param_names: Explicit parameter names. When given, they
                replace name introspection; a leading ``self``/``cls``
                argument is still dropped.

        Returns:
            The argument list, or None if the call does not bind.
        """
        kwargs = dict(kwargs or {})

        if param_names is not None:
            values = list(args[1:] if args and self._is_bound(func) else args)
            for name in param_names[len(values):]:
                if name not in kwargs:
                    break
                values.append(kwargs[name])
            return values

        target = inspect.unwrap(func)
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError):
            return list(args)

        try:
            bound = signature.bind(*args, **kwargs)
        except TypeError:
            return None
        bound.apply_defaults()

        named = self._named_parameters(target)
        values = [bound.arguments[p.name] for p in named]
        for param in signature.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                values.extend(bound.arguments.get(param.name, ()))
        return values

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
        if not template:
            self._logger.warning("Key template is empty; caching bypassed")
            return None

        key_template = self._template(template)
        if not key_template.placeholders:
            return template

        values = self.call_arguments(func, args, kwargs, param_names)
        if values is None:
            self._logger.warning(
                "Arguments do not bind to %s; caching bypassed",
                getattr(func, "__qualname__", func),
            )
            return None

        names = (
            tuple(param_names)
            if param_names is not None
            else self.parameter_names(func)
        )

        rendered: dict[str, str] = {}
        for token in key_template.placeholders:
            if token in rendered:
                continue

            if KeyTemplate.is_index(token):
                index = int(token)
            elif token in names:
                index = names.index(token)
            else:
                index = -1

            if index < 0 or index >= len(values):
                self._logger.warning(
                    "Cannot resolve placeholder {%s} in %r (%d args)",
                    token,
                    template,
                    len(values),
                )
                return None

            text = self._stringify(values[index])
            if text is None:
                return None
            rendered[token] = text

        key = key_template.render(rendered)
        self._logger.debug("Resolved key %r from template %r", key, template)
        return key

    def _template(self, template: str) -> KeyTemplate:
        parsed = self._templates.get(template)
        if parsed is None:
            parsed = self._templates[template] = KeyTemplate(template)
        return parsed

    def _stringify(self, value: Any) -> str | None:
        """Render one argument for substitution into a key."""
        if isinstance(value, _SCALARS):
            return str(value)
        try:
            return self._serializer.serialize(value)
        except SerializationError as e:
            self._logger.warning("Cannot encode key argument: %s", e)
            return None

    @staticmethod
    def _named_parameters(func: Callable[..., Any]) -> list[inspect.Parameter]:
        try:
            parameters = list(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            return []

        if parameters and _takes_receiver(parameters[0]):
            parameters = parameters[1:]

        return [
            p
            for p in parameters
            if p.kind
            not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]

    @staticmethod
    def _is_bound(func: Callable[..., Any]) -> bool:
        """Whether the first positional argument is ``self``/``cls``."""
        try:
            parameters = inspect.signature(inspect.unwrap(func)).parameters
        except (TypeError, ValueError):
            return False
        first = next(iter(parameters.values()), None)
        return first is not None and _takes_receiver(first)


def _takes_receiver(parameter: inspect.Parameter) -> bool:
    return parameter.name in _BOUND_NAMES and parameter.kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
