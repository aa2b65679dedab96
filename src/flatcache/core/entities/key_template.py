"""Key template value object."""

import re
from dataclasses import dataclass, field
from typing import Any, Union

JsonValue = Union[
    None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]
]

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z0-9_-]+)\}")


@dataclass(frozen=True)
class KeyTemplate:
    """Immutable cache key template.

    A template holds zero or more placeholders: ``{0}``, ``{1}`` refer
    to call arguments by position, ``{name}`` refers to a declared
    parameter of the decorated function.
    """

    template: str
    placeholders: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Parse placeholders once."""
        tokens = tuple(PLACEHOLDER_PATTERN.findall(self.template or ""))
        object.__setattr__(self, "placeholders", tokens)

    def __bool__(self) -> bool:
        return bool(self.template)

    def __str__(self) -> str:
        return self.template

    @staticmethod
    def is_index(token: str) -> bool:
        """Check whether a placeholder is a positional index."""
        return token.isdigit() and token.isascii()

    def render(self, values: dict[str, Any]) -> str:
        """Substitute already-stringified values for each placeholder.

        Args:
            values: Mapping of placeholder token to replacement text.
                Every placeholder must be present.

        Returns:
            The rendered key.
        """
        return PLACEHOLDER_PATTERN.sub(lambda m: values[m.group(1)], self.template)
