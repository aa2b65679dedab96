"""JSON serializer implementation."""

import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from typing import Any

from flatcache.exceptions import SerializationError


class JsonSerializer:
    """Canonical JSON serializer for cache values.

    Produces compact JSON with sorted object keys, so equal values
    always encode to the same text. Strings are JSON-encoded too,
    which keeps ``deserialize(serialize(v)) == v`` for every
    JSON-representable value.
    """

    def __init__(self, sort_keys: bool = True, ensure_ascii: bool = False) -> None:
        """Initialize the JSON serializer.

        Args:
            sort_keys: Whether to sort object keys.
            ensure_ascii: Whether to escape non-ASCII characters.
        """
        self._sort_keys = sort_keys
        self._ensure_ascii = ensure_ascii

    def serialize(self, value: Any) -> str:
        """Serialize value to canonical JSON text.

        Args:
            value: The Python object to serialize.

        Returns:
            The JSON text.

        Raises:
            SerializationError: If the value cannot be serialized.
        """
        try:
            return json.dumps(
                value,
                default=self._default_encoder,
                sort_keys=self._sort_keys,
                ensure_ascii=self._ensure_ascii,
                separators=(",", ":"),
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize value: {e}") from e

    def deserialize(self, data: str | bytes) -> Any:
        """Deserialize JSON text to value.

        Args:
            data: The stored text.

        Returns:
            The deserialized Python object.

        Raises:
            SerializationError: If the data is not valid JSON.
        """
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise SerializationError(f"Failed to deserialize data: {e}") from e

    def _default_encoder(self, obj: Any) -> Any:
        """Custom encoder for non-JSON-serializable types.

        Args:
            obj: The object to encode.

        Returns:
            A JSON-serializable representation of the object.

        Raises:
            TypeError: If the object cannot be encoded.
        """
        if isinstance(obj, datetime | date):
            return obj.isoformat()
        if isinstance(obj, set | frozenset):
            return sorted(obj, key=repr)
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        if hasattr(obj, "__dict__"):
            return obj.__dict__
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
