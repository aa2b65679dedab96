"""Tests for JsonSerializer."""

from dataclasses import dataclass
from datetime import date, datetime

import pytest

from flatcache.exceptions import SerializationError
from flatcache.infrastructure.serializers.json import JsonSerializer


@dataclass
class Point:
    x: int
    y: int


class TestJsonSerializer:
    """Tests for JsonSerializer."""

    @pytest.fixture
    def serializer(self) -> JsonSerializer:
        """Create a serializer for testing."""
        return JsonSerializer()

    def test_serialize_is_canonical(self, serializer: JsonSerializer) -> None:
        """Test that output is compact with sorted keys."""
        assert serializer.serialize({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_equal_dicts_serialize_equally(self, serializer: JsonSerializer) -> None:
        """Test that key order does not change the encoding."""
        first = serializer.serialize({"name": "Alice", "age": 30})
        second = serializer.serialize({"age": 30, "name": "Alice"})

        assert first == second

    def test_strings_are_json_encoded(self, serializer: JsonSerializer) -> None:
        """Test that plain strings are still quoted."""
        assert serializer.serialize("hello") == '"hello"'
        assert serializer.deserialize('"hello"') == "hello"

    def test_numeric_looking_string_keeps_type(
        self, serializer: JsonSerializer
    ) -> None:
        """Test that "123" does not come back as an int."""
        assert serializer.deserialize(serializer.serialize("123")) == "123"

    def test_roundtrip_scalars(self, serializer: JsonSerializer) -> None:
        """Test null, booleans and numbers survive a roundtrip."""
        for value in (None, True, False, 0, -7, 3.5):
            assert serializer.deserialize(serializer.serialize(value)) == value

    def test_roundtrip_nested(self, serializer: JsonSerializer) -> None:
        """Test serialization roundtrip of nested structures."""
        original = {
            "users": [
                {"id": 1, "name": "Alice"},
                {"id": 2, "name": "Bob"},
            ],
            "count": 2,
        }

        assert serializer.deserialize(serializer.serialize(original)) == original

    def test_non_ascii_kept(self, serializer: JsonSerializer) -> None:
        """Test that non-ASCII text is not escaped."""
        assert serializer.serialize("缓存") == '"缓存"'

    def test_serialize_datetime(self, serializer: JsonSerializer) -> None:
        """Test serializing datetime and date as ISO strings."""
        data = {"at": datetime(2024, 1, 15, 10, 30), "on": date(2024, 1, 15)}

        result = serializer.deserialize(serializer.serialize(data))

        assert result == {"at": "2024-01-15T10:30:00", "on": "2024-01-15"}

    def test_serialize_dataclass(self, serializer: JsonSerializer) -> None:
        """Test serializing a dataclass instance."""
        assert serializer.serialize(Point(1, 2)) == '{"x":1,"y":2}'

    def test_serialize_unsupported_type(self, serializer: JsonSerializer) -> None:
        """Test that unsupported types raise SerializationError."""
        with pytest.raises(SerializationError):
            serializer.serialize(object())

    def test_serialize_nan_rejected(self, serializer: JsonSerializer) -> None:
        """Test that NaN is not valid canonical JSON."""
        with pytest.raises(SerializationError):
            serializer.serialize(float("nan"))

    def test_deserialize_invalid_json(self, serializer: JsonSerializer) -> None:
        """Test that invalid JSON raises SerializationError."""
        with pytest.raises(SerializationError):
            serializer.deserialize("plain text")

    def test_deserialize_bytes(self, serializer: JsonSerializer) -> None:
        """Test that bytes input is accepted."""
        assert serializer.deserialize(b'{"a":1}') == {"a": 1}
