"""
Typed attribute values.

OTLP carries attribute values as AnyValue, a oneof over string, bool, int,
double, array, key-value list and bytes. AttributeValue mirrors that union as
an immutable value so assertions can compare against plain Python values.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from opentelemetry.proto.common.v1.common_pb2 import AnyValue


class ValueKind(Enum):
    """Which variant of an attribute value is populated."""

    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    ARRAY = "array"
    MAPPING = "mapping"
    BYTES = "bytes"
    # AnyValue with no variant set
    EMPTY = "empty"


_ONEOF_TO_KIND = {
    "string_value": ValueKind.STRING,
    "int_value": ValueKind.INT,
    "double_value": ValueKind.DOUBLE,
    "bool_value": ValueKind.BOOL,
    "array_value": ValueKind.ARRAY,
    "kvlist_value": ValueKind.MAPPING,
    "bytes_value": ValueKind.BYTES,
}


@dataclass(frozen=True)
class AttributeValue:
    """
    One attribute value with exactly one populated variant.

    Arrays hold a tuple of AttributeValue; mappings hold a tuple of
    (key, AttributeValue) pairs in wire order so the value stays hashable.
    """

    kind: ValueKind
    value: Any = None

    @classmethod
    def from_proto(cls, any_value: AnyValue) -> "AttributeValue":
        """Build from an OTLP AnyValue message."""
        variant = any_value.WhichOneof("value")
        if variant is None:
            return cls(ValueKind.EMPTY)
        kind = _ONEOF_TO_KIND[variant]
        if kind is ValueKind.ARRAY:
            return cls(kind, tuple(cls.from_proto(v) for v in any_value.array_value.values))
        if kind is ValueKind.MAPPING:
            return cls(
                kind,
                tuple((kv.key, cls.from_proto(kv.value)) for kv in any_value.kvlist_value.values),
            )
        return cls(kind, getattr(any_value, variant))

    @classmethod
    def of(cls, value: Any) -> "AttributeValue":
        """Build from a plain Python value (str, bool, int, float, bytes, list, dict or None)."""
        if value is None:
            return cls(ValueKind.EMPTY)
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return cls(ValueKind.BOOL, value)
        if isinstance(value, int):
            return cls(ValueKind.INT, value)
        if isinstance(value, float):
            return cls(ValueKind.DOUBLE, value)
        if isinstance(value, str):
            return cls(ValueKind.STRING, value)
        if isinstance(value, bytes):
            return cls(ValueKind.BYTES, value)
        if isinstance(value, Mapping):
            return cls(ValueKind.MAPPING, tuple((str(k), cls.of(v)) for k, v in value.items()))
        if isinstance(value, (list, tuple)):
            return cls(ValueKind.ARRAY, tuple(cls.of(v) for v in value))
        raise TypeError(f"Unsupported attribute value type: {type(value).__name__}")

    def to_python(self) -> Any:
        """Convert recursively to plain Python values (list for arrays, dict for mappings)."""
        if self.kind is ValueKind.ARRAY:
            return [v.to_python() for v in self.value]
        if self.kind is ValueKind.MAPPING:
            return {k: v.to_python() for k, v in self.value}
        return self.value

    def matches(self, expected: Any) -> bool:
        """Compare against a plain Python value or another AttributeValue."""
        if isinstance(expected, AttributeValue):
            return self == expected
        return self == AttributeValue.of(expected)

    def __str__(self) -> str:
        return str(self.to_python())
