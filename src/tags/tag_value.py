"""Tag value model.

A ``Tag`` is a tagged union: a ``TagKind`` plus a payload validated for
that kind on construction. Scalars and arrays are immutable; lists and
compounds are mutable containers owned by exactly one parent.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import struct
from typing import Any, Iterable

from core.constants import (
    BYTE_MAX,
    BYTE_MIN,
    FLOAT32_MAX,
    INT_MAX,
    INT_MIN,
    LONG_MAX,
    LONG_MIN,
    MAX_NAME_BYTES,
    SHORT_MAX,
    SHORT_MIN,
)
from core.errors import TagTypeMismatchError
from tags.container import TagContainer
from tags.tag_kind import ARRAY_ELEMENT_KINDS, WIRE_KINDS, RawPayload, TagKind

INTEGER_RANGES = {
    TagKind.BYTE: (BYTE_MIN, BYTE_MAX),
    TagKind.SHORT: (SHORT_MIN, SHORT_MAX),
    TagKind.INT: (INT_MIN, INT_MAX),
    TagKind.LONG: (LONG_MIN, LONG_MAX),
}
_FLOAT_BIT_FORMATS = {TagKind.FLOAT: ">f", TagKind.DOUBLE: ">d"}


@dataclass(frozen=True, eq=False)
class Tag:
    """One typed node of a tag tree.

    Equality is structural. FLOAT and DOUBLE payloads compare by bit
    pattern, so NaN equals NaN and ``0.0`` differs from ``-0.0``.

    Attributes:
        kind: Variant of this node.
        value: Payload; int for integer kinds, float for FLOAT/DOUBLE, str for
            STRING, tuple of ints for arrays, TagList, Compound, or RawPayload.
    """

    kind: TagKind
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", _coerce_kind(self.kind))
        object.__setattr__(self, "value", normalize_payload(self.kind, self.value))

    def expect(self, kind: TagKind) -> Any:
        """Return the payload when this node is of ``kind``.

        Args:
            kind: Expected variant.

        Returns:
            The payload.

        Raises:
            TagTypeMismatchError: If the node holds another variant.
        """
        if self.kind is not kind:
            raise TagTypeMismatchError(
                f"Expected a {kind.label} tag, found {self.kind.label}."
            )
        return self.value

    def copy(self) -> "Tag":
        """Return a deep copy; scalar tags are immutable and returned as-is."""
        if isinstance(self.value, TagContainer):
            return Tag(self.kind, self.value.copy())  # type: ignore[attr-defined]
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.kind is other.kind and self._comparable() == other._comparable()

    def __hash__(self) -> int:
        return hash((self.kind, self._comparable()))

    def _comparable(self) -> Any:
        float_format = _FLOAT_BIT_FORMATS.get(self.kind)
        if float_format is not None:
            return struct.pack(float_format, self.value)
        return self.value


def normalize_payload(kind: TagKind, value: Any) -> Any:
    """Validate and normalize a payload for ``kind``.

    Integers are range-checked against the signed width of the kind and
    rejected when out of range; floats for FLOAT are rounded to 32-bit
    precision so a decoded value compares equal to the one encoded.

    Args:
        kind: Target variant.
        value: Native payload.

    Returns:
        Normalized payload.

    Raises:
        TagTypeMismatchError: If the payload does not fit the kind.
    """
    if kind.is_integer:
        return _check_integer(kind, value)
    if kind is TagKind.FLOAT:
        return _to_float32(value)
    if kind is TagKind.DOUBLE:
        return _to_double(value)
    if kind is TagKind.STRING:
        return _check_string(value)
    if kind.is_array:
        return _to_array(kind, value)
    if kind.is_container:
        if not isinstance(value, TagContainer) or value.container_kind is not kind:
            raise TagTypeMismatchError(
                f"A {kind.label} tag requires a {kind.label} container, "
                f"got {type(value).__name__}."
            )
        return value
    if kind is TagKind.RAW:
        return _check_raw(value)
    raise TagTypeMismatchError(
        "The end tag only terminates compounds on the wire and cannot hold a value."
    )


def check_name(name: Any) -> str:
    """Validate a compound key; names share the string length limit."""
    return _check_string(name)


def byte_tag(value: int) -> Tag:
    return Tag(TagKind.BYTE, value)


def short_tag(value: int) -> Tag:
    return Tag(TagKind.SHORT, value)


def int_tag(value: int) -> Tag:
    return Tag(TagKind.INT, value)


def long_tag(value: int) -> Tag:
    return Tag(TagKind.LONG, value)


def float_tag(value: float) -> Tag:
    return Tag(TagKind.FLOAT, value)


def double_tag(value: float) -> Tag:
    return Tag(TagKind.DOUBLE, value)


def string_tag(value: str) -> Tag:
    return Tag(TagKind.STRING, value)


def byte_array_tag(values: Iterable[int] | bytes) -> Tag:
    """Build a byte array tag; ``bytes`` input is reinterpreted as signed."""
    return Tag(TagKind.BYTE_ARRAY, values)


def int_array_tag(values: Iterable[int]) -> Tag:
    return Tag(TagKind.INT_ARRAY, values)


def long_array_tag(values: Iterable[int]) -> Tag:
    return Tag(TagKind.LONG_ARRAY, values)


def raw_tag(type_id: int, data: bytes) -> Tag:
    """Build a tag carrying the payload of a reserved type id verbatim."""
    return Tag(TagKind.RAW, RawPayload(type_id=type_id, data=bytes(data)))


def _coerce_kind(kind: Any) -> TagKind:
    try:
        return TagKind(kind)
    except ValueError as error:
        raise TagTypeMismatchError(f"Unknown tag kind {kind!r}.") from error


def _check_integer(kind: TagKind, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TagTypeMismatchError(
            f"A {kind.label} tag requires an int, got {type(value).__name__}."
        )
    low, high = INTEGER_RANGES[kind]
    if not low <= value <= high:
        raise TagTypeMismatchError(
            f"Value {value} is outside the {kind.label} range [{low}, {high}]."
        )
    return int(value)


def _to_float32(value: Any) -> float:
    number = _to_double(value)
    if math.isfinite(number) and abs(number) > FLOAT32_MAX:
        raise TagTypeMismatchError(f"Value {number} is outside the float range.")
    try:
        return struct.unpack(">f", struct.pack(">f", number))[0]
    except OverflowError as error:
        raise TagTypeMismatchError(f"Value {number} is outside the float range.") from error


def _to_double(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TagTypeMismatchError(
            f"A floating point tag requires a number, got {type(value).__name__}."
        )
    try:
        return float(value)
    except OverflowError as error:
        raise TagTypeMismatchError(f"Value {value} is outside the double range.") from error


def _check_string(value: Any) -> str:
    if not isinstance(value, str):
        raise TagTypeMismatchError(f"A string tag requires str, got {type(value).__name__}.")
    try:
        encoded = value.encode("utf-8")
    except UnicodeEncodeError as error:
        raise TagTypeMismatchError(f"String is not encodable as UTF-8: {error.reason}.") from error
    if len(encoded) > MAX_NAME_BYTES:
        raise TagTypeMismatchError(
            f"String of {len(encoded)} UTF-8 bytes exceeds the {MAX_NAME_BYTES} byte limit."
        )
    return value


def _to_array(kind: TagKind, values: Any) -> tuple[int, ...]:
    if isinstance(values, (bytes, bytearray, memoryview)):
        if kind is not TagKind.BYTE_ARRAY:
            raise TagTypeMismatchError(f"A {kind.label} tag cannot be built from bytes.")
        raw = bytes(values)
        return struct.unpack(f">{len(raw)}b", raw)
    if isinstance(values, (str, TagContainer)) or not isinstance(values, Iterable):
        raise TagTypeMismatchError(
            f"A {kind.label} tag requires a sequence of ints, got {type(values).__name__}."
        )
    element_kind = ARRAY_ELEMENT_KINDS[kind]
    return tuple(_check_integer(element_kind, item) for item in values)


def _check_raw(value: Any) -> RawPayload:
    if not isinstance(value, RawPayload):
        raise TagTypeMismatchError(f"A raw tag requires RawPayload, got {type(value).__name__}.")
    if not 0 <= value.type_id <= 0xFF or value.type_id in WIRE_KINDS:
        raise TagTypeMismatchError(
            f"Type id {value.type_id} is not a reserved id and cannot be carried raw."
        )
    return value
