"""Tag kinds and their wire type ids.

Each member value is the 1-byte type id written on the wire, except RAW,
which stands for a reserved id carried through the codec uninterpreted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class TagKind(IntEnum):
    """Closed set of tag variants."""

    END = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11
    LONG_ARRAY = 12
    RAW = -1

    @property
    def is_integer(self) -> bool:
        """Return whether the kind holds a single signed integer."""
        return self in _INTEGER_KINDS

    @property
    def is_array(self) -> bool:
        """Return whether the kind holds a fixed-width integer array."""
        return self in ARRAY_ELEMENT_KINDS

    @property
    def is_container(self) -> bool:
        """Return whether the kind owns nested tags."""
        return self in (TagKind.LIST, TagKind.COMPOUND)

    @property
    def label(self) -> str:
        """Human-readable kind name used in error messages."""
        return self.name.lower()


_INTEGER_KINDS = frozenset((TagKind.BYTE, TagKind.SHORT, TagKind.INT, TagKind.LONG))

ARRAY_ELEMENT_KINDS = {
    TagKind.BYTE_ARRAY: TagKind.BYTE,
    TagKind.INT_ARRAY: TagKind.INT,
    TagKind.LONG_ARRAY: TagKind.LONG,
}

WIRE_KINDS = frozenset(kind for kind in TagKind if kind is not TagKind.RAW)


@dataclass(frozen=True)
class RawPayload:
    """Uninterpreted payload of a reserved type id.

    Attributes:
        type_id: Wire type id as read from the stream.
        data: Exact payload bytes following the name.
    """

    type_id: int
    data: bytes
