"""Binary encode/decode between compounds and the tag-tree wire format.

Wire layout, all integers big-endian:

    named tag   := type_id:u8  name_length:u16  name:utf8  payload
    root        := named tag of type COMPOUND (name is usually "")
    COMPOUND    := named tag*  END:u8
    LIST        := element_type_id:u8  count:i32  payload*count
    *_ARRAY     := count:i32  element*count  (i8 / i32 / i64)
    STRING      := length:u16  utf8
    scalars     := i8 / i16 / i32 / i64 / f32 / f64

Compound entries are written in insertion order, so encoding the same
tree twice yields identical bytes.
"""

from __future__ import annotations

import struct
from typing import Any, Mapping

from codec.byte_reader import ByteReader
from codec.compression import compress, decompress
from core.config import TagTreeConfig
from core.constants import (
    DEFAULT_COMPRESSION,
    DEFAULT_MAX_DEPTH,
    MAX_SUPPORTED_DEPTH,
    ROOT_TAG_NAME,
)
from core.errors import (
    TagCorruptDataError,
    TagTreeConfigError,
    TagTypeMismatchError,
    TagUnsupportedError,
)
from tags.compound import Compound
from tags.tag_kind import WIRE_KINDS, RawPayload, TagKind
from tags.tag_list import TagList
from tags.tag_value import Tag, check_name, raw_tag

_SCALAR_FORMATS = {
    TagKind.BYTE: struct.Struct(">b"),
    TagKind.SHORT: struct.Struct(">h"),
    TagKind.INT: struct.Struct(">i"),
    TagKind.LONG: struct.Struct(">q"),
    TagKind.FLOAT: struct.Struct(">f"),
    TagKind.DOUBLE: struct.Struct(">d"),
}
_SCALAR_READERS = {
    TagKind.BYTE: ByteReader.read_byte,
    TagKind.SHORT: ByteReader.read_short,
    TagKind.INT: ByteReader.read_int,
    TagKind.LONG: ByteReader.read_long,
    TagKind.FLOAT: ByteReader.read_float,
    TagKind.DOUBLE: ByteReader.read_double,
}
_ARRAY_FORMATS = {
    TagKind.BYTE_ARRAY: ("b", 1),
    TagKind.INT_ARRAY: ("i", 4),
    TagKind.LONG_ARRAY: ("q", 8),
}
_COUNT = struct.Struct(">i")
_NAME_LENGTH = struct.Struct(">H")
_WIRE_IDS = frozenset(int(kind) for kind in WIRE_KINDS)
_END_MARKER = bytes([TagKind.END])


class TagCodec:
    """Encoder and decoder for root compounds.

    Attributes are fixed at construction; a codec is stateless between
    calls and safe to share across threads.
    """

    def __init__(
        self,
        compression: str = DEFAULT_COMPRESSION,
        max_depth: int = DEFAULT_MAX_DEPTH,
        reserved_shapes: Mapping[int, int] | None = None,
    ) -> None:
        """Create a codec.

        Args:
            compression: ``none`` or ``gzip`` applied around the tree bytes.
            max_depth: Maximum container nesting, the root compound being 1.
                At most MAX_SUPPORTED_DEPTH.
            reserved_shapes: Fixed payload widths for reserved type ids.
                Entries with these ids decode to raw tags and re-encode
                byte-identical.

        Raises:
            TagTreeConfigError: If a reserved id collides with a known kind or
                ``max_depth`` is outside 1..MAX_SUPPORTED_DEPTH.
        """
        compress(b"", compression)
        if not 0 < max_depth <= MAX_SUPPORTED_DEPTH:
            raise TagTreeConfigError(
                f"Invalid max_depth {max_depth}: expected a value in 1..{MAX_SUPPORTED_DEPTH}."
            )
        self._compression = compression
        self._max_depth = max_depth
        self._reserved_shapes = dict(reserved_shapes or {})
        for type_id, width in self._reserved_shapes.items():
            if type_id in _WIRE_IDS or not 0 < type_id <= 0xFF or width < 0:
                raise TagTreeConfigError(
                    f"Invalid reserved shape {type_id}: {width}. Reserved ids must be "
                    "unused type ids in 13..255 with a non-negative payload width."
                )

    @classmethod
    def from_config(cls, config: TagTreeConfig) -> "TagCodec":
        return cls(
            compression=config.compression,
            max_depth=config.max_depth,
            reserved_shapes=config.reserved_shapes,
        )

    @property
    def compression(self) -> str:
        return self._compression

    def encode(self, root: Compound, name: str = ROOT_TAG_NAME) -> bytes:
        """Serialize a root compound.

        The whole tree is assembled in memory first, so a violation anywhere
        in the tree raises before any output exists.

        Args:
            root: Tree to encode.
            name: Root tag name.

        Returns:
            Encoded, optionally compressed bytes.

        Raises:
            TagTypeMismatchError: For a heterogeneous list, a non-compound
                root, nesting beyond ``max_depth``, or a raw tag whose id or
                length does not match a registered reserved shape.
        """
        if not isinstance(root, Compound):
            raise TagTypeMismatchError(
                f"The root of a tag tree must be a Compound, got {type(root).__name__}."
            )
        parts: list[bytes] = [bytes([TagKind.COMPOUND]), _pack_string(check_name(name))]
        self._write_payload(parts, TagKind.COMPOUND, root, depth=1)
        return compress(b"".join(parts), self._compression)

    def decode(self, data: bytes) -> Compound:
        """Deserialize a root compound, discarding its name."""
        return self.decode_named(data)[1]

    def decode_named(self, data: bytes) -> tuple[str, Compound]:
        """Deserialize a root compound and its name.

        Args:
            data: Encoded, optionally compressed bytes.

        Returns:
            Pair of root name and root compound.

        Raises:
            TagCorruptDataError: If the stream is malformed anywhere.
            TagUnsupportedError: For an unregistered unknown type id.
        """
        reader = ByteReader(decompress(bytes(data), self._compression))
        type_id = reader.read_unsigned_byte("root type id")
        if type_id != TagKind.COMPOUND:
            raise TagCorruptDataError(
                f"Root tag must be a compound, found type id {type_id}", 0
            )
        name = reader.read_string("root name")
        root = self._read_payload(reader, TagKind.COMPOUND, depth=1).value
        if reader.remaining:
            raise TagCorruptDataError(
                f"{reader.remaining} trailing bytes after the root compound", reader.offset
            )
        return name, root

    def _write_payload(self, parts: list[bytes], kind: TagKind, value: Any, depth: int) -> None:
        scalar_format = _SCALAR_FORMATS.get(kind)
        if scalar_format is not None:
            parts.append(scalar_format.pack(value))
        elif kind is TagKind.STRING:
            parts.append(_pack_string(value))
        elif kind in _ARRAY_FORMATS:
            element_format, _ = _ARRAY_FORMATS[kind]
            parts.append(_COUNT.pack(len(value)))
            parts.append(struct.pack(f">{len(value)}{element_format}", *value))
        elif kind is TagKind.LIST:
            self._check_depth(depth)
            self._write_list(parts, value, depth)
        elif kind is TagKind.COMPOUND:
            self._check_depth(depth)
            for name, tag in value.items():
                parts.append(bytes([_wire_id(tag)]))
                parts.append(_pack_string(name))
                self._write_payload(parts, tag.kind, tag.value, depth + 1)
            parts.append(_END_MARKER)
        elif kind is TagKind.RAW:
            self._check_raw_shape(value)
            parts.append(value.data)
        else:
            raise TagTypeMismatchError(f"Cannot encode a {kind.label} tag.")

    def _write_list(self, parts: list[bytes], tag_list: TagList, depth: int) -> None:
        if not tag_list.is_homogeneous():
            kinds = sorted({tag.kind.label for tag in tag_list})
            raise TagTypeMismatchError(
                f"List declared as {tag_list.element_kind.label} holds mixed element "
                f"kinds ({', '.join(kinds)}); every list element must share one kind."
            )
        parts.append(bytes([tag_list.element_kind]))
        parts.append(_COUNT.pack(len(tag_list)))
        for tag in tag_list:
            self._write_payload(parts, tag.kind, tag.value, depth + 1)

    def _read_payload(self, reader: ByteReader, kind: TagKind, depth: int) -> Tag:
        scalar_reader = _SCALAR_READERS.get(kind)
        if scalar_reader is not None:
            return Tag(kind, scalar_reader(reader, f"{kind.label} payload"))
        if kind is TagKind.STRING:
            return Tag(kind, reader.read_string("string payload"))
        if kind in _ARRAY_FORMATS:
            element_format, width = _ARRAY_FORMATS[kind]
            return Tag(kind, reader.read_array(element_format, width, kind.label))
        if kind is TagKind.LIST:
            self._check_read_depth(reader, depth)
            return Tag(kind, self._read_list(reader, depth))
        if kind is TagKind.COMPOUND:
            self._check_read_depth(reader, depth)
            return Tag(kind, self._read_compound(reader, depth))
        raise TagUnsupportedError(int(kind), reader.offset)

    def _read_list(self, reader: ByteReader, depth: int) -> TagList:
        kind_offset = reader.offset
        element_id = reader.read_unsigned_byte("list element type id")
        count = reader.read_count("list length")
        if element_id == TagKind.END and count > 0:
            raise TagCorruptDataError(
                f"List without element kind declares {count} elements", kind_offset
            )
        if element_id not in _WIRE_IDS:
            raise TagUnsupportedError(element_id, kind_offset)
        element_kind = TagKind(element_id)
        tag_list = TagList(element_kind)
        for _ in range(count):
            tag_list.append(self._read_payload(reader, element_kind, depth + 1))
        return tag_list

    def _read_compound(self, reader: ByteReader, depth: int) -> Compound:
        compound = Compound()
        while True:
            type_offset = reader.offset
            type_id = reader.read_unsigned_byte("compound entry type id")
            if type_id == TagKind.END:
                return compound
            name = reader.read_string("tag name")
            if type_id in _WIRE_IDS:
                tag = self._read_payload(reader, TagKind(type_id), depth + 1)
            elif type_id in self._reserved_shapes:
                width = self._reserved_shapes[type_id]
                tag = raw_tag(type_id, reader.read_exact(width, f"reserved tag {type_id} payload"))
            else:
                raise TagUnsupportedError(type_id, type_offset)
            compound.set(name, tag)

    def _check_depth(self, depth: int) -> None:
        if depth > self._max_depth:
            raise TagTypeMismatchError(
                f"Tag tree nesting exceeds the maximum depth of {self._max_depth}."
            )

    def _check_read_depth(self, reader: ByteReader, depth: int) -> None:
        if depth > self._max_depth:
            raise TagCorruptDataError(
                f"Nesting exceeds the maximum depth of {self._max_depth}", reader.offset
            )

    def _check_raw_shape(self, payload: RawPayload) -> None:
        width = self._reserved_shapes.get(payload.type_id)
        if width is None:
            raise TagTypeMismatchError(
                f"Raw tag type id {payload.type_id} has no registered reserved shape; "
                "register it in reserved_shapes so the output can be decoded."
            )
        if len(payload.data) != width:
            raise TagTypeMismatchError(
                f"Raw tag type id {payload.type_id} carries {len(payload.data)} bytes, "
                f"its reserved shape is {width} bytes."
            )


_DEFAULT_CODEC = TagCodec()


def encode_compound(root: Compound, name: str = ROOT_TAG_NAME) -> bytes:
    """Encode ``root`` uncompressed with default limits."""
    return _DEFAULT_CODEC.encode(root, name)


def decode_compound(data: bytes) -> Compound:
    """Decode uncompressed bytes with default limits."""
    return _DEFAULT_CODEC.decode(data)


def _wire_id(tag: Tag) -> int:
    if tag.kind is TagKind.RAW:
        return tag.value.type_id
    return int(tag.kind)


def _pack_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return _NAME_LENGTH.pack(len(encoded)) + encoded
