"""Unit tests for the binary tag codec."""

from __future__ import annotations

import math
import struct

import pytest

from codec.binary_codec import TagCodec, decode_compound, encode_compound
from core.constants import MAX_SUPPORTED_DEPTH
from core.errors import (
    TagCorruptDataError,
    TagTreeConfigError,
    TagTypeMismatchError,
    TagUnsupportedError,
)
from tags.compound import Compound
from tags.tag_kind import TagKind
from tags.tag_list import TagList
from tags.tag_value import (
    Tag,
    byte_array_tag,
    double_tag,
    float_tag,
    int_array_tag,
    int_tag,
    long_array_tag,
    raw_tag,
    string_tag,
)

EXAMPLE_BYTES = bytes.fromhex(
    "0a0000"
    "0300056c6576656c00000007"
    "090004746167730800000002000161000162"
    "00"
)


def _example_compound() -> Compound:
    compound = Compound()
    compound.set_int("level", 7)
    compound.set_list("tags", TagList(TagKind.STRING, [string_tag("a"), string_tag("b")]))
    return compound


def _rich_compound() -> Compound:
    compound = Compound()
    compound.set_byte("b", -5)
    compound.set_short("s", 300)
    compound.set_long("l", -(2**40))
    compound.set("f", float_tag(1.5))
    compound.set("d", double_tag(-0.25))
    compound.set("ba", byte_array_tag([1, -1, 0]))
    compound.set("ia", int_array_tag([]))
    compound.set("la", long_array_tag([2**62]))
    compound.set_string("name", "héros")
    compound.set_list("empty", TagList())
    compound.set_list("declared", TagList(TagKind.COMPOUND))
    nested = compound.get_or_create_compound("nested")
    nested.get_or_create_compound("deeper").set_int("x", 1)
    lists = TagList(TagKind.LIST)
    lists.append(Tag(TagKind.LIST, TagList(TagKind.INT, [int_tag(1)])))
    lists.append(Tag(TagKind.LIST, TagList(TagKind.STRING)))
    compound.set_list("lists", lists)
    return compound


def test_example_compound_encodes_to_fixed_bytes() -> None:
    """The documented example should produce the exact wire bytes."""
    assert encode_compound(_example_compound()) == EXAMPLE_BYTES


def test_example_bytes_decode_to_equal_compound() -> None:
    """The documented example bytes should decode back to the same tree."""
    assert decode_compound(EXAMPLE_BYTES) == _example_compound()


def test_round_trip_preserves_every_kind() -> None:
    """Decoding encoded bytes should return a deep-equal tree."""
    compound = _rich_compound()

    decoded = decode_compound(encode_compound(compound))

    assert decoded == compound
    assert decoded.keys() == compound.keys()


def test_round_trip_of_empty_compound() -> None:
    """An empty root should encode to a header and a terminator."""
    data = encode_compound(Compound())

    assert data == b"\x0a\x00\x00\x00" and decode_compound(data) == Compound()


def test_round_trip_of_deep_nesting() -> None:
    """Deeply nested compounds should survive a round trip."""
    root = Compound()
    node = root
    for _ in range(100):
        node = node.get_or_create_compound("n")

    assert decode_compound(encode_compound(root)) == root


def test_encoding_is_deterministic() -> None:
    """Encoding the same tree twice should yield identical bytes."""
    compound = _rich_compound()

    assert encode_compound(compound) == encode_compound(compound)


def test_heterogeneous_list_is_rejected() -> None:
    """A list with mixed element kinds should not encode."""
    mixed = TagList(TagKind.STRING, [string_tag("a")])
    mixed.append(int_tag(1))
    compound = Compound()
    compound.set_list("mixed", mixed)

    with pytest.raises(TagTypeMismatchError):
        encode_compound(compound)


def test_truncation_at_every_offset_is_corrupt() -> None:
    """Every strict prefix of a valid stream should be rejected."""
    data = encode_compound(_rich_compound())

    for cut in range(len(data)):
        with pytest.raises(TagCorruptDataError):
            decode_compound(data[:cut])


def test_root_must_be_compound() -> None:
    """A stream starting with another type id should be corrupt."""
    with pytest.raises(TagCorruptDataError) as error_info:
        decode_compound(b"\x03\x00\x00\x00\x00\x00\x01")

    assert error_info.value.offset == 0


def test_negative_array_length_is_corrupt() -> None:
    """A negative array count should be rejected with its offset."""
    data = b"\x0a\x00\x00" + b"\x0b\x00\x01a" + struct.pack(">i", -1) + b"\x00"

    with pytest.raises(TagCorruptDataError) as error_info:
        decode_compound(data)

    assert error_info.value.offset == 7


def test_list_of_end_with_elements_is_corrupt() -> None:
    """A list without element kind cannot declare elements."""
    data = b"\x0a\x00\x00" + b"\x09\x00\x01a\x00" + struct.pack(">i", 2) + b"\x00"

    with pytest.raises(TagCorruptDataError):
        decode_compound(data)


def test_trailing_bytes_are_corrupt() -> None:
    """Bytes after the root terminator should be rejected."""
    with pytest.raises(TagCorruptDataError):
        decode_compound(EXAMPLE_BYTES + b"\x00")


def test_invalid_utf8_name_is_corrupt() -> None:
    """Names must be valid UTF-8."""
    data = b"\x0a\x00\x00" + b"\x01\x00\x01\xff\x05" + b"\x00"

    with pytest.raises(TagCorruptDataError):
        decode_compound(data)


def test_unknown_type_id_is_unsupported() -> None:
    """An unregistered type id should fail explicitly."""
    data = b"\x0a\x00\x00" + b"\x63\x00\x01a\x01\x02" + b"\x00"

    with pytest.raises(TagUnsupportedError) as error_info:
        decode_compound(data)

    assert error_info.value.type_id == 0x63 and error_info.value.offset == 3


def test_reserved_shape_round_trips_byte_identical() -> None:
    """A registered reserved id should decode raw and re-encode unchanged."""
    codec = TagCodec(reserved_shapes={0x63: 2})
    data = b"\x0a\x00\x00" + b"\x63\x00\x01a\x01\x02" + b"\x03\x00\x01b\x00\x00\x00\x09" + b"\x00"

    decoded = codec.decode(data)

    assert decoded.get("a") == raw_tag(0x63, b"\x01\x02")
    assert codec.encode(decoded) == data


def test_reserved_shape_cannot_shadow_known_kind() -> None:
    """Known type ids cannot be registered as reserved shapes."""
    with pytest.raises(TagTreeConfigError):
        TagCodec(reserved_shapes={TagKind.INT: 4})


def test_decode_beyond_max_depth_is_corrupt() -> None:
    """Nesting deeper than the limit should be rejected while decoding."""
    root = Compound()
    root.get_or_create_compound("a").get_or_create_compound("b")
    data = encode_compound(root)

    with pytest.raises(TagCorruptDataError):
        TagCodec(max_depth=2).decode(data)


def test_root_name_is_exposed() -> None:
    """decode_named should return the root tag name."""
    codec = TagCodec()

    name, root = codec.decode_named(codec.encode(_example_compound(), name="player"))

    assert name == "player" and root == _example_compound()


def test_gzip_codec_round_trips() -> None:
    """Gzip compression should wrap the tree bytes transparently."""
    codec = TagCodec(compression="gzip")

    data = codec.encode(_example_compound())

    assert data[:2] == b"\x1f\x8b" and codec.decode(data) == _example_compound()


def test_gzip_codec_rejects_plain_bytes() -> None:
    """Uncompressed input read with gzip configured should be corrupt."""
    with pytest.raises(TagCorruptDataError):
        TagCodec(compression="gzip").decode(EXAMPLE_BYTES)


def test_unregistered_raw_tag_is_rejected_on_encode() -> None:
    """A raw tag without a registered shape should not produce undecodable bytes."""
    compound = Compound()
    compound.set("r", raw_tag(0x63, b"\x01\x02"))

    with pytest.raises(TagTypeMismatchError):
        encode_compound(compound)


def test_raw_tag_with_wrong_width_is_rejected_on_encode() -> None:
    """A raw payload must match the registered width exactly."""
    codec = TagCodec(reserved_shapes={0x63: 2})
    compound = Compound()
    compound.set("r", raw_tag(0x63, b"\x01\x02\x03"))

    with pytest.raises(TagTypeMismatchError):
        codec.encode(compound)


def test_nan_payloads_round_trip_equal() -> None:
    """NaN floats and doubles should compare equal after a round trip."""
    compound = Compound()
    compound.set("f", float_tag(math.nan))
    compound.set("d", double_tag(math.nan))

    assert decode_compound(encode_compound(compound)) == compound


def test_max_depth_above_supported_ceiling_is_config_error() -> None:
    """Depth limits the recursive reader cannot honor should be refused."""
    with pytest.raises(TagTreeConfigError):
        TagCodec(max_depth=MAX_SUPPORTED_DEPTH + 1)


def test_very_deep_stream_is_corrupt() -> None:
    """A stream nested far beyond the limit should fail as corrupt data."""
    levels = 3000
    data = b"\x0a\x00\x00" + b"\x0a\x00\x01n" * levels + b"\x00" * (levels + 1)

    with pytest.raises(TagCorruptDataError):
        TagCodec(max_depth=MAX_SUPPORTED_DEPTH).decode(data)
