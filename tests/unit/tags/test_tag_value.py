"""Unit tests for tag payload validation."""

from __future__ import annotations

import math

import pytest

from core.errors import TagTypeMismatchError
from tags.compound import Compound
from tags.tag_kind import RawPayload, TagKind
from tags.tag_list import TagList
from tags.tag_value import (
    Tag,
    byte_array_tag,
    byte_tag,
    double_tag,
    float_tag,
    int_tag,
    long_array_tag,
    long_tag,
    raw_tag,
    short_tag,
    string_tag,
)


def test_byte_tag_rejects_value_above_range() -> None:
    """Byte payloads above 127 should be rejected, not wrapped."""
    with pytest.raises(TagTypeMismatchError):
        byte_tag(128)


def test_integer_tags_accept_their_bounds() -> None:
    """Each integer width should accept its signed minimum and maximum."""
    tags = [byte_tag(-128), short_tag(32767), int_tag(-(2**31)), long_tag(2**63 - 1)]

    assert [tag.value for tag in tags] == [-128, 32767, -(2**31), 2**63 - 1]


def test_int_tag_rejects_bool() -> None:
    """Booleans should not silently become integers."""
    with pytest.raises(TagTypeMismatchError):
        int_tag(True)


def test_float_tag_rounds_to_single_precision() -> None:
    """Float payloads should be stored at 32-bit precision."""
    tag = float_tag(0.1)

    assert tag.value != 0.1 and abs(tag.value - 0.1) < 1e-7


def test_float_tag_rejects_values_beyond_float32() -> None:
    """Finite values too large for a 32-bit float should be rejected."""
    with pytest.raises(TagTypeMismatchError):
        float_tag(1e39)


def test_double_tag_keeps_full_precision() -> None:
    """Double payloads should be stored unchanged."""
    assert double_tag(0.1).value == 0.1


def test_string_tag_rejects_oversized_utf8() -> None:
    """Strings longer than 65535 encoded bytes should be rejected."""
    with pytest.raises(TagTypeMismatchError):
        string_tag("é" * 40000)


def test_byte_array_from_bytes_is_signed() -> None:
    """Raw bytes should be reinterpreted as signed bytes."""
    tag = byte_array_tag(b"\x01\xff")

    assert tag.value == (1, -1)


def test_long_array_rejects_out_of_range_element() -> None:
    """Array elements should be range-checked individually."""
    with pytest.raises(TagTypeMismatchError):
        long_array_tag([1, 2**63])


def test_expect_raises_for_other_kind() -> None:
    """Typed access should fail when the node holds another variant."""
    with pytest.raises(TagTypeMismatchError):
        string_tag("x").expect(TagKind.INT)


def test_container_kind_must_match_payload() -> None:
    """A list tag should not accept a compound payload."""
    with pytest.raises(TagTypeMismatchError):
        Tag(TagKind.LIST, Compound())


def test_end_kind_cannot_hold_a_value() -> None:
    """The terminator exists only on the wire."""
    with pytest.raises(TagTypeMismatchError):
        Tag(TagKind.END, 0)


def test_raw_tag_rejects_known_type_id() -> None:
    """Raw payloads are only allowed for reserved ids."""
    with pytest.raises(TagTypeMismatchError):
        raw_tag(TagKind.INT, b"\x00\x00\x00\x01")


def test_raw_tag_keeps_payload() -> None:
    """Raw tags should keep type id and bytes."""
    tag = raw_tag(99, b"\x01\x02")

    assert tag.value == RawPayload(type_id=99, data=b"\x01\x02")


def test_copy_of_container_tag_is_deep() -> None:
    """Copying a compound tag should not share the compound."""
    inner = Compound()
    inner.set_int("a", 1)
    tag = Tag(TagKind.COMPOUND, inner)

    duplicate = tag.copy()
    duplicate.value.set_int("a", 2)

    assert inner.get_int("a") == 1 and duplicate.value.get_int("a") == 2


def test_list_tag_equality_requires_same_element_kind() -> None:
    """Empty lists with different declared kinds should differ."""
    assert Tag(TagKind.LIST, TagList(TagKind.INT)) != Tag(TagKind.LIST, TagList(TagKind.STRING))


def test_nan_tags_compare_equal() -> None:
    """Floating payloads compare by bit pattern, so NaN equals NaN."""
    assert float_tag(math.nan) == float_tag(math.nan)
    assert double_tag(math.nan) == double_tag(math.nan)


def test_signed_zeros_are_distinct() -> None:
    """Positive and negative zero have different bit patterns."""
    assert double_tag(0.0) != double_tag(-0.0)
    assert hash(float_tag(1.5)) == hash(float_tag(1.5))
