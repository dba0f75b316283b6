"""Unit tests for the bounds-checked byte reader."""

from __future__ import annotations

import struct

import pytest

from codec.byte_reader import ByteReader
from core.errors import TagCorruptDataError


def test_reads_big_endian_values_in_order() -> None:
    """Values should decode big-endian and advance the offset."""
    reader = ByteReader(b"\x01\x00\x02" + struct.pack(">i", -3))

    assert reader.read_byte("a") == 1
    assert reader.read_short("b") == 2
    assert reader.read_int("c") == -3
    assert reader.remaining == 0 and reader.offset == 7


def test_short_read_reports_offset() -> None:
    """Reading past the end should report where the read started."""
    reader = ByteReader(b"\x00\x01\x02")
    reader.read_byte("first")

    with pytest.raises(TagCorruptDataError) as error_info:
        reader.read_int("value")

    assert error_info.value.offset == 1


def test_negative_count_is_corrupt() -> None:
    """Counts below zero should be rejected."""
    with pytest.raises(TagCorruptDataError):
        ByteReader(struct.pack(">i", -5)).read_count("length")


def test_oversized_string_length_is_corrupt() -> None:
    """A string length beyond the buffer should be rejected."""
    with pytest.raises(TagCorruptDataError):
        ByteReader(b"\x00\x05ab").read_string("name")


def test_read_array_returns_signed_values() -> None:
    """Arrays should decode with their declared element width."""
    reader = ByteReader(struct.pack(">i", 2) + b"\x7f\x80")

    assert reader.read_array("b", 1, "bytes") == (127, -128)
