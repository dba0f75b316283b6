"""Bounds-checked big-endian reader over an in-memory byte stream.

Every read verifies the declared width against the remaining bytes first,
so truncation surfaces as TagCorruptDataError with the failing offset.
"""

from __future__ import annotations

import struct

from core.errors import TagCorruptDataError

_BYTE = struct.Struct(">b")
_UNSIGNED_BYTE = struct.Struct(">B")
_SHORT = struct.Struct(">h")
_UNSIGNED_SHORT = struct.Struct(">H")
_INT = struct.Struct(">i")
_LONG = struct.Struct(">q")
_FLOAT = struct.Struct(">f")
_DOUBLE = struct.Struct(">d")


class ByteReader:
    """Sequential reader that tracks its byte offset."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read_exact(self, size: int, what: str) -> bytes:
        """Read exactly ``size`` bytes.

        Args:
            size: Number of bytes declared by the stream.
            what: Description of the field, used in error messages.

        Returns:
            The bytes read.

        Raises:
            TagCorruptDataError: If fewer than ``size`` bytes remain.
        """
        if size > self.remaining:
            raise TagCorruptDataError(
                f"Truncated {what}: {size} bytes declared, {self.remaining} remain",
                self._offset,
            )
        start = self._offset
        self._offset += size
        return self._data[start : self._offset].tobytes()

    def read_unsigned_byte(self, what: str) -> int:
        return _UNSIGNED_BYTE.unpack(self.read_exact(1, what))[0]

    def read_byte(self, what: str) -> int:
        return _BYTE.unpack(self.read_exact(1, what))[0]

    def read_short(self, what: str) -> int:
        return _SHORT.unpack(self.read_exact(2, what))[0]

    def read_int(self, what: str) -> int:
        return _INT.unpack(self.read_exact(4, what))[0]

    def read_long(self, what: str) -> int:
        return _LONG.unpack(self.read_exact(8, what))[0]

    def read_float(self, what: str) -> float:
        return _FLOAT.unpack(self.read_exact(4, what))[0]

    def read_double(self, what: str) -> float:
        return _DOUBLE.unpack(self.read_exact(8, what))[0]

    def read_count(self, what: str) -> int:
        """Read a 4-byte signed element count, rejecting negative values."""
        start = self._offset
        count = self.read_int(what)
        if count < 0:
            raise TagCorruptDataError(f"Negative {what} {count}", start)
        return count

    def read_string(self, what: str) -> str:
        """Read a 2-byte length-prefixed UTF-8 string."""
        length = _UNSIGNED_SHORT.unpack(self.read_exact(2, f"{what} length"))[0]
        start = self._offset
        raw = self.read_exact(length, what)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise TagCorruptDataError(
                f"Invalid UTF-8 in {what}: {error.reason}", start + error.start
            ) from error

    def read_array(self, element_format: str, width: int, what: str) -> tuple[int, ...]:
        """Read a count-prefixed array of fixed-width big-endian integers."""
        count = self.read_count(f"{what} length")
        raw = self.read_exact(count * width, what)
        return struct.unpack(f">{count}{element_format}", raw)
