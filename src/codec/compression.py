"""Optional stream compression around encoded tag trees.

Compression is an explicit setting. Payloads are never sniffed for magic
bytes, so uncompressed data is never mistaken for a corrupt gzip stream.
"""

from __future__ import annotations

import gzip
import zlib

from core.constants import GZIP_COMPRESS_LEVEL, SUPPORTED_COMPRESSIONS
from core.errors import TagCorruptDataError, TagTreeConfigError


def compress(data: bytes, compression: str) -> bytes:
    """Apply configured compression to encoded tag bytes.

    Args:
        data: Encoded tag tree.
        compression: One of ``none`` or ``gzip``.

    Returns:
        Bytes ready for storage. Gzip output uses a zero mtime so equal
        trees still produce equal files.
    """
    _check_compression(compression)
    if compression == "gzip":
        return gzip.compress(data, compresslevel=GZIP_COMPRESS_LEVEL, mtime=0)
    return data


def decompress(data: bytes, compression: str) -> bytes:
    """Undo configured compression.

    Raises:
        TagCorruptDataError: If a gzip stream cannot be inflated.
    """
    _check_compression(compression)
    if compression != "gzip":
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as error:
        raise TagCorruptDataError(f"Invalid gzip stream: {error}", 0) from error


def _check_compression(compression: str) -> None:
    if compression not in SUPPORTED_COMPRESSIONS:
        raise TagTreeConfigError(
            f"Unsupported compression '{compression}'. "
            f"Use one of: {', '.join(SUPPORTED_COMPRESSIONS)}."
        )
