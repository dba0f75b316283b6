"""One-shot tag file helpers.

These read or write a whole file without keeping a PersistentCompound
around, for callers that only need a snapshot.
"""

from __future__ import annotations

import os

from codec.binary_codec import TagCodec
from core.config import TagTreeConfig
from core.logging_config import get_logger
from store.storage_backend import FileStorage
from tags.compound import Compound

_LOGGER = get_logger(__name__)


def read_tag_file(
    path: str | os.PathLike[str],
    config: TagTreeConfig | None = None,
) -> Compound:
    """Read a tag file into a new compound.

    Args:
        path: File to read.
        config: Optional configuration; read from environment when omitted.

    Returns:
        Decoded root compound, or an empty compound when the file is missing.

    Raises:
        TagCorruptDataError: If the file does not decode.
        TagStorageError: If the file exists but cannot be read.
    """
    resolved_config = config or TagTreeConfig.from_env()
    storage = FileStorage(path, fsync=resolved_config.fsync)
    if not storage.exists():
        return Compound()
    return TagCodec.from_config(resolved_config).decode(storage.read_bytes())


def write_tag_file(
    path: str | os.PathLike[str],
    compound: Compound,
    config: TagTreeConfig | None = None,
) -> None:
    """Write a compound to a tag file, fully replacing existing content.

    Parent directories are created as needed.

    Raises:
        TagTypeMismatchError: If the tree violates the wire format.
        TagStorageError: If the file cannot be replaced.
    """
    resolved_config = config or TagTreeConfig.from_env()
    storage = FileStorage(path, fsync=resolved_config.fsync)
    data = TagCodec.from_config(resolved_config).encode(compound)
    storage.replace_bytes(data)
    _LOGGER.info("tag_file_written", location=storage.describe(), byte_count=len(data))
