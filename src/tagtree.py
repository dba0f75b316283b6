"""Public SDK surface for TagTree.

This module provides a stable import path for library users.
It re-exports the tag model, codec, persistence, and adapter contract.
"""

from __future__ import annotations

from adapter.live_object import (
    LiveObjectAdapter,
    capture_into,
    restore_from,
    restore_object,
    snapshot_object,
)
from codec.binary_codec import TagCodec, decode_compound, encode_compound
from codec.snbt_render import render_snbt
from core.config import TagTreeConfig
from core.errors import (
    TagAdapterError,
    TagCorruptDataError,
    TagOwnershipError,
    TagStorageError,
    TagTreeConfigError,
    TagTreeError,
    TagTypeMismatchError,
    TagUnsupportedError,
)
from store.persistent_compound import PersistentCompound
from store.storage_backend import FileStorage, MemoryStorage, StorageBackend
from store.tag_file_io import read_tag_file, write_tag_file
from tags.compound import Compound
from tags.tag_kind import RawPayload, TagKind
from tags.tag_list import TagList
from tags.tag_value import (
    Tag,
    byte_array_tag,
    byte_tag,
    double_tag,
    float_tag,
    int_array_tag,
    int_tag,
    long_array_tag,
    long_tag,
    raw_tag,
    short_tag,
    string_tag,
)

__all__ = [
    "Compound",
    "FileStorage",
    "LiveObjectAdapter",
    "MemoryStorage",
    "PersistentCompound",
    "RawPayload",
    "StorageBackend",
    "Tag",
    "TagAdapterError",
    "TagCodec",
    "TagCorruptDataError",
    "TagKind",
    "TagList",
    "TagOwnershipError",
    "TagStorageError",
    "TagTreeConfig",
    "TagTreeConfigError",
    "TagTreeError",
    "TagTypeMismatchError",
    "TagUnsupportedError",
    "byte_array_tag",
    "byte_tag",
    "capture_into",
    "decode_compound",
    "double_tag",
    "encode_compound",
    "float_tag",
    "int_array_tag",
    "int_tag",
    "long_array_tag",
    "long_tag",
    "raw_tag",
    "read_tag_file",
    "render_snbt",
    "restore_from",
    "restore_object",
    "short_tag",
    "snapshot_object",
    "string_tag",
    "write_tag_file",
]
