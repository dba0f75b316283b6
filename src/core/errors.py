"""TagTree exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TagTreeError(Exception):
    """Base exception for all TagTree failures."""


class TagTreeConfigError(TagTreeError):
    """Raised for invalid runtime configuration."""


class TagTypeMismatchError(TagTreeError, TypeError):
    """Raised when a tag payload or accessor does not match the node kind."""


class TagCorruptDataError(TagTreeError):
    """Raised when a byte stream is not a well-formed tag tree.

    Attributes:
        offset: Byte offset where parsing failed.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at byte offset {offset})")
        self.offset = offset


class TagUnsupportedError(TagTreeError):
    """Raised for a type id whose payload shape is not known to the codec.

    Attributes:
        type_id: Wire type id that could not be interpreted.
        offset: Byte offset of the type id.
    """

    def __init__(self, type_id: int, offset: int) -> None:
        super().__init__(
            f"Unsupported tag type id {type_id} at byte offset {offset}. "
            "Register its payload width as a reserved shape to carry it through."
        )
        self.type_id = type_id
        self.offset = offset


class TagStorageError(TagTreeError):
    """Raised when a storage backend cannot be read or replaced."""


class TagOwnershipError(TagTreeError):
    """Raised when a container is inserted while owned by another parent."""


class TagAdapterError(TagTreeError):
    """Raised when a live-object adapter fails or breaks its contract."""
