"""File-backed root compound.

This module binds one root compound to one storage location. Callers
mutate the root in memory and persist it explicitly with ``save()``;
there is no write-through.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
import os
from types import TracebackType
from typing import Iterator

from codec.binary_codec import TagCodec
from core.config import TagTreeConfig
from core.errors import TagStorageError
from core.logging_config import get_logger
from store.rw_lock import ReadWriteLock
from store.storage_backend import StorageBackend, resolve_backend
from tags.compound import Compound

_LOGGER = get_logger(__name__)


class PersistentCompound(AbstractContextManager["PersistentCompound"]):
    """Root compound owned together with its storage location.

    The reader-writer lock is per instance and is taken exclusively only by
    ``save()`` and ``reload()``. Plain traversal and mutation of ``root`` are
    not synchronized; callers that must not overlap a save or reload can
    wrap traversal in ``read_locked()``.
    """

    def __init__(
        self,
        root: Compound,
        storage: StorageBackend | None,
        config: TagTreeConfig,
    ) -> None:
        """Wrap an existing root; prefer ``open`` or ``detached``.

        Args:
            root: Root compound; ownership moves to this instance.
            storage: Backing location, or None for an in-memory tree.
            config: Runtime configuration.

        Raises:
            TagOwnershipError: If ``root`` already belongs to a parent or
                another persistent compound.
        """
        root.claim(self)
        self._root = root
        self._storage = storage
        self._config = config
        self._codec = TagCodec.from_config(config)
        self._lock = ReadWriteLock()
        self._loaded = False

    @classmethod
    def open(
        cls,
        location: StorageBackend | str | os.PathLike[str],
        config: TagTreeConfig | None = None,
    ) -> "PersistentCompound":
        """Open a location, loading it or creating it when missing.

        Args:
            location: File path or storage backend.
            config: Optional configuration; read from environment when omitted.

        Returns:
            Persistent compound whose location exists afterwards.

        Raises:
            TagCorruptDataError: If existing content does not decode.
            TagUnsupportedError: If existing content uses an unknown type id.
            TagStorageError: If the location cannot be read or created.
        """
        resolved_config = config or TagTreeConfig.from_env()
        storage = resolve_backend(location, fsync=resolved_config.fsync)
        if not storage.exists():
            instance = cls(Compound(), storage, resolved_config)
            instance.save()
            _LOGGER.info("tag_tree_created", location=storage.describe())
            return instance
        root = _load_root(storage, TagCodec.from_config(resolved_config))
        instance = cls(root, storage, resolved_config)
        instance._loaded = True
        _LOGGER.info(
            "tag_tree_loaded",
            location=storage.describe(),
            key_count=len(instance._root),
        )
        return instance

    @classmethod
    def detached(
        cls,
        root: Compound | None = None,
        config: TagTreeConfig | None = None,
    ) -> "PersistentCompound":
        """Wrap an in-memory root that has no storage location."""
        resolved_config = config or TagTreeConfig.from_env()
        return cls(root if root is not None else Compound(), None, resolved_config)

    @property
    def root(self) -> Compound:
        return self._root

    def get_root(self) -> Compound:
        return self._root

    @property
    def location(self) -> StorageBackend | None:
        return self._storage

    @property
    def is_loaded(self) -> bool:
        """Return whether the root mirrors the location as of the last load or save."""
        return self._loaded

    def save(self) -> None:
        """Encode the root and atomically replace the stored content.

        Without a location this is a no-op or raises TagStorageError,
        depending on ``detached_save_policy``.

        Raises:
            TagTypeMismatchError: If the tree violates the wire format.
            TagStorageError: If the backend replace fails; prior content is kept.
        """
        if self._storage is None:
            if self._config.detached_save_policy == "error":
                raise TagStorageError(
                    "Cannot save a detached tag tree: no storage location is attached. "
                    "Open a location with PersistentCompound.open() instead."
                )
            _LOGGER.debug("tag_tree_save_skipped", reason="detached")
            return
        with self._lock.write_locked():
            data = self._codec.encode(self._root)
            try:
                self._storage.replace_bytes(data)
            except TagStorageError as error:
                _LOGGER.error(
                    "tag_tree_save_failed",
                    location=self._storage.describe(),
                    error=str(error),
                )
                raise
            self._loaded = True
        _LOGGER.info(
            "tag_tree_saved",
            location=self._storage.describe(),
            byte_count=len(data),
        )

    def reload(self) -> None:
        """Replace the in-memory root with the stored content.

        Unsaved in-memory changes are discarded and cannot be recovered.
        References to the previous root stay valid but are detached from
        this instance.

        Raises:
            TagStorageError: If there is no location or it no longer exists.
            TagCorruptDataError: If the stored content does not decode; the
                current root is kept in that case.
        """
        if self._storage is None:
            raise TagStorageError("Cannot reload a detached tag tree: no storage location.")
        with self._lock.write_locked():
            if not self._storage.exists():
                raise TagStorageError(
                    f"Cannot reload {self._storage.describe()}: the location no longer exists."
                )
            new_root = _load_root(self._storage, self._codec)
            self._root.release(self)
            new_root.claim(self)
            self._root = new_root
            self._loaded = True
        _LOGGER.info(
            "tag_tree_reloaded",
            location=self._storage.describe(),
            key_count=len(new_root),
        )

    def read_locked(self) -> AbstractContextManager[None]:
        """Return a context that holds the shared lock, excluding save and reload."""
        return self._lock.read_locked()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(self._root)

    def __repr__(self) -> str:
        location = self._storage.describe() if self._storage else "detached"
        return f"PersistentCompound({location}, keys={len(self._root)})"


def _load_root(storage: StorageBackend, codec: TagCodec) -> Compound:
    """Read and fully decode a stored tree; errors propagate unchanged."""
    return codec.decode(storage.read_bytes())
