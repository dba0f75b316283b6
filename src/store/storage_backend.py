"""Storage backends for encoded tag trees.

A backend reads whole contents and replaces them all at once; readers
never observe a partially written payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import os
from pathlib import Path
import tempfile

from core.constants import TEMP_FILE_SUFFIX
from core.errors import TagStorageError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class StorageBackend(ABC):
    """Whole-content byte storage with atomic replace."""

    @abstractmethod
    def exists(self) -> bool:
        """Return whether the location currently holds content."""

    @abstractmethod
    def read_bytes(self) -> bytes:
        """Return the full stored content.

        Raises:
            TagStorageError: If the content cannot be read.
        """

    @abstractmethod
    def replace_bytes(self, data: bytes) -> None:
        """Replace the stored content with ``data`` in one step.

        Raises:
            TagStorageError: If the replace fails; prior content is kept.
        """

    @abstractmethod
    def describe(self) -> str:
        """Return a short label for logs and error messages."""


class FileStorage(StorageBackend):
    """Filesystem backend using a temporary side file and ``os.replace``."""

    def __init__(self, path: str | os.PathLike[str], fsync: bool = True) -> None:
        self._path = Path(path).expanduser()
        self._fsync = fsync

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read_bytes(self) -> bytes:
        try:
            return self._path.read_bytes()
        except OSError as error:
            raise TagStorageError(
                f"Failed to read tag file at {self._path}: {error.strerror or error}."
            ) from error

    def replace_bytes(self, data: bytes) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=TEMP_FILE_SUFFIX,
                dir=self._path.parent,
            )
        except OSError as error:
            raise TagStorageError(
                f"Failed to prepare a temporary file next to {self._path}: "
                f"{error.strerror or error}. Check directory permissions."
            ) from error
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                if self._fsync:
                    os.fsync(handle.fileno())
            os.replace(temp_name, self._path)
        except OSError as error:
            raise TagStorageError(
                f"Failed to replace tag file at {self._path}: {error.strerror or error}. "
                "The previous content was left untouched."
            ) from error
        finally:
            if os.path.exists(temp_name):
                _remove_temp_file(temp_name)

    def describe(self) -> str:
        return str(self._path)


class MemoryStorage(StorageBackend):
    """In-memory backend; replacing swaps one immutable bytes object."""

    def __init__(self, initial: bytes | None = None) -> None:
        self._data = bytes(initial) if initial is not None else None

    @property
    def data(self) -> bytes | None:
        return self._data

    def exists(self) -> bool:
        return self._data is not None

    def read_bytes(self) -> bytes:
        if self._data is None:
            raise TagStorageError("Memory storage is empty; save before reading.")
        return self._data

    def replace_bytes(self, data: bytes) -> None:
        self._data = bytes(data)

    def describe(self) -> str:
        return f"memory:{id(self):x}"


def resolve_backend(
    location: StorageBackend | str | os.PathLike[str],
    fsync: bool = True,
) -> StorageBackend:
    """Return ``location`` as a backend, wrapping paths in FileStorage."""
    if isinstance(location, StorageBackend):
        return location
    return FileStorage(location, fsync=fsync)


def _remove_temp_file(temp_name: str) -> None:
    try:
        os.remove(temp_name)
    except OSError as error:
        _LOGGER.warning("temp_file_cleanup_failed", path=temp_name, error=str(error))
