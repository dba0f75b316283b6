"""Compound tag: string keys mapped to tags.

Keys are unique and iterate in insertion order. Setting an existing key
replaces its value in place, so the key keeps its original position.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from core.errors import TagOwnershipError, TagTypeMismatchError
from tags.container import TagContainer
from tags.tag_kind import TagKind
from tags.tag_list import TagList
from tags.tag_value import Tag, check_name

_MISSING: Any = object()


class Compound(TagContainer):
    """Mutable compound tag with typed accessors.

    Typed getters raise ``KeyError`` for a missing key unless a default is
    given, and ``TagTypeMismatchError`` when the key holds another kind.
    """

    container_kind = TagKind.COMPOUND

    def __init__(
        self,
        entries: Mapping[str, Tag] | Iterable[tuple[str, Tag]] | None = None,
    ) -> None:
        super().__init__()
        self._entries: dict[str, Tag] = {}
        if entries is None:
            return
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        for key, tag in pairs:
            self.set(key, tag)

    def set(self, key: str, tag: Tag) -> None:
        """Store ``tag`` under ``key``; the last write wins.

        Args:
            key: Entry name.
            tag: Value; container payloads become owned by this compound.

        Raises:
            TagTypeMismatchError: If key or tag are of the wrong type.
            TagOwnershipError: If the container payload has another parent.
        """
        check_name(key)
        if not isinstance(tag, Tag):
            raise TagTypeMismatchError(
                f"Compound values must be Tag instances, got {type(tag).__name__}."
            )
        previous = self._entries.get(key)
        if previous is None or previous.value is not tag.value:
            if isinstance(tag.value, TagContainer):
                if tag.value.is_owned_by(self):
                    raise TagOwnershipError(
                        f"This {tag.kind.label} is already stored under another key. "
                        "Set value.copy() to duplicate it."
                    )
                tag.value.claim(self)
            if previous is not None:
                _release(previous, self)
        self._entries[key] = tag

    def get(self, key: str, default: Tag | None = None) -> Tag | None:
        return self._entries.get(key, default)

    def remove(self, key: str) -> Tag | None:
        """Remove ``key`` and return its tag, or None when absent."""
        tag = self._entries.pop(key, None)
        if tag is not None:
            _release(tag, self)
        return tag

    def has_key(self, key: str) -> bool:
        return key in self._entries

    def get_kind(self, key: str) -> TagKind | None:
        """Return the kind stored under ``key``, or None when absent."""
        tag = self._entries.get(key)
        return tag.kind if tag is not None else None

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, Tag]]:
        return list(self._entries.items())

    def values(self) -> list[Tag]:
        return list(self._entries.values())

    def clear(self) -> None:
        for tag in self._entries.values():
            _release(tag, self)
        self._entries.clear()

    def copy(self) -> "Compound":
        """Return a deep copy with no owner."""
        return Compound((key, tag.copy()) for key, tag in self._entries.items())

    def merge(self, other: "Compound") -> None:
        """Deep-copy ``other``'s entries into this compound.

        Nested compounds present on both sides are merged recursively;
        every other entry from ``other`` replaces the local one.
        """
        for key, tag in other.items():
            local = self._entries.get(key)
            if (
                local is not None
                and local.kind is TagKind.COMPOUND
                and tag.kind is TagKind.COMPOUND
            ):
                local.value.merge(tag.value)
            else:
                self.set(key, tag.copy())

    # Scalars

    def set_byte(self, key: str, value: int) -> None:
        self.set(key, Tag(TagKind.BYTE, value))

    def get_byte(self, key: str, default: Any = _MISSING) -> int:
        return self._get_typed(key, TagKind.BYTE, default)

    def set_short(self, key: str, value: int) -> None:
        self.set(key, Tag(TagKind.SHORT, value))

    def get_short(self, key: str, default: Any = _MISSING) -> int:
        return self._get_typed(key, TagKind.SHORT, default)

    def set_int(self, key: str, value: int) -> None:
        self.set(key, Tag(TagKind.INT, value))

    def get_int(self, key: str, default: Any = _MISSING) -> int:
        return self._get_typed(key, TagKind.INT, default)

    def set_long(self, key: str, value: int) -> None:
        self.set(key, Tag(TagKind.LONG, value))

    def get_long(self, key: str, default: Any = _MISSING) -> int:
        return self._get_typed(key, TagKind.LONG, default)

    def set_float(self, key: str, value: float) -> None:
        self.set(key, Tag(TagKind.FLOAT, value))

    def get_float(self, key: str, default: Any = _MISSING) -> float:
        return self._get_typed(key, TagKind.FLOAT, default)

    def set_double(self, key: str, value: float) -> None:
        self.set(key, Tag(TagKind.DOUBLE, value))

    def get_double(self, key: str, default: Any = _MISSING) -> float:
        return self._get_typed(key, TagKind.DOUBLE, default)

    def set_boolean(self, key: str, value: bool) -> None:
        """Store a boolean as a byte tag holding 1 or 0."""
        self.set(key, Tag(TagKind.BYTE, 1 if value else 0))

    def get_boolean(self, key: str, default: Any = _MISSING) -> bool:
        """Read a byte tag as a boolean; any non-zero byte is true."""
        if default is not _MISSING and key not in self._entries:
            return default
        return self._get_typed(key, TagKind.BYTE, _MISSING) != 0

    def set_string(self, key: str, value: str) -> None:
        self.set(key, Tag(TagKind.STRING, value))

    def get_string(self, key: str, default: Any = _MISSING) -> str:
        return self._get_typed(key, TagKind.STRING, default)

    # Arrays

    def set_byte_array(self, key: str, values: Iterable[int] | bytes) -> None:
        self.set(key, Tag(TagKind.BYTE_ARRAY, values))

    def get_byte_array(self, key: str, default: Any = _MISSING) -> tuple[int, ...]:
        return self._get_typed(key, TagKind.BYTE_ARRAY, default)

    def set_int_array(self, key: str, values: Iterable[int]) -> None:
        self.set(key, Tag(TagKind.INT_ARRAY, values))

    def get_int_array(self, key: str, default: Any = _MISSING) -> tuple[int, ...]:
        return self._get_typed(key, TagKind.INT_ARRAY, default)

    def set_long_array(self, key: str, values: Iterable[int]) -> None:
        self.set(key, Tag(TagKind.LONG_ARRAY, values))

    def get_long_array(self, key: str, default: Any = _MISSING) -> tuple[int, ...]:
        return self._get_typed(key, TagKind.LONG_ARRAY, default)

    # Containers

    def set_compound(self, key: str, compound: "Compound") -> None:
        self.set(key, Tag(TagKind.COMPOUND, compound))

    def get_compound(self, key: str, default: Any = _MISSING) -> "Compound":
        return self._get_typed(key, TagKind.COMPOUND, default)

    def set_list(self, key: str, tag_list: TagList) -> None:
        self.set(key, Tag(TagKind.LIST, tag_list))

    def get_list(self, key: str, default: Any = _MISSING) -> TagList:
        return self._get_typed(key, TagKind.LIST, default)

    def get_or_create_compound(self, key: str) -> "Compound":
        """Return the compound under ``key``, adding an empty one when absent."""
        if key not in self._entries:
            self.set_compound(key, Compound())
        return self.get_compound(key)

    def get_or_create_list(self, key: str, element_kind: TagKind = TagKind.END) -> TagList:
        """Return the list under ``key``, adding an empty one when absent.

        Raises:
            TagTypeMismatchError: If the existing list records another
                non-END element kind than ``element_kind``.
        """
        if key not in self._entries:
            self.set_list(key, TagList(element_kind))
        tag_list = self.get_list(key)
        if (
            element_kind is not TagKind.END
            and tag_list.element_kind not in (TagKind.END, element_kind)
        ):
            raise TagTypeMismatchError(
                f"List '{key}' holds {tag_list.element_kind.label} elements, "
                f"not {element_kind.label}."
            )
        return tag_list

    def _get_typed(self, key: str, kind: TagKind, default: Any) -> Any:
        tag = self._entries.get(key)
        if tag is None:
            if default is _MISSING:
                raise KeyError(key)
            return default
        if tag.kind is not kind:
            raise TagTypeMismatchError(
                f"Key '{key}' holds a {tag.kind.label} tag, not {kind.label}."
            )
        return tag.value

    def __getitem__(self, key: str) -> Tag:
        return self._entries[key]

    def __setitem__(self, key: str, tag: Tag) -> None:
        self.set(key, tag)

    def __delitem__(self, key: str) -> None:
        if self.remove(key) is None:
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Compound):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Compound({self._entries!r})"


def _release(tag: Tag, owner: object) -> None:
    if isinstance(tag.value, TagContainer):
        tag.value.release(owner)
