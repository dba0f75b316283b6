"""Ordered list of unnamed tags sharing one element kind.

The element kind is recorded once for the whole list. An empty list
without a declared kind carries the END sentinel; the first appended
element fixes the kind when none was declared.
"""

from __future__ import annotations

from typing import Iterable, Iterator, overload

from core.errors import TagOwnershipError, TagTypeMismatchError
from tags.container import TagContainer
from tags.tag_kind import TagKind
from tags.tag_value import Tag


class TagList(TagContainer):
    """Mutable list tag.

    Mixed element kinds are a wire-format violation. The list itself stays
    permissive and reports it through ``is_homogeneous``; the encoder rejects
    such a list before producing any bytes.
    """

    container_kind = TagKind.LIST

    def __init__(
        self,
        element_kind: TagKind = TagKind.END,
        items: Iterable[Tag] = (),
    ) -> None:
        super().__init__()
        self._element_kind = TagKind(element_kind)
        if self._element_kind is TagKind.RAW:
            raise TagTypeMismatchError("Raw tags cannot be list elements.")
        self._items: list[Tag] = []
        for item in items:
            self.append(item)

    @property
    def element_kind(self) -> TagKind:
        """Recorded element kind; END while no kind has been chosen."""
        return self._element_kind

    def append(self, tag: Tag) -> None:
        """Append a tag, taking ownership of its container payload.

        Args:
            tag: Element to append.

        Raises:
            TagTypeMismatchError: If ``tag`` is not a Tag.
            TagOwnershipError: If its container already has a parent.
        """
        self._adopt(tag)
        if self._element_kind is TagKind.END and not self._items:
            self._element_kind = tag.kind
        self._items.append(tag)

    def extend(self, tags: Iterable[Tag]) -> None:
        for tag in tags:
            self.append(tag)

    def insert(self, index: int, tag: Tag) -> None:
        self._adopt(tag)
        if self._element_kind is TagKind.END and not self._items:
            self._element_kind = tag.kind
        self._items.insert(index, tag)

    def pop(self, index: int = -1) -> Tag:
        """Remove and return the element at ``index``, releasing its container."""
        tag = self._items.pop(index)
        _release(tag, self)
        return tag

    def clear(self) -> None:
        """Remove all elements; the recorded element kind is kept."""
        for tag in self._items:
            _release(tag, self)
        self._items.clear()

    def is_homogeneous(self) -> bool:
        """Return whether every element matches the recorded element kind."""
        return all(tag.kind is self._element_kind for tag in self._items)

    def values(self) -> list[object]:
        """Return element payloads in order."""
        return [tag.value for tag in self._items]

    def copy(self) -> "TagList":
        """Return a deep copy with no owner."""
        return TagList(self._element_kind, (tag.copy() for tag in self._items))

    @overload
    def __getitem__(self, index: int) -> Tag: ...

    @overload
    def __getitem__(self, index: slice) -> list[Tag]: ...

    def __getitem__(self, index: int | slice) -> Tag | list[Tag]:
        return self._items[index]

    def __setitem__(self, index: int, tag: Tag) -> None:
        if isinstance(index, slice):
            raise TypeError("TagList does not support slice assignment.")
        previous = self._items[index]
        if previous.value is not tag.value:
            self._adopt(tag)
            _release(previous, self)
        self._items[index] = tag

    def __delitem__(self, index: int) -> None:
        if isinstance(index, slice):
            raise TypeError("TagList does not support slice deletion.")
        self.pop(index)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagList):
            return NotImplemented
        return self._element_kind is other._element_kind and self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TagList({self._element_kind.name}, {self._items!r})"

    def _adopt(self, tag: Tag) -> None:
        if not isinstance(tag, Tag):
            raise TagTypeMismatchError(
                f"List elements must be Tag instances, got {type(tag).__name__}."
            )
        if tag.kind is TagKind.RAW:
            raise TagTypeMismatchError("Raw tags cannot be list elements.")
        if isinstance(tag.value, TagContainer):
            if tag.value.is_owned_by(self):
                raise TagOwnershipError(
                    f"This {tag.kind.label} is already an element of the list. "
                    "Append value.copy() to duplicate it."
                )
            tag.value.claim(self)


def _release(tag: Tag, owner: object) -> None:
    if isinstance(tag.value, TagContainer):
        tag.value.release(owner)
