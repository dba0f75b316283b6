"""Ownership bookkeeping shared by lists and compounds.

A container belongs to at most one parent at a time, which keeps every
tag tree acyclic without a traversal on insert.
"""

from __future__ import annotations

from core.errors import TagOwnershipError
from tags.tag_kind import TagKind


class TagContainer:
    """Base for tag kinds that own nested tags."""

    container_kind: TagKind = TagKind.END

    def __init__(self) -> None:
        self._owner: object | None = None

    @property
    def is_owned(self) -> bool:
        """Return whether another list, compound, or store owns this container."""
        return self._owner is not None

    def claim(self, owner: object) -> None:
        """Mark this container as owned by ``owner``.

        Args:
            owner: New parent object.

        Raises:
            TagOwnershipError: If a different owner already holds it.
        """
        if self._owner is owner:
            return
        if self._owner is not None:
            raise TagOwnershipError(
                f"Cannot insert {self.container_kind.label}: it already belongs to "
                "another parent. Insert value.copy() to duplicate it."
            )
        if self._is_ancestor_of(owner):
            raise TagOwnershipError(
                f"Cannot insert {self.container_kind.label} into itself or one of its "
                "descendants."
            )
        self._owner = owner

    def is_owned_by(self, owner: object) -> bool:
        """Return whether ``owner`` currently holds this container."""
        return self._owner is owner

    def release(self, owner: object) -> None:
        """Drop ownership when ``owner`` removes this container."""
        if self._owner is owner:
            self._owner = None

    def _is_ancestor_of(self, candidate: object) -> bool:
        node: object | None = candidate
        while isinstance(node, TagContainer):
            if node is self:
                return True
            node = node._owner
        return False
