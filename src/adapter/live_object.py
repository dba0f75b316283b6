"""Contract between the tag core and live-object adapters.

Adapters decide how a host object's state maps onto a compound, including
any host-version specific lookup. The core only validates what crosses
the boundary and never inspects the object itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from core.errors import TagAdapterError, TagTreeError
from store.persistent_compound import PersistentCompound
from tags.compound import Compound


class LiveObjectAdapter(ABC):
    """Projects host objects onto tag trees and back."""

    @abstractmethod
    def to_tag_tree(self, obj: Any) -> Compound:
        """Return a new compound describing ``obj``."""

    @abstractmethod
    def from_tag_tree(self, obj: Any, compound: Compound) -> None:
        """Apply ``compound`` onto ``obj``."""


def snapshot_object(adapter: LiveObjectAdapter, obj: Any) -> Compound:
    """Capture an object's state through its adapter.

    Args:
        adapter: Adapter for the object's host type.
        obj: Live host object.

    Returns:
        Unowned compound produced by the adapter.

    Raises:
        TagAdapterError: If the adapter fails or returns something other
            than an unowned Compound.
    """
    try:
        compound = adapter.to_tag_tree(obj)
    except TagTreeError:
        raise
    except Exception as error:
        raise TagAdapterError(
            f"{type(adapter).__name__}.to_tag_tree failed for {type(obj).__name__}: {error}"
        ) from error
    if not isinstance(compound, Compound):
        raise TagAdapterError(
            f"{type(adapter).__name__}.to_tag_tree returned {type(compound).__name__}, "
            "expected a Compound."
        )
    if compound.is_owned:
        raise TagAdapterError(
            f"{type(adapter).__name__}.to_tag_tree returned a compound that already "
            "belongs to another tree. Return a fresh compound or a copy."
        )
    return compound


def restore_object(adapter: LiveObjectAdapter, obj: Any, compound: Compound) -> None:
    """Apply a compound onto an object through its adapter.

    The adapter receives a deep copy, so it can never alias or mutate a
    tree owned by a persistent compound.

    Raises:
        TagAdapterError: If the adapter fails.
    """
    try:
        adapter.from_tag_tree(obj, compound.copy())
    except TagTreeError:
        raise
    except Exception as error:
        raise TagAdapterError(
            f"{type(adapter).__name__}.from_tag_tree failed for {type(obj).__name__}: {error}"
        ) from error


def capture_into(
    persistent: PersistentCompound,
    adapter: LiveObjectAdapter,
    obj: Any,
    key: str,
) -> Compound:
    """Store an object's snapshot under ``key`` of a persistent root.

    Nothing is saved; call ``persistent.save()`` to persist.

    Returns:
        The stored compound, now owned by the persistent root.
    """
    compound = snapshot_object(adapter, obj)
    persistent.root.set_compound(key, compound)
    return compound


def restore_from(
    persistent: PersistentCompound,
    adapter: LiveObjectAdapter,
    obj: Any,
    key: str,
) -> bool:
    """Apply the compound stored under ``key`` onto ``obj``.

    Returns:
        False when the key is absent, True after applying it.
    """
    compound = persistent.root.get_compound(key, None)
    if compound is None:
        return False
    restore_object(adapter, obj, compound)
    return True
