"""Unit tests for compound tags."""

from __future__ import annotations

import pytest

from core.errors import TagOwnershipError, TagTypeMismatchError
from tags.compound import Compound
from tags.tag_kind import TagKind
from tags.tag_list import TagList
from tags.tag_value import int_tag, string_tag


def test_set_same_key_keeps_single_entry() -> None:
    """The later write should replace the earlier one under a key."""
    compound = Compound()
    compound.set_int("level", 1)
    compound.set_int("level", 7)

    assert len(compound) == 1 and compound.get_int("level") == 7


def test_replacing_key_keeps_insertion_position() -> None:
    """Overwriting a key should not move it to the end."""
    compound = Compound()
    compound.set_int("a", 1)
    compound.set_int("b", 2)
    compound.set_string("a", "x")

    assert compound.keys() == ["a", "b"]


def test_typed_getter_raises_for_other_kind() -> None:
    """Reading an int key as a string should be a type mismatch."""
    compound = Compound()
    compound.set_int("level", 7)

    with pytest.raises(TagTypeMismatchError):
        compound.get_string("level")


def test_typed_getter_missing_key() -> None:
    """Missing keys should raise KeyError unless a default is given."""
    compound = Compound()

    with pytest.raises(KeyError):
        compound.get_int("missing")

    assert compound.get_int("missing", 5) == 5


def test_boolean_is_stored_as_byte() -> None:
    """Booleans should round through byte tags."""
    compound = Compound()
    compound.set_boolean("alive", True)

    assert compound.get_kind("alive") is TagKind.BYTE and compound.get_boolean("alive")


def test_compound_cannot_have_two_parents() -> None:
    """A nested compound should not be insertable under a second parent."""
    child = Compound()
    first = Compound()
    second = Compound()
    first.set_compound("child", child)

    with pytest.raises(TagOwnershipError):
        second.set_compound("child", child)


def test_compound_cannot_contain_itself() -> None:
    """Inserting an ancestor into its descendant should fail."""
    parent = Compound()
    child = parent.get_or_create_compound("child")

    with pytest.raises(TagOwnershipError):
        child.set_compound("loop", parent)


def test_removed_child_can_be_reinserted_elsewhere() -> None:
    """Removing a child should release it for another parent."""
    child = Compound()
    first = Compound()
    second = Compound()
    first.set_compound("child", child)

    first.remove("child")
    second.set_compound("child", child)

    assert second.get_compound("child") is child


def test_copy_is_deep_and_unowned() -> None:
    """A copy should be equal but share no containers with the source."""
    source = Compound()
    source.get_or_create_compound("stats").set_int("hp", 10)
    source.get_or_create_list("names").append(string_tag("a"))

    duplicate = source.copy()
    duplicate.get_compound("stats").set_int("hp", 0)

    assert source.get_compound("stats").get_int("hp") == 10
    assert not duplicate.is_owned
    assert duplicate.get_list("names") == source.get_list("names")


def test_merge_combines_nested_compounds() -> None:
    """Merging should recurse into compounds present on both sides."""
    target = Compound()
    target.get_or_create_compound("stats").set_int("hp", 10)
    other = Compound()
    other.get_or_create_compound("stats").set_int("mana", 3)
    other.set_string("name", "hero")

    target.merge(other)

    stats = target.get_compound("stats")
    assert stats.get_int("hp") == 10 and stats.get_int("mana") == 3
    assert target.get_string("name") == "hero"


def test_get_or_create_list_checks_element_kind() -> None:
    """An existing list of another kind should not be returned."""
    compound = Compound()
    compound.set_list("scores", TagList(TagKind.INT, [int_tag(1)]))

    with pytest.raises(TagTypeMismatchError):
        compound.get_or_create_list("scores", TagKind.STRING)


def test_equality_is_structural() -> None:
    """Compounds with equal entries should compare equal."""
    left = Compound({"a": int_tag(1)})
    right = Compound([("a", int_tag(1))])

    assert left == right


def test_non_string_key_is_rejected() -> None:
    """Keys must be strings."""
    with pytest.raises(TagTypeMismatchError):
        Compound().set(1, int_tag(1))  # type: ignore[arg-type]
