"""Stringified tag notation for human inspection.

Output follows the familiar SNBT conventions: typed numeric suffixes,
``[B;..]``/``[I;..]``/``[L;..]`` arrays, and quoted keys only when needed.
"""

from __future__ import annotations

import json
import re

from core.constants import SNBT_INDENT
from tags.compound import Compound
from tags.tag_kind import TagKind
from tags.tag_list import TagList
from tags.tag_value import Tag

_BARE_KEY = re.compile(r"^[A-Za-z0-9._+-]+$")
_NUMBER_SUFFIXES = {
    TagKind.BYTE: "b",
    TagKind.SHORT: "s",
    TagKind.INT: "",
    TagKind.LONG: "L",
    TagKind.FLOAT: "f",
    TagKind.DOUBLE: "d",
}
_ARRAY_PREFIXES = {
    TagKind.BYTE_ARRAY: ("B", "b"),
    TagKind.INT_ARRAY: ("I", ""),
    TagKind.LONG_ARRAY: ("L", "L"),
}


def render_snbt(compound: Compound, pretty: bool = False) -> str:
    """Render a compound as SNBT text.

    Args:
        compound: Tree to render.
        pretty: Emit one entry per line with indentation.

    Returns:
        SNBT string.
    """
    return _render_compound(compound, 0 if pretty else None)


def _render_tag(tag: Tag, level: int | None) -> str:
    if tag.kind in _NUMBER_SUFFIXES:
        return f"{tag.value!r}{_NUMBER_SUFFIXES[tag.kind]}"
    if tag.kind is TagKind.STRING:
        return _quote(tag.value)
    if tag.kind in _ARRAY_PREFIXES:
        prefix, suffix = _ARRAY_PREFIXES[tag.kind]
        return f"[{prefix};" + ",".join(f"{item}{suffix}" for item in tag.value) + "]"
    if tag.kind is TagKind.LIST:
        return _render_list(tag.value, level)
    if tag.kind is TagKind.COMPOUND:
        return _render_compound(tag.value, level)
    return _quote(f"raw:{tag.value.type_id}:{tag.value.data.hex()}")


def _render_compound(compound: Compound, level: int | None) -> str:
    if not len(compound):
        return "{}"
    entries = [
        f"{_render_key(key)}:{_render_tag(tag, _deeper(level))}" for key, tag in compound.items()
    ]
    return _join("{", entries, "}", level)


def _render_list(tag_list: TagList, level: int | None) -> str:
    if not len(tag_list):
        return "[]"
    items = [_render_tag(tag, _deeper(level)) for tag in tag_list]
    return _join("[", items, "]", level)


def _join(opening: str, parts: list[str], closing: str, level: int | None) -> str:
    if level is None:
        return opening + ",".join(parts) + closing
    inner = SNBT_INDENT * (level + 1)
    outer = SNBT_INDENT * level
    return f"{opening}\n{inner}" + f",\n{inner}".join(parts) + f"\n{outer}{closing}"


def _deeper(level: int | None) -> int | None:
    return None if level is None else level + 1


def _render_key(key: str) -> str:
    return key if _BARE_KEY.match(key) else _quote(key)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)
