"""Runtime configuration model for TagTree.

This module owns all environment variable parsing and validation.
Codec and store modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Literal, Mapping, cast

from core.constants import (
    DEFAULT_COMPRESSION,
    DEFAULT_DETACHED_SAVE_POLICY,
    DEFAULT_MAX_DEPTH,
    MAX_SUPPORTED_DEPTH,
    SUPPORTED_COMPRESSIONS,
    SUPPORTED_DETACHED_SAVE_POLICIES,
)
from core.errors import TagTreeConfigError

CompressionName = Literal["none", "gzip"]
DetachedSavePolicy = Literal["noop", "error"]


@dataclass(frozen=True)
class TagTreeConfig:
    """Validated runtime configuration.

    Attributes:
        compression: Stream compression applied around tag-tree bytes.
        max_depth: Maximum container nesting accepted by encode and decode.
        detached_save_policy: Behavior of save() without a storage location.
        fsync: Whether file replaces flush data to disk before renaming.
        reserved_shapes: Payload widths for reserved type ids carried raw.
    """

    compression: CompressionName = cast(CompressionName, DEFAULT_COMPRESSION)
    max_depth: int = DEFAULT_MAX_DEPTH
    detached_save_policy: DetachedSavePolicy = cast(
        DetachedSavePolicy, DEFAULT_DETACHED_SAVE_POLICY
    )
    fsync: bool = True
    reserved_shapes: Mapping[int, int] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "TagTreeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            TagTreeConfigError: If environment values are invalid.
        """
        compression = _parse_choice(
            "TAGTREE_COMPRESSION",
            os.getenv("TAGTREE_COMPRESSION", DEFAULT_COMPRESSION),
            SUPPORTED_COMPRESSIONS,
        )
        detached_save_policy = _parse_choice(
            "TAGTREE_DETACHED_SAVE",
            os.getenv("TAGTREE_DETACHED_SAVE", DEFAULT_DETACHED_SAVE_POLICY),
            SUPPORTED_DETACHED_SAVE_POLICIES,
        )
        max_depth = _parse_max_depth(os.getenv("TAGTREE_MAX_DEPTH", str(DEFAULT_MAX_DEPTH)))
        fsync = _parse_flag("TAGTREE_FSYNC", os.getenv("TAGTREE_FSYNC", "1"))
        return cls(
            compression=cast(CompressionName, compression),
            max_depth=max_depth,
            detached_save_policy=cast(DetachedSavePolicy, detached_save_policy),
            fsync=fsync,
        )


def _parse_choice(variable: str, raw_value: str, choices: tuple[str, ...]) -> str:
    """Parse an enumerated environment value.

    Args:
        variable: Environment variable name, used in error messages.
        raw_value: Raw string from environment.
        choices: Accepted lowercase values.

    Returns:
        Normalized value.

    Raises:
        TagTreeConfigError: If the value is not one of the choices.
    """
    value = raw_value.strip().lower()
    if value not in choices:
        raise TagTreeConfigError(
            f"Invalid {variable} value: expected one of {', '.join(choices)}, "
            f"got '{raw_value}'."
        )
    return value


def _parse_max_depth(raw_value: str) -> int:
    """Parse the maximum nesting depth environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed depth in 1..MAX_SUPPORTED_DEPTH.

    Raises:
        TagTreeConfigError: If value is not an integer in that range.
    """
    try:
        depth = int(raw_value)
    except ValueError as error:
        raise TagTreeConfigError(
            "Invalid TAGTREE_MAX_DEPTH value: "
            f"expected integer, got '{raw_value}'. "
            "Set TAGTREE_MAX_DEPTH to a positive number."
        ) from error
    if not 0 < depth <= MAX_SUPPORTED_DEPTH:
        raise TagTreeConfigError(
            "Invalid TAGTREE_MAX_DEPTH value: "
            f"expected a number in 1..{MAX_SUPPORTED_DEPTH}, got {depth}."
        )
    return depth


def _parse_flag(variable: str, raw_value: str) -> bool:
    """Parse a boolean flag environment value."""
    value = raw_value.strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    raise TagTreeConfigError(
        f"Invalid {variable} value: expected 1 or 0, got '{raw_value}'."
    )
