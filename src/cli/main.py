"""TagTree CLI entry points.
This module exposes inspection and conversion commands for tag files.
It maps argparse commands onto codec and store calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Any, Sequence, cast

from codec.snbt_render import render_snbt
from core.config import CompressionName, TagTreeConfig
from core.constants import SUPPORTED_COMPRESSIONS
from core.errors import TagTreeError
from store.storage_backend import FileStorage
from store.tag_file_io import read_tag_file, write_tag_file


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="tagtree", description="Tag tree file tools")
    parser.add_argument(
        "--compression",
        choices=SUPPORTED_COMPRESSIONS,
        help="Override TAGTREE_COMPRESSION for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_dump_command(subparsers)
    _add_check_command(subparsers)
    _add_convert_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the TagTree CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.compression)
    try:
        if args.command == "dump":
            return _run_dump_command(config, args)
        if args.command == "check":
            return _run_check_command(config, args)
        if args.command == "convert":
            return _run_convert_command(config, args)
    except TagTreeError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(compression: str | None) -> TagTreeConfig:
    """Build config with optional compression override."""
    config = TagTreeConfig.from_env()
    if compression:
        config = replace(config, compression=cast(CompressionName, compression))
    return config


def _add_dump_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("dump", help="Print a tag file as SNBT")
    parser.add_argument("path", help="Tag file to read")
    parser.add_argument("--pretty", action="store_true", help="Indent nested entries")


def _add_check_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("check", help="Decode a tag file and report its shape")
    parser.add_argument("path", help="Tag file to validate")


def _add_convert_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("convert", help="Rewrite a tag file with other compression")
    parser.add_argument("source", help="Tag file to read")
    parser.add_argument("destination", help="Tag file to write")
    parser.add_argument(
        "--to",
        dest="target_compression",
        choices=SUPPORTED_COMPRESSIONS,
        required=True,
        help="Compression for the destination file",
    )


def _run_dump_command(config: TagTreeConfig, args: argparse.Namespace) -> int:
    """Handle dump command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    if not FileStorage(args.path).exists():
        print(f"error=missing file {args.path}")
        return 1
    print(render_snbt(read_tag_file(args.path, config), pretty=args.pretty))
    return 0


def _run_check_command(config: TagTreeConfig, args: argparse.Namespace) -> int:
    """Handle check command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    if not FileStorage(args.path).exists():
        print(f"error=missing file {args.path}")
        return 1
    compound = read_tag_file(args.path, config)
    print(f"ok keys={len(compound)}")
    return 0


def _run_convert_command(config: TagTreeConfig, args: argparse.Namespace) -> int:
    """Handle convert command.

    Args:
        config: Runtime configuration used to read the source.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    compound = read_tag_file(args.source, config)
    target_config = replace(
        config, compression=cast(CompressionName, args.target_compression)
    )
    write_tag_file(args.destination, compound, target_config)
    print(args.destination)
    return 0
