"""memstore CLI entry points.

This module exposes record commands over a JSON snapshot file.
It maps argparse commands onto MemStore calls and prints JSON lines.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from core.config import MemStoreConfig
from core.errors import MemStoreError
from core.options_file import load_store_options
from core.types import CollectionRef, Entity, EntityDraft
from store.mem_store import MemStore
from store.snapshot_io import read_snapshot_file, write_snapshot_file

_MUTATING_COMMANDS = ("save", "remove")


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="memstore", description="In-memory document store CLI")
    parser.add_argument("--snapshot", help="JSON snapshot file loaded before and saved after writes")
    parser.add_argument("--options", help="YAML store options file")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_save_command(subparsers)
    _add_load_command(subparsers)
    _add_list_command(subparsers)
    _add_remove_command(subparsers)
    subparsers.add_parser("dump", help="Print the whole record map")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the memstore CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        store = _open_store(args.snapshot, args.options)
        exit_code = _dispatch(parser, store, args)
        if args.snapshot and args.command in _MUTATING_COMMANDS:
            write_snapshot_file(Path(args.snapshot), store.dump())
    except (MemStoreError, ValueError) as error:
        print(f"memstore_error={error}", file=sys.stderr)
        return 1
    return exit_code


def _dispatch(parser: argparse.ArgumentParser, store: MemStore, args: argparse.Namespace) -> int:
    if args.command == "save":
        return _run_save_command(store, args)
    if args.command == "load":
        return _run_load_command(store, args)
    if args.command == "list":
        return _run_list_command(store, args)
    if args.command == "remove":
        return _run_remove_command(store, args)
    if args.command == "dump":
        print(json.dumps(store.dump(), indent=2, sort_keys=True))
        return 0
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _open_store(snapshot: str | None, options: str | None) -> MemStore:
    """Build a store from config and an optional snapshot file.

    Args:
        snapshot: Optional snapshot path.
        options: Optional YAML options path.

    Returns:
        Populated store.
    """
    config = MemStoreConfig.from_env()
    if options:
        config = load_store_options(options, base=config)
    store = MemStore(config)
    if snapshot:
        store.import_entries(read_snapshot_file(Path(snapshot)))
    return store


def _run_save_command(store: MemStore, args: argparse.Namespace) -> int:
    """Handle save command.

    Args:
        store: Target store.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    data = _parse_json_argument(args.data)
    if not isinstance(data, dict):
        raise ValueError("Save data must be a JSON object, e.g. '{\"name\": \"x\"}'.")
    draft = EntityDraft(
        ref=CollectionRef.parse(args.collection),
        data=data,
        explicit_id=args.id,
        merge=args.merge,
    )
    query = {"upsert$": list(args.upsert_on)} if args.upsert_on else None
    outcome = store.save_with_outcome(draft, query)
    print(f"status={outcome.status}", file=sys.stderr)
    _print_entity(outcome.entity)
    return 0


def _run_load_command(store: MemStore, args: argparse.Namespace) -> int:
    """Handle load command."""
    entity = store.load(args.collection, _parse_json_argument(args.query))
    _print_entity(entity)
    return 0


def _run_list_command(store: MemStore, args: argparse.Namespace) -> int:
    """Handle list command."""
    query = _parse_json_argument(args.query) if args.query is not None else None
    for entity in store.list(args.collection, query):
        _print_entity(entity)
    return 0


def _run_remove_command(store: MemStore, args: argparse.Namespace) -> int:
    """Handle remove command."""
    entity = store.remove(args.collection, _parse_json_argument(args.query))
    if entity is not None:
        _print_entity(entity)
    return 0


def _parse_json_argument(raw_value: str) -> Any:
    """Decode a JSON argument; bare words are taken as record ids."""
    try:
        return json.loads(raw_value)
    except json.JSONDecodeError:
        return raw_value


def _print_entity(entity: Entity | None) -> None:
    payload = entity.to_dict() if entity is not None else None
    print(json.dumps(payload, sort_keys=True))


def _add_save_command(subparsers: Any) -> None:
    """Register save subcommand."""
    parser = subparsers.add_parser("save", help="Create or update one record")
    parser.add_argument("collection", help="Collection, namespace/collection, or full canon")
    parser.add_argument("data", help="Record fields as a JSON object")
    parser.add_argument("--id", help="Explicit id for a new record")
    parser.add_argument(
        "--upsert-on",
        nargs="+",
        help="Update the first record with equal values for these fields",
    )
    merge_group = parser.add_mutually_exclusive_group()
    merge_group.add_argument(
        "--merge",
        dest="merge",
        action="store_true",
        default=None,
        help="Overlay fields onto the previous record",
    )
    merge_group.add_argument(
        "--no-merge",
        dest="merge",
        action="store_false",
        default=None,
        help="Replace the previous record entirely",
    )


def _add_load_command(subparsers: Any) -> None:
    """Register load subcommand."""
    parser = subparsers.add_parser("load", help="Print the first matching record")
    parser.add_argument("collection", help="Collection, namespace/collection, or full canon")
    parser.add_argument("query", help="Record id or JSON query")


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    parser = subparsers.add_parser("list", help="Print all matching records")
    parser.add_argument("collection", help="Collection, namespace/collection, or full canon")
    parser.add_argument("query", nargs="?", help="Optional record id or JSON query")


def _add_remove_command(subparsers: Any) -> None:
    """Register remove subcommand."""
    parser = subparsers.add_parser("remove", help="Remove matching records")
    parser.add_argument("collection", help="Collection, namespace/collection, or full canon")
    parser.add_argument("query", help="Record id or JSON query, use all$ to remove every match")
