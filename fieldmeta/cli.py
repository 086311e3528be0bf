# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Inspect and edit stored field values directly in the
#   configured store (FM_BACKEND), without a form.
#
# COMMANDS:
# ---------
# 1. Show every key stored on an object, or one key:
#    python -m fieldmeta.cli get --type post --id 12
#    python -m fieldmeta.cli get --type post --id 12 --key seo_title
#
# 2. Replace the value of a key:
#    python -m fieldmeta.cli set --type post --id 12 --key seo_title --value '"Hello"'
#
# 3. Append a value under a key:
#    python -m fieldmeta.cli add --type post --id 12 --key tags --value '"news"'
#
# 4. Delete a key (or only rows matching --value):
#    python -m fieldmeta.cli delete --type post --id 12 --key tags
#
# Values are parsed as JSON, falling back to the raw string.
#
# ==============================================

import argparse
import json
import sys
from typing import Any, List, Optional

from fieldmeta.storage import create_store


def _parse_value(raw: Optional[str]) -> Any:
    if raw is None:
        return ""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_id(raw: str):
    return int(raw) if raw.isdigit() else raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldmeta",
        description="Inspect and edit stored field metadata."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("get", "Show stored values"),
        ("set", "Replace the value of a key"),
        ("add", "Append a value under a key"),
        ("delete", "Delete a key"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--type", dest="data_type", default="post",
                         help="Object type (post, user, term, option, ...)")
        sub.add_argument("--id", dest="data_id", required=True, help="Object ID")
        sub.add_argument("--key", required=name != "get", help="Meta key")
        if name in ("set", "add"):
            sub.add_argument("--value", required=True, help="Value (JSON or string)")
        if name == "delete":
            sub.add_argument("--value", help="Only delete rows with this value")
        if name == "set":
            sub.add_argument("--prev", help="Only replace rows with this value")
        if name == "add":
            sub.add_argument("--unique", action="store_true",
                             help="Fail if the key already has a value")
    return parser


def run(args: argparse.Namespace) -> int:
    store = create_store(args.data_type)
    connected = hasattr(store, "connect")
    if connected:
        store.connect()
    try:
        data_id = _parse_id(args.data_id)

        if args.command == "get":
            if args.key:
                result = store.get_data(data_id, args.key)
            else:
                result = store.get_all(data_id)
            print(json.dumps(result, indent=2, default=str))
            return 0

        if args.command == "set":
            prev = _parse_value(args.prev) if args.prev is not None else ""
            result = store.update_data(data_id, args.key, _parse_value(args.value), prev)
        elif args.command == "add":
            result = store.add_data(data_id, args.key, _parse_value(args.value), args.unique)
        else:
            value = _parse_value(args.value) if args.value is not None else ""
            result = store.delete_data(data_id, args.key, value)

        if result is False:
            print(f"✗ {args.command} '{args.key}' on {args.data_type} {data_id}: no change")
            return 1
        print(f"✓ {args.command} '{args.key}' on {args.data_type} {data_id}: {result}")
        return 0
    finally:
        if connected:
            store.disconnect()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
