from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path
from typing import Any

from spreadsheet_parser.config.descriptor_loader import load_descriptor
from spreadsheet_parser.errors import ConfigError, SchemaError
from spreadsheet_parser.logging_setup import setup_logging
from spreadsheet_parser.parsing.columns import column_letter, resolve_column_index
from spreadsheet_parser.parsing.schema import resolve_schema


def import_target(target_ref: str) -> Any:
    """`"package.module:Class"` (or `"package.module:Outer.Inner"`) -> the class object."""
    module_name, sep, attr_path = target_ref.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigError(f"target must look like 'package.module:ClassName', got {target_ref!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import {module_name!r}: {e}") from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(f"{module_name!r} has no attribute {attr_path!r}") from e
    return obj


def main(argv: list[str] | None = None) -> int:
    """
    A CLI for inspecting row schemas.

    The `cmd` options are:
    ## schema:
    Resolve a target type's schema and print its lookup tables as JSON.
    - `--target` as `package.module:ClassName`,
    - `--descriptor` as an optional YAML descriptor replacing the class-level one.

    ### Example:
    - `spreadsheet-parser schema --target myapp.rows:Contact`
    - `spreadsheet-parser schema --target myapp.rows:Contact --descriptor contacts.yml`

    ## column:
    Translate column references into zero-based indexes.
    - `spreadsheet-parser column A c AA 7`

    Exit code is 0 on success, 1 on a schema / config problem.
    """
    p = argparse.ArgumentParser(prog="spreadsheet-parser")
    p.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    sub = p.add_subparsers(dest="cmd", required=True)

    # schema cmd
    schema = sub.add_parser("schema", help="Resolve and print a target type's schema.")
    schema.add_argument("--target", required=True, help="Target type as 'package.module:ClassName'.")
    schema.add_argument("--descriptor", default=None, help="Optional YAML schema descriptor.")

    # column cmd
    col = sub.add_parser("column", help="Resolve column references to zero-based indexes.")
    col.add_argument("refs", nargs="+", help="Column references: digits or letters.")

    args = p.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    if args.cmd == "schema":
        try:
            target = import_target(args.target)
            descriptor = load_descriptor(Path(args.descriptor)) if args.descriptor else None
            resolved = resolve_schema(target, descriptor=descriptor)
        except (ConfigError, SchemaError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(resolved.to_dict(), indent=2, ensure_ascii=False))
        return 0

    if args.cmd == "column":
        for ref in args.refs:
            try:
                idx = resolve_column_index(ref, field=ref)
            except SchemaError as e:
                print(f"error: {e}", file=sys.stderr)
                return 1
            print(f"{ref} -> {idx} ({column_letter(idx)})")
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
