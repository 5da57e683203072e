"""
Schema descriptors declared in YAML instead of on the class:

    header_rows: 1
    columns:
      A: email
      B: rank
      2: joined_on
    messages:
      required: "The :attribute column is empty"

`columns` may also be a list of field names, mapped from column 0 onwards.
Quote the letter keys `Y` and `N`: YAML reads them as booleans.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from spreadsheet_parser.errors import ConfigError, SchemaError
from spreadsheet_parser.parsing.types import SchemaDescriptor

DESCRIPTOR_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["columns"],
    "properties": {
        "header_rows": {"type": "integer", "minimum": 0},
        "columns": {
            "oneOf": [
                {
                    "type": "object",
                    "minProperties": 1,
                    "additionalProperties": {"type": "string", "minLength": 1},
                },
                {
                    "type": "array",
                    "minItems": 1,
                    "items": {"type": "string", "minLength": 1},
                },
            ]
        },
        "messages": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
    },
}


def _normalize_keys(columns: Any) -> Any:
    # YAML turns `0:` into an int key; JSON schema wants string property names.
    if isinstance(columns, dict):
        return {str(k): v for k, v in columns.items()}
    return columns


def descriptor_from_mapping(data: Any) -> SchemaDescriptor:
    """Validate an already-parsed mapping and turn it into a `SchemaDescriptor`."""
    if not isinstance(data, dict):
        raise ConfigError(f"descriptor must be a mapping, got {type(data).__name__}")

    checked = {**data, "columns": _normalize_keys(data.get("columns"))} if "columns" in data else data
    try:
        jsonschema.validate(checked, DESCRIPTOR_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"descriptor validation failed: {e.message}") from e

    try:
        return SchemaDescriptor(
            columns=data["columns"],
            header_rows=data.get("header_rows", 1),
            messages=data.get("messages") or {},
        )
    except SchemaError as e:
        raise ConfigError(str(e)) from e


def load_descriptor(path: Path) -> SchemaDescriptor:
    """Read a YAML descriptor file. Any problem surfaces as `ConfigError`."""
    if not path.exists():
        raise ConfigError(f"descriptor file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return descriptor_from_mapping(data)
