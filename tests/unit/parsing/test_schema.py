from __future__ import annotations

from datetime import date

import pytest

from spreadsheet_parser.errors import SchemaError
from spreadsheet_parser.parsing.schema import build_schema, resolve_schema
from spreadsheet_parser.parsing.types import ColumnSpec, FieldMetadata, SchemaDescriptor
from sheet_fixtures import (
    BadReferenceRow,
    CountMismatchRow,
    DoubleSpecRow,
    InventoryRow,
    NoDescriptorRow,
    NoSpecRow,
    SameIndexRow,
    UnmappedFieldRow,
    ValidFixture,
)


def test_resolve_schema_tables() -> None:
    """Indexes, mandatory set, rules and messages are derived from the declarations."""
    schema = resolve_schema(ValidFixture)

    assert dict(schema.index_of) == {"email": 0, "int": 1, "date": 2, "string": 3}
    assert schema.mandatory_indexes == frozenset({1})
    assert dict(schema.rules) == {
        "email": "required|email",
        "int": "integer",
        "date": "nullable|date",
        "string": "required",
    }
    assert dict(schema.messages) == {
        "required": "The required `:attribute` is missing",
        "email.email": "The email address is required",
    }
    assert schema.header_rows == 0
    assert [(f.name, f.type_tag) for f in schema.fields][2] == ("date", date)


def test_resolve_schema_letter_columns() -> None:
    schema = resolve_schema(InventoryRow)
    assert dict(schema.index_of) == {"sku": 0, "qty": 1, "price": 2, "restocked": 4}
    assert schema.mandatory_indexes == frozenset({0})
    assert schema.header_rows == 2


def test_resolve_schema_is_deterministic() -> None:
    """Resolving the same declarations twice gives identical tables."""
    first = resolve_schema(ValidFixture)
    second = resolve_schema(ValidFixture)
    assert dict(first.index_of) == dict(second.index_of)
    assert first.mandatory_indexes == second.mandatory_indexes
    assert first == second


def test_explicit_descriptor_overrides_class_descriptor() -> None:
    descriptor = SchemaDescriptor(columns={"D": "email", "C": "int", "B": "date", "A": "string"}, header_rows=1)
    schema = resolve_schema(ValidFixture, descriptor=descriptor)
    assert dict(schema.index_of) == {"email": 3, "int": 2, "date": 1, "string": 0}
    assert schema.header_rows == 1
    assert "required" not in schema.messages


def test_rule_less_fields_have_no_rule_entry() -> None:
    fields = [
        FieldMetadata("a", (ColumnSpec(rule="required"),), str),
        FieldMetadata("b", (ColumnSpec(),), str),
        FieldMetadata("ignored", (), str),
    ]
    schema = build_schema(SchemaDescriptor(columns=["a", "b"]), fields)
    assert dict(schema.rules) == {"a": "required"}
    assert [f.name for f in schema.fields] == ["a", "b"]


def test_schema_tables_are_read_only() -> None:
    schema = resolve_schema(ValidFixture)
    with pytest.raises(TypeError):
        schema.index_of["email"] = 9  # type: ignore[index]


@pytest.mark.parametrize(
    "target, match",
    [
        (NoDescriptorRow, "Missing schema descriptor"),
        (NoSpecRow, "No column specs"),
        (DoubleSpecRow, "more than one column spec"),
        (CountMismatchRow, "doesn't match"),
        (UnmappedFieldRow, "`z` is not specified"),
        (SameIndexRow, "mapped to both"),
        (BadReferenceRow, "Unparseable column reference"),
    ],
)
def test_resolve_schema_failures(target: type, match: str) -> None:
    """Every structural problem is a `SchemaError` raised before any row is read."""
    with pytest.raises(SchemaError, match=match):
        resolve_schema(target)


def test_metadata_failure_becomes_schema_error() -> None:
    with pytest.raises(SchemaError):
        resolve_schema("not a class")


def test_build_schema_without_descriptor() -> None:
    with pytest.raises(SchemaError):
        build_schema(None, [FieldMetadata("a", (ColumnSpec(),), str)])
