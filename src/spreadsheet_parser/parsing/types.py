from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

from spreadsheet_parser.errors import SchemaError

# A column reference as written in a schema: `0`, `"3"`, `"B"`, `"aa"`.
ColumnRef = Union[int, str]

# A raw row: dense (list/tuple) or sparse (`{index: value}`).
Row = Union[Sequence[Any], Mapping[int, Any]]


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    """Per-field declaration: how a single mapped column is validated and cast."""
    rule: str | None = None                                 # opaque rule expression, handed to the validator.
    messages: Mapping[str, str] = field(default_factory=dict, hash=False)  # rule-key -> custom message.
    mandatory: bool = False                                 # row is skipped unless this cell is non-empty.
    format: str | None = None                               # format hint for the field's caster.

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", MappingProxyType(dict(self.messages)))


# Declaration-side spelling: `Annotated[int, Column(rule="integer")]`.
Column = ColumnSpec


@dataclass(frozen=True, slots=True)
class SchemaDescriptor:
    """
    Class-level declaration: how many header rows to skip, which column feeds which field,
    and the global validation messages.

    `columns` maps a column reference to a field name. A plain sequence of names is also
    accepted and enumerated from column 0.
    """
    columns: Mapping[ColumnRef, str] = field(hash=False)
    header_rows: int = 1
    messages: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        columns = self.columns
        if not isinstance(columns, Mapping):
            if isinstance(columns, (str, bytes)):
                raise SchemaError("columns must be a mapping or a sequence of field names")
            columns = dict(enumerate(columns))
        if not columns:
            raise SchemaError("At least one column must be specified in the header")
        if isinstance(self.header_rows, bool) or not isinstance(self.header_rows, int) or self.header_rows < 0:
            raise SchemaError(f"header_rows must be a non-negative int, got {self.header_rows!r}")

        object.__setattr__(self, "columns", MappingProxyType(dict(columns)))
        object.__setattr__(self, "messages", MappingProxyType(dict(self.messages)))

    def reference_for(self, name: str) -> ColumnRef | None:
        """Column reference declared for field `name`, or `None` when the field is not mapped."""
        for ref, field_name in self.columns.items():
            if field_name == name:
                return ref
        return None


@dataclass(frozen=True, slots=True)
class FieldMetadata:
    """What the metadata provider reports for one declared field of the target type."""
    name: str
    specs: tuple[ColumnSpec, ...]   # every `ColumnSpec` attached to the field (0, 1 or, wrongly, more).
    type_tag: Any = None            # declared type, `Optional` unwrapped. `None` when undeclared.


@dataclass(frozen=True, slots=True)
class FieldInfo:
    """A mapped field after resolution."""
    name: str
    index: int
    type_tag: Any = None
    format: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedSchema:
    """
    Lookup tables derived from a `SchemaDescriptor` plus the target's field specs.

    Built once per pipeline and read-only afterwards.
    """
    index_of: Mapping[str, int]         # field name -> zero-based column index.
    mandatory_indexes: frozenset[int]   # columns that must be non-empty for a row to be processed.
    rules: Mapping[str, str]            # field name -> rule expression.
    messages: Mapping[str, str]         # "field.rule" or global key -> text.
    header_rows: int
    fields: tuple[FieldInfo, ...]       # mapped fields in declaration order.

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly rendering, used by the CLI."""
        return {
            "header_rows": self.header_rows,
            "index_of": dict(self.index_of),
            "mandatory_indexes": sorted(self.mandatory_indexes),
            "rules": dict(self.rules),
            "messages": dict(self.messages),
            "fields": [
                {
                    "name": f.name,
                    "index": f.index,
                    "type": getattr(f.type_tag, "__name__", None if f.type_tag is None else str(f.type_tag)),
                    "format": f.format,
                }
                for f in self.fields
            ],
        }
