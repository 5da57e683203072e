from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, Callable, Mapping, Sequence, TypeVar, Union, get_args, get_origin, get_type_hints

from spreadsheet_parser.errors import MetadataError
from spreadsheet_parser.parsing.types import ColumnRef, ColumnSpec, FieldMetadata, SchemaDescriptor

SCHEMA_ATTR = "__sheet_schema__"
COLUMN_METADATA_KEY = "spreadsheet_parser.column"

T = TypeVar("T", bound=type)


## -- declaration API

def sheet(
    columns: Mapping[ColumnRef, str] | Sequence[str],
    *,
    header_rows: int = 1,
    messages: Mapping[str, str] | None = None,
) -> Callable[[T], T]:
    """
    Class decorator attaching a `SchemaDescriptor` to the decorated type.

    Example:
    ```
    @sheet(columns={"A": "email", "B": "rank"}, header_rows=1)
    @dataclass
    class Contact:
        email: str = column(rule="required|email")
        rank: int | None = column(rule="integer")
    ```

    A field named after its own type (`date: date = column()`) shadows that type in
    the class namespace; annotate through an alias (`from datetime import date as Date`).
    """
    descriptor = SchemaDescriptor(columns=columns, header_rows=header_rows, messages=messages or {})

    def decorate(cls: T) -> T:
        setattr(cls, SCHEMA_ATTR, descriptor)
        return cls

    return decorate


def no_header(
    columns: Mapping[ColumnRef, str] | Sequence[str],
    *,
    messages: Mapping[str, str] | None = None,
) -> Callable[[T], T]:
    """`sheet(...)` for data that starts on the very first row."""
    return sheet(columns, header_rows=0, messages=messages)


def column(
    *,
    rule: str | None = None,
    messages: Mapping[str, str] | None = None,
    mandatory: bool = False,
    format: str | None = None,
    default: Any = None,
) -> Any:
    """
    A dataclass `field()` carrying a `ColumnSpec` in its metadata.

    Fields default to `None` so the target type stays constructible when a cell is empty.
    """
    spec = ColumnSpec(rule=rule, messages=messages or {}, mandatory=mandatory, format=format)
    return dataclasses.field(default=default, metadata={COLUMN_METADATA_KEY: (spec,)})


## -- provider

def _unwrap_optional(tp: Any) -> Any:
    """`date | None` / `Optional[date]` -> `date`. Any other union stays as is."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _split_annotated(tp: Any) -> tuple[Any, tuple[ColumnSpec, ...]]:
    """Strip `Annotated[...]`, returning the bare type and any `ColumnSpec` extras."""
    if get_origin(tp) is typing.Annotated:
        base, *extras = get_args(tp)
        specs = tuple(x for x in extras if isinstance(x, ColumnSpec))
        inner_base, inner_specs = _split_annotated(base)
        return inner_base, inner_specs + specs
    return tp, ()


def _metadata_specs(target: type) -> dict[str, tuple[ColumnSpec, ...]]:
    """`ColumnSpec`s stored in dataclass field metadata, keyed by field name."""
    if not dataclasses.is_dataclass(target):
        return {}
    out: dict[str, tuple[ColumnSpec, ...]] = {}
    for f in dataclasses.fields(target):
        raw = f.metadata.get(COLUMN_METADATA_KEY)
        if raw is None:
            continue
        out[f.name] = tuple(raw) if isinstance(raw, (tuple, list)) else (raw,)
    return out


def read_descriptor(target: type) -> SchemaDescriptor | None:
    """Class-level descriptor, or `None` when the type was never decorated."""
    descriptor = getattr(target, SCHEMA_ATTR, None)
    if descriptor is not None and not isinstance(descriptor, SchemaDescriptor):
        raise MetadataError(f"{SCHEMA_ATTR} on {target.__name__} is not a SchemaDescriptor")
    return descriptor


def read_metadata(target: Any) -> tuple[SchemaDescriptor | None, list[FieldMetadata]]:
    """
    Read the schema declarations from `target`.

    Returns the class-level descriptor (or `None`) and one `FieldMetadata` per declared
    field, in declaration order. Specs attached through `Annotated[...]` and through
    `column()` are both collected, so a field carrying more than one shows up as such.

    Raises `MetadataError` if `target` is not a class, its annotations cannot be evaluated,
    or a field annotation resolves to `NoneType`.
    """
    if not isinstance(target, type):
        raise MetadataError(f"Expected a class, got {type(target).__name__}")

    try:
        hints = get_type_hints(target, include_extras=True)
    except Exception as e:  # NameError for forward refs, TypeError for bad annotations
        raise MetadataError(f"Cannot read annotations of {target.__name__}: {e}") from e

    from_fields = _metadata_specs(target)

    out: list[FieldMetadata] = []
    for name, tp in hints.items():
        if get_origin(tp) is typing.ClassVar:
            continue
        base, specs = _split_annotated(tp)
        specs = specs + from_fields.get(name, ())
        type_tag = _unwrap_optional(base)
        if type_tag is type(None):
            # `int: int = column()` resolves `int` to the field's own default
            raise MetadataError(
                f"Field `{name}` of {target.__name__} resolves to NoneType; "
                f"a field named after its type shadows it, annotate through an alias"
            )
        out.append(FieldMetadata(name=name, specs=specs, type_tag=type_tag))

    return read_descriptor(target), out
