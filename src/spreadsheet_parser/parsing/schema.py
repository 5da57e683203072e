from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Sequence

from spreadsheet_parser.errors import MetadataError, SchemaError
from spreadsheet_parser.parsing.columns import resolve_column_index
from spreadsheet_parser.parsing.metadata import read_metadata
from spreadsheet_parser.parsing.types import ColumnSpec, FieldInfo, FieldMetadata, ResolvedSchema, SchemaDescriptor

logger = logging.getLogger(__name__)


def build_schema(descriptor: SchemaDescriptor | None, fields: Sequence[FieldMetadata]) -> ResolvedSchema:
    """
    Combine a `SchemaDescriptor` with the target's field specs into a `ResolvedSchema`.

    Fails fast with `SchemaError`, in this order, on:
    - a missing descriptor,
    - a field carrying more than one `ColumnSpec`,
    - no field carrying a `ColumnSpec` at all,
    - descriptor column count != count of fields carrying a spec,
    - a spec'd field the descriptor does not map,
    - an unresolvable column reference,
    - two fields resolving to the same column.
    """
    if descriptor is None:
        raise SchemaError("Missing schema descriptor: decorate the type with @sheet or @no_header")

    mapped: list[tuple[FieldMetadata, ColumnSpec]] = []
    for fm in fields:
        if not fm.specs:
            continue
        if len(fm.specs) > 1:
            raise SchemaError(f"There is more than one column spec for field `{fm.name}`")
        mapped.append((fm, fm.specs[0]))

    if not mapped:
        raise SchemaError("No column specs found on any field")

    if len(descriptor.columns) != len(mapped):
        raise SchemaError(
            f"Descriptor column count ({len(descriptor.columns)}) doesn't match "
            f"the column spec count ({len(mapped)})"
        )

    index_of: dict[str, int] = {}
    owner_of: dict[int, str] = {}
    mandatory: set[int] = set()
    rules: dict[str, str] = {}
    messages: dict[str, str] = dict(descriptor.messages)     # global messages first
    infos: list[FieldInfo] = []

    for fm, spec in mapped:
        ref = descriptor.reference_for(fm.name)
        if ref is None:
            raise SchemaError(f"The column name `{fm.name}` is not specified in the descriptor columns")

        idx = resolve_column_index(ref, field=fm.name)
        if idx in owner_of:
            raise SchemaError(f"Column {idx} is mapped to both `{owner_of[idx]}` and `{fm.name}`")
        owner_of[idx] = fm.name

        index_of[fm.name] = idx
        if spec.mandatory:
            mandatory.add(idx)
        if spec.rule is not None:
            rules[fm.name] = spec.rule
        for key, text in spec.messages.items():
            messages[f"{fm.name}.{key}"] = text

        infos.append(FieldInfo(name=fm.name, index=idx, type_tag=fm.type_tag, format=spec.format))

    return ResolvedSchema(
        index_of=MappingProxyType(index_of),
        mandatory_indexes=frozenset(mandatory),
        rules=MappingProxyType(rules),
        messages=MappingProxyType(messages),
        header_rows=descriptor.header_rows,
        fields=tuple(infos),
    )


def resolve_schema(target: Any, *, descriptor: SchemaDescriptor | None = None) -> ResolvedSchema:
    """
    Read `target`'s declarations and build its `ResolvedSchema`.

    An explicit `descriptor` (e.g. one loaded from a file) replaces the class-level one.
    Metadata extraction failures surface as `SchemaError`.
    """
    try:
        declared, fields = read_metadata(target)
    except MetadataError as e:
        raise SchemaError(str(e)) from e

    schema = build_schema(descriptor if descriptor is not None else declared, fields)
    logger.info(
        "resolved schema for %s: %d column(s), %d mandatory, %d header row(s)",
        getattr(target, "__qualname__", target),
        len(schema.index_of),
        len(schema.mandatory_indexes),
        schema.header_rows,
    )
    return schema
