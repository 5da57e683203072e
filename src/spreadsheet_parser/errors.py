from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping


class SpreadsheetParserError(Exception):
    """Base for every error raised by this package."""


class SchemaError(SpreadsheetParserError):
    """The target type's schema is structurally broken. Raised at construction, before any row is read."""


class MetadataError(SpreadsheetParserError):
    """The metadata provider could not read the target type (wrapped into `SchemaError` by the builder)."""


class ConfigError(SpreadsheetParserError):
    """A descriptor file is missing, unreadable or fails its schema."""


class ValidationEngineError(SpreadsheetParserError):
    """The validation engine was handed a rule it does not understand."""


class ValidationException(SpreadsheetParserError):
    """
    A row failed its validation rules.

    `errors` is the engine's structured payload: `{field: {rule: message}}`.
    The whole run halts on the first one of these.
    """

    def __init__(self, row_index: int, errors: Mapping[str, Mapping[str, str]]) -> None:
        self.row_index = row_index
        self.errors = {f: dict(rules) for f, rules in errors.items()}
        super().__init__(f"row {row_index}: {json.dumps(self.errors, ensure_ascii=False)}")

    @property
    def fields(self) -> list[str]:
        """Names of the failing fields, in payload order."""
        return list(self.errors)


@dataclass(eq=False)
class CastError(SpreadsheetParserError):
    """A caster rejected a value it could not convert."""
    detail: str                     # what went wrong, human readable.
    value: Any = None               # the raw value handed to the caster.
    row_index: int | None = None    # filled in by the pipeline.
    field: str | None = None        # filled in by the pipeline.

    def __str__(self) -> str:
        where = []
        if self.row_index is not None:
            where.append(f"row {self.row_index}")
        if self.field is not None:
            where.append(self.field)
        prefix = f"{', '.join(where)}: " if where else ""
        return f"{prefix}{self.detail}"
