from __future__ import annotations

import dataclasses
import inspect
import logging
from typing import Any, Generic, Iterable, Iterator, Mapping, TypeVar

from spreadsheet_parser.casting.registry import CasterRegistry, default_casters
from spreadsheet_parser.errors import CastError, SchemaError, ValidationException
from spreadsheet_parser.parsing.schema import resolve_schema
from spreadsheet_parser.parsing.summary import RunSummary
from spreadsheet_parser.parsing.types import ResolvedSchema, Row, SchemaDescriptor
from spreadsheet_parser.validation.base import Validator
from spreadsheet_parser.validation.rules import RuleValidator

logger = logging.getLogger(__name__)

T = TypeVar("T")

Rows = Iterable[Row] | Mapping[int, Row]


def cell_value(row: Row, index: int) -> Any:
    """Cell at `index`, or `None` when the row is too short or sparse there."""
    if isinstance(row, Mapping):
        return row.get(index)
    try:
        return row[index]
    except IndexError:
        return None


def is_empty_cell(value: Any) -> bool:
    """
    Emptiness as the mandatory-column filter sees it: `None`, `""`, `"0"`, `0`, `0.0`,
    `False` and empty containers are all empty.
    """
    if isinstance(value, str):
        return value in ("", "0")
    return not value


def _indexed(rows: Rows) -> Iterator[tuple[int, Row]]:
    # a mapping of rows keeps its own indexes; anything else is numbered from 0
    if isinstance(rows, Mapping):
        return iter(rows.items())
    return enumerate(rows)


class RowPipeline(Generic[T]):
    """
    Map raw spreadsheet rows onto instances of `target`.

    Construction resolves the whole schema up front and raises `SchemaError` on any
    structural problem. Then, per row:
    - rows below `header_rows` are skipped,
    - rows with an empty mandatory cell are skipped,
    - the row is projected onto field names and handed to the validator,
    - (`parse` only) values are cast and a `target` instance is built.

    The first failing row stops the run: `ValidationException` or `CastError` propagate
    and nothing after that row is read.
    """

    def __init__(
        self,
        target: type[T],
        *,
        validator: Validator | None = None,
        casters: CasterRegistry | None = None,
        descriptor: SchemaDescriptor | None = None,
    ) -> None:
        self.target = target
        self.schema: ResolvedSchema = resolve_schema(target, descriptor=descriptor)
        self.validator: Validator = validator if validator is not None else RuleValidator()
        self.casters = casters if casters is not None else default_casters()
        self._check_constructible()

    def _check_constructible(self) -> None:
        """
        A dataclass target must not require init arguments the schema never fills.
        Any other target must be callable with no arguments.
        """
        if not dataclasses.is_dataclass(self.target):
            try:
                sig = inspect.signature(self.target)
            except (TypeError, ValueError):
                # no introspectable signature (some builtins / C types)
                return
            try:
                sig.bind()
            except TypeError as e:
                raise SchemaError(f"{self.target.__name__} cannot be instantiated without arguments: {e}") from e
            return
        missing = [
            f.name
            for f in dataclasses.fields(self.target)
            if f.init
            and f.name not in self.schema.index_of
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        ]
        if missing:
            raise SchemaError(f"{self.target.__name__} requires unmapped field(s) without defaults: {missing}")

    ## -- public passes

    def validate_all(self, rows: Rows) -> None:
        """Validate every admitted row. Returns quietly or raises on the first failing row."""
        summary = RunSummary(target=self.target.__qualname__)
        for row_index, row in self._admitted(rows, summary):
            self.validate_row(row, row_index)
            summary.processed += 1
        logger.info("validated %s", summary.render_one_line())

    def parse(self, rows: Rows) -> Iterator[tuple[int, T]]:
        """Lazily yield `(row_index, obj)` for every admitted row, in input order."""
        summary = RunSummary(target=self.target.__qualname__)
        for row_index, row in self._admitted(rows, summary):
            data = self.validate_row(row, row_index)
            obj = self.build_object(data, row_index)
            summary.processed += 1
            yield row_index, obj
        logger.info("parsed %s", summary.render_one_line())

    ## -- per-row steps

    def mandatory_present(self, row: Row) -> bool:
        return all(not is_empty_cell(cell_value(row, idx)) for idx in self.schema.mandatory_indexes)

    def map_row(self, row: Row) -> dict[str, Any]:
        """Project a raw row onto field names."""
        return {name: cell_value(row, idx) for name, idx in self.schema.index_of.items()}

    def validate_row(self, row: Row, row_index: int) -> Mapping[str, Any]:
        """Run the validator over one raw row; returns the validated values keyed by field name."""
        mapped = self.map_row(row)
        result = self.validator.validate(mapped, self.schema.rules, self.schema.messages)
        if not result.passed:
            logger.debug("row %d failed validation: %s", row_index, dict(result.errors))
            raise ValidationException(row_index, result.errors)
        return result.data

    def build_object(self, data: Mapping[str, Any], row_index: int) -> T:
        """Cast validated values to their declared types and build a `target` instance."""
        values: dict[str, Any] = {}
        for f in self.schema.fields:
            raw = data.get(f.name)
            # whitespace-only cells are blank, same as the validator sees them
            if isinstance(raw, str) and not raw.strip():
                raw = None
            try:
                values[f.name] = self.casters.cast(raw, f.type_tag, f.format)
            except CastError as e:
                e.row_index = row_index
                e.field = f.name
                raise
        return self._instantiate(values)

    def _instantiate(self, values: dict[str, Any]) -> T:
        if dataclasses.is_dataclass(self.target):
            init_names = {f.name for f in dataclasses.fields(self.target) if f.init}
            obj = self.target(**{k: v for k, v in values.items() if k in init_names})
            for k, v in values.items():
                if k not in init_names:
                    setattr(obj, k, v)
            return obj

        obj = self.target()
        for k, v in values.items():
            setattr(obj, k, v)
        return obj

    def _admitted(self, rows: Rows, summary: RunSummary) -> Iterator[tuple[int, Row]]:
        """Drop header and incomplete rows, counting both."""
        for row_index, row in _indexed(rows):
            summary.seen += 1
            if row_index < self.schema.header_rows:
                summary.skipped_header += 1
                logger.debug("row %d: header, skipped", row_index)
                continue
            if not self.mandatory_present(row):
                summary.skipped_incomplete += 1
                logger.debug("row %d: mandatory value missing, skipped", row_index)
                continue
            yield row_index, row


class ParserFactory:
    """Builds pipelines that share one validator and one set of casters."""

    def __init__(self, validator: Validator | None = None, casters: CasterRegistry | None = None) -> None:
        self.validator: Validator = validator if validator is not None else RuleValidator()
        self.casters = casters if casters is not None else default_casters()

    def make(self, target: type[T], *, descriptor: SchemaDescriptor | None = None) -> RowPipeline[T]:
        # each pipeline gets its own registry copy so later registrations don't leak across
        return RowPipeline(target, validator=self.validator, casters=self.casters.copy(), descriptor=descriptor)


def make_parser(
    target: type[T],
    *,
    validator: Validator | None = None,
    casters: CasterRegistry | None = None,
    descriptor: SchemaDescriptor | None = None,
) -> RowPipeline[T]:
    """Shorthand for `RowPipeline(target, ...)`."""
    return RowPipeline(target, validator=validator, casters=casters, descriptor=descriptor)
