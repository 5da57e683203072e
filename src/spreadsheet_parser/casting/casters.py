from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from spreadsheet_parser.errors import CastError

# Tried in order when no format hint is given (after ISO-8601).
FALLBACK_DATE_FORMATS: tuple[str, ...] = ("%m/%d/%Y", "%d.%m.%Y", "%Y/%m/%d")


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else str(value)


## -- dates

def _parse_datetime(value: Any, fmt: str | None) -> datetime:
    """
    Parse a cell into a `datetime`.

    With a format hint only `strptime(fmt)` is tried. Without one, accepts:
    - ISO forms (`1977-10-31`, `1977-10-31T12:34:56Z`, `1977-10-31 12:34:56+00:00`),
    - then each of `FALLBACK_DATE_FORMATS`.
    """
    s = _text(value)
    if fmt is not None:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            raise CastError(f"invalid date {value!r} (expected format {fmt!r})", value=value)

    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        pass

    for candidate in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(s, candidate)
        except ValueError:
            continue

    raise CastError(f"invalid date {value!r}", value=value)


@dataclass(frozen=True, slots=True)
class DateCaster:
    """Cell -> `datetime.date`. `date`/`datetime` values pass through (datetimes lose their time)."""

    def cast(self, value: Any, fmt: str | None = None) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return _parse_datetime(value, fmt).date()


@dataclass(frozen=True, slots=True)
class DateTimeCaster:
    """
    Cell -> `datetime.datetime`.

    Naive results are assumed to be in `assume_tz` (UTC unless told otherwise);
    pass `assume_tz=None` to keep them naive.
    """
    assume_tz: timezone | None = timezone.utc

    def cast(self, value: Any, fmt: str | None = None) -> datetime:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            dt = datetime(value.year, value.month, value.day)
        else:
            dt = _parse_datetime(value, fmt)
        if dt.tzinfo is None and self.assume_tz is not None:
            dt = dt.replace(tzinfo=self.assume_tz)
        return dt


## -- numbers

@dataclass(frozen=True, slots=True)
class IntCaster:
    """Cell -> `int`. `"12.3"` and `"1e4"` are rejected rather than coerced."""

    def cast(self, value: Any, fmt: str | None = None) -> int:
        if isinstance(value, bool):
            raise CastError(f"invalid int {value!r}", value=value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise CastError(f"invalid int {value!r}", value=value)
            return int(value)
        s = _text(value)
        if "." in s or "e" in s.lower():
            raise CastError(f"invalid int {value!r}", value=value)
        try:
            return int(s)
        except ValueError:
            raise CastError(f"invalid int {value!r}", value=value)


@dataclass(frozen=True, slots=True)
class FloatCaster:
    """Cell -> `float`."""

    def cast(self, value: Any, fmt: str | None = None) -> float:
        if isinstance(value, bool):
            raise CastError(f"invalid float {value!r}", value=value)
        try:
            return float(_text(value) if isinstance(value, str) else value)
        except (TypeError, ValueError):
            raise CastError(f"invalid float {value!r}", value=value)


@dataclass(frozen=True, slots=True)
class DecimalCaster:
    """
    Cell -> `Decimal`.

    A format hint of the form `"0.01"` quantizes the result to that exponent.
    """

    def cast(self, value: Any, fmt: str | None = None) -> Decimal:
        try:
            d = Decimal(_text(value))     # through `str` so floats keep their printed digits
        except (InvalidOperation, ValueError):
            raise CastError(f"invalid decimal {value!r}", value=value)
        if not d.is_finite():
            raise CastError(f"invalid decimal {value!r}", value=value)
        if fmt is not None:
            try:
                d = d.quantize(Decimal(fmt))
            except InvalidOperation:
                raise CastError(f"decimal {value!r} does not fit format {fmt!r}", value=value)
        return d


## -- booleans

_TRUE = frozenset({"1", "true", "t", "yes", "y"})
_FALSE = frozenset({"0", "false", "f", "no", "n"})


@dataclass(frozen=True, slots=True)
class BoolCaster:
    """Cell -> `bool`. Accepts 0/1, true/false, t/f, yes/no, y/n (any case)."""

    def cast(self, value: Any, fmt: str | None = None) -> bool:
        if isinstance(value, bool):
            return value
        s = _text(value).lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
        raise CastError(f"invalid boolean {value!r} (expected 0/1 or true/false)", value=value)
