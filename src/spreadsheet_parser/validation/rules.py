"""
Reference validation engine for pipe-separated rule strings: `"required|email"`,
`"nullable|date"`, `"integer|min:1|max:10"`.

Blank values (`None`, whitespace-only strings) only ever fail `required` / `filled`;
every other rule is skipped for them, which makes `nullable` a readability marker.
`regex:` patterns cannot contain `|`.
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional

from spreadsheet_parser.casting.casters import DateCaster
from spreadsheet_parser.errors import CastError, ValidationEngineError
from spreadsheet_parser.validation.base import ValidationResult

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_INT_RE = re.compile(r"^[+-]?\d+$")

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "The :attribute field is required.",
    "filled": "The :attribute field must have a value.",
    "email": "The :attribute must be a valid email address.",
    "integer": "The :attribute must be an integer.",
    "numeric": "The :attribute must be a number.",
    "string": "The :attribute must be a string.",
    "date": "The :attribute is not a valid date.",
    "boolean": "The :attribute field must be true or false.",
    "min": "The :attribute must be at least :min.",
    "max": "The :attribute may not be greater than :max.",
    "in": "The selected :attribute is invalid.",
    "regex": "The :attribute format is invalid.",
}

# rules that still run against blank values
_IMPLICIT = frozenset({"required", "filled"})
# rules that make `min`/`max` compare numbers instead of lengths
_NUMERIC_RULES = frozenset({"integer", "numeric"})


def _is_blank(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, str):
        return v.strip() == ""
    if isinstance(v, (list, tuple, dict, set)):
        return len(v) == 0
    return False


def _as_number(v: Any) -> Decimal | None:
    if isinstance(v, bool):
        return None
    try:
        d = Decimal(v.strip() if isinstance(v, str) else str(v))
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


## -- individual checks: (value, param, numeric_context) -> passed

def _required(v: Any, param: str | None, numeric: bool) -> bool:
    return not _is_blank(v)


def _email(v: Any, param: str | None, numeric: bool) -> bool:
    return isinstance(v, str) and _EMAIL_RE.match(v.strip()) is not None


def _integer(v: Any, param: str | None, numeric: bool) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    return isinstance(v, str) and _INT_RE.match(v.strip()) is not None


def _numeric(v: Any, param: str | None, numeric: bool) -> bool:
    return _as_number(v) is not None


def _string(v: Any, param: str | None, numeric: bool) -> bool:
    return isinstance(v, str)


def _date(v: Any, param: str | None, numeric: bool) -> bool:
    try:
        DateCaster().cast(v)
    except CastError:
        return False
    return True


def _boolean(v: Any, param: str | None, numeric: bool) -> bool:
    return v in (True, False, 0, 1, "0", "1", "true", "false")


def _size(v: Any, numeric: bool) -> Decimal | None:
    if numeric:
        return _as_number(v)
    if isinstance(v, (str, list, tuple, dict, set)):
        return Decimal(len(v))
    return _as_number(v)


def _bound(param: str | None, rule: str) -> Decimal:
    bound = _as_number(param)
    if bound is None:
        raise ValidationEngineError(f"rule `{rule}` needs a numeric parameter, got {param!r}")
    return bound


def _min(v: Any, param: str | None, numeric: bool) -> bool:
    size = _size(v, numeric)
    return size is not None and size >= _bound(param, "min")


def _max(v: Any, param: str | None, numeric: bool) -> bool:
    size = _size(v, numeric)
    return size is not None and size <= _bound(param, "max")


def _in(v: Any, param: str | None, numeric: bool) -> bool:
    allowed = [] if param is None else [p.strip() for p in param.split(",")]
    return str(v).strip() in allowed


def _regex(v: Any, param: str | None, numeric: bool) -> bool:
    if not param:
        raise ValidationEngineError("rule `regex` needs a pattern")
    try:
        return re.search(param, str(v)) is not None
    except re.error as e:
        raise ValidationEngineError(f"invalid regex {param!r}: {e}") from e


Check = Callable[[Any, Optional[str], bool], bool]

CHECKS: dict[str, Check] = {
    "required": _required,
    "filled": _required,
    "nullable": lambda v, p, n: True,
    "email": _email,
    "integer": _integer,
    "numeric": _numeric,
    "string": _string,
    "date": _date,
    "boolean": _boolean,
    "min": _min,
    "max": _max,
    "in": _in,
    "regex": _regex,
}


@lru_cache(maxsize=256)
def parse_rule(expression: str) -> tuple[tuple[str, str | None], ...]:
    """`"required|max:10"` -> `(("required", None), ("max", "10"))`. Raises on unknown rule names."""
    out: list[tuple[str, str | None]] = []
    for part in expression.split("|"):
        part = part.strip()
        if not part:
            continue
        name, sep, param = part.partition(":")
        name = name.strip().lower()
        if name not in CHECKS:
            raise ValidationEngineError(f"unknown validation rule `{name}` in {expression!r}")
        out.append((name, param if sep else None))
    return tuple(out)


class RuleValidator:
    """
    `Validator` for pipe-separated rule strings.

    Custom messages are looked up as `"field.rule"`, then `"rule"`, then `DEFAULT_MESSAGES`.
    `:attribute` and the rule's own parameter placeholder (`:min`, `:max`, `:values`, `:param`)
    are substituted.
    """

    def __init__(self, default_messages: Mapping[str, str] | None = None) -> None:
        self.default_messages = {**DEFAULT_MESSAGES, **(default_messages or {})}

    def _message(self, field: str, rule: str, param: str | None, messages: Mapping[str, str]) -> str:
        text = messages.get(f"{field}.{rule}") or messages.get(rule) or self.default_messages.get(rule)
        if text is None:
            text = f"The :attribute failed the {rule} rule."
        text = text.replace(":attribute", field)
        if param is not None:
            text = text.replace(f":{rule}", param).replace(":values", param).replace(":param", param)
        return text

    def validate(
        self,
        values: Mapping[str, Any],
        rules: Mapping[str, str],
        messages: Mapping[str, str],
    ) -> ValidationResult:
        errors: dict[str, dict[str, str]] = {}

        for field, expression in rules.items():
            parsed = parse_rule(expression)
            numeric = any(name in _NUMERIC_RULES for name, _ in parsed)
            value = values.get(field)
            blank = _is_blank(value)

            for name, param in parsed:
                if blank and name not in _IMPLICIT:
                    continue
                if name == "filled" and value is None:
                    continue
                if not CHECKS[name](value, param, numeric):
                    errors.setdefault(field, {})[name] = self._message(field, name, param, messages)

        return ValidationResult(passed=not errors, data=dict(values), errors=errors)
