from __future__ import annotations

from typing import Any

import pytest

from spreadsheet_parser.errors import ValidationEngineError
from spreadsheet_parser.validation.rules import RuleValidator, parse_rule


def _errors(values: dict[str, Any], rules: dict[str, str], messages: dict[str, str] | None = None) -> dict:
    result = RuleValidator().validate(values, rules, messages or {})
    assert result.passed is (not result.errors)
    return {k: dict(v) for k, v in result.errors.items()}


def test_parse_rule() -> None:
    assert parse_rule("required|max:10| in:a,b ") == (("required", None), ("max", "10"), ("in", "a,b"))
    assert parse_rule("") == ()


def test_unknown_rule_is_an_engine_error() -> None:
    with pytest.raises(ValidationEngineError, match="frobnicate"):
        parse_rule("required|frobnicate")


@pytest.mark.parametrize(
    "rule, value",
    [
        ("required", "x"),
        ("email", "ada@example.com"),
        ("integer", "42"),
        ("integer", 42),
        ("integer", "-7"),
        ("numeric", "3.14"),
        ("numeric", 2),
        ("string", "abc"),
        ("date", "10/31/1977"),
        ("boolean", "1"),
        ("boolean", False),
        ("min:3", "abc"),
        ("max:3", "abc"),
        ("integer|min:5", "12"),
        ("numeric|max:1.5", "1.5"),
        ("in:GB,US", "US"),
        ("regex:^SKU-\\d+$", "SKU-12"),
    ],
)
def test_passing_rules(rule: str, value: Any) -> None:
    assert _errors({"f": value}, {"f": rule}) == {}


@pytest.mark.parametrize(
    "rule, value, failed",
    [
        ("required", "", "required"),
        ("required", "   ", "required"),
        ("required", None, "required"),
        ("email", "nope", "email"),
        ("integer", "1.5", "integer"),
        ("integer", True, "integer"),
        ("numeric", "abc", "numeric"),
        ("string", 5, "string"),
        ("date", "31/31/1977", "date"),
        ("boolean", "maybe", "boolean"),
        ("min:3", "ab", "min"),
        ("integer|max:10", "11", "max"),
        ("in:GB,US", "FR", "in"),
        ("regex:^SKU-\\d+$", "sku-1", "regex"),
    ],
)
def test_failing_rules(rule: str, value: Any, failed: str) -> None:
    assert list(_errors({"f": value}, {"f": rule})["f"]) == [failed]


def test_blank_values_skip_non_required_rules() -> None:
    """`nullable|date` on an empty cell passes; so does a bare `email` rule."""
    assert _errors({"d": "", "e": None}, {"d": "nullable|date", "e": "email"}) == {}


def test_filled_only_rejects_present_blank_values() -> None:
    assert _errors({"f": None}, {"f": "filled"}) == {}
    assert list(_errors({"f": " "}, {"f": "filled"})["f"]) == ["filled"]


def test_every_failing_rule_is_reported() -> None:
    errors = _errors({"f": "abcdef"}, {"f": "email|max:3"})
    assert list(errors["f"]) == ["email", "max"]


def test_message_lookup_order() -> None:
    """`field.rule` beats `rule`, which beats the default; placeholders are filled in."""
    messages = {"email.required": "Need an email", "required": "The :attribute column is empty"}
    errors = _errors(
        {"email": "", "name": "", "qty": "0"},
        {"email": "required", "name": "required", "qty": "integer|min:1"},
        messages,
    )
    assert errors == {
        "email": {"required": "Need an email"},
        "name": {"required": "The name column is empty"},
        "qty": {"min": "The qty must be at least 1."},
    }


def test_fields_without_rules_are_not_checked() -> None:
    result = RuleValidator().validate({"a": "x", "b": "not checked"}, {"a": "required"}, {})
    assert result.passed
    assert result.data == {"a": "x", "b": "not checked"}


def test_bad_rule_parameters() -> None:
    with pytest.raises(ValidationEngineError):
        RuleValidator().validate({"f": "x"}, {"f": "min:lots"}, {})
    with pytest.raises(ValidationEngineError):
        RuleValidator().validate({"f": "x"}, {"f": "regex:("}, {})


def test_custom_default_messages() -> None:
    validator = RuleValidator(default_messages={"required": ":attribute is mandatory"})
    result = validator.validate({"f": ""}, {"f": "required"}, {})
    assert result.errors == {"f": {"required": "f is mandatory"}}
