from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """What a validation engine reports for one row."""
    passed: bool
    data: Mapping[str, Any]                                             # cleaned values, keyed by field name.
    errors: Mapping[str, Mapping[str, str]] = field(default_factory=dict)  # field -> rule -> message.


class Validator(Protocol):
    """
    A validation engine.

    `rules` maps field names to opaque rule expressions, `messages` holds custom texts keyed
    by `"field.rule"` or by a bare rule name.
    """
    def validate(
        self,
        values: Mapping[str, Any],
        rules: Mapping[str, str],
        messages: Mapping[str, str],
    ) -> ValidationResult: ...
