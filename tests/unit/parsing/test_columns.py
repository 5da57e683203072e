from __future__ import annotations

import pytest

from spreadsheet_parser.errors import SchemaError
from spreadsheet_parser.parsing.columns import column_letter, letters_to_index, resolve_column_index


@pytest.mark.parametrize(
    "ref, expected",
    [
        (0, 0),
        (7, 7),
        ("0", 0),
        ("12", 12),
        ("A", 0),
        ("a", 0),
        ("c", 2),
        ("Z", 25),
        ("AA", 26),
        ("AB", 27),
        ("AZ", 51),
        ("BA", 52),
        ("LOL", 8513),
        ("xxx", 16871),
        (" B ", 1),
    ],
)
def test_resolve_column_index(ref: object, expected: int) -> None:
    """Ints, digit strings and letter codes of any length resolve to zero-based indexes."""
    assert resolve_column_index(ref, field="f") == expected


@pytest.mark.parametrize("ref", ["", "   ", "A1", "1A", "B-", "Ä", "ß", "ı", "\ufb00", "1.5", -1, True, 1.0, None])
def test_resolve_column_index_rejects(ref: object) -> None:
    """Empty, mixed, negative and non-int/str references are schema errors naming the field."""
    with pytest.raises(SchemaError) as e:
        resolve_column_index(ref, field="rank")
    assert "rank" in str(e.value)


def test_multi_letter_codes_are_not_judged_by_first_character() -> None:
    """A code starting with a letter but continuing with digits is rejected, not half-decoded."""
    with pytest.raises(SchemaError):
        resolve_column_index("AB12", field="f")
    assert resolve_column_index("AB", field="f") == letters_to_index("AB")


@pytest.mark.parametrize("index", [0, 1, 25, 26, 51, 52, 701, 702, 8513, 16871])
def test_column_letter_inverts_resolution(index: int) -> None:
    """`column_letter` produces a code that resolves back to the same index."""
    assert resolve_column_index(column_letter(index), field="f") == index


def test_column_letter_rejects_negative() -> None:
    with pytest.raises(ValueError):
        column_letter(-1)
