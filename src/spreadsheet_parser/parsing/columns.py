from __future__ import annotations

import string
from typing import Any

from spreadsheet_parser.errors import SchemaError


def letters_to_index(code: str) -> int:
    """
    Decode a spreadsheet column name into a zero-based index.

    Base-26 with A=1 ... Z=26, most significant letter first:
    `"A"` -> 0, `"Z"` -> 25, `"AA"` -> 26, `"LOL"` -> 8513.
    Expects an already upper-cased, letters-only code.
    """
    value = 0
    for ch in code:
        value = value * 26 + (ord(ch) - ord("A") + 1)
    return value - 1


def column_letter(index: int) -> str:
    """Inverse of `letters_to_index`: `0` -> `"A"`, `26` -> `"AA"`."""
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise ValueError(f"column index must be a non-negative int, got {index!r}")
    n = index + 1
    out: list[str] = []
    while n:
        n, rem = divmod(n - 1, 26)
        out.append(chr(ord("A") + rem))
    return "".join(reversed(out))


def resolve_column_index(ref: Any, *, field: str) -> int:
    """
    Translate a column reference into a zero-based column index.

    Accepts:
    - non-negative `int`,
    - a string of digits (`"3"`),
    - a string of letters, case-insensitive (`"c"`, `"AA"`).

    Raises `SchemaError` (naming `field`) on anything else, including empty strings and
    mixed codes like `"A1"`.
    """
    if isinstance(ref, bool):
        raise SchemaError(f"Invalid column reference {ref!r} for column `{field}`")

    if isinstance(ref, int):
        if ref < 0:
            raise SchemaError(f"Negative column index {ref} for column `{field}`")
        return ref

    if not isinstance(ref, str):
        raise SchemaError(f"Unsupported column reference type {type(ref).__name__} for column `{field}`")

    s = ref.strip()
    if s == "":
        raise SchemaError(f"Empty string index for column `{field}`")

    # str.isdigit() also accepts things like superscripts, so check against ascii explicitly.
    if all(ch in string.digits for ch in s):
        return int(s)

    # check before upper-casing: "ß".upper() is "SS"
    if s.isascii() and s.isalpha():
        return letters_to_index(s.upper())

    raise SchemaError(f"Unparseable column reference {ref!r} for column `{field}`")
