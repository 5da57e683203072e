from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterator, Protocol

from spreadsheet_parser.casting.casters import (
    BoolCaster,
    DateCaster,
    DateTimeCaster,
    DecimalCaster,
    FloatCaster,
    IntCaster,
)


class Caster(Protocol):
    """Converts a raw, non-empty cell value into a field's type. Raises `CastError` on bad input."""
    def cast(self, value: Any, fmt: str | None = None) -> Any: ...


class CasterRegistry:
    """
    Declared field type -> `Caster`.

    Keys are the type objects themselves (`date`, `Decimal`, a user class ...), never their names.
    Types without a caster are passed through unchanged.
    """

    def __init__(self, casters: dict[Any, Caster] | None = None) -> None:
        self._casters: dict[Any, Caster] = dict(casters or {})

    def register(self, type_tag: Any, caster: Caster) -> None:
        """Associate `caster` with `type_tag`, replacing any previous one."""
        self._casters[type_tag] = caster

    def get(self, type_tag: Any) -> Caster | None:
        return self._casters.get(type_tag)

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._casters

    def __iter__(self) -> Iterator[Any]:
        return iter(self._casters)

    def __len__(self) -> int:
        return len(self._casters)

    def copy(self) -> CasterRegistry:
        return CasterRegistry(self._casters)

    def cast(self, value: Any, type_tag: Any, fmt: str | None = None) -> Any:
        """
        Convert `value` for a field declared as `type_tag`.

        - `None` is returned as is, casters never see it.
        - unregistered `type_tag` -> `value` unchanged.
        """
        if value is None:
            return None
        caster = self._casters.get(type_tag)
        if caster is None:
            return value
        return caster.cast(value, fmt)


def default_casters() -> CasterRegistry:
    """A fresh registry with the built-in casters."""
    return CasterRegistry(
        {
            date: DateCaster(),
            datetime: DateTimeCaster(),
            int: IntCaster(),
            float: FloatCaster(),
            Decimal: DecimalCaster(),
            bool: BoolCaster(),
        }
    )
