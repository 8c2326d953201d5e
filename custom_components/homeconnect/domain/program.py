"""Program and program option value objects."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import math
from typing import Any, Final


def coerce_int(value: Any) -> int | None:
    """Return ``value`` as an integer when it carries a number."""

    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if value is None:
        return None
    try:
        number = value if isinstance(value, float) else float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


@dataclass(frozen=True, slots=True)
class Option:
    """Named value attached to a program."""

    key: str
    value: int
    unit: str | None = None


@dataclass(frozen=True, slots=True)
class Program:
    """Named operating mode with its options."""

    key: str
    options: tuple[Option, ...] = ()

    @classmethod
    def build(cls, key: str, options: Iterable[Option] = ()) -> Program:
        """Return a program keeping ``options`` in their given order."""

        return cls(key, tuple(options))

    def option(self, key: str) -> Option | None:
        """Return the first option named ``key``."""

        for option in self.options:
            if option.key == key:
                return option
        return None


@dataclass(frozen=True, slots=True)
class NoProgram:
    """Marker for an empty selected or active program slot."""


NO_PROGRAM: Final = NoProgram()

ProgramSlot = Program | NoProgram
