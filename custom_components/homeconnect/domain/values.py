"""Externally visible channel values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final


@dataclass(frozen=True, slots=True)
class Defined:
    """A channel value that carries data."""

    value: Any
    unit: str | None = None


@dataclass(frozen=True, slots=True)
class Undefined:
    """A channel value that is not applicable right now."""


UNDEFINED: Final = Undefined()

ChannelValue = Defined | Undefined


def native_value(value: ChannelValue | None) -> Any:
    """Return the raw value for entities, ``None`` when undefined."""

    if isinstance(value, Defined):
        return value.value
    return None
