"""Inbound push events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .program import coerce_int


@dataclass(frozen=True, slots=True)
class Event:
    """One status, event or notify item pushed by the appliance."""

    key: str
    value: Any = None
    unit: str | None = None

    def value_as_int(self) -> int | None:
        """Return the value as an integer when it is numeric."""

        return coerce_int(self.value)

    def value_as_str(self) -> str | None:
        """Return the value as a trimmed string, ``None`` when empty."""

        if self.value is None:
            return None
        text = str(self.value).strip()
        return text or None
