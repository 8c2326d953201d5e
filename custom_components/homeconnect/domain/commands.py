"""User commands and the outbound appliance calls they translate to."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StringCommand:
    """Free-form text command, e.g. a program key or a basic action."""

    value: str


@dataclass(frozen=True, slots=True)
class OnOffCommand:
    """Boolean command."""

    on: bool


@dataclass(frozen=True, slots=True)
class QuantityCommand:
    """Numeric command carrying a unit."""

    value: float
    unit: str


Command = StringCommand | OnOffCommand | QuantityCommand


@dataclass(frozen=True, slots=True)
class StartProgram:
    """Start ``program_key`` on the appliance."""

    program_key: str


@dataclass(frozen=True, slots=True)
class StopProgram:
    """Stop the running program."""


@dataclass(frozen=True, slots=True)
class SetSelectedProgram:
    """Select ``program_key`` without starting it."""

    program_key: str


@dataclass(frozen=True, slots=True)
class SetPowerState:
    """Switch the appliance to the power state ``tag``."""

    tag: str


@dataclass(frozen=True, slots=True)
class SetProgramOption:
    """Write one option of the selected or running program."""

    option_key: str
    value: str
    unit: str
    value_as_int: bool = True
    apply_live: bool = False


ApiCall = StartProgram | StopProgram | SetSelectedProgram | SetPowerState | SetProgramOption
