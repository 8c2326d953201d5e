"""Domain-layer primitives for the Home Connect integration."""

from .commands import (
    ApiCall,
    Command,
    OnOffCommand,
    QuantityCommand,
    SetPowerState,
    SetProgramOption,
    SetSelectedProgram,
    StartProgram,
    StopProgram,
    StringCommand,
)
from .events import Event
from .ids import (
    ACTIVE_STATES,
    INACTIVE_STATES,
    ApplianceKind,
    Channel,
    ChannelKind,
    DoorState,
    EventKind,
    HomeAppliance,
    OperationState,
    PowerState,
)
from .mirror import DeviceStateMirror
from .program import NO_PROGRAM, NoProgram, Option, Program, ProgramSlot
from .values import UNDEFINED, ChannelValue, Defined, Undefined, native_value

__all__ = [
    "ACTIVE_STATES",
    "INACTIVE_STATES",
    "NO_PROGRAM",
    "UNDEFINED",
    "ApiCall",
    "ApplianceKind",
    "Channel",
    "ChannelKind",
    "ChannelValue",
    "Command",
    "Defined",
    "DeviceStateMirror",
    "DoorState",
    "Event",
    "EventKind",
    "HomeAppliance",
    "NoProgram",
    "OnOffCommand",
    "OperationState",
    "Option",
    "PowerState",
    "Program",
    "ProgramSlot",
    "QuantityCommand",
    "SetPowerState",
    "SetProgramOption",
    "SetSelectedProgram",
    "StartProgram",
    "StopProgram",
    "StringCommand",
    "Undefined",
    "native_value",
]
