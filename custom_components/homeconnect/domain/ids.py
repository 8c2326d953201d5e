"""Identifiers and enumerations for domain objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final


class OperationState(str, Enum):
    """Discrete lifecycle stage reported by an appliance."""

    INACTIVE = "BSH.Common.EnumType.OperationState.Inactive"
    READY = "BSH.Common.EnumType.OperationState.Ready"
    DELAYED_START = "BSH.Common.EnumType.OperationState.DelayedStart"
    RUN = "BSH.Common.EnumType.OperationState.Run"
    PAUSE = "BSH.Common.EnumType.OperationState.Pause"
    FINISHED = "BSH.Common.EnumType.OperationState.Finished"
    ERROR = "BSH.Common.EnumType.OperationState.Error"
    ABORTING = "BSH.Common.EnumType.OperationState.Aborting"

    @classmethod
    def from_api(cls, tag: object) -> OperationState | None:
        """Return the state for ``tag`` or ``None`` when unrecognised."""

        try:
            return cls(str(tag))
        except ValueError:
            return None

    @property
    def label(self) -> str:
        """Return the short name used for entity states."""

        return self.value.rsplit(".", 1)[-1]


ACTIVE_STATES: Final = frozenset(
    {OperationState.DELAYED_START, OperationState.RUN, OperationState.PAUSE}
)
INACTIVE_STATES: Final = frozenset({OperationState.INACTIVE, OperationState.READY})


class PowerState(str, Enum):
    """Power state of an appliance."""

    ON = "BSH.Common.EnumType.PowerState.On"
    STANDBY = "BSH.Common.EnumType.PowerState.Standby"
    OFF = "BSH.Common.EnumType.PowerState.Off"

    @classmethod
    def from_api(cls, tag: object) -> PowerState | None:
        """Return the power state for ``tag`` or ``None`` when unrecognised."""

        try:
            return cls(str(tag))
        except ValueError:
            return None


class DoorState(str, Enum):
    """Door state of an appliance."""

    OPEN = "BSH.Common.EnumType.DoorState.Open"
    CLOSED = "BSH.Common.EnumType.DoorState.Closed"
    LOCKED = "BSH.Common.EnumType.DoorState.Locked"

    @classmethod
    def from_api(cls, tag: object) -> DoorState | None:
        """Return the door state for ``tag`` or ``None`` when unrecognised."""

        try:
            return cls(str(tag))
        except ValueError:
            return None


class Channel(str, Enum):
    """Externally observable attribute of an appliance."""

    OPERATION_STATE = "operation_state"
    POWER_STATE = "power_state"
    DOOR_STATE = "door_state"
    REMOTE_CONTROL_ACTIVE = "remote_control_active_state"
    REMOTE_START_ALLOWED = "remote_start_allowance_state"
    SELECTED_PROGRAM = "selected_program_state"
    ACTIVE_PROGRAM = "active_program_state"
    REMAINING_PROGRAM_TIME = "remaining_program_time_state"
    PROGRAM_PROGRESS = "program_progress_state"
    ELAPSED_PROGRAM_TIME = "elapsed_program_time"
    CAVITY_TEMPERATURE = "oven_current_cavity_temperature"
    SETPOINT_TEMPERATURE = "setpoint_temperature"
    DURATION = "duration"
    BASIC_ACTIONS = "basic_actions_state"


PROGRAM_STATE_CHANNELS: Final = (
    Channel.REMAINING_PROGRAM_TIME,
    Channel.PROGRAM_PROGRESS,
    Channel.ELAPSED_PROGRAM_TIME,
    Channel.CAVITY_TEMPERATURE,
)


class EventKind(Enum):
    """How an inbound push event is reconciled into the mirror."""

    BOOLEAN = "boolean"
    DOOR_STATE = "door_state"
    OPERATION_STATE = "operation_state"
    POWER_STATE = "power_state"
    SELECTED_PROGRAM = "selected_program"
    ACTIVE_PROGRAM = "active_program"
    REMAINING_TIME = "remaining_time"
    PROGRESS = "progress"
    ELAPSED_TIME = "elapsed_time"
    CAVITY_TEMPERATURE = "cavity_temperature"
    SETPOINT_TEMPERATURE = "setpoint_temperature"
    DURATION = "duration"


class ChannelKind(Enum):
    """How a channel value is pulled from the appliance API."""

    STATUS = "status"
    SETTING = "setting"
    SELECTED_PROGRAM = "selected_program"
    SELECTED_PROGRAM_OPTION = "selected_program_option"
    ACTIVE_PROGRAM = "active_program"
    COMMAND = "command"


class ApplianceKind(str, Enum):
    """Appliance families supported by the integration."""

    OVEN = "Oven"
    COFFEE_MAKER = "CoffeeMaker"
    DISHWASHER = "Dishwasher"
    WASHER = "Washer"
    DRYER = "Dryer"
    WASHER_DRYER = "WasherDryer"
    FRIDGE_FREEZER = "FridgeFreezer"
    HOOD = "Hood"
    COOKTOP = "Hob"
    GENERIC = "Generic"

    @classmethod
    def from_api(cls, appliance_type: str | None) -> ApplianceKind:
        """Return the kind for an API appliance type, defaulting to generic."""

        if not appliance_type:
            return cls.GENERIC
        try:
            return cls(appliance_type)
        except ValueError:
            return cls.GENERIC


@dataclass(frozen=True, slots=True)
class HomeAppliance:
    """Appliance metadata as listed by the cloud account.

    Equality and hashing only consider ``ha_id``.
    """

    ha_id: str
    name: str | None = field(default=None, compare=False)
    brand: str | None = field(default=None, compare=False)
    vib: str | None = field(default=None, compare=False)
    connected: bool = field(default=False, compare=False)
    type: str | None = field(default=None, compare=False)
    enumber: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Reject empty appliance identifiers."""

        ha_id = str(self.ha_id).strip()
        if not ha_id:
            msg = "ha_id must not be empty"
            raise ValueError(msg)
        object.__setattr__(self, "ha_id", ha_id)

    @property
    def kind(self) -> ApplianceKind:
        """Return the appliance family."""

        return ApplianceKind.from_api(self.type)

    @property
    def display_name(self) -> str:
        """Return a human readable name for the appliance."""

        if self.name and self.name.strip():
            return self.name.strip()
        return f"{self.kind.value} {self.ha_id}"
