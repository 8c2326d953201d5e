"""Per-appliance mirror of the operable state and its cascade rules."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import logging
from typing import Any

from homeassistant.const import UnitOfTemperature

from ..const import (
    OPTION_DURATION,
    OPTION_ELAPSED_PROGRAM_TIME,
    OPTION_PROGRAM_PROGRESS,
    OPTION_REMAINING_PROGRAM_TIME,
    OPTION_SETPOINT_TEMPERATURE,
)
from ..units import PERCENT, SECONDS, map_temperature
from .ids import PROGRAM_STATE_CHANNELS, Channel, DoorState, OperationState, PowerState
from .program import NO_PROGRAM, NoProgram, Option, Program, ProgramSlot
from .values import UNDEFINED, ChannelValue, Defined

_LOGGER = logging.getLogger(__name__)

ChannelValueSink = Callable[[Channel, ChannelValue], None]
RefreshRequester = Callable[[frozenset[Channel] | None], None]

_PROGRAM_CHANNELS_CLEARED_ON_STANDBY = (
    Channel.SELECTED_PROGRAM,
    Channel.ACTIVE_PROGRAM,
    Channel.SETPOINT_TEMPERATURE,
    Channel.DURATION,
)


def _discard_value(channel: Channel, value: ChannelValue) -> None:
    """Default sink used before the host attaches one."""


def _discard_refresh(channels: frozenset[Channel] | None) -> None:
    """Default refresh requester used before a session attaches one."""


class DeviceStateMirror:
    """Local cache of one appliance's state.

    Every mutation goes through the ``apply_*`` methods so dependent channels
    follow the primary change. Values are only emitted for channels the
    appliance registered; the sink receives each emitted value.
    """

    def __init__(
        self,
        ha_id: str,
        channels: Iterable[Channel],
        *,
        sink: ChannelValueSink | None = None,
        refresh_requester: RefreshRequester | None = None,
    ) -> None:
        """Initialise an empty mirror for ``ha_id``."""

        self.ha_id = ha_id
        self._channels = frozenset(channels)
        self._sink: ChannelValueSink = sink or _discard_value
        self._refresh_requester: RefreshRequester = (
            refresh_requester or _discard_refresh
        )
        self.operation_state: OperationState | None = None
        self.power_state: PowerState | None = None
        self.door_state: DoorState | None = None
        self.selected_program: ProgramSlot = NO_PROGRAM
        self.active_program: ProgramSlot = NO_PROGRAM
        self.temperature_unit: UnitOfTemperature | None = None
        self._values: dict[Channel, ChannelValue] = {}

    # ------------------------------------------------------------------
    # Wiring and accessors
    # ------------------------------------------------------------------
    def attach(
        self,
        *,
        sink: ChannelValueSink | None = None,
        refresh_requester: RefreshRequester | None = None,
    ) -> None:
        """Attach the value sink and refresh requester."""

        if sink is not None:
            self._sink = sink
        if refresh_requester is not None:
            self._refresh_requester = refresh_requester

    @property
    def channels(self) -> frozenset[Channel]:
        """Return the channels registered for this appliance."""

        return self._channels

    @property
    def values(self) -> dict[Channel, ChannelValue]:
        """Return a copy of the last emitted value per channel."""

        return dict(self._values)

    @property
    def native_temperature_unit(self) -> UnitOfTemperature:
        """Return the temperature unit the appliance reports in."""

        return self.temperature_unit or UnitOfTemperature.CELSIUS

    def has_channel(self, channel: Channel) -> bool:
        """Return True when ``channel`` is registered."""

        return channel in self._channels

    def value(self, channel: Channel) -> ChannelValue:
        """Return the last emitted value for ``channel``."""

        return self._values.get(channel, UNDEFINED)

    def set_channel(self, channel: Channel, value: ChannelValue) -> None:
        """Store and emit ``value`` when ``channel`` is registered."""

        if channel not in self._channels:
            return
        self._values[channel] = value
        self._sink(channel, value)

    def _request_refresh(self, channels: Iterable[Channel] | None) -> None:
        if channels is None:
            self._refresh_requester(None)
            return
        wanted = frozenset(channel for channel in channels if channel in self._channels)
        if wanted:
            self._refresh_requester(wanted)

    # ------------------------------------------------------------------
    # Cascade rules
    # ------------------------------------------------------------------
    def apply_operation_state(self, state: OperationState | None) -> None:
        """Record the operation state and update dependent channels."""

        self.operation_state = state
        self.set_channel(
            Channel.OPERATION_STATE,
            Defined(state.label) if state is not None else UNDEFINED,
        )

        if state is OperationState.FINISHED:
            self.set_channel(Channel.PROGRAM_PROGRESS, Defined(100, PERCENT))
        elif state is OperationState.RUN:
            self.set_channel(Channel.PROGRAM_PROGRESS, Defined(0, PERCENT))
            self._request_refresh((Channel.ACTIVE_PROGRAM,))
        elif state is OperationState.READY:
            self.reset_program_state_channels()

    def apply_power_state(self, state: PowerState | None) -> None:
        """Record the power state; leaving On clears program channels."""

        self.power_state = state
        self.set_channel(
            Channel.POWER_STATE,
            Defined(state is PowerState.ON) if state is not None else UNDEFINED,
        )

        if state is not PowerState.ON:
            self.reset_program_state_channels()
            self.selected_program = NO_PROGRAM
            self.active_program = NO_PROGRAM
            for channel in _PROGRAM_CHANNELS_CLEARED_ON_STANDBY:
                self.set_channel(channel, UNDEFINED)
            return

        # The appliance may have changed while it was off or in standby.
        self._request_refresh(None)

    def apply_door_state(self, state: DoorState | None) -> None:
        """Record the door state."""

        self.door_state = state
        self.set_channel(
            Channel.DOOR_STATE,
            Defined(state is DoorState.OPEN) if state is not None else UNDEFINED,
        )

    def apply_active_program(self, slot: ProgramSlot) -> None:
        """Record the active program and the options it reports."""

        self.active_program = slot
        if isinstance(slot, NoProgram):
            self.set_channel(Channel.ACTIVE_PROGRAM, UNDEFINED)
            self.reset_program_state_channels()
            return

        self.set_channel(Channel.ACTIVE_PROGRAM, Defined(slot.key))
        for option in slot.options:
            self.apply_active_option(option)

    def apply_active_option(self, option: Option) -> None:
        """Emit the channel fed by a running program option."""

        if option.key == OPTION_REMAINING_PROGRAM_TIME:
            # Zero means no remaining time has been reported yet.
            self.set_channel(
                Channel.REMAINING_PROGRAM_TIME,
                UNDEFINED if option.value == 0 else Defined(option.value, SECONDS),
            )
        elif option.key == OPTION_PROGRAM_PROGRESS:
            # 100 is reported by programs that are not running.
            self.set_channel(
                Channel.PROGRAM_PROGRESS,
                UNDEFINED if option.value == 100 else Defined(option.value, PERCENT),
            )
        elif option.key == OPTION_ELAPSED_PROGRAM_TIME:
            self.set_channel(
                Channel.ELAPSED_PROGRAM_TIME, Defined(option.value, SECONDS)
            )

    def apply_selected_program(self, slot: ProgramSlot) -> None:
        """Record the selected program and derive its option channels."""

        self.selected_program = slot
        if isinstance(slot, NoProgram):
            self.set_channel(Channel.SELECTED_PROGRAM, UNDEFINED)
            return

        self.set_channel(Channel.SELECTED_PROGRAM, Defined(slot.key))
        setpoint = slot.option(OPTION_SETPOINT_TEMPERATURE)
        if setpoint is None:
            self.set_channel(Channel.SETPOINT_TEMPERATURE, UNDEFINED)
        else:
            self._apply_setpoint(setpoint)
        duration = slot.option(OPTION_DURATION)
        if duration is None:
            self.set_channel(Channel.DURATION, UNDEFINED)
        else:
            self.set_channel(Channel.DURATION, Defined(duration.value, SECONDS))

    def apply_selected_program_key(self, key: str | None) -> None:
        """Record a selected program change that only carries the key."""

        if not key:
            self.selected_program = NO_PROGRAM
            self.set_channel(Channel.SELECTED_PROGRAM, UNDEFINED)
            return

        current = self.selected_program
        self.set_channel(Channel.SELECTED_PROGRAM, Defined(key))
        if isinstance(current, Program) and current.key == key:
            return
        # Options of the previous program no longer apply.
        self.selected_program = Program(key)
        self.set_channel(Channel.SETPOINT_TEMPERATURE, UNDEFINED)
        self.set_channel(Channel.DURATION, UNDEFINED)
        self._request_refresh((Channel.SETPOINT_TEMPERATURE, Channel.DURATION))

    def apply_selected_option(self, option: Option) -> None:
        """Record a setpoint or duration change of the selected program."""

        current = self.selected_program
        if isinstance(current, Program):
            others = tuple(item for item in current.options if item.key != option.key)
            self.selected_program = Program(current.key, (*others, option))

        if option.key == OPTION_SETPOINT_TEMPERATURE:
            self._apply_setpoint(option)
        elif option.key == OPTION_DURATION:
            self.set_channel(Channel.DURATION, Defined(option.value, SECONDS))

    def apply_cavity_temperature(self, value: int, unit: str | None) -> None:
        """Record the current cavity temperature."""

        mapped = map_temperature(unit)
        self.temperature_unit = mapped
        self.set_channel(Channel.CAVITY_TEMPERATURE, Defined(value, mapped))

    def apply_boolean(self, channel: Channel, value: Any) -> None:
        """Record a plain boolean status."""

        self.set_channel(channel, Defined(bool(value)))

    def reset_program_state_channels(self) -> None:
        """Clear the channels that only make sense while a program runs."""

        _LOGGER.debug("%s: resetting active program channel states", self.ha_id)
        for channel in PROGRAM_STATE_CHANNELS:
            self.set_channel(channel, UNDEFINED)

    def _apply_setpoint(self, option: Option) -> None:
        mapped = map_temperature(option.unit)
        self.temperature_unit = mapped
        self.set_channel(Channel.SETPOINT_TEMPERATURE, Defined(option.value, mapped))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def snapshot(self) -> Mapping[str, Any]:
        """Return a plain representation of the mirror."""

        def _slot(slot: ProgramSlot) -> dict[str, Any] | None:
            if isinstance(slot, NoProgram):
                return None
            return {
                "key": slot.key,
                "options": [
                    {"key": opt.key, "value": opt.value, "unit": opt.unit}
                    for opt in slot.options
                ],
            }

        return {
            "operation_state": self.operation_state.label
            if self.operation_state
            else None,
            "power_state": self.power_state.value if self.power_state else None,
            "door_state": self.door_state.value if self.door_state else None,
            "selected_program": _slot(self.selected_program),
            "active_program": _slot(self.active_program),
            "channels": {
                channel.value: (
                    {"value": value.value, "unit": value.unit}
                    if isinstance(value, Defined)
                    else None
                )
                for channel, value in sorted(
                    self._values.items(), key=lambda item: item[0].value
                )
            },
        }
