"""Translate user commands into appliance API calls."""

from __future__ import annotations

import logging

from homeassistant.const import UnitOfTemperature

from .const import (
    BASIC_ACTION_START,
    DURATION_UNIT_TAG,
    OPTION_DURATION,
    OPTION_SETPOINT_TEMPERATURE,
    POWER_STATE_ON,
    POWER_STATE_STANDBY,
)
from .domain.commands import (
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
from .domain.ids import ACTIVE_STATES, INACTIVE_STATES, Channel
from .domain.mirror import DeviceStateMirror
from .domain.program import Program
from .units import (
    UnitConversionError,
    convert_duration,
    convert_temperature,
    parse_temperature_unit,
)

_LOGGER = logging.getLogger(__name__)


class CommandTranslator:
    """Decide which API call, if any, a channel command needs."""

    def translate(
        self, channel: Channel, command: Command, mirror: DeviceStateMirror
    ) -> ApiCall | None:
        """Return the call for ``command`` on ``channel`` or ``None``."""

        if channel is Channel.BASIC_ACTIONS and isinstance(command, StringCommand):
            return self._basic_action(command, mirror)
        if channel is Channel.SELECTED_PROGRAM and isinstance(command, StringCommand):
            return SetSelectedProgram(command.value)
        if channel is Channel.POWER_STATE and isinstance(command, OnOffCommand):
            return SetPowerState(POWER_STATE_ON if command.on else POWER_STATE_STANDBY)
        if channel is Channel.SETPOINT_TEMPERATURE and isinstance(
            command, QuantityCommand
        ):
            return self._setpoint(command, mirror)
        if channel is Channel.DURATION and isinstance(command, QuantityCommand):
            return self._duration(command, mirror)

        _LOGGER.debug(
            "%s: no translation for %s on %s", mirror.ha_id, command, channel.value
        )
        return None

    def _basic_action(
        self, command: StringCommand, mirror: DeviceStateMirror
    ) -> ApiCall | None:
        if command.value.strip().lower() != BASIC_ACTION_START:
            return StopProgram()
        selected = mirror.selected_program
        if not isinstance(selected, Program):
            _LOGGER.warning(
                "%s: cannot start program; no program is selected", mirror.ha_id
            )
            return None
        return StartProgram(selected.key)

    def _setpoint(
        self, command: QuantityCommand, mirror: DeviceStateMirror
    ) -> ApiCall | None:
        try:
            unit = parse_temperature_unit(command.unit)
            if unit is not None and unit == mirror.native_temperature_unit:
                value = int(command.value)
            else:
                _LOGGER.info(
                    "Converting target setpoint temperature from %s%s to °C value.",
                    command.value,
                    command.unit,
                )
                value = int(
                    convert_temperature(
                        command.value, command.unit, UnitOfTemperature.CELSIUS
                    )
                )
                unit = UnitOfTemperature.CELSIUS
        except UnitConversionError as err:
            _LOGGER.error("Could not set setpoint! error: %s", err)
            return None

        _LOGGER.debug("Set setpoint temperature to %s %s.", value, unit)
        return self._gated_option(
            mirror, OPTION_SETPOINT_TEMPERATURE, str(value), str(unit)
        )

    def _duration(
        self, command: QuantityCommand, mirror: DeviceStateMirror
    ) -> ApiCall | None:
        try:
            seconds = int(convert_duration(command.value, command.unit))
        except UnitConversionError as err:
            _LOGGER.error("Could not set duration! error: %s", err)
            return None

        _LOGGER.debug("Set duration to %s seconds.", seconds)
        return self._gated_option(
            mirror, OPTION_DURATION, str(seconds), DURATION_UNIT_TAG
        )

    @staticmethod
    def _gated_option(
        mirror: DeviceStateMirror, option_key: str, value: str, unit: str
    ) -> ApiCall | None:
        state = mirror.operation_state
        if state is None or state not in ACTIVE_STATES | INACTIVE_STATES:
            _LOGGER.debug(
                "%s: not writing %s in operation state %s",
                mirror.ha_id,
                option_key,
                state.label if state else None,
            )
            return None
        return SetProgramOption(
            option_key,
            value,
            unit,
            value_as_int=True,
            apply_live=state in ACTIVE_STATES,
        )
