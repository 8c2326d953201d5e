from __future__ import annotations

import logging

import pytest

from conftest import OVEN_ID
from custom_components.homeconnect.const import (
    OPTION_DURATION,
    OPTION_SETPOINT_TEMPERATURE,
    POWER_STATE_ON,
    POWER_STATE_STANDBY,
)
from custom_components.homeconnect.domain.commands import (
    OnOffCommand,
    QuantityCommand,
    SetPowerState,
    SetProgramOption,
    SetSelectedProgram,
    StartProgram,
    StopProgram,
    StringCommand,
)
from custom_components.homeconnect.domain.ids import (
    ApplianceKind,
    Channel,
    OperationState,
)
from custom_components.homeconnect.domain.mirror import DeviceStateMirror
from custom_components.homeconnect.domain.program import Option, Program
from custom_components.homeconnect.profiles import profile_for
from custom_components.homeconnect.translator import CommandTranslator

HOT_AIR = "Cooking.Oven.Program.HeatingMode.HotAir"


def _mirror(state: OperationState | None = None) -> DeviceStateMirror:
    mirror = DeviceStateMirror(OVEN_ID, profile_for(ApplianceKind.OVEN).channels)
    if state is not None:
        mirror.apply_operation_state(state)
    return mirror


def test_setpoint_fahrenheit_is_converted_while_running() -> None:
    mirror = _mirror(OperationState.RUN)

    call = CommandTranslator().translate(
        Channel.SETPOINT_TEMPERATURE, QuantityCommand(350, "°F"), mirror
    )

    assert call == SetProgramOption(
        OPTION_SETPOINT_TEMPERATURE, "176", "°C", value_as_int=True, apply_live=True
    )


def test_setpoint_without_operation_state_is_dropped() -> None:
    mirror = _mirror()
    before = mirror.values

    call = CommandTranslator().translate(
        Channel.SETPOINT_TEMPERATURE, QuantityCommand(200, "°C"), mirror
    )

    assert call is None
    assert mirror.values == before
    assert mirror.operation_state is None


@pytest.mark.parametrize(
    "state", [OperationState.FINISHED, OperationState.ERROR, OperationState.ABORTING]
)
def test_setpoint_outside_program_states_is_dropped(state: OperationState) -> None:
    call = CommandTranslator().translate(
        Channel.SETPOINT_TEMPERATURE, QuantityCommand(200, "°C"), _mirror(state)
    )

    assert call is None


@pytest.mark.parametrize(
    ("state", "apply_live"),
    [
        (OperationState.READY, False),
        (OperationState.INACTIVE, False),
        (OperationState.DELAYED_START, True),
        (OperationState.PAUSE, True),
    ],
)
def test_setpoint_targets_running_or_selected_program(
    state: OperationState, apply_live: bool
) -> None:
    call = CommandTranslator().translate(
        Channel.SETPOINT_TEMPERATURE, QuantityCommand(200.7, "°C"), _mirror(state)
    )

    assert call == SetProgramOption(
        OPTION_SETPOINT_TEMPERATURE, "200", "°C", True, apply_live
    )


def test_setpoint_in_native_unit_is_passed_through() -> None:
    mirror = _mirror(OperationState.READY)
    mirror.apply_selected_program(
        Program(HOT_AIR, (Option(OPTION_SETPOINT_TEMPERATURE, 400, "°F"),))
    )

    call = CommandTranslator().translate(
        Channel.SETPOINT_TEMPERATURE, QuantityCommand(350, "°F"), mirror
    )

    assert call == SetProgramOption(
        OPTION_SETPOINT_TEMPERATURE, "350", "°F", True, False
    )


def test_setpoint_with_non_temperature_unit_logs_error(caplog) -> None:
    mirror = _mirror(OperationState.RUN)

    call = CommandTranslator().translate(
        Channel.SETPOINT_TEMPERATURE, QuantityCommand(3, "min"), mirror
    )

    assert call is None
    assert [r.levelno for r in caplog.records].count(logging.ERROR) == 1


def test_duration_is_converted_to_seconds() -> None:
    call = CommandTranslator().translate(
        Channel.DURATION, QuantityCommand(2, "min"), _mirror(OperationState.RUN)
    )

    assert call == SetProgramOption(OPTION_DURATION, "120", "seconds", True, True)


def test_duration_with_pressure_unit_logs_one_error(caplog) -> None:
    caplog.set_level(logging.DEBUG)

    call = CommandTranslator().translate(
        Channel.DURATION, QuantityCommand(3, "Pa"), _mirror(OperationState.RUN)
    )

    assert call is None
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Could not set duration" in errors[0].getMessage()


def test_start_uses_selected_program() -> None:
    mirror = _mirror(OperationState.READY)
    mirror.apply_selected_program(Program(HOT_AIR))

    call = CommandTranslator().translate(
        Channel.BASIC_ACTIONS, StringCommand("Start"), mirror
    )

    assert call == StartProgram(HOT_AIR)


def test_start_without_selected_program_is_dropped(caplog) -> None:
    call = CommandTranslator().translate(
        Channel.BASIC_ACTIONS, StringCommand("start"), _mirror(OperationState.READY)
    )

    assert call is None
    assert "no program is selected" in caplog.text


def test_any_other_basic_action_stops() -> None:
    call = CommandTranslator().translate(
        Channel.BASIC_ACTIONS, StringCommand("stop"), _mirror()
    )

    assert call == StopProgram()


def test_selected_program_and_power_commands() -> None:
    translator = CommandTranslator()
    mirror = _mirror()

    assert translator.translate(
        Channel.SELECTED_PROGRAM, StringCommand(HOT_AIR), mirror
    ) == SetSelectedProgram(HOT_AIR)
    assert translator.translate(
        Channel.POWER_STATE, OnOffCommand(True), mirror
    ) == SetPowerState(POWER_STATE_ON)
    assert translator.translate(
        Channel.POWER_STATE, OnOffCommand(False), mirror
    ) == SetPowerState(POWER_STATE_STANDBY)


def test_unsupported_command_shape_is_ignored() -> None:
    translator = CommandTranslator()
    mirror = _mirror(OperationState.RUN)

    setpoint = translator.translate(
        Channel.SETPOINT_TEMPERATURE, OnOffCommand(True), mirror
    )
    door = translator.translate(Channel.DOOR_STATE, StringCommand("open"), mirror)

    assert setpoint is None
    assert door is None
