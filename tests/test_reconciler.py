from __future__ import annotations

import logging
from types import MappingProxyType

import pytest

from conftest import OVEN_ID, FakeClient, RecordingSink
from custom_components.homeconnect.api import AuthorizationError, CommunicationError
from custom_components.homeconnect.const import (
    OPTION_DURATION,
    OPTION_ELAPSED_PROGRAM_TIME,
    OPTION_PROGRAM_PROGRESS,
    OPTION_REMAINING_PROGRAM_TIME,
    OPTION_SETPOINT_TEMPERATURE,
    ROOT_ACTIVE_PROGRAM,
    ROOT_SELECTED_PROGRAM,
    SETTING_POWER_STATE,
    STATUS_DOOR_STATE,
    STATUS_OPERATION_STATE,
    STATUS_OVEN_CAVITY_TEMPERATURE,
    STATUS_REMOTE_CONTROL_ACTIVE,
)
from custom_components.homeconnect.domain.events import Event
from custom_components.homeconnect.domain.ids import ApplianceKind, Channel, ChannelKind
from custom_components.homeconnect.domain.mirror import DeviceStateMirror
from custom_components.homeconnect.domain.program import NO_PROGRAM, Option, Program
from custom_components.homeconnect.domain.values import UNDEFINED, Defined
from custom_components.homeconnect.profiles import profile_for
from custom_components.homeconnect.reconciler import EventReconciler, PollingReconciler

HOT_AIR = "Cooking.Oven.Program.HeatingMode.HotAir"
RUN = "BSH.Common.EnumType.OperationState.Run"
READY = "BSH.Common.EnumType.OperationState.Ready"
POWER_ON = "BSH.Common.EnumType.PowerState.On"
POWER_STANDBY = "BSH.Common.EnumType.PowerState.Standby"


def _build(kind: ApplianceKind = ApplianceKind.OVEN):
    profile = profile_for(kind)
    sink = RecordingSink()
    refreshes: list[frozenset[Channel] | None] = []
    mirror = DeviceStateMirror(
        OVEN_ID, profile.channels, sink=sink, refresh_requester=refreshes.append
    )
    events = EventReconciler(mirror, profile)
    polling = PollingReconciler(mirror, profile, events)
    return mirror, sink, refreshes, events, polling


def test_event_reconciler_dispatches_by_key() -> None:
    mirror, _sink, refreshes, events, _polling = _build()

    events.handle(Event(STATUS_OPERATION_STATE, RUN))
    events.handle(Event(STATUS_DOOR_STATE, "BSH.Common.EnumType.DoorState.Open"))
    events.handle(Event(STATUS_REMOTE_CONTROL_ACTIVE, "false"))
    events.handle(Event(STATUS_OVEN_CAVITY_TEMPERATURE, 57.5, "°C"))
    events.handle(Event(OPTION_REMAINING_PROGRAM_TIME, 1200, "seconds"))
    events.handle(Event(OPTION_PROGRAM_PROGRESS, 12, "%"))

    assert mirror.value(Channel.OPERATION_STATE) == Defined("Run")
    assert mirror.value(Channel.DOOR_STATE) == Defined(True)
    assert mirror.value(Channel.REMOTE_CONTROL_ACTIVE) == Defined(False)
    assert mirror.value(Channel.CAVITY_TEMPERATURE) == Defined(57, "°C")
    assert mirror.value(Channel.REMAINING_PROGRAM_TIME) == Defined(1200, "s")
    assert mirror.value(Channel.PROGRAM_PROGRESS) == Defined(12, "%")
    assert refreshes == [frozenset({Channel.ACTIVE_PROGRAM})]


def test_event_reconciler_ignores_unknown_keys(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    mirror, sink, _refreshes, events, _polling = _build()

    assert not events.handles("Vendor.Status.Unknown")
    events.handle(Event("Vendor.Status.Unknown", 1))

    assert sink.emitted == []
    assert "ignoring event Vendor.Status.Unknown" in caplog.text


def test_event_reconciler_non_numeric_option_is_undefined() -> None:
    mirror, _sink, _refreshes, events, _polling = _build()
    events.handle(Event(OPTION_REMAINING_PROGRAM_TIME, 90, "seconds"))

    events.handle(Event(OPTION_REMAINING_PROGRAM_TIME, "n/a"))

    assert mirror.value(Channel.REMAINING_PROGRAM_TIME) is UNDEFINED


def test_event_reconciler_program_roots() -> None:
    mirror, _sink, _refreshes, events, _polling = _build()

    events.handle(Event(ROOT_SELECTED_PROGRAM, HOT_AIR))
    events.handle(Event(ROOT_ACTIVE_PROGRAM, HOT_AIR))
    events.handle(Event(OPTION_SETPOINT_TEMPERATURE, 190, "°C"))
    events.handle(Event(OPTION_DURATION, 1800, "seconds"))

    assert mirror.value(Channel.SELECTED_PROGRAM) == Defined(HOT_AIR)
    assert mirror.value(Channel.ACTIVE_PROGRAM) == Defined(HOT_AIR)
    assert mirror.value(Channel.SETPOINT_TEMPERATURE) == Defined(190, "°C")
    assert mirror.value(Channel.DURATION) == Defined(1800, "s")

    events.handle(Event(ROOT_ACTIVE_PROGRAM, None))

    assert mirror.active_program is NO_PROGRAM
    assert mirror.value(Channel.ACTIVE_PROGRAM) is UNDEFINED


def test_event_reconciler_power_standby_cascade() -> None:
    mirror, _sink, refreshes, events, _polling = _build()
    events.handle(Event(ROOT_SELECTED_PROGRAM, HOT_AIR))
    refreshes.clear()

    events.handle(Event(SETTING_POWER_STATE, POWER_STANDBY))

    assert mirror.value(Channel.POWER_STATE) == Defined(False)
    assert mirror.value(Channel.SELECTED_PROGRAM) is UNDEFINED
    assert refreshes == []

    events.handle(Event(SETTING_POWER_STATE, POWER_ON))

    assert refreshes == [None]


def test_polling_handlers_are_read_only() -> None:
    _mirror, _sink, _refreshes, _events, polling = _build()

    assert isinstance(polling.handlers, MappingProxyType)
    assert set(polling.handlers) == set(profile_for(ApplianceKind.OVEN).channels)
    with pytest.raises(TypeError):
        polling.handlers[Channel.DOOR_STATE] = None  # type: ignore[index]


@pytest.mark.asyncio
async def test_polling_full_refresh_applies_snapshot() -> None:
    mirror, _sink, refreshes, _events, polling = _build()
    client = FakeClient(
        status=[
            Event(STATUS_OPERATION_STATE, READY),
            Event(STATUS_DOOR_STATE, "BSH.Common.EnumType.DoorState.Closed"),
            Event(STATUS_OVEN_CAVITY_TEMPERATURE, 23, "°C"),
        ],
        settings=[Event(SETTING_POWER_STATE, POWER_ON)],
        selected=Program(
            HOT_AIR,
            (
                Option(OPTION_SETPOINT_TEMPERATURE, 180, "°C"),
                Option(OPTION_DURATION, 600, "seconds"),
            ),
        ),
        active=NO_PROGRAM,
    )

    failed = await polling.refresh(client)

    assert failed == frozenset()
    assert [name for name, _args in client.calls] == [
        "get_settings",
        "get_status",
        "get_selected_program",
        "get_active_program",
    ]
    assert mirror.value(Channel.POWER_STATE) == Defined(True)
    assert mirror.value(Channel.OPERATION_STATE) == Defined("Ready")
    assert mirror.value(Channel.DOOR_STATE) == Defined(False)
    assert mirror.value(Channel.CAVITY_TEMPERATURE) == Defined(23, "°C")
    assert mirror.value(Channel.SELECTED_PROGRAM) == Defined(HOT_AIR)
    assert mirror.value(Channel.SETPOINT_TEMPERATURE) == Defined(180, "°C")
    assert mirror.value(Channel.ACTIVE_PROGRAM) is UNDEFINED
    assert mirror.value(Channel.BASIC_ACTIONS) is UNDEFINED
    # Power On during a pull asks for a refresh; the host drops it when covered.
    assert refreshes == [None]


@pytest.mark.asyncio
async def test_polling_applies_cascades_before_plain_values() -> None:
    mirror, _sink, _refreshes, _events, polling = _build()
    client = FakeClient(
        status=[
            Event(STATUS_OVEN_CAVITY_TEMPERATURE, 150, "°C"),
            Event(STATUS_OPERATION_STATE, READY),
        ]
    )

    await polling.refresh(
        client, [Channel.CAVITY_TEMPERATURE, Channel.OPERATION_STATE]
    )

    assert mirror.value(Channel.CAVITY_TEMPERATURE) == Defined(150, "°C")


@pytest.mark.asyncio
async def test_polling_subset_only_touches_requested_channels() -> None:
    mirror, sink, _refreshes, _events, polling = _build()
    client = FakeClient(
        status=[
            Event(STATUS_DOOR_STATE, "BSH.Common.EnumType.DoorState.Open"),
            Event(STATUS_OVEN_CAVITY_TEMPERATURE, 99, "°C"),
        ]
    )

    await polling.refresh(client, [Channel.DOOR_STATE])

    assert sink.channels() == [Channel.DOOR_STATE]
    assert client.calls_named("get_status") == [(OVEN_ID,)]


@pytest.mark.asyncio
async def test_polling_option_channels_survive_empty_selection() -> None:
    mirror, _sink, _refreshes, events, polling = _build()
    events.handle(Event(OPTION_SETPOINT_TEMPERATURE, 200, "°C"))
    client = FakeClient(selected=NO_PROGRAM)

    await polling.refresh(client, [Channel.SETPOINT_TEMPERATURE])

    assert mirror.value(Channel.SETPOINT_TEMPERATURE) == Defined(200, "°C")

    await polling.refresh(client, [Channel.SELECTED_PROGRAM])

    assert mirror.value(Channel.SELECTED_PROGRAM) is UNDEFINED


@pytest.mark.asyncio
async def test_polling_reports_failed_channels(caplog) -> None:
    mirror, _sink, _refreshes, _events, polling = _build()
    client = FakeClient(settings=[Event(SETTING_POWER_STATE, POWER_STANDBY)])
    client.errors["get_status"] = CommunicationError("HTTP 409")

    failed = await polling.refresh(client)

    oven = profile_for(ApplianceKind.OVEN)
    assert failed == oven.channels_of_kind(ChannelKind.STATUS)
    assert mirror.value(Channel.POWER_STATE) == Defined(False)
    assert "could not refresh" in caplog.text


@pytest.mark.asyncio
async def test_polling_propagates_authorization_errors() -> None:
    _mirror, _sink, _refreshes, _events, polling = _build()
    client = FakeClient()
    client.errors["get_settings"] = AuthorizationError("Unauthorized (401)")

    with pytest.raises(AuthorizationError):
        await polling.refresh(client)

    assert client.calls_named("get_status") == []


def test_event_reconciler_non_finite_progress_is_undefined() -> None:
    mirror, _sink, _refreshes, events, _polling = _build()
    events.handle(Event(OPTION_PROGRAM_PROGRESS, 40, "%"))

    events.handle(Event(OPTION_PROGRAM_PROGRESS, float("nan"), "%"))
    events.handle(Event(OPTION_ELAPSED_PROGRAM_TIME, 30, "seconds"))

    assert mirror.value(Channel.PROGRAM_PROGRESS) is UNDEFINED
    assert mirror.value(Channel.ELAPSED_PROGRAM_TIME) == Defined(30, "s")


def test_event_reconciler_elapsed_zero_is_defined() -> None:
    mirror, _sink, _refreshes, events, _polling = _build()

    events.handle(Event(OPTION_ELAPSED_PROGRAM_TIME, 0, "seconds"))
    events.handle(Event(OPTION_REMAINING_PROGRAM_TIME, 0, "seconds"))

    assert mirror.value(Channel.ELAPSED_PROGRAM_TIME) == Defined(0, "s")
    assert mirror.value(Channel.REMAINING_PROGRAM_TIME) is UNDEFINED


def test_event_reconciler_new_selected_key_requests_options() -> None:
    mirror, _sink, refreshes, events, _polling = _build()
    mirror.apply_selected_program(
        Program(HOT_AIR, (Option(OPTION_SETPOINT_TEMPERATURE, 180, "°C"),))
    )

    events.handle(Event(ROOT_SELECTED_PROGRAM, HOT_AIR))
    assert refreshes == []

    events.handle(
        Event(ROOT_SELECTED_PROGRAM, "Cooking.Oven.Program.HeatingMode.PizzaSetting")
    )

    assert mirror.value(Channel.SETPOINT_TEMPERATURE) is UNDEFINED
    assert refreshes == [frozenset({Channel.SETPOINT_TEMPERATURE, Channel.DURATION})]


@pytest.mark.asyncio
async def test_polling_failed_active_program_keeps_program_state() -> None:
    mirror, _sink, _refreshes, events, polling = _build()
    events.handle(Event(ROOT_ACTIVE_PROGRAM, HOT_AIR))
    events.handle(Event(OPTION_PROGRAM_PROGRESS, 40, "%"))
    client = FakeClient()
    client.errors["get_active_program"] = CommunicationError("HTTP 409")

    failed = await polling.refresh(client, [Channel.ACTIVE_PROGRAM])

    assert Channel.ACTIVE_PROGRAM in failed
    assert mirror.value(Channel.ACTIVE_PROGRAM) == Defined(HOT_AIR)
    assert mirror.value(Channel.PROGRAM_PROGRESS) == Defined(40, "%")
