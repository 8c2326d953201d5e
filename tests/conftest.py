# ruff: noqa: D100,D101,D102,D103,D104,D105,D106,D107,INP001,E402
from __future__ import annotations

import asyncio
import inspect
from typing import Any

import pytest

from custom_components.homeconnect.domain.events import Event
from custom_components.homeconnect.domain.ids import HomeAppliance
from custom_components.homeconnect.domain.program import NO_PROGRAM, ProgramSlot
from custom_components.homeconnect.profiles import profile_for
from custom_components.homeconnect.session import ApplianceSession

OVEN_ID = "BOSCH-HBG6764S6-68A40E000000"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom pytest markers used across the suite."""

    if not config.pluginmanager.hasplugin("pytest_asyncio"):
        config.addinivalue_line(
            "markers", "asyncio: mark test as requiring asyncio event loop support."
        )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async tests when pytest-asyncio is unavailable."""

    if pyfuncitem.config.pluginmanager.hasplugin("pytest_asyncio"):
        return None

    testfunction = pyfuncitem.obj
    if not inspect.iscoroutinefunction(testfunction):
        return None

    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None

    argnames = pyfuncitem._fixtureinfo.argnames
    kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
    with asyncio.Runner(debug=False) as runner:
        runner.run(testfunction(**kwargs))
    return True


class FakeClient:
    """In-memory appliance client recording every call."""

    def __init__(
        self,
        *,
        status: list[Event] | None = None,
        settings: list[Event] | None = None,
        selected: ProgramSlot = NO_PROGRAM,
        active: ProgramSlot = NO_PROGRAM,
    ) -> None:
        self.status = list(status or [])
        self.settings = list(settings or [])
        self.selected = selected
        self.active = active
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.errors: dict[str, Exception] = {}

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        error = self.errors.get(name)
        if error is not None:
            raise error

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    async def get_status(self, ha_id: str) -> list[Event]:
        self._record("get_status", ha_id)
        return list(self.status)

    async def get_settings(self, ha_id: str) -> list[Event]:
        self._record("get_settings", ha_id)
        return list(self.settings)

    async def get_selected_program(self, ha_id: str) -> ProgramSlot:
        self._record("get_selected_program", ha_id)
        return self.selected

    async def get_active_program(self, ha_id: str) -> ProgramSlot:
        self._record("get_active_program", ha_id)
        return self.active

    async def start_program(self, ha_id: str, program_key: str) -> None:
        self._record("start_program", ha_id, program_key)

    async def stop_program(self, ha_id: str) -> None:
        self._record("stop_program", ha_id)

    async def set_selected_program(self, ha_id: str, program_key: str) -> None:
        self._record("set_selected_program", ha_id, program_key)

    async def set_power_state(self, ha_id: str, tag: str) -> None:
        self._record("set_power_state", ha_id, tag)

    async def set_program_option(
        self,
        ha_id: str,
        option_key: str,
        value: str,
        unit: str | None,
        value_as_int: bool,
        apply_live: bool,
    ) -> None:
        self._record(
            "set_program_option",
            ha_id,
            option_key,
            value,
            unit,
            value_as_int,
            apply_live,
        )


class RecordingSink:
    """Collect every channel value the mirror emits."""

    def __init__(self) -> None:
        self.emitted: list[tuple[Any, Any]] = []

    def __call__(self, channel: Any, value: Any) -> None:
        self.emitted.append((channel, value))

    def last(self, channel: Any) -> Any:
        for emitted_channel, value in reversed(self.emitted):
            if emitted_channel is channel:
                return value
        raise AssertionError(f"{channel} was never emitted")

    def channels(self) -> list[Any]:
        return [channel for channel, _value in self.emitted]


def make_oven(*, connected: bool = True) -> HomeAppliance:
    return HomeAppliance(
        OVEN_ID,
        name="Oven",
        brand="BOSCH",
        vib="HBG6764S6",
        connected=connected,
        type="Oven",
        enumber="HBG6764S6/01",
    )


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def oven_profile():
    return profile_for(make_oven().kind)


@pytest.fixture
def oven_session(fake_client: FakeClient, sink: RecordingSink) -> ApplianceSession:
    return ApplianceSession(make_oven(), fake_client, sink=sink)
