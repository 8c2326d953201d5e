"""Per-appliance session tying the mirror, reconcilers and translator together."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from contextlib import suppress
import logging
from types import MappingProxyType
from typing import assert_never

from .api import ApplianceClientProto, CommunicationError
from .domain.commands import (
    ApiCall,
    Command,
    SetPowerState,
    SetProgramOption,
    SetSelectedProgram,
    StartProgram,
    StopProgram,
)
from .domain.events import Event
from .domain.ids import Channel, HomeAppliance
from .domain.mirror import ChannelValueSink, DeviceStateMirror
from .domain.values import Defined
from .profiles import ApplianceProfile, profile_for
from .reconciler import ChannelUpdateHandler, EventReconciler, PollingReconciler
from .sanitize import mask_identifier
from .translator import CommandTranslator

_LOGGER = logging.getLogger(__name__)

EventHandler = Callable[[Event], Awaitable[None]]


class ApplianceSession:
    """Own one appliance's mirror and serialise every change to it.

    Pushed events, polls and user commands all take the same lock, so a
    cascade triggered by an event never interleaves with a command reading
    the operation state.
    """

    def __init__(
        self,
        appliance: HomeAppliance,
        client: ApplianceClientProto,
        *,
        profile: ApplianceProfile | None = None,
        sink: ChannelValueSink | None = None,
    ) -> None:
        """Create the mirror and its collaborators for ``appliance``."""

        self.appliance = appliance
        self.client = client
        self.profile = profile or profile_for(appliance.kind)
        self.mirror = DeviceStateMirror(
            appliance.ha_id,
            self.profile.channels,
            sink=sink,
            refresh_requester=self._on_refresh_requested,
        )
        self._events = EventReconciler(self.mirror, self.profile)
        self._polling = PollingReconciler(self.mirror, self.profile, self._events)
        self._translator = CommandTranslator()
        self._lock = asyncio.Lock()
        self._connected = appliance.connected
        self._initialized = False
        self._refresh_active = False
        self._refreshing: frozenset[Channel] | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._event_handlers: Mapping[str, EventHandler] = MappingProxyType(
            {key: self.handle_event for key in self.profile.events}
        )

    def __repr__(self) -> str:
        """Return a log-safe representation."""

        return f"ApplianceSession[haId: {mask_identifier(self.ha_id)}]"

    @property
    def ha_id(self) -> str:
        """Return the appliance identifier."""

        return self.appliance.ha_id

    @property
    def connected(self) -> bool:
        """Return True when the appliance is reachable through the cloud."""

        return self._connected

    @property
    def ready(self) -> bool:
        """Return True when commands can be handled."""

        return self._initialized and self._connected

    @property
    def channel_update_handlers(self) -> Mapping[Channel, ChannelUpdateHandler]:
        """Return the read-only channel → pull handler table."""

        return self._polling.handlers

    @property
    def event_handlers(self) -> Mapping[str, EventHandler]:
        """Return the read-only event key → handler table."""

        return self._event_handlers

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------
    async def handle_event(self, event: Event) -> None:
        """Apply one pushed event."""

        async with self._lock:
            self._events.handle(event)

    async def refresh(
        self, channels: Iterable[Channel] | None = None
    ) -> frozenset[Channel]:
        """Pull ``channels`` (all when ``None``) and return those that failed."""

        wanted = None if channels is None else frozenset(channels)
        async with self._lock:
            self._refresh_active = True
            self._refreshing = wanted
            try:
                failed = await self._polling.refresh(self.client, wanted)
            finally:
                self._refresh_active = False
                self._refreshing = None
            self._initialized = True
        return failed

    async def handle_command(self, channel: Channel, command: Command) -> None:
        """Translate ``command`` and send it to the appliance."""

        if not self.ready:
            _LOGGER.debug(
                "%s: not ready; dropping %s for %s", self, command, channel.value
            )
            return

        _LOGGER.debug("%s: %s", channel.value, command)
        async with self._lock:
            call = self._translator.translate(channel, command, self.mirror)
            if call is None:
                return
            try:
                await self._execute(call)
            except CommunicationError as err:
                _LOGGER.warning(
                    "Could not handle command %s. API communication problem! error: %s",
                    command,
                    err,
                )
                return
            if channel is Channel.BASIC_ACTIONS:
                self.mirror.set_channel(channel, Defined(""))

    def set_connected(self, connected: bool) -> None:
        """Record a connectivity change reported by the event stream."""

        was_connected = self._connected
        self._connected = connected
        _LOGGER.debug("%s: connected=%s", self, connected)
        if connected and not was_connected:
            self._schedule_refresh(None)

    # ------------------------------------------------------------------
    # Outbound calls
    # ------------------------------------------------------------------
    async def _execute(self, call: ApiCall) -> None:
        ha_id = self.ha_id
        match call:
            case StartProgram(program_key=key):
                await self.client.start_program(ha_id, key)
            case StopProgram():
                await self.client.stop_program(ha_id)
            case SetSelectedProgram(program_key=key):
                await self.client.set_selected_program(ha_id, key)
            case SetPowerState(tag=tag):
                await self.client.set_power_state(ha_id, tag)
            case SetProgramOption():
                await self.client.set_program_option(
                    ha_id,
                    call.option_key,
                    call.value,
                    call.unit,
                    call.value_as_int,
                    call.apply_live,
                )
            case _:
                assert_never(call)

    # ------------------------------------------------------------------
    # Deferred refreshes
    # ------------------------------------------------------------------
    def _on_refresh_requested(self, channels: frozenset[Channel] | None) -> None:
        if self._refresh_active and (
            self._refreshing is None
            or (channels is not None and channels <= self._refreshing)
        ):
            # Already being pulled by the refresh in progress.
            return
        self._schedule_refresh(channels)

    def _schedule_refresh(self, channels: frozenset[Channel] | None) -> None:
        task = asyncio.get_running_loop().create_task(
            self._deferred_refresh(channels),
            name=f"homeconnect-refresh-{mask_identifier(self.ha_id)}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deferred_refresh(self, channels: frozenset[Channel] | None) -> None:
        try:
            await self.refresh(channels)
        except asyncio.CancelledError:
            raise
        except Exception:
            _LOGGER.exception("%s: deferred refresh failed", self)

    async def async_drain(self) -> None:
        """Wait for deferred refreshes, including ones they schedule."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def async_stop(self) -> None:
        """Cancel deferred refreshes."""

        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task
        self._pending.clear()
