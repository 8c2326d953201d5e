"""Reconcile pushed events and polled snapshots into the state mirror."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
import logging
from types import MappingProxyType
from typing import Any, assert_never

from .api import ApplianceClientProto, AuthorizationError, CommunicationError
from .domain.events import Event
from .domain.ids import (
    Channel,
    ChannelKind,
    DoorState,
    EventKind,
    OperationState,
    PowerState,
)
from .domain.mirror import DeviceStateMirror
from .domain.program import NO_PROGRAM, NoProgram, Option, Program
from .domain.values import UNDEFINED
from .profiles import CHANNEL_API_KEYS, ApplianceProfile
from .sanitize import mask_identifier

_LOGGER = logging.getLogger(__name__)

ChannelUpdateHandler = Callable[
    [frozenset[Channel], ApplianceClientProto], Awaitable[None]
]

# Events that cascade into other channels are applied before the rest of a
# snapshot so the plain values pulled alongside them are not reset again.
_CASCADING_KINDS = (EventKind.POWER_STATE, EventKind.OPERATION_STATE)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "on", "yes"}
    return bool(value)


class EventReconciler:
    """Apply pushed events to the mirror in arrival order."""

    def __init__(self, mirror: DeviceStateMirror, profile: ApplianceProfile) -> None:
        """Bind the reconciler to one appliance's mirror and profile."""

        self._mirror = mirror
        self._profile = profile

    def handles(self, key: str) -> bool:
        """Return True when events named ``key`` target a known channel."""

        return self._profile.route(key) is not None

    def handle(self, event: Event) -> None:
        """Dispatch ``event`` by key; unknown keys are ignored."""

        route = self._profile.route(event.key)
        if route is None:
            _LOGGER.debug(
                "%s: ignoring event %s", mask_identifier(self._mirror.ha_id), event.key
            )
            return

        mirror = self._mirror
        match route.kind:
            case EventKind.BOOLEAN:
                mirror.apply_boolean(route.channel, _as_bool(event.value))
            case EventKind.DOOR_STATE:
                mirror.apply_door_state(DoorState.from_api(event.value))
            case EventKind.OPERATION_STATE:
                mirror.apply_operation_state(OperationState.from_api(event.value))
            case EventKind.POWER_STATE:
                mirror.apply_power_state(PowerState.from_api(event.value))
            case EventKind.SELECTED_PROGRAM:
                mirror.apply_selected_program_key(event.value_as_str())
            case EventKind.ACTIVE_PROGRAM:
                key = event.value_as_str()
                mirror.apply_active_program(Program(key) if key else NO_PROGRAM)
            case EventKind.REMAINING_TIME | EventKind.PROGRESS | EventKind.ELAPSED_TIME:
                value = event.value_as_int()
                if value is None:
                    mirror.set_channel(route.channel, UNDEFINED)
                else:
                    mirror.apply_active_option(Option(event.key, value, event.unit))
            case EventKind.CAVITY_TEMPERATURE:
                value = event.value_as_int()
                if value is None:
                    mirror.set_channel(route.channel, UNDEFINED)
                else:
                    mirror.apply_cavity_temperature(value, event.unit)
            case EventKind.SETPOINT_TEMPERATURE | EventKind.DURATION:
                value = event.value_as_int()
                if value is None:
                    mirror.set_channel(route.channel, UNDEFINED)
                else:
                    mirror.apply_selected_option(Option(event.key, value, event.unit))
            case _:
                assert_never(route.kind)


class PollingReconciler:
    """Pull channel values from the API and apply them like events."""

    def __init__(
        self,
        mirror: DeviceStateMirror,
        profile: ApplianceProfile,
        events: EventReconciler,
    ) -> None:
        """Build the immutable channel → update handler table."""

        self._mirror = mirror
        self._profile = profile
        self._events = events
        by_kind: dict[ChannelKind, ChannelUpdateHandler] = {
            ChannelKind.STATUS: self._update_status,
            ChannelKind.SETTING: self._update_settings,
            ChannelKind.SELECTED_PROGRAM: self._update_selected_program,
            ChannelKind.SELECTED_PROGRAM_OPTION: self._update_selected_program,
            ChannelKind.ACTIVE_PROGRAM: self._update_active_program,
            ChannelKind.COMMAND: self._update_command,
        }
        self._handlers: Mapping[Channel, ChannelUpdateHandler] = MappingProxyType(
            {channel: by_kind[kind] for channel, kind in profile.channels.items()}
        )

    @property
    def handlers(self) -> Mapping[Channel, ChannelUpdateHandler]:
        """Return the read-only channel → update handler table."""

        return self._handlers

    async def refresh(
        self,
        client: ApplianceClientProto,
        channels: Iterable[Channel] | None = None,
    ) -> frozenset[Channel]:
        """Refresh ``channels`` (all registered channels when ``None``).

        Returns the channels whose pull failed. Authorization failures are
        raised since no other channel can succeed either.
        """

        wanted = (
            frozenset(self._handlers)
            if channels is None
            else frozenset(channels) & frozenset(self._handlers)
        )
        grouped: dict[ChannelUpdateHandler, set[Channel]] = {}
        # Settings first: a power change resets what the other pulls restore.
        for kind in (
            ChannelKind.SETTING,
            ChannelKind.STATUS,
            ChannelKind.SELECTED_PROGRAM,
            ChannelKind.SELECTED_PROGRAM_OPTION,
            ChannelKind.ACTIVE_PROGRAM,
            ChannelKind.COMMAND,
        ):
            for channel in sorted(wanted, key=lambda item: item.value):
                if self._profile.channels[channel] is kind:
                    grouped.setdefault(self._handlers[channel], set()).add(channel)

        failed: set[Channel] = set()
        for handler, group in grouped.items():
            try:
                await handler(frozenset(group), client)
            except AuthorizationError:
                raise
            except CommunicationError as err:
                failed.update(group)
                _LOGGER.warning(
                    "%s: could not refresh %s: %s",
                    mask_identifier(self._mirror.ha_id),
                    ", ".join(sorted(channel.value for channel in group)),
                    err,
                )
        return frozenset(failed)

    def _apply_items(
        self, items: Iterable[Event], channels: frozenset[Channel]
    ) -> None:
        keys = {
            CHANNEL_API_KEYS[channel]
            for channel in channels
            if channel in CHANNEL_API_KEYS
        }
        selected = [item for item in items if item.key in keys]
        first = [
            item
            for item in selected
            if (route := self._profile.route(item.key)) is not None
            and route.kind in _CASCADING_KINDS
        ]
        rest = [item for item in selected if item not in first]
        for item in (*first, *rest):
            self._events.handle(item)

    async def _update_status(
        self, channels: frozenset[Channel], client: ApplianceClientProto
    ) -> None:
        self._apply_items(await client.get_status(self._mirror.ha_id), channels)

    async def _update_settings(
        self, channels: frozenset[Channel], client: ApplianceClientProto
    ) -> None:
        self._apply_items(await client.get_settings(self._mirror.ha_id), channels)

    async def _update_selected_program(
        self, channels: frozenset[Channel], client: ApplianceClientProto
    ) -> None:
        slot = await client.get_selected_program(self._mirror.ha_id)
        if isinstance(slot, NoProgram) and Channel.SELECTED_PROGRAM not in channels:
            # Option channels keep their value when nothing is selected.
            return
        self._mirror.apply_selected_program(slot)

    async def _update_active_program(
        self, channels: frozenset[Channel], client: ApplianceClientProto
    ) -> None:
        self._mirror.apply_active_program(
            await client.get_active_program(self._mirror.ha_id)
        )

    async def _update_command(
        self, channels: frozenset[Channel], client: ApplianceClientProto
    ) -> None:
        for channel in channels:
            self._mirror.set_channel(channel, UNDEFINED)
