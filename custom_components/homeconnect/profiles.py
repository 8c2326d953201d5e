"""Per appliance-kind channel and event registration tables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .const import (
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
    STATUS_REMOTE_CONTROL_START_ALLOWED,
)
from .domain.ids import ApplianceKind, Channel, ChannelKind, EventKind


@dataclass(frozen=True, slots=True)
class EventRoute:
    """Where an event key is reconciled."""

    kind: EventKind
    channel: Channel


@dataclass(frozen=True, slots=True)
class ApplianceProfile:
    """Immutable registration tables for one appliance kind."""

    kind: ApplianceKind
    channels: Mapping[Channel, ChannelKind]
    events: Mapping[str, EventRoute]

    def route(self, key: str) -> EventRoute | None:
        """Return the route for event ``key``; ``None`` when unknown."""

        return self.events.get(key)

    def channels_of_kind(self, *kinds: ChannelKind) -> frozenset[Channel]:
        """Return the registered channels pulled the given ways."""

        return frozenset(
            channel for channel, kind in self.channels.items() if kind in kinds
        )


# Key read from the status or settings list for channels pulled that way.
CHANNEL_API_KEYS: Final[Mapping[Channel, str]] = MappingProxyType(
    {
        Channel.OPERATION_STATE: STATUS_OPERATION_STATE,
        Channel.DOOR_STATE: STATUS_DOOR_STATE,
        Channel.REMOTE_CONTROL_ACTIVE: STATUS_REMOTE_CONTROL_ACTIVE,
        Channel.REMOTE_START_ALLOWED: STATUS_REMOTE_CONTROL_START_ALLOWED,
        Channel.CAVITY_TEMPERATURE: STATUS_OVEN_CAVITY_TEMPERATURE,
        Channel.POWER_STATE: SETTING_POWER_STATE,
    }
)

_PROGRAM_CHANNELS: Final[dict[Channel, ChannelKind]] = {
    Channel.OPERATION_STATE: ChannelKind.STATUS,
    Channel.POWER_STATE: ChannelKind.SETTING,
    Channel.DOOR_STATE: ChannelKind.STATUS,
    Channel.REMOTE_CONTROL_ACTIVE: ChannelKind.STATUS,
    Channel.REMOTE_START_ALLOWED: ChannelKind.STATUS,
    Channel.SELECTED_PROGRAM: ChannelKind.SELECTED_PROGRAM,
    Channel.ACTIVE_PROGRAM: ChannelKind.ACTIVE_PROGRAM,
    Channel.REMAINING_PROGRAM_TIME: ChannelKind.ACTIVE_PROGRAM,
    Channel.PROGRAM_PROGRESS: ChannelKind.ACTIVE_PROGRAM,
    Channel.ELAPSED_PROGRAM_TIME: ChannelKind.ACTIVE_PROGRAM,
    Channel.BASIC_ACTIONS: ChannelKind.COMMAND,
}

_OVEN_CHANNELS: Final[dict[Channel, ChannelKind]] = {
    **_PROGRAM_CHANNELS,
    Channel.CAVITY_TEMPERATURE: ChannelKind.STATUS,
    Channel.SETPOINT_TEMPERATURE: ChannelKind.SELECTED_PROGRAM_OPTION,
    Channel.DURATION: ChannelKind.SELECTED_PROGRAM_OPTION,
}

_FRIDGE_CHANNELS: Final[dict[Channel, ChannelKind]] = {
    Channel.POWER_STATE: ChannelKind.SETTING,
    Channel.DOOR_STATE: ChannelKind.STATUS,
    Channel.REMOTE_CONTROL_ACTIVE: ChannelKind.STATUS,
}

_PROGRAM_EVENTS: Final[dict[str, EventRoute]] = {
    STATUS_OPERATION_STATE: EventRoute(
        EventKind.OPERATION_STATE, Channel.OPERATION_STATE
    ),
    SETTING_POWER_STATE: EventRoute(EventKind.POWER_STATE, Channel.POWER_STATE),
    STATUS_DOOR_STATE: EventRoute(EventKind.DOOR_STATE, Channel.DOOR_STATE),
    STATUS_REMOTE_CONTROL_ACTIVE: EventRoute(
        EventKind.BOOLEAN, Channel.REMOTE_CONTROL_ACTIVE
    ),
    STATUS_REMOTE_CONTROL_START_ALLOWED: EventRoute(
        EventKind.BOOLEAN, Channel.REMOTE_START_ALLOWED
    ),
    ROOT_SELECTED_PROGRAM: EventRoute(
        EventKind.SELECTED_PROGRAM, Channel.SELECTED_PROGRAM
    ),
    ROOT_ACTIVE_PROGRAM: EventRoute(EventKind.ACTIVE_PROGRAM, Channel.ACTIVE_PROGRAM),
    OPTION_REMAINING_PROGRAM_TIME: EventRoute(
        EventKind.REMAINING_TIME, Channel.REMAINING_PROGRAM_TIME
    ),
    OPTION_PROGRAM_PROGRESS: EventRoute(EventKind.PROGRESS, Channel.PROGRAM_PROGRESS),
    OPTION_ELAPSED_PROGRAM_TIME: EventRoute(
        EventKind.ELAPSED_TIME, Channel.ELAPSED_PROGRAM_TIME
    ),
}

_OVEN_EVENTS: Final[dict[str, EventRoute]] = {
    **_PROGRAM_EVENTS,
    STATUS_OVEN_CAVITY_TEMPERATURE: EventRoute(
        EventKind.CAVITY_TEMPERATURE, Channel.CAVITY_TEMPERATURE
    ),
    OPTION_SETPOINT_TEMPERATURE: EventRoute(
        EventKind.SETPOINT_TEMPERATURE, Channel.SETPOINT_TEMPERATURE
    ),
    OPTION_DURATION: EventRoute(EventKind.DURATION, Channel.DURATION),
}

_FRIDGE_EVENTS: Final[dict[str, EventRoute]] = {
    key: route
    for key, route in _PROGRAM_EVENTS.items()
    if route.channel in _FRIDGE_CHANNELS
}


def _profile(
    kind: ApplianceKind,
    channels: Mapping[Channel, ChannelKind],
    events: Mapping[str, EventRoute],
) -> ApplianceProfile:
    return ApplianceProfile(
        kind, MappingProxyType(dict(channels)), MappingProxyType(dict(events))
    )


PROFILES: Final[Mapping[ApplianceKind, ApplianceProfile]] = MappingProxyType(
    {
        ApplianceKind.OVEN: _profile(ApplianceKind.OVEN, _OVEN_CHANNELS, _OVEN_EVENTS),
        ApplianceKind.FRIDGE_FREEZER: _profile(
            ApplianceKind.FRIDGE_FREEZER, _FRIDGE_CHANNELS, _FRIDGE_EVENTS
        ),
        **{
            kind: _profile(kind, _PROGRAM_CHANNELS, _PROGRAM_EVENTS)
            for kind in (
                ApplianceKind.COFFEE_MAKER,
                ApplianceKind.DISHWASHER,
                ApplianceKind.WASHER,
                ApplianceKind.DRYER,
                ApplianceKind.WASHER_DRYER,
                ApplianceKind.HOOD,
                ApplianceKind.COOKTOP,
                ApplianceKind.GENERIC,
            )
        },
    }
)


def profile_for(kind: ApplianceKind) -> ApplianceProfile:
    """Return the registration tables for ``kind``."""

    return PROFILES.get(kind, PROFILES[ApplianceKind.GENERIC])
