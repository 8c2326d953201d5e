"""Constants for the Home Connect integration."""

from __future__ import annotations

from typing import Final

# Domain
DOMAIN: Final = "homeconnect"

# HTTP base & paths
API_BASE: Final = "https://api.home-connect.com"
OAUTH2_AUTHORIZE: Final = f"{API_BASE}/security/oauth/authorize"
OAUTH2_TOKEN: Final = f"{API_BASE}/security/oauth/token"
APPLIANCES_PATH: Final = "/api/homeappliances"
STATUS_PATH_FMT: Final = "/api/homeappliances/{ha_id}/status"
SETTINGS_PATH_FMT: Final = "/api/homeappliances/{ha_id}/settings"
SETTING_PATH_FMT: Final = "/api/homeappliances/{ha_id}/settings/{key}"
SELECTED_PROGRAM_PATH_FMT: Final = "/api/homeappliances/{ha_id}/programs/selected"
ACTIVE_PROGRAM_PATH_FMT: Final = "/api/homeappliances/{ha_id}/programs/active"
PROGRAM_OPTION_PATH_FMT: Final = "/api/homeappliances/{ha_id}/programs/{slot}/options/{key}"
EVENTS_PATH: Final = "/api/homeappliances/events"

CONTENT_TYPE: Final = "application/vnd.bsh.sdk.v1+json"
ACCEPT_LANGUAGE: Final = "en-US,en;q=0.8"
REQUEST_TIMEOUT: Final = 25  # seconds

# Status / setting / root keys
STATUS_OPERATION_STATE: Final = "BSH.Common.Status.OperationState"
STATUS_DOOR_STATE: Final = "BSH.Common.Status.DoorState"
STATUS_REMOTE_CONTROL_ACTIVE: Final = "BSH.Common.Status.RemoteControlActive"
STATUS_REMOTE_CONTROL_START_ALLOWED: Final = (
    "BSH.Common.Status.RemoteControlStartAllowed"
)
SETTING_POWER_STATE: Final = "BSH.Common.Setting.PowerState"
ROOT_SELECTED_PROGRAM: Final = "BSH.Common.Root.SelectedProgram"
ROOT_ACTIVE_PROGRAM: Final = "BSH.Common.Root.ActiveProgram"

# Program option keys
OPTION_REMAINING_PROGRAM_TIME: Final = "BSH.Common.Option.RemainingProgramTime"
OPTION_PROGRAM_PROGRESS: Final = "BSH.Common.Option.ProgramProgress"
OPTION_ELAPSED_PROGRAM_TIME: Final = "BSH.Common.Option.ElapsedProgramTime"
OPTION_DURATION: Final = "BSH.Common.Option.Duration"
OPTION_SETPOINT_TEMPERATURE: Final = "Cooking.Oven.Option.SetpointTemperature"

# Oven status keys
STATUS_OVEN_CAVITY_TEMPERATURE: Final = "Cooking.Oven.Status.CurrentCavityTemperature"

# Power state tags
POWER_STATE_ON: Final = "BSH.Common.EnumType.PowerState.On"
POWER_STATE_STANDBY: Final = "BSH.Common.EnumType.PowerState.Standby"

# Basic action commands
BASIC_ACTION_START: Final = "start"
BASIC_ACTION_STOP: Final = "stop"

# Unit tag used for duration program options
DURATION_UNIT_TAG: Final = "seconds"

# Server-sent event types
SSE_EVENT_STATUS: Final = "STATUS"
SSE_EVENT_EVENT: Final = "EVENT"
SSE_EVENT_NOTIFY: Final = "NOTIFY"
SSE_EVENT_CONNECTED: Final = "CONNECTED"
SSE_EVENT_DISCONNECTED: Final = "DISCONNECTED"
SSE_EVENT_KEEP_ALIVE: Final = "KEEP-ALIVE"
SSE_ITEM_EVENTS: Final = frozenset(
    {SSE_EVENT_STATUS, SSE_EVENT_EVENT, SSE_EVENT_NOTIFY}
)

# Event stream reconnect backoff (seconds)
STREAM_BACKOFF: Final = (5, 10, 30, 120, 300)
STREAM_IDLE_TIMEOUT: Final = 120  # seconds without any frame, keep-alives included

# Polling
CONF_POLL_INTERVAL: Final = "poll_interval"
DEFAULT_POLL_INTERVAL: Final = 300  # seconds
MIN_POLL_INTERVAL: Final = 30  # seconds
MAX_POLL_INTERVAL: Final = 3600  # seconds
