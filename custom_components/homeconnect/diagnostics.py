"""Diagnostics support for the Home Connect integration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL
from .runtime import require_runtime
from .sanitize import mask_identifier

SENSITIVE_FIELDS: Final = {
    "access_token",
    "authorization",
    "client_secret",
    "enumber",
    "ha_id",
    "refresh_token",
    "token",
}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> Mapping[str, Any]:
    """Return a diagnostics payload for ``entry``."""

    runtime = require_runtime(hass, entry)
    appliances: list[dict[str, Any]] = []
    for coordinator in runtime.iter_coordinators():
        session = coordinator.session
        appliance = session.appliance
        appliances.append(
            {
                "id": mask_identifier(appliance.ha_id),
                "ha_id": appliance.ha_id,
                "enumber": appliance.enumber,
                "kind": appliance.kind.value,
                "brand": appliance.brand,
                "connected": session.connected,
                "ready": session.ready,
                "last_update_success": coordinator.last_update_success,
                "mirror": dict(session.mirror.snapshot()),
            }
        )

    diagnostics: dict[str, Any] = {
        "entry": {
            "data": dict(entry.data),
            "options": dict(entry.options),
            "poll_interval": entry.options.get(
                CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL
            ),
        },
        "event_stream": {
            "running": runtime.stream.is_running(),
            "restart_count": runtime.stream.restart_count,
            "last_frame_at": runtime.stream.last_frame_at,
        },
        "appliances": appliances,
    }
    return async_redact_data(diagnostics, SENSITIVE_FIELDS)
