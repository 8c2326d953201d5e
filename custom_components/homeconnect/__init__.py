"""Home Assistant entry point for the Home Connect integration."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EVENT_HOMEASSISTANT_STOP, Platform
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryNotReady
from homeassistant.helpers import aiohttp_client, config_entry_oauth2_flow

from .api import AuthorizationError, CommunicationError, HomeConnectClient
from .const import CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL, DOMAIN
from .coordinator import ApplianceCoordinator, clamp_poll_interval
from .event_stream import EventStreamClient
from .runtime import EntryRuntime
from .sanitize import mask_identifier
from .session import ApplianceSession

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [
    Platform.BINARY_SENSOR,
    Platform.BUTTON,
    Platform.NUMBER,
    Platform.SENSOR,
    Platform.SWITCH,
    Platform.TEXT,
]


def _token_provider(oauth_session: config_entry_oauth2_flow.OAuth2Session):
    async def _get_token() -> str:
        await oauth_session.async_ensure_token_valid()
        return str(oauth_session.token["access_token"])

    return _get_token


def _poll_interval(entry: ConfigEntry) -> int:
    return clamp_poll_interval(
        entry.options.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
        DEFAULT_POLL_INTERVAL,
    )


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Home Connect appliances for a config entry."""

    implementation = (
        await config_entry_oauth2_flow.async_get_config_entry_implementation(
            hass, entry
        )
    )
    oauth_session = config_entry_oauth2_flow.OAuth2Session(hass, entry, implementation)
    client = HomeConnectClient(
        aiohttp_client.async_get_clientsession(hass),
        _token_provider(oauth_session),
    )

    try:
        appliances = await client.list_appliances()
    except AuthorizationError as err:
        raise ConfigEntryAuthFailed from err
    except CommunicationError as err:
        raise ConfigEntryNotReady from err

    _LOGGER.info(
        "Discovered appliances: %s",
        ", ".join(
            f"{appliance.kind.value}:{mask_identifier(appliance.ha_id)}"
            for appliance in appliances
        )
        or "none",
    )

    poll_interval = _poll_interval(entry)
    sessions: dict[str, ApplianceSession] = {}
    coordinators: dict[str, ApplianceCoordinator] = {}
    for appliance in appliances:
        session = ApplianceSession(appliance, client)
        sessions[appliance.ha_id] = session
        coordinator = ApplianceCoordinator(hass, entry, session, poll_interval)
        coordinators[appliance.ha_id] = coordinator
        await coordinator.async_refresh()

    @callback
    def _on_connectivity(ha_id: str, connected: bool) -> None:
        coordinator = coordinators.get(ha_id)
        if coordinator is not None:
            coordinator.async_connectivity_changed()

    stream = EventStreamClient(client, sessions, on_connectivity=_on_connectivity)
    runtime = EntryRuntime(
        client=client,
        sessions=sessions,
        coordinators=coordinators,
        stream=stream,
        poll_interval=poll_interval,
    )
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = runtime

    async def _async_handle_hass_stop(_event: Any) -> None:
        """Stop background activity when Home Assistant stops."""

        await runtime.async_shutdown()

    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_handle_hass_stop)
    )
    entry.async_on_unload(entry.add_update_listener(async_update_entry_options))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    stream.start()
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry for Home Connect."""

    domain_data = hass.data.get(DOMAIN)
    runtime = domain_data.get(entry.entry_id) if domain_data else None
    if runtime is None:
        return True

    await runtime.async_shutdown()
    ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if ok:
        domain_data.pop(entry.entry_id, None)
    return ok


async def async_update_entry_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply a changed poll interval to every coordinator."""

    runtime: EntryRuntime = hass.data[DOMAIN][entry.entry_id]
    runtime.poll_interval = _poll_interval(entry)
    for coordinator in runtime.iter_coordinators():
        coordinator.update_interval = timedelta(seconds=runtime.poll_interval)
    _LOGGER.debug("Poll interval set to %s s", runtime.poll_interval)
