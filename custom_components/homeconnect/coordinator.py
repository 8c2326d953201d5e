"""Coordinator wiring one appliance session into Home Assistant."""

from __future__ import annotations

from datetime import timedelta
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryAuthFailed
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import AuthorizationError
from .const import DOMAIN, MAX_POLL_INTERVAL, MIN_POLL_INTERVAL
from .domain.ids import Channel, ChannelKind
from .domain.values import ChannelValue
from .sanitize import mask_identifier
from .session import ApplianceSession

_LOGGER = logging.getLogger(__name__)


def clamp_poll_interval(value: object, default: int) -> int:
    """Return ``value`` as a poll interval within the supported range."""

    try:
        seconds = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        seconds = default
    return max(MIN_POLL_INTERVAL, min(MAX_POLL_INTERVAL, seconds))


class ApplianceCoordinator(DataUpdateCoordinator[dict[Channel, ChannelValue]]):
    """Poll one appliance and publish its channel values to entities.

    Values pushed by the event stream reach the coordinator through the
    mirror sink; bursts of channel updates from one cascade are published
    as a single refresh of the listeners.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        session: ApplianceSession,
        poll_interval: int,
    ) -> None:
        """Initialise the coordinator for ``session``."""

        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=f"{DOMAIN}-{mask_identifier(session.ha_id)}",
            update_interval=timedelta(seconds=poll_interval),
        )
        self.session = session
        self._publish_scheduled = False
        self._polling = False
        session.mirror.attach(sink=self._on_channel_value)

    @property
    def ha_id(self) -> str:
        """Return the appliance identifier."""

        return self.session.ha_id

    @callback
    def _on_channel_value(self, channel: Channel, value: ChannelValue) -> None:
        if self._polling or self._publish_scheduled:
            return
        self._publish_scheduled = True
        self.hass.loop.call_soon(self._publish)

    @callback
    def _publish(self) -> None:
        self._publish_scheduled = False
        self.async_set_updated_data(self.session.mirror.values)

    @callback
    def async_connectivity_changed(self) -> None:
        """Notify entities that the appliance went on- or offline."""

        self.async_update_listeners()

    async def _async_update_data(self) -> dict[Channel, ChannelValue]:
        """Pull every channel of the appliance."""

        self._polling = True
        try:
            failed = await self.session.refresh()
        except AuthorizationError as err:
            raise ConfigEntryAuthFailed(str(err)) from err
        finally:
            self._polling = False

        pulled = {
            channel
            for channel, kind in self.session.profile.channels.items()
            if kind is not ChannelKind.COMMAND
        }
        if pulled and failed >= pulled:
            raise UpdateFailed(
                f"Could not refresh appliance {mask_identifier(self.ha_id)}"
            )
        return self.session.mirror.values
