"""Config and options flow for Home Connect."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from homeassistant import config_entries
from homeassistant.config_entries import ConfigEntry, ConfigFlowResult
from homeassistant.core import callback
from homeassistant.helpers import config_entry_oauth2_flow
import voluptuous as vol

from .const import (
    CONF_POLL_INTERVAL,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
    MAX_POLL_INTERVAL,
    MIN_POLL_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)

OAUTH_SCOPES = ("IdentifyAppliance", "Monitor", "Control", "Settings")


def options_schema(default_interval: int) -> vol.Schema:
    """Return the schema for the options form."""

    return vol.Schema(
        {
            vol.Required(CONF_POLL_INTERVAL, default=default_interval): vol.All(
                vol.Coerce(int),
                vol.Range(min=MIN_POLL_INTERVAL, max=MAX_POLL_INTERVAL),
            )
        }
    )


class HomeConnectConfigFlow(
    config_entry_oauth2_flow.AbstractOAuth2FlowHandler, domain=DOMAIN
):
    """Link a Home Connect account through OAuth2."""

    DOMAIN = DOMAIN
    VERSION = 1

    @property
    def logger(self) -> logging.Logger:
        """Return the logger used by the OAuth2 helpers."""

        return _LOGGER

    @property
    def extra_authorize_data(self) -> dict[str, Any]:
        """Request the scopes needed to monitor and control appliances."""

        return {"scope": " ".join(OAUTH_SCOPES)}

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Allow a single account per Home Assistant instance."""

        await self.async_set_unique_id(DOMAIN)
        if self.source != config_entries.SOURCE_REAUTH:
            self._abort_if_unique_id_configured()
        return await super().async_step_user(user_input)

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Start re-authentication after the token was rejected."""

        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask the user to confirm re-authentication."""

        if user_input is None:
            return self.async_show_form(step_id="reauth_confirm")
        return await self.async_step_user()

    async def async_oauth_create_entry(self, data: dict[str, Any]) -> ConfigFlowResult:
        """Create the entry, or update it when re-authenticating."""

        if self.source == config_entries.SOURCE_REAUTH:
            return self.async_update_reload_and_abort(
                self._get_reauth_entry(), data=data
            )
        return self.async_create_entry(title="Home Connect", data=data)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> HomeConnectOptionsFlow:
        """Return the options flow handler for this config entry."""

        return HomeConnectOptionsFlow()


class HomeConnectOptionsFlow(config_entries.OptionsFlow):
    """Options flow to tune the poll interval."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Show or process the options form."""

        if user_input is not None:
            return self.async_create_entry(
                title="",
                data={CONF_POLL_INTERVAL: int(user_input[CONF_POLL_INTERVAL])},
            )

        current = int(
            self.config_entry.options.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)
        )
        return self.async_show_form(
            step_id="init", data_schema=options_schema(current)
        )
