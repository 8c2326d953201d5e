"""Power switch for Home Connect appliances."""

from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchEntity

from .coordinator import ApplianceCoordinator
from .domain.commands import OnOffCommand
from .domain.ids import Channel
from .entity import ApplianceEntity
from .runtime import require_runtime


async def async_setup_entry(hass, entry, async_add_entities):
    """Add a power switch for appliances exposing the power setting."""

    runtime = require_runtime(hass, entry)
    async_add_entities(
        [
            AppliancePowerSwitch(coordinator)
            for coordinator in runtime.iter_coordinators()
            if coordinator.session.mirror.has_channel(Channel.POWER_STATE)
        ]
    )


class AppliancePowerSwitch(ApplianceEntity, SwitchEntity):
    """Switch the appliance on or to standby."""

    def __init__(self, coordinator: ApplianceCoordinator) -> None:
        """Initialise the power switch."""

        super().__init__(coordinator, Channel.POWER_STATE)

    @property
    def is_on(self) -> bool | None:
        """Return True when the appliance is powered on."""

        value = self.raw_value
        return None if value is None else bool(value)

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Power the appliance on."""

        await self._async_command(OnOffCommand(True))

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Put the appliance into standby."""

        await self._async_command(OnOffCommand(False))
