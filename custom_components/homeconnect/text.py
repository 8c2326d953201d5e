"""Selected program text entity for Home Connect appliances."""

from __future__ import annotations

from homeassistant.components.text import TextEntity

from .coordinator import ApplianceCoordinator
from .domain.commands import StringCommand
from .domain.ids import Channel
from .entity import ApplianceEntity
from .runtime import require_runtime


async def async_setup_entry(hass, entry, async_add_entities):
    """Add the selected program entity where programs are supported."""

    runtime = require_runtime(hass, entry)
    async_add_entities(
        [
            SelectedProgramText(coordinator)
            for coordinator in runtime.iter_coordinators()
            if coordinator.session.mirror.has_channel(Channel.SELECTED_PROGRAM)
        ]
    )


class SelectedProgramText(ApplianceEntity, TextEntity):
    """Program key currently selected on the appliance."""

    _attr_native_max = 255

    def __init__(self, coordinator: ApplianceCoordinator) -> None:
        """Initialise the selected program entity."""

        super().__init__(coordinator, Channel.SELECTED_PROGRAM)

    @property
    def native_value(self) -> str | None:
        """Return the selected program key."""

        value = self.raw_value
        return None if value is None else str(value)

    async def async_set_value(self, value: str) -> None:
        """Select the program ``value`` on the appliance."""

        await self._async_command(StringCommand(value.strip()))
