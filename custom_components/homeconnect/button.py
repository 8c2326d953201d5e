"""Start and stop buttons for Home Connect appliances."""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity

from .const import BASIC_ACTION_START, BASIC_ACTION_STOP
from .coordinator import ApplianceCoordinator
from .domain.commands import StringCommand
from .domain.ids import Channel
from .entity import ApplianceEntity
from .runtime import require_runtime


async def async_setup_entry(hass, entry, async_add_entities):
    """Add start and stop buttons for appliances running programs."""

    runtime = require_runtime(hass, entry)
    entities: list[ButtonEntity] = []
    for coordinator in runtime.iter_coordinators():
        if not coordinator.session.mirror.has_channel(Channel.BASIC_ACTIONS):
            continue
        entities.append(BasicActionButton(coordinator, BASIC_ACTION_START))
        entities.append(BasicActionButton(coordinator, BASIC_ACTION_STOP))
    async_add_entities(entities)


class BasicActionButton(ApplianceEntity, ButtonEntity):
    """Send a basic action such as starting the selected program."""

    def __init__(self, coordinator: ApplianceCoordinator, action: str) -> None:
        """Initialise the button for ``action``."""

        super().__init__(coordinator, Channel.BASIC_ACTIONS)
        self._action = action
        self._attr_translation_key = f"{action}_program"
        self._attr_unique_id = f"{coordinator.ha_id}-{action}_program"

    async def async_press(self) -> None:
        """Send the action to the appliance."""

        await self._async_command(StringCommand(self._action))
