"""Base entity shared across Home Connect platforms."""

from __future__ import annotations

from typing import Any

from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import ApplianceCoordinator
from .domain.commands import Command
from .domain.ids import Channel
from .domain.values import UNDEFINED, ChannelValue, Defined, native_value


def build_device_info(coordinator: ApplianceCoordinator) -> DeviceInfo:
    """Return Home Assistant device metadata for an appliance."""

    appliance = coordinator.session.appliance
    return DeviceInfo(
        identifiers={(DOMAIN, appliance.ha_id)},
        name=appliance.display_name,
        manufacturer=appliance.brand or "Home Connect",
        model=appliance.vib or appliance.kind.value,
        model_id=appliance.enumber,
    )


class ApplianceEntity(CoordinatorEntity[ApplianceCoordinator]):
    """Entity bound to one channel of an appliance."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(self, coordinator: ApplianceCoordinator, channel: Channel) -> None:
        """Initialise the entity for ``channel``."""

        super().__init__(coordinator)
        self._channel = channel
        self._attr_translation_key = channel.value
        self._attr_unique_id = f"{coordinator.ha_id}-{channel.value}"
        self._attr_device_info = build_device_info(coordinator)

    @property
    def channel(self) -> Channel:
        """Return the channel backing this entity."""

        return self._channel

    @property
    def channel_value(self) -> ChannelValue:
        """Return the last published value of the channel."""

        data = self.coordinator.data or {}
        return data.get(self._channel, UNDEFINED)

    @property
    def raw_value(self) -> Any:
        """Return the plain channel value, ``None`` when undefined."""

        return native_value(self.channel_value)

    @property
    def value_unit(self) -> str | None:
        """Return the unit reported alongside the channel value."""

        value = self.channel_value
        return value.unit if isinstance(value, Defined) else None

    @property
    def available(self) -> bool:
        """Return True while the appliance is reachable."""

        return super().available and self.coordinator.session.connected

    async def _async_command(self, command: Command) -> None:
        await self.coordinator.session.handle_command(self._channel, command)
