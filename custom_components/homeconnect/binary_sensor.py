"""Binary sensors for Home Connect appliances."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.helpers.entity import EntityCategory
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import ApplianceCoordinator
from .domain.ids import Channel
from .entity import ApplianceEntity, build_device_info
from .runtime import require_runtime

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ApplianceBinarySensorDescription(BinarySensorEntityDescription):
    """Binary sensor description bound to an appliance channel."""

    channel: Channel


BINARY_SENSORS: tuple[ApplianceBinarySensorDescription, ...] = (
    ApplianceBinarySensorDescription(
        key=Channel.DOOR_STATE.value,
        channel=Channel.DOOR_STATE,
        device_class=BinarySensorDeviceClass.DOOR,
    ),
    ApplianceBinarySensorDescription(
        key=Channel.REMOTE_CONTROL_ACTIVE.value,
        channel=Channel.REMOTE_CONTROL_ACTIVE,
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
    ApplianceBinarySensorDescription(
        key=Channel.REMOTE_START_ALLOWED.value,
        channel=Channel.REMOTE_START_ALLOWED,
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up door, remote control and connectivity sensors."""

    runtime = require_runtime(hass, entry)
    entities: list[BinarySensorEntity] = []
    for coordinator in runtime.iter_coordinators():
        entities.append(ApplianceConnectivityBinarySensor(coordinator))
        entities.extend(
            ApplianceBinarySensor(coordinator, description)
            for description in BINARY_SENSORS
            if coordinator.session.mirror.has_channel(description.channel)
        )
    _LOGGER.debug("Adding %d Home Connect binary sensors", len(entities))
    async_add_entities(entities)


class ApplianceBinarySensor(ApplianceEntity, BinarySensorEntity):
    """Boolean channel value."""

    entity_description: ApplianceBinarySensorDescription

    def __init__(
        self,
        coordinator: ApplianceCoordinator,
        description: ApplianceBinarySensorDescription,
    ) -> None:
        """Initialise the binary sensor from ``description``."""

        super().__init__(coordinator, description.channel)
        self.entity_description = description

    @property
    def is_on(self) -> bool | None:
        """Return the channel value, ``None`` when undefined."""

        value = self.raw_value
        return None if value is None else bool(value)


class ApplianceConnectivityBinarySensor(
    CoordinatorEntity[ApplianceCoordinator], BinarySensorEntity
):
    """Whether the cloud reports the appliance as reachable."""

    _attr_has_entity_name = True
    _attr_device_class = BinarySensorDeviceClass.CONNECTIVITY
    _attr_entity_category = EntityCategory.DIAGNOSTIC
    _attr_translation_key = "connected"
    _attr_should_poll = False

    def __init__(self, coordinator: ApplianceCoordinator) -> None:
        """Initialise the connectivity sensor."""

        super().__init__(coordinator)
        self._attr_unique_id = f"{coordinator.ha_id}-connected"
        self._attr_device_info = build_device_info(coordinator)

    @property
    def available(self) -> bool:
        """Stay available so an offline appliance reads as off."""

        return True

    @property
    def is_on(self) -> bool:
        """Return True while the appliance is connected."""

        return self.coordinator.session.connected
