"""Sensor platform for Home Connect appliances."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import PERCENTAGE, UnitOfTime

from .coordinator import ApplianceCoordinator
from .domain.ids import Channel, OperationState
from .entity import ApplianceEntity
from .runtime import require_runtime
from .units import map_temperature

_LOGGER = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def state_key(label: str) -> str:
    """Return the translation key for an operation state label."""

    return _CAMEL_BOUNDARY.sub("_", label).lower()


@dataclass(frozen=True, kw_only=True)
class ApplianceSensorDescription(SensorEntityDescription):
    """Sensor description bound to an appliance channel."""

    channel: Channel


SENSORS: tuple[ApplianceSensorDescription, ...] = (
    ApplianceSensorDescription(
        key=Channel.OPERATION_STATE.value,
        channel=Channel.OPERATION_STATE,
        device_class=SensorDeviceClass.ENUM,
        options=[state_key(state.label) for state in OperationState],
    ),
    ApplianceSensorDescription(
        key=Channel.ACTIVE_PROGRAM.value,
        channel=Channel.ACTIVE_PROGRAM,
    ),
    ApplianceSensorDescription(
        key=Channel.REMAINING_PROGRAM_TIME.value,
        channel=Channel.REMAINING_PROGRAM_TIME,
        device_class=SensorDeviceClass.DURATION,
        native_unit_of_measurement=UnitOfTime.SECONDS,
    ),
    ApplianceSensorDescription(
        key=Channel.PROGRAM_PROGRESS.value,
        channel=Channel.PROGRAM_PROGRESS,
        native_unit_of_measurement=PERCENTAGE,
        state_class=SensorStateClass.MEASUREMENT,
    ),
    ApplianceSensorDescription(
        key=Channel.ELAPSED_PROGRAM_TIME.value,
        channel=Channel.ELAPSED_PROGRAM_TIME,
        device_class=SensorDeviceClass.DURATION,
        native_unit_of_measurement=UnitOfTime.SECONDS,
    ),
    ApplianceSensorDescription(
        key=Channel.CAVITY_TEMPERATURE.value,
        channel=Channel.CAVITY_TEMPERATURE,
        device_class=SensorDeviceClass.TEMPERATURE,
        state_class=SensorStateClass.MEASUREMENT,
    ),
)


async def async_setup_entry(hass, entry, async_add_entities):
    """Create sensors for every appliance channel that supports one."""

    runtime = require_runtime(hass, entry)
    entities: list[SensorEntity] = [
        ApplianceSensor(coordinator, description)
        for coordinator in runtime.iter_coordinators()
        for description in SENSORS
        if coordinator.session.mirror.has_channel(description.channel)
    ]
    _LOGGER.debug("Adding %d Home Connect sensors", len(entities))
    async_add_entities(entities)


class ApplianceSensor(ApplianceEntity, SensorEntity):
    """Read-only channel value."""

    entity_description: ApplianceSensorDescription

    def __init__(
        self,
        coordinator: ApplianceCoordinator,
        description: ApplianceSensorDescription,
    ) -> None:
        """Initialise the sensor from ``description``."""

        super().__init__(coordinator, description.channel)
        self.entity_description = description

    @property
    def native_value(self) -> Any:
        """Return the current channel value."""

        value = self.raw_value
        if value is not None and self.entity_description.device_class is (
            SensorDeviceClass.ENUM
        ):
            return state_key(str(value))
        return value

    @property
    def native_unit_of_measurement(self) -> str | None:
        """Return the unit, following the appliance for temperatures."""

        if self.entity_description.device_class is SensorDeviceClass.TEMPERATURE:
            unit = self.value_unit
            if unit is None:
                return self.coordinator.session.mirror.native_temperature_unit
            return map_temperature(unit)
        return self.entity_description.native_unit_of_measurement
