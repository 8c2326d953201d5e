"""Setpoint and duration controls for Home Connect appliances."""

from __future__ import annotations

from dataclasses import dataclass

from homeassistant.components.number import (
    NumberDeviceClass,
    NumberEntity,
    NumberEntityDescription,
    NumberMode,
)
from homeassistant.const import UnitOfTemperature, UnitOfTime

from .coordinator import ApplianceCoordinator
from .domain.commands import QuantityCommand
from .domain.ids import Channel
from .entity import ApplianceEntity
from .runtime import require_runtime
from .units import convert_temperature, map_temperature

# Oven setpoint range in °C.
SETPOINT_MIN_C = 30
SETPOINT_MAX_C = 300


@dataclass(frozen=True, kw_only=True)
class ApplianceNumberDescription(NumberEntityDescription):
    """Number description bound to an appliance channel."""

    channel: Channel


NUMBERS: tuple[ApplianceNumberDescription, ...] = (
    ApplianceNumberDescription(
        key=Channel.SETPOINT_TEMPERATURE.value,
        channel=Channel.SETPOINT_TEMPERATURE,
        device_class=NumberDeviceClass.TEMPERATURE,
        native_step=1,
        mode=NumberMode.BOX,
    ),
    ApplianceNumberDescription(
        key=Channel.DURATION.value,
        channel=Channel.DURATION,
        device_class=NumberDeviceClass.DURATION,
        native_unit_of_measurement=UnitOfTime.SECONDS,
        native_min_value=1,
        native_max_value=86340,
        native_step=1,
        mode=NumberMode.BOX,
    ),
)


async def async_setup_entry(hass, entry, async_add_entities):
    """Add program option controls for appliances that expose them."""

    runtime = require_runtime(hass, entry)
    async_add_entities(
        [
            ApplianceNumber(coordinator, description)
            for coordinator in runtime.iter_coordinators()
            for description in NUMBERS
            if coordinator.session.mirror.has_channel(description.channel)
        ]
    )


class ApplianceNumber(ApplianceEntity, NumberEntity):
    """Writable option of the selected or running program."""

    entity_description: ApplianceNumberDescription

    def __init__(
        self,
        coordinator: ApplianceCoordinator,
        description: ApplianceNumberDescription,
    ) -> None:
        """Initialise the control from ``description``."""

        super().__init__(coordinator, description.channel)
        self.entity_description = description

    @property
    def _is_temperature(self) -> bool:
        return self.entity_description.device_class is NumberDeviceClass.TEMPERATURE

    @property
    def native_unit_of_measurement(self) -> str | None:
        """Return the unit the appliance uses for this option."""

        if self._is_temperature:
            unit = self.value_unit
            if unit is None:
                return self.coordinator.session.mirror.native_temperature_unit
            return map_temperature(unit)
        return self.entity_description.native_unit_of_measurement

    @property
    def native_min_value(self) -> float:
        """Return the lower bound in the native unit."""

        if self._is_temperature:
            return round(self._from_celsius(SETPOINT_MIN_C))
        return super().native_min_value

    @property
    def native_max_value(self) -> float:
        """Return the upper bound in the native unit."""

        if self._is_temperature:
            return round(self._from_celsius(SETPOINT_MAX_C))
        return super().native_max_value

    @property
    def native_value(self) -> float | None:
        """Return the option value."""

        value = self.raw_value
        return None if value is None else float(value)

    async def async_set_native_value(self, value: float) -> None:
        """Write the option in the unit shown to the user."""

        unit = self.native_unit_of_measurement or UnitOfTemperature.CELSIUS
        await self._async_command(QuantityCommand(value, unit))

    def _from_celsius(self, value: float) -> float:
        unit = self.native_unit_of_measurement or UnitOfTemperature.CELSIUS
        return convert_temperature(value, UnitOfTemperature.CELSIUS, unit)
