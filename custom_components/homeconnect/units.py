"""Map appliance unit tags to Home Assistant units and convert between them."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Final

from homeassistant.const import PERCENTAGE, UnitOfTemperature, UnitOfTime
from homeassistant.util.unit_conversion import DurationConverter, TemperatureConverter

_LOGGER = logging.getLogger(__name__)

_TEMPERATURE_TAGS: Final[Mapping[str, UnitOfTemperature]] = {
    "°c": UnitOfTemperature.CELSIUS,
    "c": UnitOfTemperature.CELSIUS,
    "cel": UnitOfTemperature.CELSIUS,
    "celsius": UnitOfTemperature.CELSIUS,
    "°f": UnitOfTemperature.FAHRENHEIT,
    "f": UnitOfTemperature.FAHRENHEIT,
    "fahrenheit": UnitOfTemperature.FAHRENHEIT,
    "k": UnitOfTemperature.KELVIN,
    "kelvin": UnitOfTemperature.KELVIN,
}

_DURATION_TAGS: Final[Mapping[str, UnitOfTime]] = {
    "s": UnitOfTime.SECONDS,
    "sec": UnitOfTime.SECONDS,
    "seconds": UnitOfTime.SECONDS,
    "min": UnitOfTime.MINUTES,
    "minutes": UnitOfTime.MINUTES,
    "h": UnitOfTime.HOURS,
    "hours": UnitOfTime.HOURS,
    "d": UnitOfTime.DAYS,
    "days": UnitOfTime.DAYS,
}

PERCENT: Final = PERCENTAGE
SECONDS: Final = UnitOfTime.SECONDS


class UnitConversionError(ValueError):
    """Requested unit cannot be converted to the target quantity."""


def parse_temperature_unit(tag: str | None) -> UnitOfTemperature | None:
    """Return the temperature unit for ``tag`` or ``None`` when unknown."""

    if tag is None:
        return None
    return _TEMPERATURE_TAGS.get(str(tag).strip().lower())


def parse_duration_unit(tag: str | None) -> UnitOfTime | None:
    """Return the time unit for ``tag`` or ``None`` when unknown."""

    if tag is None:
        return None
    return _DURATION_TAGS.get(str(tag).strip().lower())


def map_temperature(tag: str | None) -> UnitOfTemperature:
    """Map a device temperature tag to a unit, defaulting to Celsius."""

    unit = parse_temperature_unit(tag)
    if unit is None:
        _LOGGER.debug("Unknown temperature unit tag %r; assuming Celsius", tag)
        return UnitOfTemperature.CELSIUS
    return unit


def map_duration(tag: str | None) -> UnitOfTime:
    """Return the unit of appliance durations, which are always seconds."""

    return UnitOfTime.SECONDS


def convert_temperature(
    value: float,
    from_unit: str,
    to_unit: str = UnitOfTemperature.CELSIUS,
) -> float:
    """Convert ``value`` between temperature units."""

    source = parse_temperature_unit(from_unit)
    target = parse_temperature_unit(to_unit)
    if source is None or source not in TemperatureConverter.VALID_UNITS:
        raise UnitConversionError(f"{from_unit!r} is not a temperature unit")
    if target is None or target not in TemperatureConverter.VALID_UNITS:
        raise UnitConversionError(f"{to_unit!r} is not a temperature unit")
    return TemperatureConverter.convert(value, source, target)


def convert_duration(value: float, from_unit: str) -> float:
    """Convert ``value`` in ``from_unit`` to seconds."""

    source = parse_duration_unit(from_unit)
    if source is None or source not in DurationConverter.VALID_UNITS:
        raise UnitConversionError(f"{from_unit!r} is not a time unit")
    return DurationConverter.convert(value, source, UnitOfTime.SECONDS)
