"""Pydantic models for Home Connect API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .domain.events import Event
from .domain.ids import HomeAppliance
from .domain.program import NO_PROGRAM, Option, Program, ProgramSlot, coerce_int


class ItemModel(BaseModel):
    """Key/value/unit triple used by status, settings, options and events."""

    model_config = ConfigDict(extra="ignore")

    key: str
    value: Any = None
    unit: str | None = None

    def to_event(self) -> Event:
        """Return the item as a domain event."""

        return Event(self.key, self.value, self.unit)

    def to_option(self) -> Option | None:
        """Return the item as a program option when its value is numeric."""

        value = coerce_int(self.value)
        if value is None:
            return None
        return Option(self.key, value, self.unit)


class ProgramModel(BaseModel):
    """Selected or active program."""

    model_config = ConfigDict(extra="ignore")

    key: str | None = None
    options: list[ItemModel] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        """Treat a missing option list as empty."""

        return [] if value is None else value

    def to_slot(self) -> ProgramSlot:
        """Return the program, or the empty slot when no key is present."""

        if not self.key:
            return NO_PROGRAM
        options = (item.to_option() for item in self.options)
        return Program.build(self.key, (opt for opt in options if opt is not None))


class ProgramResponse(BaseModel):
    """Envelope of ``/programs/selected`` and ``/programs/active``."""

    model_config = ConfigDict(extra="ignore")

    data: ProgramModel = Field(default_factory=ProgramModel)


class ApplianceModel(BaseModel):
    """Appliance entry of the ``/homeappliances`` list."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ha_id: str = Field(alias="haId")
    name: str | None = None
    brand: str | None = None
    vib: str | None = None
    connected: bool = False
    type: str | None = None
    enumber: str | None = None

    def to_domain(self) -> HomeAppliance:
        """Return the appliance metadata value object."""

        return HomeAppliance(
            ha_id=self.ha_id,
            name=self.name,
            brand=self.brand,
            vib=self.vib,
            connected=self.connected,
            type=self.type,
            enumber=self.enumber,
        )


class AppliancesData(BaseModel):
    """Body of the appliance list."""

    model_config = ConfigDict(extra="ignore")

    homeappliances: list[ApplianceModel] = Field(default_factory=list)


class AppliancesResponse(BaseModel):
    """Envelope of ``/homeappliances``."""

    model_config = ConfigDict(extra="ignore")

    data: AppliancesData = Field(default_factory=AppliancesData)


class StatusData(BaseModel):
    """Body of ``/status``."""

    model_config = ConfigDict(extra="ignore")

    status: list[ItemModel] = Field(default_factory=list)


class StatusResponse(BaseModel):
    """Envelope of ``/status``."""

    model_config = ConfigDict(extra="ignore")

    data: StatusData = Field(default_factory=StatusData)


class SettingsData(BaseModel):
    """Body of ``/settings``."""

    model_config = ConfigDict(extra="ignore")

    settings: list[ItemModel] = Field(default_factory=list)


class SettingsResponse(BaseModel):
    """Envelope of ``/settings``."""

    model_config = ConfigDict(extra="ignore")

    data: SettingsData = Field(default_factory=SettingsData)


class EventPayload(BaseModel):
    """JSON body of a server-sent STATUS, EVENT or NOTIFY frame."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ha_id: str | None = Field(default=None, alias="haId")
    items: list[ItemModel] = Field(default_factory=list)


class ItemWrite(BaseModel):
    """Write payload for settings and program options."""

    model_config = ConfigDict(extra="forbid")

    key: str
    value: int | str
    unit: str | None = None


def encode_item_write(
    key: str, value: Any, unit: str | None = None, *, value_as_int: bool = False
) -> dict[str, Any]:
    """Return the ``{"data": ...}`` body for a setting or option write."""

    encoded: int | str
    if value_as_int:
        coerced = coerce_int(value)
        if coerced is None:
            raise ValueError(f"Option value {value!r} is not an integer")
        encoded = coerced
    else:
        encoded = str(value)
    model = ItemWrite(key=key, value=encoded, unit=unit)
    return {"data": model.model_dump(exclude_none=True)}


def encode_program_key(key: str) -> dict[str, Any]:
    """Return the body selecting or starting program ``key``."""

    return {"data": {"key": key}}
