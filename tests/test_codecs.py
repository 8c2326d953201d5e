from __future__ import annotations

import pytest
from pydantic import ValidationError

from custom_components.homeconnect.codecs import (
    AppliancesResponse,
    EventPayload,
    ProgramResponse,
    StatusResponse,
    encode_item_write,
    encode_program_key,
)
from custom_components.homeconnect.domain.events import Event
from custom_components.homeconnect.domain.ids import ApplianceKind
from custom_components.homeconnect.domain.program import (
    NO_PROGRAM,
    Option,
    Program,
    coerce_int,
)


def test_appliances_response_builds_domain_objects() -> None:
    payload = {
        "data": {
            "homeappliances": [
                {
                    "haId": "SIEMENS-HB676G5S6-68A40E000001",
                    "name": "Oven",
                    "brand": "SIEMENS",
                    "vib": "HB676G5S6",
                    "connected": True,
                    "type": "Oven",
                    "enumber": "HB676G5S6/01",
                    "unexpected": "ignored",
                },
                {"haId": "BOSCH-SMV88TX36E-68A40E000002", "type": "Toaster"},
            ]
        }
    }

    appliances = [
        item.to_domain()
        for item in AppliancesResponse.model_validate(payload).data.homeappliances
    ]

    assert [item.ha_id for item in appliances] == [
        "SIEMENS-HB676G5S6-68A40E000001",
        "BOSCH-SMV88TX36E-68A40E000002",
    ]
    assert appliances[0].connected is True
    assert appliances[0].kind is ApplianceKind.OVEN
    assert appliances[1].connected is False
    assert appliances[1].kind is ApplianceKind.GENERIC


def test_appliance_without_id_is_rejected() -> None:
    with pytest.raises(ValidationError):
        AppliancesResponse.model_validate({"data": {"homeappliances": [{}]}})


def test_program_response_keeps_numeric_options_only() -> None:
    payload = {
        "data": {
            "key": "Cooking.Oven.Program.HeatingMode.HotAir",
            "options": [
                {
                    "key": "Cooking.Oven.Option.SetpointTemperature",
                    "value": 180,
                    "unit": "°C",
                },
                {"key": "BSH.Common.Option.Duration", "value": "600", "unit": "seconds"},
                {"key": "Cooking.Oven.Option.FastPreHeat", "value": "abc"},
            ],
        }
    }

    slot = ProgramResponse.model_validate(payload).data.to_slot()

    assert slot == Program(
        "Cooking.Oven.Program.HeatingMode.HotAir",
        (
            Option("Cooking.Oven.Option.SetpointTemperature", 180, "°C"),
            Option("BSH.Common.Option.Duration", 600, "seconds"),
        ),
    )


def test_program_response_without_key_is_empty_slot() -> None:
    assert ProgramResponse.model_validate({}).data.to_slot() is NO_PROGRAM
    assert (
        ProgramResponse.model_validate({"data": {"options": None}}).data.to_slot()
        is NO_PROGRAM
    )


def test_status_items_become_events() -> None:
    payload = {
        "data": {
            "status": [
                {
                    "key": "BSH.Common.Status.OperationState",
                    "value": "BSH.Common.EnumType.OperationState.Run",
                },
                {
                    "key": "Cooking.Oven.Status.CurrentCavityTemperature",
                    "value": 57,
                    "unit": "°C",
                },
            ]
        }
    }

    events = [item.to_event() for item in StatusResponse.model_validate(payload).data.status]

    assert events[1] == Event("Cooking.Oven.Status.CurrentCavityTemperature", 57, "°C")
    assert events[0].value_as_str() == "BSH.Common.EnumType.OperationState.Run"


def test_event_payload_reads_appliance_id() -> None:
    payload = EventPayload.model_validate_json(
        '{"haId": "OVEN-1", "items": [{"key": "BSH.Common.Option.ProgramProgress",'
        ' "value": 37, "unit": "%", "timestamp": 1}]}'
    )

    assert payload.ha_id == "OVEN-1"
    assert payload.items[0].to_event().value_as_int() == 37


def test_encode_item_write_as_integer() -> None:
    body = encode_item_write(
        "Cooking.Oven.Option.SetpointTemperature", "176", "°C", value_as_int=True
    )

    assert body == {
        "data": {
            "key": "Cooking.Oven.Option.SetpointTemperature",
            "value": 176,
            "unit": "°C",
        }
    }


def test_encode_item_write_as_string_omits_missing_unit() -> None:
    body = encode_item_write(
        "BSH.Common.Setting.PowerState", "BSH.Common.EnumType.PowerState.On"
    )

    assert body == {
        "data": {
            "key": "BSH.Common.Setting.PowerState",
            "value": "BSH.Common.EnumType.PowerState.On",
        }
    }


def test_encode_item_write_rejects_non_numeric_integer() -> None:
    with pytest.raises(ValueError):
        encode_item_write("BSH.Common.Option.Duration", "soon", value_as_int=True)


def test_encode_program_key() -> None:
    assert encode_program_key("Dishcare.Dishwasher.Program.Eco50") == {
        "data": {"key": "Dishcare.Dishwasher.Program.Eco50"}
    }


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (37, 37),
        (37.9, 37),
        (" 12 ", 12),
        (True, 1),
        (None, None),
        ("n/a", None),
        (float("nan"), None),
        (float("inf"), None),
        ("-Infinity", None),
    ],
)
def test_coerce_int(value: object, expected: int | None) -> None:
    assert coerce_int(value) == expected


def test_event_payload_with_nan_value_has_no_integer() -> None:
    payload = EventPayload.model_validate_json(
        '{"haId": "OVEN-1", "items": ['
        '{"key": "BSH.Common.Option.ProgramProgress", "value": NaN, "unit": "%"},'
        '{"key": "BSH.Common.Option.ElapsedProgramTime", "value": 60}]}'
    )

    events = [item.to_event() for item in payload.items]

    assert events[0].value_as_int() is None
    assert events[1].value_as_int() == 60


def test_program_response_drops_non_finite_options() -> None:
    payload = {
        "data": {
            "key": "Cooking.Oven.Program.HeatingMode.HotAir",
            "options": [
                {"key": "BSH.Common.Option.RemainingProgramTime", "value": float("inf")},
                {"key": "BSH.Common.Option.ProgramProgress", "value": 12, "unit": "%"},
            ],
        }
    }

    slot = ProgramResponse.model_validate(payload).data.to_slot()

    assert slot == Program(
        "Cooking.Oven.Program.HeatingMode.HotAir",
        (Option("BSH.Common.Option.ProgramProgress", 12, "%"),),
    )
