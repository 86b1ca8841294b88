from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from models.records import AcuriteTowerRecord, SensorRecord, canonical_sensor_id
from services.errors import LineParseError
from services.parser import RECORD_TYPES, parse_line


def _line(**overrides) -> bytes:
    payload = {
        "time": "2024-05-01 12:00:00",
        "model": "Acurite-Tower",
        "id": 5019,
        "channel": "C",
        "battery_ok": 1,
        "temperature_C": 21.5,
        "humidity": 55,
        "mic": "CHECKSUM",
    }
    payload.update(overrides)
    return json.dumps(payload).encode("utf-8")


def test_canonical_sensor_id_is_lowercase_and_zero_padded() -> None:
    assert canonical_sensor_id("Acurite-Tower", 5019, "C") == "acurite-tower-00005019-c"
    assert canonical_sensor_id("Acurite-Tower", 11771, "a") == "acurite-tower-00011771-a"
    assert canonical_sensor_id("X", 123456789, "B") == "x-123456789-b"


def test_parse_supported_model() -> None:
    record = parse_line(_line())

    assert isinstance(record, AcuriteTowerRecord)
    assert record.sensor_id == "acurite-tower-00005019-c"
    assert record.battery_ok == 1
    assert record.temperature_c == 21.5
    assert record.humidity == 55.0
    assert record.time == "2024-05-01 12:00:00"
    assert record.channel == "C"


def test_pass_through_fields_are_optional() -> None:
    line = json.dumps(
        {
            "model": "Acurite-Tower",
            "id": 7276,
            "channel": "B",
            "battery_ok": 0,
            "temperature_C": -3.25,
            "humidity": 80.5,
        }
    ).encode("utf-8")

    record = parse_line(line)

    assert record is not None
    assert record.sensor_id == "acurite-tower-00007276-b"
    assert record.time is None


def test_unknown_model_returns_none() -> None:
    line = json.dumps({"model": "LaCrosse-TX141THBv2", "id": 1, "temperature_C": 3.0}).encode()

    assert parse_line(line) is None


def test_unknown_model_with_foreign_schema_is_not_an_error() -> None:
    assert parse_line(b'{"model": "Something-Else", "freq": "433.92"}') is None


@pytest.mark.parametrize(
    "line",
    [
        b"",
        b"not json",
        b'{"model": "Acurite-Tower"',
        b"[1, 2, 3]",
        b'{"time": "2024-05-01 12:00:00"}',
        b'{"model": 17}',
    ],
)
def test_envelope_failures_raise_line_parse_error(line: bytes) -> None:
    with pytest.raises(LineParseError) as excinfo:
        parse_line(line)

    assert excinfo.value.reason
    assert isinstance(excinfo.value.__cause__, ValidationError)


@pytest.mark.parametrize(
    "overrides",
    [
        {"temperature_C": "warm"},
        {"id": "not-a-number"},
        {"id": -1},
        {"humidity": None},
        {"channel": None},
        {"id": "5019"},
        {"id": 5019.0},
        {"temperature_C": "21.5"},
        {"humidity": "55"},
        {"battery_ok": True},
        {"battery_ok": 1.0},
        {"channel": 3},
    ],
)
def test_schema_mismatch_for_supported_model_raises(overrides) -> None:
    with pytest.raises(LineParseError):
        parse_line(_line(**overrides))


def test_missing_required_field_raises() -> None:
    payload = json.loads(_line())
    del payload["battery_ok"]

    with pytest.raises(LineParseError) as excinfo:
        parse_line(json.dumps(payload).encode())

    assert "battery_ok" in excinfo.value.reason


def test_records_are_immutable() -> None:
    record = parse_line(_line())
    assert record is not None

    with pytest.raises(ValidationError):
        record.humidity = 10.0  # type: ignore[misc]


def test_custom_registry_dispatch() -> None:
    class ThermoRecord(SensorRecord):
        serial: str
        temperature_C: float

        @property
        def sensor_id(self) -> str:
            return f"{self.model.lower()}-{self.serial}"

    registry = {**RECORD_TYPES, "Thermo": ThermoRecord}
    line = b'{"model": "Thermo", "serial": "ab12", "temperature_C": 4.5}'

    record = parse_line(line, record_types=registry)

    assert isinstance(record, ThermoRecord)
    assert record.sensor_id == "thermo-ab12"
    assert parse_line(line) is None


def test_whole_json_numbers_are_accepted_for_float_fields() -> None:
    record = parse_line(_line(temperature_C=21, humidity=55))

    assert isinstance(record, AcuriteTowerRecord)
    assert record.temperature_c == 21.0
    assert record.humidity == 55.0


def test_base_record_requires_a_sensor_id() -> None:
    with pytest.raises(TypeError):
        SensorRecord(model="Acurite-Tower")  # type: ignore[abstract]
