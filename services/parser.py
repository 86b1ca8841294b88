"""Decode single log lines into typed sensor records."""

from __future__ import annotations

from typing import Dict, Optional, Type

from pydantic import ValidationError

from models.records import AcuriteTowerRecord, RecordEnvelope, SensorRecord
from services.errors import LineParseError

# Device models we know how to decode, keyed by the ``model`` field.
RECORD_TYPES: Dict[str, Type[SensorRecord]] = {
    "Acurite-Tower": AcuriteTowerRecord,
}


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "line"
    return f"{location}: {first.get('msg', 'invalid')}"


def parse_line(
    line: bytes,
    record_types: Optional[Dict[str, Type[SensorRecord]]] = None,
) -> Optional[SensorRecord]:
    """Return the record for ``line``, or ``None`` for an unsupported model.

    Raises :class:`LineParseError` when the line is not a JSON object with a
    ``model`` string, or when it does not fit the schema of its model.
    """
    registry = RECORD_TYPES if record_types is None else record_types

    try:
        envelope = RecordEnvelope.model_validate_json(line)
    except ValidationError as exc:
        raise LineParseError(_describe(exc)) from exc

    record_type = registry.get(envelope.model)
    if record_type is None:
        return None

    try:
        return record_type.model_validate_json(line)
    except ValidationError as exc:
        raise LineParseError(_describe(exc)) from exc
