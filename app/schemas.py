"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import AcuriteTowerRecord, SensorRecord


class SensorReadingOut(BaseModel):
    """Latest reading known for one sensor."""

    sensor_id: str = Field(..., description="Canonical id, e.g. acurite-tower-00005019-c.")
    model: str
    channel: Optional[str] = None
    time: Optional[str] = Field(default=None, description="Timestamp as logged by the receiver.")
    battery_ok: Optional[int] = None
    temperature_c: Optional[float] = None
    humidity: Optional[float] = None

    @classmethod
    def from_record(cls, sensor_id: str, record: SensorRecord) -> "SensorReadingOut":
        if isinstance(record, AcuriteTowerRecord):
            return cls(
                sensor_id=sensor_id,
                model=record.model,
                channel=record.channel,
                time=record.time,
                battery_ok=record.battery_ok,
                temperature_c=record.temperature_c,
                humidity=record.humidity,
            )
        return cls(sensor_id=sensor_id, model=record.model, time=record.time)


class SensorsResponse(BaseModel):
    """All sensors currently held in the cache, ordered by id."""

    count: int = Field(..., ge=0)
    sensors: List[SensorReadingOut] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    sensors: int = Field(..., ge=0)
