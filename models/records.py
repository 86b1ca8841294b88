"""Domain models decoded from the sensor log."""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def canonical_sensor_id(model: str, device_id: int, channel: str) -> str:
    """Build the cache key for a device, e.g. ``acurite-tower-00005019-c``."""

    return f"{model.lower()}-{device_id:08d}-{channel.lower()}"


class RecordEnvelope(BaseModel):
    """The fields every logged line carries, used to pick a decoder."""

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True)

    model: str
    time: Optional[str] = None


class SensorRecord(BaseModel):
    """Base for typed device readings. Instances are immutable."""

    model_config = ConfigDict(
        extra="ignore", frozen=True, strict=True, populate_by_name=True
    )

    model: str
    time: Optional[str] = None

    @property
    @abstractmethod
    def sensor_id(self) -> str:
        """Canonical cache key for the device that produced this reading."""


class AcuriteTowerRecord(SensorRecord):
    """A reading from an Acurite tower temperature/humidity sensor."""

    id: int = Field(..., ge=0)
    channel: str
    battery_ok: int
    temperature_c: float = Field(..., alias="temperature_C")
    humidity: float
    mic: Optional[str] = None

    @property
    def sensor_id(self) -> str:
        return canonical_sensor_id(self.model, self.id, self.channel)
