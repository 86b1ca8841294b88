"""Expose cached sensor readings through a Prometheus collector."""

from __future__ import annotations

import logging
from typing import Iterator, Mapping, Optional

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, Metric

from datastore.sensor_cache import SensorCacheReader
from models.records import AcuriteTowerRecord

logger = logging.getLogger(__name__)

LOCATION_LABEL = "location"


def _location_for(sensor_id: str, locations: Mapping[str, str]) -> Optional[str]:
    if not locations:
        return sensor_id
    return locations.get(sensor_id)


class SensorCollector:
    """Builds gauges from a fresh cache snapshot on every scrape.

    Sensors missing from a configured location map are left out.
    """

    def __init__(
        self,
        reader: SensorCacheReader,
        locations: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._reader = reader
        self._locations = locations or {}

    def collect(self) -> Iterator[Metric]:
        temperature = GaugeMetricFamily(
            "temperature_degrees_celsius",
            "temperature in degrees celsius",
            labels=[LOCATION_LABEL],
        )
        humidity = GaugeMetricFamily(
            "temperature_humidity_percent", "relative humidity", labels=[LOCATION_LABEL]
        )
        battery = GaugeMetricFamily(
            "temperature_battery_ok", "sensor battery health", labels=[LOCATION_LABEL]
        )

        for sensor_id, record in self._reader.snapshot():
            if not isinstance(record, AcuriteTowerRecord):
                continue
            location = _location_for(sensor_id, self._locations)
            if location is None:
                logger.warning("New temperature sensor?", extra={"sensor_id": sensor_id})
                continue
            temperature.add_metric([location], record.temperature_c)
            humidity.add_metric([location], record.humidity)
            battery.add_metric([location], record.battery_ok)

        yield temperature
        yield humidity
        yield battery


def build_registry(
    reader: SensorCacheReader,
    locations: Optional[Mapping[str, str]] = None,
) -> CollectorRegistry:
    registry = CollectorRegistry(auto_describe=False)
    registry.register(SensorCollector(reader, locations))
    return registry


def render_metrics(
    reader: SensorCacheReader,
    locations: Optional[Mapping[str, str]] = None,
) -> bytes:
    """Render the current snapshot in the Prometheus text format."""
    return generate_latest(build_registry(reader, locations))
