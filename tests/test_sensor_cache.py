"""Unit tests for the latest-reading cache."""

from __future__ import annotations

import threading

from datastore.sensor_cache import SensorCacheReader, SensorStateCache, build_default_cache
from models.records import AcuriteTowerRecord


def _record(device_id: int = 5019, channel: str = "C", value: float = 21.5) -> AcuriteTowerRecord:
    return AcuriteTowerRecord(
        model="Acurite-Tower",
        id=device_id,
        channel=channel,
        battery_ok=1,
        temperature_c=value,
        humidity=value,
    )


def test_upsert_replaces_existing_entry() -> None:
    cache = SensorStateCache()
    first = _record(value=21.5)
    second = _record(value=22.0)

    cache.upsert(first.sensor_id, first)
    cache.upsert(second.sensor_id, second)

    assert len(cache) == 1
    assert cache.snapshot() == [("acurite-tower-00005019-c", second)]


def test_snapshot_is_sorted_and_stable() -> None:
    cache = SensorStateCache()
    for device_id, channel in [(11771, "A"), (5019, "C"), (7276, "B")]:
        record = _record(device_id, channel)
        cache.upsert(record.sensor_id, record)

    first = cache.snapshot()
    second = cache.snapshot()

    assert [sensor_id for sensor_id, _ in first] == [
        "acurite-tower-00005019-c",
        "acurite-tower-00007276-b",
        "acurite-tower-00011771-a",
    ]
    assert first == second
    assert first is not second


def test_snapshot_is_independent_of_later_writes() -> None:
    cache = SensorStateCache()
    record = _record()
    cache.upsert(record.sensor_id, record)

    snapshot = cache.snapshot()
    newer = _record(value=30.0)
    cache.upsert(newer.sensor_id, newer)
    other = _record(device_id=1, channel="A")
    cache.upsert(other.sensor_id, other)

    assert snapshot == [("acurite-tower-00005019-c", record)]


def test_reader_exposes_snapshot_only() -> None:
    cache = SensorStateCache()
    record = _record()
    cache.upsert(record.sensor_id, record)

    reader = cache.reader()

    assert isinstance(reader, SensorCacheReader)
    assert reader.snapshot() == cache.snapshot()
    assert not hasattr(reader, "upsert")


def test_build_default_cache_is_shared() -> None:
    assert build_default_cache() is build_default_cache()


def test_concurrent_snapshots_never_see_torn_records() -> None:
    cache = SensorStateCache()
    stop = threading.Event()
    failures: list[str] = []

    def write() -> None:
        for step in range(2000):
            record = _record(value=float(step))
            cache.upsert(record.sensor_id, record)
        stop.set()

    def read() -> None:
        last_seen = -1.0
        while not stop.is_set():
            for _, record in cache.snapshot():
                if record.temperature_c != record.humidity:
                    failures.append("torn record")
                if record.temperature_c < last_seen:
                    failures.append("went backwards")
                last_seen = record.temperature_c

    readers = [threading.Thread(target=read) for _ in range(4)]
    for thread in readers:
        thread.start()
    writer = threading.Thread(target=write)
    writer.start()
    writer.join(timeout=10)
    for thread in readers:
        thread.join(timeout=10)

    assert failures == []
    assert cache.snapshot()[0][1].temperature_c == 1999.0
