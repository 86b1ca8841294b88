from __future__ import annotations

from functools import lru_cache
from threading import Lock
from typing import Dict, List, Tuple

from models.records import SensorRecord

SnapshotEntry = Tuple[str, SensorRecord]


class SensorStateCache:
    """Latest reading per sensor id, shared by one writer and many readers."""

    def __init__(self) -> None:
        self._entries: Dict[str, SensorRecord] = {}
        self._lock = Lock()

    def upsert(self, sensor_id: str, record: SensorRecord) -> None:
        with self._lock:
            self._entries[sensor_id] = record

    def snapshot(self) -> List[SnapshotEntry]:
        """Return an independent, id-sorted copy of all entries."""

        with self._lock:
            items = list(self._entries.items())
        items.sort(key=lambda item: item[0])
        return items

    def reader(self) -> "SensorCacheReader":
        return SensorCacheReader(self)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SensorCacheReader:
    """Read-only view handed to the HTTP and metrics layers."""

    __slots__ = ("_snapshot",)

    def __init__(self, cache: SensorStateCache) -> None:
        self._snapshot = cache.snapshot

    def snapshot(self) -> List[SnapshotEntry]:
        return self._snapshot()


@lru_cache
def build_default_cache() -> SensorStateCache:
    return SensorStateCache()
