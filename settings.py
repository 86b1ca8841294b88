from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional


_LOG_PATH_ENV = "SENSOR_LOG_PATH"
_POLL_INTERVAL_ENV = "SENSOR_POLL_INTERVAL"
_BACKOFF_ENV = "SENSOR_RESTART_BACKOFF"
_BIND_ENV = "SENSOR_BIND_ADDRESS"
_LOCATIONS_ENV = "SENSOR_LOCATIONS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    log_path: Optional[str]
    poll_interval: float
    restart_backoff: float
    bind_address: str
    log_level: str
    locations: Dict[str, str] = field(default_factory=dict)


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_interval(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def parse_locations(raw: Optional[str]) -> Dict[str, str]:
    """Parse ``id=label,id=label`` pairs; malformed pairs are ignored."""
    locations: Dict[str, str] = {}
    if not raw:
        return locations
    for pair in raw.split(","):
        sensor_id, sep, label = pair.partition("=")
        sensor_id = sensor_id.strip().lower()
        label = label.strip()
        if not sep or not sensor_id or not label:
            continue
        locations[sensor_id] = label
    return locations


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_path=_read_optional_env(_LOG_PATH_ENV, None),
        poll_interval=_read_interval(_POLL_INTERVAL_ENV, 1.0),
        restart_backoff=_read_interval(_BACKOFF_ENV, 2.0),
        bind_address=_read_str_env(_BIND_ENV, "0.0.0.0:4547"),
        log_level=_read_log_level("INFO"),
        locations=parse_locations(os.getenv(_LOCATIONS_ENV)),
    )
