"""Keeps a tail session running against the sensor log for the life of the process."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, Union

from datastore.sensor_cache import SensorStateCache, build_default_cache
from services.errors import TailError
from services.tail_session import DEFAULT_POLL_INTERVAL, TailSession
from settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_RESTART_BACKOFF = 2.0


class SessionOutcome(str, Enum):
    rotated = "rotated"
    failed = "failed"


class Supervisor:
    """Runs tail sessions back to back, sleeping a fixed backoff between them.

    The supervisor is the only writer of ``cache``; since one session runs at
    a time, upserts reach the cache in file order.
    """

    def __init__(
        self,
        path: Union[str, Path],
        cache: SensorStateCache,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        restart_backoff: float = DEFAULT_RESTART_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.path = Path(path)
        self.cache = cache
        self.poll_interval = poll_interval
        self.restart_backoff = restart_backoff
        self._sleep = sleep
        self.sessions_started = 0
        self.last_session: Optional[TailSession] = None
        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()

    def new_session(self) -> TailSession:
        return TailSession(
            self.path,
            self.cache,
            poll_interval=self.poll_interval,
            sleep=self._sleep,
        )

    def run_once(self) -> SessionOutcome:
        session = self.new_session()
        self.last_session = session
        self.sessions_started += 1
        try:
            session.run()
        except TailError as exc:
            logger.error(
                "Tail session failed: %s",
                exc,
                extra={"path": str(self.path), "outcome": SessionOutcome.failed.value},
            )
            return SessionOutcome.failed
        except Exception:
            logger.exception(
                "Tail session crashed",
                extra={"path": str(self.path), "outcome": SessionOutcome.failed.value},
            )
            return SessionOutcome.failed
        return SessionOutcome.rotated

    def run_forever(self) -> None:
        while True:
            self.run_once()
            self._sleep(self.restart_backoff)

    def start(self) -> threading.Thread:
        """Run :meth:`run_forever` on a daemon thread; repeated calls are no-ops."""
        with self._thread_lock:
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self.run_forever, name="sensor-tail", daemon=True
                )
                self._thread.start()
            return self._thread

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


@lru_cache
def build_default_supervisor(path: Optional[str] = None) -> Supervisor:
    """Factory that wires the supervisor to the default cache and settings."""
    settings = get_settings()
    log_path = path if path is not None else settings.log_path
    if not log_path:
        raise ValueError("No sensor log path configured; set SENSOR_LOG_PATH.")
    return Supervisor(
        log_path,
        build_default_cache(),
        poll_interval=settings.poll_interval,
        restart_backoff=settings.restart_backoff,
    )
