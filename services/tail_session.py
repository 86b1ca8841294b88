"""A single attempt at following the sensor log until it rotates or fails."""

from __future__ import annotations

import logging
import os
import time
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from datastore.sensor_cache import SensorStateCache
from services.errors import LineParseError, OpenError, ReadError
from services.parser import parse_line
from services.reassembler import LineReassembler
from services.rotation import FileIdentity, RotationStatus, check

logger = logging.getLogger(__name__)

TAIL_WINDOW = 16 * 1024
CHUNK_SIZE = 16 * 1024
DEFAULT_POLL_INTERVAL = 1.0


class SessionState(str, Enum):
    opening = "opening"
    seeking = "seeking"
    streaming = "streaming"
    polling = "polling"
    ended = "ended"


def initial_offset(size: int, window: int = TAIL_WINDOW) -> int:
    """Where to start reading a file of ``size`` bytes: at most ``window`` from the end."""
    return size - window if size > window else 0


class TailSession:
    """Streams one open handle of the log into the cache.

    :meth:`run` returns normally once the file has been rotated or truncated
    and raises :class:`OpenError` or :class:`ReadError` on I/O failure. The
    handle is closed either way. A session is single use.
    """

    def __init__(
        self,
        path: Union[str, Path],
        cache: SensorStateCache,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        chunk_size: int = CHUNK_SIZE,
        window: int = TAIL_WINDOW,
    ) -> None:
        self.path = Path(path)
        self.cache = cache
        self.poll_interval = poll_interval
        self.chunk_size = chunk_size
        self.window = window
        self._sleep = sleep
        self.state = SessionState.opening
        self.identity: Optional[FileIdentity] = None
        self.start_offset: Optional[int] = None
        self.offset = 0
        self.lines_processed = 0
        self.reassembler = LineReassembler()
        self._handle: Optional[BinaryIO] = None

    @property
    def closed(self) -> bool:
        return self._handle is None or self._handle.closed

    def run(self) -> None:
        if self.state is not SessionState.opening:
            raise RuntimeError("TailSession.run() may only be called once.")
        try:
            self._open()
            self._stream()
        finally:
            self.state = SessionState.ended
            if self._handle is not None:
                self._handle.close()

    def _open(self) -> None:
        context = {"path": str(self.path)}
        try:
            handle = open(self.path, "rb", buffering=0)
        except OSError as exc:
            raise OpenError(f"open {str(self.path)!r}: {exc}") from exc
        self._handle = handle

        try:
            stat_result = os.fstat(handle.fileno())
        except OSError as exc:
            raise OpenError(f"stat {str(self.path)!r}: {exc}") from exc

        self.identity = FileIdentity.from_stat(stat_result)
        logger.info(
            "Opened sensor log",
            extra={**context, "device": self.identity.device, "inode": self.identity.inode},
        )

        self.state = SessionState.seeking
        size = stat_result.st_size
        start = initial_offset(size, self.window)
        if start:
            logger.info("Picking up near end of file", extra={**context, "size": size, "offset": start})
        else:
            logger.info("Starting at beginning of file", extra={**context, "size": size, "offset": 0})
        try:
            handle.seek(start, os.SEEK_SET)
        except OSError as exc:
            raise OpenError(f"seek {str(self.path)!r}: {exc}") from exc
        self.start_offset = start
        self.offset = start

    def _stream(self) -> None:
        assert self._handle is not None and self.identity is not None
        self.state = SessionState.streaming
        while True:
            try:
                chunk = self._handle.read(self.chunk_size)
            except OSError as exc:
                raise ReadError(f"read {str(self.path)!r} at {self.offset}: {exc}") from exc

            if not chunk:
                self.state = SessionState.polling
                if check(self.path, self.identity, self.offset) is RotationStatus.rotated:
                    logger.info("Reopening sensor log", extra={"path": str(self.path), "offset": self.offset})
                    return
                self._sleep(self.poll_interval)
                self.state = SessionState.streaming
                continue

            self.offset += len(chunk)
            for line in self.reassembler.feed(chunk):
                self._apply(line)

    def _apply(self, line: bytes) -> None:
        if not line.strip():
            return
        self.lines_processed += 1
        try:
            record = parse_line(line)
        except LineParseError as exc:
            logger.warning(
                "Skipping unparseable line",
                extra={"path": str(self.path), "offset": self.offset, "reason": exc.reason},
            )
            return
        if record is None:
            logger.debug("Ignoring unsupported device model", extra={"path": str(self.path)})
            return
        self.cache.upsert(record.sensor_id, record)
