"""Detect replacement or truncation of the tailed file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from services.errors import OpenError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class RotationStatus(str, Enum):
    unchanged = "unchanged"
    rotated = "rotated"


@dataclass(frozen=True)
class FileIdentity:
    """Physical identity of a file: the device it lives on and its inode."""

    device: int
    inode: int

    @classmethod
    def from_stat(cls, stat_result: os.stat_result) -> "FileIdentity":
        return cls(device=stat_result.st_dev, inode=stat_result.st_ino)


def capture(path: PathLike) -> FileIdentity:
    try:
        stat_result = os.stat(path)
    except OSError as exc:
        raise OpenError(f"stat {os.fspath(path)!r}: {exc}") from exc
    return FileIdentity.from_stat(stat_result)


def check(path: PathLike, identity: FileIdentity, consumed_offset: int) -> RotationStatus:
    """Compare the file now at ``path`` with the one opened earlier.

    A different device or inode means the file was replaced; a size below
    ``consumed_offset`` means it was truncated in place. A path that cannot
    be stat-ed right now is reported unchanged and looked at again on the
    next poll.
    """
    try:
        stat_result = os.stat(path)
    except OSError as exc:
        logger.debug(
            "Could not stat tailed file, will retry",
            extra={"path": os.fspath(path), "reason": str(exc)},
        )
        return RotationStatus.unchanged

    context = {"path": os.fspath(path), "offset": consumed_offset}
    rotated = False
    if stat_result.st_dev != identity.device:
        logger.info(
            "File changed device %X -> %X", identity.device, stat_result.st_dev, extra=context
        )
        rotated = True
    if stat_result.st_ino != identity.inode:
        logger.info(
            "File changed inode %X -> %X", identity.inode, stat_result.st_ino, extra=context
        )
        rotated = True
    if stat_result.st_size < consumed_offset:
        logger.info("File shrunk", extra={**context, "size": stat_result.st_size})
        rotated = True

    return RotationStatus.rotated if rotated else RotationStatus.unchanged
