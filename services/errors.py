"""Exceptions raised by the tailing pipeline."""

from __future__ import annotations


class TailError(Exception):
    """A failure that ends the current tail session."""


class OpenError(TailError):
    """The log file could not be opened or inspected at session start."""


class ReadError(TailError):
    """Reading from an already open log file failed."""


class LineParseError(ValueError):
    """A single line could not be decoded; the line is dropped."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
