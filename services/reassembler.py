"""Split a stream of byte chunks into newline-terminated lines."""

from __future__ import annotations

from typing import List

LINE_TERMINATOR = b"\n"


class LineReassembler:
    """Carries an incomplete trailing line across reads.

    The pending buffer never holds a terminator; a line is only handed out
    once its terminator has been seen.
    """

    def __init__(self) -> None:
        self._pending = bytearray()

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)

    def feed(self, chunk: bytes) -> List[bytes]:
        lines: List[bytes] = []
        start = 0
        while True:
            end = chunk.find(LINE_TERMINATOR, start)
            if end < 0:
                break
            self._pending += chunk[start:end]
            lines.append(bytes(self._pending))
            self._pending.clear()
            start = end + 1
        self._pending += chunk[start:]
        return lines
