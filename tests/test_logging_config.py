from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.tail_session",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Opened sensor log",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(path="/var/log/sdr.json", device=0x803, inode=0x1F, offset=3616))

    assert message == "Opened sensor log | path=/var/log/sdr.json device=803 inode=1F offset=3616"


def test_formatter_leaves_plain_messages_alone() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(unrelated="x")) == "Opened sensor log"


def test_formatter_respects_custom_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["sensor_id"])

    message = formatter.format(_record(sensor_id="acurite-tower-00005019-c", path="/tmp/x"))

    assert message == "Opened sensor log | sensor_id=acurite-tower-00005019-c"
