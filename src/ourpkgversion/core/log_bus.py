"""Publish/subscribe bus for log records.

Every message the core logger emits is published here, regardless of whether
it is also printed. Subscribers (test captures, for instance)
receive ``LogRecord`` values. A failing subscriber is reported on stderr and
otherwise ignored, so logging never breaks a munge run.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable, Iterator
from dataclasses import dataclass

Subscriber = Callable[["LogRecord"], None]


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    message: str
    logger_name: str

    @property
    def plain(self) -> str:
        return f"[{self.level_name.lower()}] {self.message}"


class LogBus:
    def __init__(self) -> None:
        self._by_level: dict[str, list[Subscriber]] = {}
        self._all: list[Subscriber] = []

    def subscribe(self, cb: Subscriber, level_name: str | None = None) -> None:
        """Subscribe to every record, or only to records of ``level_name``."""
        if level_name is None:
            self._all.append(cb)
        else:
            self._by_level.setdefault(level_name.upper(), []).append(cb)

    def unsubscribe(self, cb: Subscriber) -> None:
        with contextlib.suppress(ValueError):
            self._all.remove(cb)
        for level_name in list(self._by_level):
            subs = self._by_level[level_name]
            with contextlib.suppress(ValueError):
                subs.remove(cb)
            if not subs:
                del self._by_level[level_name]

    def publish(self, record: LogRecord) -> None:
        targets = list(self._all) + list(self._by_level.get(record.level_name, []))
        for cb in targets:
            try:
                cb(record)
            except Exception:
                # Not through the logger: that would publish again.
                msg = "LogBus subscriber raised; suppressed.\n" + traceback.format_exc()
                with contextlib.suppress(Exception):
                    sys.stderr.write(msg)

    @contextlib.contextmanager
    def capture(self, level_name: str | None = None) -> Iterator[list[LogRecord]]:
        """Collect published records for the duration of the block."""
        records: list[LogRecord] = []
        self.subscribe(records.append, level_name)
        try:
            yield records
        finally:
            self.unsubscribe(records.append)

    def clear(self) -> None:
        self._by_level.clear()
        self._all.clear()


_LOG_BUS: LogBus | None = None


def get_log_bus() -> LogBus:
    global _LOG_BUS
    if _LOG_BUS is None:
        _LOG_BUS = LogBus()
    return _LOG_BUS
