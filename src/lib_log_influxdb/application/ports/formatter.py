"""Port for human-readable renderings of log records."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_influxdb.domain.record import LogRecord


@runtime_checkable
class FormatterPort(Protocol):
    """Render a :class:`LogRecord` into text."""

    def format(self, record: LogRecord) -> str:
        """Return the textual representation of ``record``."""


__all__ = ["FormatterPort"]
