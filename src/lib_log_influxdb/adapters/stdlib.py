"""Bridge from :mod:`logging` to a driver logger.

Purpose
-------
Let applications that log through the standard library attach an
``InfluxDBHandler`` to any logger and have records land in InfluxDB.

Contents
--------
* :class:`InfluxDBHandler` - :class:`logging.Handler` forwarding records.
* :func:`record_context` - extraction of ``extra`` attributes.

System Role
-----------
Optional entry point; the driver logger remains the single place that maps
and dispatches records.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lib_log_influxdb.domain.levels import LogLevel

if TYPE_CHECKING:
    from lib_log_influxdb.logger import AbstractLogger

#: Attributes present on every stdlib record; anything else came from ``extra``.
_STANDARD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

#: Loggers whose records are never forwarded: this package and the InfluxDB
#: client, which reports its own batch failures through :mod:`logging`.
_SKIPPED_LOGGER_PREFIXES = ("lib_log_influxdb", "influxdb_client")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the driver context for ``record``.

    ``extra`` attributes become context entries, ``exc_info`` becomes the
    ``error`` entry, and the logger name is kept as ``logger``.
    """

    context: dict[str, Any] = {
        key: value for key, value in vars(record).items() if key not in _STANDARD_ATTRIBUTES and not key.startswith("_")
    }
    context.setdefault("logger", record.name)
    if record.exc_info and record.exc_info[1] is not None:
        context["error"] = record.exc_info[1]
    return context


class InfluxDBHandler(logging.Handler):
    """Forward stdlib records to an :class:`AbstractLogger`.

    Without an explicit ``level`` the handler filters at the stdlib level
    closest to the driver logger's threshold.
    """

    def __init__(self, logger: "AbstractLogger", level: int | None = None) -> None:
        super().__init__(logger.level.to_python_level() if level is None else level)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        if _is_skipped(record.name):
            return
        try:
            self._logger.log(
                LogLevel.from_python_level(record.levelno),
                record.getMessage(),
                record_context(record),
            )
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def close(self) -> None:
        try:
            self._logger.close()
        finally:
            super().close()


def _is_skipped(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in _SKIPPED_LOGGER_PREFIXES)


__all__ = ["InfluxDBHandler", "record_context"]
