"""Logger contract of the host framework and the InfluxDB driver.

Purpose
-------
Offer the base logger capability (severity threshold, convenience methods,
formatter) and the InfluxDB implementation that maps each record onto a
measurement point and dispatches it to the write API.

Contents
--------
* :class:`AbstractLogger` - threshold filtering and the abstract ``write``.
* :class:`InfluxDBLogger` - dispatching logger owning a write API handle.

System Role
-----------
Long-lived object created by :func:`lib_log_influxdb.runtime.create_logger`
(one per configured channel) and closed at application shutdown so the client
flushes its batch.

Alignment Notes
---------------
Sink failures are reported through :data:`LOGGER` and the optional diagnostic
hook; they never propagate out of :meth:`AbstractLogger.log` or
:meth:`InfluxDBLogger.close`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType
from typing import Any, Mapping

from lib_log_influxdb.adapters.formatters import JsonFormatter
from lib_log_influxdb.application.ports.formatter import FormatterPort
from lib_log_influxdb.application.ports.write_api import WriteApiPort
from lib_log_influxdb.application.use_cases.dispatch import PointDispatcher
from lib_log_influxdb.application.use_cases.map_point import build_point
from lib_log_influxdb.domain.errors import WriteDispatchError
from lib_log_influxdb.domain.levels import LogLevel
from lib_log_influxdb.domain.point import MeasurementPoint
from lib_log_influxdb.domain.record import LogRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_MEASUREMENT = "logs"

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


class AbstractLogger(ABC):
    """Base logger applying the minimum severity before ``write`` runs."""

    def __init__(self, level: str | LogLevel = LogLevel.DEBUG, formatter: FormatterPort | None = None) -> None:
        self._level = LogLevel.coerce(level)
        self._formatter = formatter or JsonFormatter()

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def formatter(self) -> FormatterPort:
        return self._formatter

    def set_level(self, level: str | LogLevel) -> "AbstractLogger":
        self._level = LogLevel.coerce(level)
        return self

    def is_enabled_for(self, level: str | LogLevel) -> bool:
        return LogLevel.coerce(level).allows(self._level)

    def log(self, level: str | LogLevel, message: str, context: Mapping[str, Any] | None = None) -> None:
        """Forward the record to :meth:`write` unless it is below the threshold.

        Raises
        ------
        ValueError
            When ``level`` names no known severity.
        """
        resolved = LogLevel.coerce(level)
        if not resolved.allows(self._level):
            return
        self.write(resolved, str(message), dict(context or {}))

    def format(self, level: str | LogLevel, message: str, context: Mapping[str, Any] | None = None) -> str:
        """Render a record with the configured formatter."""
        return self._formatter.format(LogRecord.create(level, message, context))

    def debug(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.INFO, message, context)

    def notice(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.NOTICE, message, context)

    def warning(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.WARNING, message, context)

    def error(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ERROR, message, context)

    def critical(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.CRITICAL, message, context)

    def alert(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ALERT, message, context)

    def emergency(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.EMERGENCY, message, context)

    @abstractmethod
    def write(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        """Persist a record that passed the threshold."""

    def close(self) -> None:
        """Release resources held by the logger."""

    async def aclose(self) -> None:
        self.close()


class InfluxDBLogger(AbstractLogger):
    """Write log records to InfluxDB 2.x as measurement points.

    Examples
    --------
    >>> class MemoryWriteApi:
    ...     def __init__(self):
    ...         self.points = []
    ...     def write(self, point):
    ...         self.points.append(point)
    ...     def close(self):
    ...         pass
    >>> api = MemoryWriteApi()
    >>> logger = InfluxDBLogger(api, default_tags={"service": "api"})
    >>> logger.error("disk full", {"tags": {"disk": "sda1"}})
    >>> api.points[0].tags
    {'level': 'error', 'service': 'api', 'disk': 'sda1'}
    """

    def __init__(
        self,
        write_api: WriteApiPort,
        *,
        measurement: str = DEFAULT_MEASUREMENT,
        default_tags: Mapping[str, Any] | None = None,
        use_coroutines: bool = False,
        level: str | LogLevel = LogLevel.DEBUG,
        formatter: FormatterPort | None = None,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        """Bind the logger to ``write_api``.

        Parameters
        ----------
        write_api:
            Object providing ``write(point)`` and ``close()``.
        measurement:
            Measurement name for every point.
        default_tags:
            Tags added to every point; per-call tags override them.
        use_coroutines:
            Submit writes as detached work when an asyncio loop is running.
        level:
            Minimum severity; lower records never reach the mapper.
        formatter:
            Formatter for human-readable renderings (not used for writes).
        diagnostic:
            Optional ``(name, payload)`` callback notified about write and
            close failures.
        """
        super().__init__(level, formatter)
        self._write_api = write_api
        self._measurement = _require_measurement(measurement)
        self._default_tags: dict[str, Any] = dict(default_tags or {})
        self._use_coroutines = bool(use_coroutines)
        self._diagnostic = diagnostic
        self._dispatcher = PointDispatcher(write_api.write, on_error=self._report_write_failure)
        self._closed = False

    @classmethod
    def create(cls, config: Mapping[str, Any]) -> "InfluxDBLogger":
        """Build a logger from a driver configuration mapping."""
        from lib_log_influxdb.runtime._factory import create_logger

        return create_logger(config)

    @property
    def measurement(self) -> str:
        return self._measurement

    @property
    def default_tags(self) -> dict[str, Any]:
        return dict(self._default_tags)

    @property
    def coroutine_mode(self) -> bool:
        return self._use_coroutines

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_writes(self) -> int:
        """Number of detached writes still in flight."""
        return self._dispatcher.pending

    def set_measurement(self, measurement: str) -> "InfluxDBLogger":
        self._measurement = _require_measurement(measurement)
        return self

    def add_default_tags(self, tags: Mapping[str, Any]) -> "InfluxDBLogger":
        """Merge ``tags`` into the default tags; later calls win on conflicts."""
        self._default_tags.update(tags)
        return self

    def set_coroutine_mode(self, enabled: bool) -> "InfluxDBLogger":
        self._use_coroutines = bool(enabled)
        return self

    def build_point(self, level: str | LogLevel, message: str, context: Mapping[str, Any] | None = None) -> MeasurementPoint:
        """Return the point :meth:`write` would send, without sending it."""
        return build_point(
            level,
            message,
            context,
            measurement=self._measurement,
            default_tags=self._default_tags,
        )

    def write(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        if self._closed:
            LOGGER.debug("Dropping %s record; InfluxDB logger already closed", level.severity)
            return
        point = self.build_point(level, message, context)
        self._dispatcher.dispatch(point, detached=self._use_coroutines)

    def close(self) -> None:
        """Flush and close the write API once; later calls do nothing.

        Detached writes still running are not awaited; inside an event loop
        use :meth:`aclose` so they reach the write API before it closes.
        """
        if self._closed:
            return
        self._closed = True
        pending = self._dispatcher.pending
        if pending:
            LOGGER.warning("Closing InfluxDB logger with %d detached write(s) in flight; use aclose() to await them", pending)
        try:
            self._write_api.close()
        except Exception as exc:  # noqa: BLE001
            error = WriteDispatchError("close", exc)
            LOGGER.error("Error closing InfluxDB write API: %s", exc, exc_info=exc)
            self._emit_diagnostic("influxdb_close_error", {"exception": repr(error.cause)})

    async def aclose(self) -> None:
        """Await detached writes started on this loop, then :meth:`close`."""
        await self._dispatcher.wait_pending()
        self.close()

    def __enter__(self) -> "InfluxDBLogger":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _report_write_failure(self, error: WriteDispatchError, point: MeasurementPoint) -> None:
        LOGGER.error("Error writing to InfluxDB: %s", error.cause, exc_info=error.cause)
        self._emit_diagnostic(
            "influxdb_write_error",
            {
                "measurement": point.measurement,
                "level": point.tags.get("level"),
                "exception": repr(error.cause),
            },
        )

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.warning("InfluxDB diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


def _require_measurement(measurement: str) -> str:
    if not measurement or not str(measurement).strip():
        raise ValueError("measurement must not be empty")
    return str(measurement)


__all__ = ["AbstractLogger", "DEFAULT_MEASUREMENT", "DiagnosticHook", "InfluxDBLogger"]
