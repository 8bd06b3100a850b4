"""Line and JSON formatters for human-readable record output.

Purpose
-------
Provide the pluggable formatting capability of the host logging contract.
The InfluxDB write path never uses a formatter; the CLI uses one to echo what
was sent.

Contents
--------
* :class:`LineFormatter` - ``str.format`` template rendering.
* :class:`JsonFormatter` - one JSON object per record.
* :func:`create_formatter` - selection from driver configuration.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from lib_log_influxdb.application.ports.formatter import FormatterPort
from lib_log_influxdb.domain.record import LogRecord

DEFAULT_LINE_FORMAT = "[{datetime}] {level_name}: {message} {context}"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

Now = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_payload(record: LogRecord, timestamp: datetime, date_format: str) -> dict[str, Any]:
    context = dict(record.context)
    return {
        "datetime": timestamp.strftime(date_format),
        "level": record.level.severity,
        "level_name": record.level.name,
        "message": record.message,
        "context": json.dumps(context, default=str, sort_keys=True) if context else "",
    }


class LineFormatter(FormatterPort):
    """Render records through a ``str.format`` template.

    Examples
    --------
    >>> from lib_log_influxdb.domain.levels import LogLevel
    >>> fixed = lambda: datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    >>> LineFormatter("{level_name} {message}", now=fixed).format(LogRecord(LogLevel.INFO, "ready"))
    'INFO ready'
    """

    def __init__(self, format: str | None = None, date_format: str | None = None, *, now: Now | None = None) -> None:
        self._template = format or DEFAULT_LINE_FORMAT
        self._date_format = date_format or DEFAULT_DATE_FORMAT
        self._now = now or _utc_now

    def format(self, record: LogRecord) -> str:
        payload = _format_payload(record, self._now(), self._date_format)
        return self._template.format(**payload).rstrip()


class JsonFormatter(FormatterPort):
    """Render records as single-line JSON objects with sorted keys."""

    def __init__(self, *, now: Now | None = None) -> None:
        self._now = now or _utc_now

    def format(self, record: LogRecord) -> str:
        data = {
            "datetime": self._now().isoformat(),
            "level": record.level.severity,
            "message": record.message,
            "context": dict(record.context),
        }
        return json.dumps(data, default=str, sort_keys=True)


def create_formatter(config: Mapping[str, Any]) -> FormatterPort:
    """Pick a formatter from ``config["formatter"]``; unknown names mean JSON."""

    formatter_type = str(config.get("formatter") or "json").lower()
    if formatter_type == "line":
        return LineFormatter(config.get("format"), config.get("date_format"))
    return JsonFormatter()


__all__ = ["DEFAULT_DATE_FORMAT", "DEFAULT_LINE_FORMAT", "JsonFormatter", "LineFormatter", "create_formatter"]
