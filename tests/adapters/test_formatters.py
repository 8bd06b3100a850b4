from __future__ import annotations

import json
from datetime import datetime, timezone

from lib_log_influxdb.adapters.formatters import JsonFormatter, LineFormatter, create_formatter
from lib_log_influxdb.application.ports.formatter import FormatterPort
from lib_log_influxdb.domain.levels import LogLevel
from lib_log_influxdb.domain.record import LogRecord


def _fixed() -> datetime:
    return datetime(2025, 9, 23, 12, 30, 0, tzinfo=timezone.utc)


def test_line_formatter_default_template() -> None:
    record = LogRecord(LogLevel.ERROR, "disk full", {"disk": "sda1"})

    output = LineFormatter(now=_fixed).format(record)

    assert output == '[2025-09-23 12:30:00] ERROR: disk full {"disk": "sda1"}'


def test_line_formatter_custom_date_format_and_empty_context() -> None:
    output = LineFormatter("{datetime} {level} {message} {context}", "%H:%M", now=_fixed).format(LogRecord(LogLevel.INFO, "ok"))

    assert output == "12:30 info ok"


def test_json_formatter_serialises_unencodable_context_as_text() -> None:
    record = LogRecord(LogLevel.WARNING, "careful", {"when": datetime(2025, 1, 1), "n": 1})

    payload = json.loads(JsonFormatter(now=_fixed).format(record))

    assert payload["level"] == "warning"
    assert payload["message"] == "careful"
    assert payload["context"]["n"] == 1
    assert payload["context"]["when"] == "2025-01-01 00:00:00"
    assert payload["datetime"] == "2025-09-23T12:30:00+00:00"


def test_create_formatter_selects_by_name() -> None:
    line = create_formatter({"formatter": "line", "format": "{message}"})
    assert isinstance(line, LineFormatter)
    assert line.format(LogRecord(LogLevel.INFO, "hi")) == "hi"
    assert isinstance(create_formatter({"formatter": "json"}), JsonFormatter)
    assert isinstance(create_formatter({"formatter": "xml"}), JsonFormatter)
    assert isinstance(create_formatter({}), FormatterPort)
