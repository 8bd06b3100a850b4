"""Adapters: InfluxDB client, formatters, and the stdlib bridge."""

from __future__ import annotations

from .formatters import JsonFormatter, LineFormatter, create_formatter
from .influx import InfluxWriteApi, SystemClock, create_write_client
from .stdlib import InfluxDBHandler

__all__ = [
    "InfluxDBHandler",
    "InfluxWriteApi",
    "JsonFormatter",
    "LineFormatter",
    "SystemClock",
    "create_formatter",
    "create_write_client",
]
