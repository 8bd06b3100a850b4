"""Domain entities and value objects used by the InfluxDB driver."""

from __future__ import annotations

from .errors import ConfigurationError, ErrorDetails, StructuredError, WriteDispatchError, describe_error
from .levels import LogLevel
from .point import FieldValue, MeasurementPoint
from .record import LogRecord

__all__ = [
    "ConfigurationError",
    "ErrorDetails",
    "FieldValue",
    "LogLevel",
    "LogRecord",
    "MeasurementPoint",
    "StructuredError",
    "WriteDispatchError",
    "describe_error",
]
