"""InfluxDB 2.x driver for structured application logging.

The public surface covers the driver logger, the point mapper, the stdlib
bridge, and the registration hook for the host log manager::

    from lib_log_influxdb import LogManager, register

    manager = register(LogManager())
    logger = manager.channel("influxdb", {"url": ..., "token": ..., "org": ..., "bucket": ...})
    logger.error("disk full", {"tags": {"disk": "sda1"}})
    manager.shutdown()
"""

from __future__ import annotations

from .adapters.stdlib import InfluxDBHandler
from .application.use_cases.map_point import build_point
from .domain import ConfigurationError, LogLevel, LogRecord, MeasurementPoint, WriteDispatchError
from .logger import AbstractLogger, InfluxDBLogger
from .runtime import LogManager, create_logger, register, settings_from_env, shutdown, shutdown_async

__all__ = [
    "AbstractLogger",
    "ConfigurationError",
    "InfluxDBHandler",
    "InfluxDBLogger",
    "LogLevel",
    "LogManager",
    "LogRecord",
    "MeasurementPoint",
    "WriteDispatchError",
    "build_point",
    "create_logger",
    "register",
    "settings_from_env",
    "shutdown",
    "shutdown_async",
]
