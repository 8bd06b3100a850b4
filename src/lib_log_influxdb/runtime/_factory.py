"""Driver factory building an :class:`InfluxDBLogger` from configuration."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from lib_log_influxdb.adapters.formatters import create_formatter
from lib_log_influxdb.adapters.influx import create_write_client
from lib_log_influxdb.application.ports.write_api import WriteApiPort
from lib_log_influxdb.logger import DiagnosticHook, InfluxDBLogger

from ._settings import EnvironmentResolver, build_settings

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[..., WriteApiPort]


def create_logger(
    config: Mapping[str, Any],
    *,
    client_factory: ClientFactory | None = None,
    resolver: EnvironmentResolver | None = None,
    diagnostic: DiagnosticHook = None,
) -> InfluxDBLogger:
    """Create an InfluxDB logger from a configuration mapping.

    Parameters
    ----------
    config:
        Driver configuration; ``url``, ``token``, ``org`` and ``bucket`` are
        mandatory.
    client_factory:
        Callable accepting ``url``, ``token``, ``org``, ``bucket``,
        ``precision``, ``batch_size`` and ``flush_interval`` keywords and
        returning a write API. Defaults to :func:`create_write_client`.
    resolver:
        Source of the ``service``/``environment``/``host`` tag defaults.
    diagnostic:
        Optional hook forwarded to the logger.

    Raises
    ------
    ConfigurationError
        When configuration is incomplete; raised before the client exists.
    """

    settings = build_settings(config, resolver)
    factory = client_factory or create_write_client
    write_api = factory(
        url=settings.url,
        token=settings.token,
        org=settings.org,
        bucket=settings.bucket,
        precision=settings.precision,
        batch_size=settings.batch_size,
        flush_interval=settings.flush_interval,
    )
    formatter = create_formatter(settings.formatter) if settings.formatter is not None else None
    LOGGER.debug("Created InfluxDB logger for %s (bucket=%s, measurement=%s)", settings.url, settings.bucket, settings.measurement)
    return InfluxDBLogger(
        write_api,
        measurement=settings.measurement,
        default_tags=settings.default_tags,
        use_coroutines=settings.use_coroutines,
        level=settings.level,
        formatter=formatter,
        diagnostic=diagnostic,
    )


__all__ = ["ClientFactory", "create_logger"]
