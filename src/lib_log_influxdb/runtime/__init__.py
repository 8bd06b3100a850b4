"""Runtime wiring: driver registration with the host log manager.

Purpose
-------
Expose the registration hook host applications call at startup plus the
factory and manager helpers behind it. Registration mirrors a service
provider: ``register`` adds the ``"influxdb"`` driver, ``boot`` adds the
package namespace for discovery.

Contents
--------
* :data:`DRIVER_NAME` / :data:`DRIVER_NAMESPACE`.
* :func:`register` - register + boot in one call.
* :func:`create_logger`, :class:`LogManager`, settings helpers (re-exported).
* :func:`shutdown` / :func:`shutdown_async` - close channels of the default
  manager.
"""

from __future__ import annotations

from ._factory import ClientFactory, create_logger
from ._manager import DriverFactory, LogManager, clear_manager, current_manager, set_manager
from ._settings import (
    EnvironmentResolver,
    InfluxDBSettings,
    REQUIRED_KEYS,
    build_settings,
    parse_tag_pairs,
    settings_from_env,
)

DRIVER_NAME = "influxdb"
DRIVER_NAMESPACE = "lib_log_influxdb"


def register(manager: LogManager | None = None) -> LogManager:
    """Register the InfluxDB driver and its discovery namespace.

    Returns the manager so callers can chain ``register().channel(...)``.

    Examples
    --------
    >>> manager = register(LogManager())
    >>> manager.drivers(), manager.namespaces()
    (('influxdb',), ('lib_log_influxdb',))
    """

    target = manager or current_manager()
    target.register_driver(DRIVER_NAME, create_logger)
    target.register_namespace(DRIVER_NAMESPACE)
    return target


def shutdown() -> None:
    """Close every channel of the default manager (flushing InfluxDB batches)."""

    current_manager().shutdown()


async def shutdown_async() -> None:
    """Await detached writes and close every channel of the default manager."""

    await current_manager().shutdown_async()


__all__ = [
    "ClientFactory",
    "DRIVER_NAME",
    "DRIVER_NAMESPACE",
    "DriverFactory",
    "EnvironmentResolver",
    "InfluxDBSettings",
    "LogManager",
    "REQUIRED_KEYS",
    "build_settings",
    "clear_manager",
    "create_logger",
    "current_manager",
    "parse_tag_pairs",
    "register",
    "set_manager",
    "settings_from_env",
    "shutdown",
    "shutdown_async",
]
