"""Host logging manager: driver registry and channel lifecycle.

Purpose
-------
Model the host framework's log manager the driver plugs into: drivers are
registered by name, unregistered names may be discovered in registered
namespaces, and channels are created once and closed on shutdown.

Contents
--------
* :class:`LogManager` - registry and channel cache.
* :func:`current_manager` / :func:`set_manager` / :func:`clear_manager` -
  process-wide default instance.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from threading import RLock
from typing import Any, Callable, Mapping

from lib_log_influxdb.domain.errors import ConfigurationError
from lib_log_influxdb.logger import AbstractLogger

LOGGER = logging.getLogger(__name__)

DriverFactory = Callable[[Mapping[str, Any]], AbstractLogger]


class LogManager:
    """Registry mapping driver names to logger factories.

    Examples
    --------
    >>> manager = LogManager()
    >>> manager.register_driver("null", lambda config: None)
    >>> manager.drivers()
    ('null',)
    """

    def __init__(self) -> None:
        self._drivers: dict[str, DriverFactory] = {}
        self._namespaces: list[str] = []
        self._channels: dict[str, AbstractLogger] = {}
        self._lock = RLock()

    def register_driver(self, name: str, factory: DriverFactory) -> None:
        """Register ``factory`` under ``name``; re-registration replaces it."""
        with self._lock:
            self._drivers[name.lower()] = factory

    def register_namespace(self, namespace: str) -> None:
        """Add ``namespace`` (an importable module path) to driver discovery."""
        with self._lock:
            if namespace not in self._namespaces:
                self._namespaces.append(namespace)

    def drivers(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._drivers)

    def namespaces(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._namespaces)

    def resolve_driver(self, name: str) -> DriverFactory:
        """Return the factory for ``name``.

        Registered drivers win. Otherwise each namespace module is searched for
        a class named ``<name>Logger`` (case-insensitive) exposing ``create``.

        Raises
        ------
        ConfigurationError
            When no driver matches ``name``.
        """
        key = name.lower()
        with self._lock:
            factory = self._drivers.get(key)
            namespaces = list(self._namespaces)
        if factory is not None:
            return factory
        for namespace in namespaces:
            discovered = _discover(namespace, key)
            if discovered is not None:
                return discovered
        raise ConfigurationError(f"Log driver {name!r} is not registered", key="driver")

    def channel(self, name: str, config: Mapping[str, Any] | None = None) -> AbstractLogger:
        """Return the logger for channel ``name``, creating it on first use.

        ``config["driver"]`` selects the driver; it defaults to ``name``.
        """
        with self._lock:
            existing = self._channels.get(name)
            if existing is not None:
                return existing
            settings = dict(config or {})
            factory = self.resolve_driver(str(settings.get("driver", name)))
            logger = factory(settings)
            self._channels[name] = logger
            return logger

    def channels(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._channels)

    def shutdown(self) -> None:
        """Close every channel once and forget them."""
        for name, logger in self._drain_channels():
            try:
                logger.close()
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Closing log channel %s failed", name, exc_info=exc)

    async def shutdown_async(self) -> None:
        """Await pending detached writes of every channel, then close them."""
        for name, logger in self._drain_channels():
            try:
                await logger.aclose()
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Closing log channel %s failed", name, exc_info=exc)

    def _drain_channels(self) -> list[tuple[str, AbstractLogger]]:
        with self._lock:
            channels = list(self._channels.items())
            self._channels.clear()
        return channels


def _discover(namespace: str, key: str) -> DriverFactory | None:
    try:
        module = importlib.import_module(namespace)
    except ImportError:
        LOGGER.warning("Log driver namespace %s cannot be imported", namespace)
        return None
    wanted = f"{key}logger"
    for attribute, value in vars(module).items():
        if attribute.lower() == wanted and inspect.isclass(value) and callable(getattr(value, "create", None)):
            return value.create
    return None


_MANAGER: LogManager | None = None
_MANAGER_LOCK = RLock()


def current_manager() -> LogManager:
    """Return the process-wide manager, creating it on first use."""

    global _MANAGER
    with _MANAGER_LOCK:
        if _MANAGER is None:
            _MANAGER = LogManager()
        return _MANAGER


def set_manager(manager: LogManager) -> None:
    """Install ``manager`` as the process-wide default."""

    global _MANAGER
    with _MANAGER_LOCK:
        _MANAGER = manager


def clear_manager() -> None:
    """Drop the process-wide manager without closing its channels."""

    global _MANAGER
    with _MANAGER_LOCK:
        _MANAGER = None


__all__ = ["DriverFactory", "LogManager", "clear_manager", "current_manager", "set_manager"]
