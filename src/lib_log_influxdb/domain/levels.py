"""Log level abstraction covering the eight syslog-style severities.

Purpose
-------
Offer a domain-specific representation of log severities that host logging
frameworks (and the stdlib bridge) can translate into, so thresholds and the
``level`` tag stay consistent across drivers.

Contents
--------
* :class:`LogLevel` enum with conversion helpers.

System Role
-----------
Used by :class:`lib_log_influxdb.logger.AbstractLogger` to filter records below
the configured threshold and by the point mapper to derive the ``level`` tag.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels ordered from most to least verbose."""

    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
    ALERT = 60
    EMERGENCY = 70

    @property
    def severity(self) -> str:
        """Return the lowercase severity name used as the ``level`` tag."""

        return self.name.lower()

    def to_python_level(self) -> int:
        """Return the closest :mod:`logging` constant for this level."""

        return _PYTHON_LEVELS[self]

    def allows(self, threshold: "LogLevel") -> bool:
        """Return ``True`` when this level is at or above ``threshold``."""

        return self.value >= threshold.value

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Translate a stdlib logging level integer into :class:`LogLevel`.

        Custom stdlib levels round down to the nearest known severity so a
        ``logging.DEBUG + 5`` record still maps to :attr:`DEBUG`.
        """
        if level >= logging.CRITICAL:
            return cls.CRITICAL
        candidates = [member for member in cls if member.value <= level and member.value <= logging.CRITICAL]
        if not candidates:
            return cls.DEBUG
        return max(candidates, key=lambda member: member.value)

    @classmethod
    def from_numeric(cls, level: int) -> "LogLevel":
        """Return the :class:`LogLevel` corresponding to ``level``."""
        try:
            return cls(level)
        except ValueError as exc:
            raise ValueError(f"Unsupported log level numeric: {level}") from exc

    @classmethod
    def coerce(cls, level: "str | int | LogLevel") -> "LogLevel":
        """Accept a member, a case-insensitive name, or a numeric rank.

        Examples
        --------
        >>> LogLevel.coerce("Warning"), LogLevel.coerce(40)
        (<LogLevel.WARNING: 30>, <LogLevel.ERROR: 40>)
        """
        if isinstance(level, LogLevel):
            return level
        if isinstance(level, str):
            return cls.from_name(level)
        if isinstance(level, int) and not isinstance(level, bool):
            return cls.from_numeric(level)
        raise ValueError(f"Unknown log level: {level!r}")


_PYTHON_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.EMERGENCY: logging.CRITICAL,
}
# stdlib has no notice/alert/emergency; they collapse onto the nearest level.


__all__ = ["LogLevel"]
