"""Structured log record handed to drivers by the host logging framework."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .levels import LogLevel


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Ephemeral record built per log call and discarded after mapping.

    Attributes
    ----------
    level:
        Severity of the record.
    message:
        Rendered message; may be empty.
    context:
        Shallow copy of caller-supplied key/value pairs. ``tags`` and
        ``error`` carry special meaning for the point mapper.
    """

    level: LogLevel
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", dict(self.context))

    @classmethod
    def create(cls, level: str | LogLevel, message: str, context: Mapping[str, Any] | None = None) -> "LogRecord":
        """Coerce loosely typed inputs into a record."""

        return cls(level=LogLevel.coerce(level), message=str(message), context=dict(context or {}))


__all__ = ["LogRecord"]
