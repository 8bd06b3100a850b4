"""Error taxonomy and the structured-error capability.

Purpose
-------
Describe the two failure classes of the driver and the duck-typed contract a
``context["error"]`` value must satisfy to be expanded into ``error_*``
fields.

Contents
--------
* :class:`ConfigurationError` - raised while building a logger from config.
* :class:`WriteDispatchError` - wraps write/close failures for diagnostics.
* :class:`StructuredError` - protocol for error-like values.
* :class:`ErrorDetails` / :func:`describe_error` - normalised error view.

System Role
-----------
Configuration failures are loud and immediate; dispatch failures never leave
the logger and only reach the side channel.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class ConfigurationError(ValueError):
    """Raised when a mandatory configuration value is missing or invalid."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class WriteDispatchError(RuntimeError):
    """Failure of the external write API during ``write`` or ``close``."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"InfluxDB {operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


@runtime_checkable
class StructuredError(Protocol):
    """Error-like value exposing message, source location, and trace."""

    message: str
    file: str
    line: int
    trace: str


@dataclass(slots=True, frozen=True)
class ErrorDetails:
    """Normalised view of a structured error used by the point mapper."""

    message: str
    file: str
    line: int
    trace: str


def describe_error(value: Any) -> ErrorDetails | None:
    """Return :class:`ErrorDetails` for ``value`` or ``None`` when unsupported.

    Exceptions report the innermost traceback frame as their source location.
    Exceptions that were never raised carry no traceback; they report an empty
    file, line ``0`` and an empty trace.

    Examples
    --------
    >>> try:
    ...     raise ValueError("boom")
    ... except ValueError as exc:
    ...     details = describe_error(exc)
    >>> details.message, details.line > 0
    ('boom', True)
    >>> describe_error("not an error") is None
    True
    """

    if isinstance(value, BaseException):
        return _describe_exception(value)
    if isinstance(value, StructuredError):
        try:
            return ErrorDetails(
                message=str(value.message),
                file=str(value.file),
                line=int(value.line),
                trace=str(value.trace),
            )
        except (TypeError, ValueError):
            return None
    return None


def _describe_exception(exc: BaseException) -> ErrorDetails:
    tb = exc.__traceback__
    if tb is None:
        return ErrorDetails(message=str(exc), file="", line=0, trace="")
    innermost = tb
    while innermost.tb_next is not None:
        innermost = innermost.tb_next
    return ErrorDetails(
        message=str(exc),
        file=innermost.tb_frame.f_code.co_filename,
        line=innermost.tb_lineno,
        trace="".join(traceback.format_tb(tb)).rstrip("\n"),
    )


__all__ = [
    "ConfigurationError",
    "ErrorDetails",
    "StructuredError",
    "WriteDispatchError",
    "describe_error",
]
