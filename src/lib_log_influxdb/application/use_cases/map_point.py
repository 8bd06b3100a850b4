"""Use case translating a structured log record into a measurement point.

Purpose
-------
Keep the record-to-point mapping pure: no I/O, no clock, no randomness. The
result depends only on the arguments, so two calls with identical inputs yield
identical tags and fields.

Contents
--------
* :func:`build_point` - the point mapper.
* :func:`encode_field_value` - lossy scalar/JSON coercion for context values.

System Role
-----------
Invoked by :class:`lib_log_influxdb.logger.InfluxDBLogger` for every record
that passed the severity threshold.

Alignment Notes
---------------
Tags are written in the order ``level``, default tags, per-call tags; the last
write wins on key collisions. ``tags`` and ``error`` context keys never become
generic fields.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from lib_log_influxdb.domain.errors import describe_error
from lib_log_influxdb.domain.levels import LogLevel
from lib_log_influxdb.domain.point import SCALAR_TYPES, FieldValue, MeasurementPoint

RESERVED_CONTEXT_KEYS = frozenset({"tags", "error"})

_DROP = object()


def build_point(
    level: str | LogLevel,
    message: str,
    context: Mapping[str, Any] | None,
    *,
    measurement: str,
    default_tags: Mapping[str, Any] | None = None,
) -> MeasurementPoint:
    """Map a log record onto a :class:`MeasurementPoint`.

    Parameters
    ----------
    level:
        Severity member or name; lower-cased into the ``level`` tag.
    message:
        Rendered message stored in the ``message`` field.
    context:
        Caller context. ``context["tags"]`` (a mapping) adds tags,
        ``context["error"]`` (an exception or structured error) adds
        ``error_*`` fields, every other entry becomes a field.
    measurement:
        Target measurement name.
    default_tags:
        Tags applied to every point before per-call tags.

    Examples
    --------
    >>> point = build_point(
    ...     "error",
    ...     "disk full",
    ...     {"tags": {"disk": "sda1"}, "context_extra": 7},
    ...     measurement="logs",
    ...     default_tags={"service": "api"},
    ... )
    >>> point.tags
    {'level': 'error', 'service': 'api', 'disk': 'sda1'}
    >>> point.fields
    {'message': 'disk full', 'context_extra': 7}
    """

    context = context or {}
    tags: dict[str, str] = {"level": _severity_name(level)}
    for key, value in (default_tags or {}).items():
        tags[str(key)] = _stringify_tag(value)

    fields: dict[str, FieldValue] = {"message": message}

    details = describe_error(context.get("error")) if "error" in context else None
    if details is not None:
        fields["error_message"] = details.message
        fields["error_file"] = details.file
        fields["error_line"] = str(details.line)
        fields["error_trace"] = details.trace

    call_tags = context.get("tags")
    if isinstance(call_tags, Mapping):
        for key, value in call_tags.items():
            tags[str(key)] = _stringify_tag(value)

    for key, value in context.items():
        if key in RESERVED_CONTEXT_KEYS:
            continue
        encoded = encode_field_value(value)
        if not is_dropped(encoded):
            fields[str(key)] = encoded  # type: ignore[assignment]

    return MeasurementPoint(measurement=measurement, tags=tags, fields=fields)


def encode_field_value(value: Any) -> Any:
    """Return ``value`` as an admissible field value or the drop sentinel.

    Scalars and ``None`` pass through unchanged. Anything else is JSON encoded;
    values the encoder rejects (unsupported types, circular or too deeply
    nested containers) are dropped.

    Examples
    --------
    >>> encode_field_value(7)
    7
    >>> encode_field_value({"a": [1, 2]})
    '{"a": [1, 2]}'
    >>> encode_field_value(object()) is _DROP
    True
    """

    if value is None or isinstance(value, SCALAR_TYPES):
        return value
    try:
        return json.dumps(value)
    except (TypeError, ValueError, RecursionError):
        return _DROP


def is_dropped(value: Any) -> bool:
    """Return ``True`` when :func:`encode_field_value` rejected a value."""

    return value is _DROP


def _severity_name(level: str | LogLevel) -> str:
    if isinstance(level, LogLevel):
        return level.severity
    return str(level).lower()


def _stringify_tag(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


__all__ = ["RESERVED_CONTEXT_KEYS", "build_point", "encode_field_value", "is_dropped"]
