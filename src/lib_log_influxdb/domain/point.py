"""Measurement point produced for the time-series write API.

Purpose
-------
Provide an immutable, client-agnostic representation of a single InfluxDB
point so the mapping logic can be tested without the ``influxdb_client``
package and so adapters own the conversion into the client's own types.

Contents
--------
* :class:`MeasurementPoint` dataclass.
* ``FieldValue`` / ``SCALAR_TYPES`` describing admissible field values.

System Role
-----------
Output of :func:`lib_log_influxdb.application.use_cases.map_point.build_point`
and input of every :class:`~lib_log_influxdb.application.ports.write_api.WriteApiPort`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

FieldValue = Union[str, int, float, bool, None]

SCALAR_TYPES: tuple[type, ...] = (str, int, float, bool)
#: Python types admitted as raw field values.


@dataclass(slots=True, frozen=True)
class MeasurementPoint:
    """Point consisting of a measurement name, string tags, and typed fields.

    The timestamp is assigned by the write layer; the point itself carries
    none so mapping stays deterministic.
    """

    measurement: str
    tags: Mapping[str, str] = field(default_factory=dict)
    fields: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.measurement:
            raise ValueError("measurement must not be empty")
        object.__setattr__(self, "tags", dict(self.tags))
        object.__setattr__(self, "fields", dict(self.fields))

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dictionary view (``measurement``/``tags``/``fields``).

        Examples
        --------
        >>> MeasurementPoint("logs", {"level": "info"}, {"message": "hi"}).to_dict()
        {'measurement': 'logs', 'tags': {'level': 'info'}, 'fields': {'message': 'hi'}}
        """

        return {
            "measurement": self.measurement,
            "tags": dict(self.tags),
            "fields": dict(self.fields),
        }


__all__ = ["FieldValue", "MeasurementPoint", "SCALAR_TYPES"]
