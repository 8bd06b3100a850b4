"""InfluxDB 2.x write adapter built on ``influxdb-client``.

Purpose
-------
Implement :class:`WriteApiPort` on top of the batching write API of the
official client so batching, retries, line-protocol encoding, and network I/O
stay inside the library.

Contents
--------
* :data:`DEFAULT_BATCH_SIZE` / :data:`DEFAULT_FLUSH_INTERVAL_MS` /
  :data:`DEFAULT_PRECISION` - batching defaults.
* :class:`SystemClock` - UTC clock used to stamp points.
* :class:`InfluxWriteApi` - adapter converting :class:`MeasurementPoint`.
* :func:`create_write_client` - factory used by the driver.

System Role
-----------
Outermost adapter of the write path; the only module importing
``influxdb_client``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from influxdb_client import InfluxDBClient, Point, WriteOptions
from influxdb_client.domain.write_precision import WritePrecision

from lib_log_influxdb.application.ports.time import ClockPort
from lib_log_influxdb.application.ports.write_api import WriteApiPort
from lib_log_influxdb.domain.errors import ConfigurationError
from lib_log_influxdb.domain.point import MeasurementPoint

LOGGER = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000
DEFAULT_FLUSH_INTERVAL_MS = 1000
DEFAULT_PRECISION = WritePrecision.S

_PRECISIONS = {
    "s": WritePrecision.S,
    "ms": WritePrecision.MS,
    "us": WritePrecision.US,
    "ns": WritePrecision.NS,
}


class SystemClock(ClockPort):
    """Clock returning timezone-aware UTC timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def coerce_precision(value: str | None) -> str:
    """Validate ``value`` against the supported write precisions.

    Examples
    --------
    >>> coerce_precision("MS")
    'ms'
    >>> coerce_precision(None)
    's'
    """

    if value is None:
        return DEFAULT_PRECISION
    normalized = str(value).strip().lower()
    try:
        return _PRECISIONS[normalized]
    except KeyError as exc:
        raise ConfigurationError(
            f"InfluxDB precision must be one of {', '.join(_PRECISIONS)}; got {value!r}",
            key="precision",
        ) from exc


def to_influx_point(point: MeasurementPoint, *, timestamp: datetime | None = None, precision: str = DEFAULT_PRECISION) -> Point:
    """Convert ``point`` into an :class:`influxdb_client.Point`.

    ``None`` fields are skipped because line protocol has no null value.
    """

    influx_point = Point(point.measurement)
    for key, value in point.tags.items():
        influx_point.tag(key, value)
    for key, value in point.fields.items():
        if value is None:
            continue
        influx_point.field(key, value)
    if timestamp is not None:
        influx_point.time(timestamp, precision)
    return influx_point


class InfluxWriteApi(WriteApiPort):
    """Batching write API bound to one bucket and organisation."""

    def __init__(
        self,
        *,
        client: Any,
        bucket: str,
        org: str,
        precision: str = DEFAULT_PRECISION,
        batch_size: int = DEFAULT_BATCH_SIZE,
        flush_interval: int = DEFAULT_FLUSH_INTERVAL_MS,
        clock: ClockPort | None = None,
    ) -> None:
        """Open the batching write API on ``client``.

        Parameters
        ----------
        client:
            :class:`influxdb_client.InfluxDBClient` (or a compatible double).
        bucket, org:
            Destination of every write.
        precision:
            Timestamp precision (``s``, ``ms``, ``us``, ``ns``).
        batch_size, flush_interval:
            Passed to :class:`influxdb_client.WriteOptions`; the flush interval
            is expressed in milliseconds.
        clock:
            Source of the write-time timestamp; defaults to :class:`SystemClock`.
        """
        self._client = client
        self._bucket = bucket
        self._org = org
        self._precision = coerce_precision(precision)
        self._clock = clock or SystemClock()
        self._write_api = client.write_api(
            write_options=WriteOptions(batch_size=batch_size, flush_interval=flush_interval),
        )

    def write(self, point: MeasurementPoint) -> None:
        """Stamp ``point`` with the current time and queue it for the batch."""
        record = to_influx_point(point, timestamp=self._clock.now(), precision=self._precision)
        self._write_api.write(bucket=self._bucket, org=self._org, record=record, write_precision=self._precision)

    def close(self) -> None:
        """Flush the batch and close the underlying client."""
        try:
            self._write_api.close()
        finally:
            self._client.close()
        LOGGER.debug("Closed InfluxDB write API for bucket %s", self._bucket)


def create_write_client(
    *,
    url: str,
    token: str,
    org: str,
    bucket: str,
    precision: str | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    flush_interval: int = DEFAULT_FLUSH_INTERVAL_MS,
) -> InfluxWriteApi:
    """Create an :class:`InfluxDBClient` and wrap its batching write API."""

    resolved_precision = coerce_precision(precision)
    client = InfluxDBClient(url=url, token=token, org=org)
    return InfluxWriteApi(
        client=client,
        bucket=bucket,
        org=org,
        precision=resolved_precision,
        batch_size=batch_size,
        flush_interval=flush_interval,
    )


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_FLUSH_INTERVAL_MS",
    "DEFAULT_PRECISION",
    "InfluxWriteApi",
    "SystemClock",
    "coerce_precision",
    "create_write_client",
    "to_influx_point",
]
