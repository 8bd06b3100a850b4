"""Port describing the external time-series write API."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_influxdb.domain.point import MeasurementPoint


@runtime_checkable
class WriteApiPort(Protocol):
    """Accept measurement points and flush them on close.

    Implementations may batch, retry, and flush on their own schedule; the
    driver assumes ``write`` is safe to call from concurrent tasks.
    """

    def write(self, point: MeasurementPoint) -> None:
        """Hand ``point`` to the client for (possibly batched) delivery."""

    def close(self) -> None:
        """Flush buffered points and release the client."""


__all__ = ["WriteApiPort"]
