"""Dispatch policy deciding how a mapped point reaches the write API.

Purpose
-------
Run each write either inline or as a detached unit of work on the running
asyncio loop, and make sure no write failure ever escapes to the caller.

Contents
--------
* :class:`PointDispatcher` - inline/detached dispatch with failure isolation.
* :func:`running_loop` - helper returning the loop of the current thread.

System Role
-----------
Owned by :class:`lib_log_influxdb.logger.InfluxDBLogger`. Inline writes keep
call order; detached writes carry no ordering guarantee and cannot be
cancelled from here.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from lib_log_influxdb.domain.errors import WriteDispatchError
from lib_log_influxdb.domain.point import MeasurementPoint

LOGGER = logging.getLogger(__name__)

WriteCallable = Callable[[MeasurementPoint], None]
ErrorReporter = Callable[[WriteDispatchError, MeasurementPoint], None]


def running_loop() -> asyncio.AbstractEventLoop | None:
    """Return the event loop running in this thread, if any."""

    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class PointDispatcher:
    """Send points to ``write`` while isolating the caller from failures.

    Examples
    --------
    >>> sent = []
    >>> dispatcher = PointDispatcher(sent.append, on_error=lambda error, point: None)
    >>> dispatcher.dispatch(MeasurementPoint("logs", {"level": "info"}, {"message": "hi"}), detached=True)
    False
    >>> sent[0].fields["message"]
    'hi'
    """

    def __init__(self, write: WriteCallable, *, on_error: ErrorReporter) -> None:
        self._write = write
        self._on_error = on_error
        self._pending: set[asyncio.Future[None]] = set()

    def dispatch(self, point: MeasurementPoint, *, detached: bool) -> bool:
        """Deliver ``point``; return ``True`` when it was submitted detached.

        Detached submission only happens when ``detached`` is requested and an
        event loop is running in the current thread. The write then runs on the
        loop's default executor and the caller returns immediately. When the
        executor refuses new work (loop shutting down) the write runs inline.
        """

        loop = running_loop() if detached else None
        if loop is None:
            self._guarded_write(point)
            return False
        try:
            future = loop.run_in_executor(None, self._guarded_write, point)
        except RuntimeError as exc:
            LOGGER.debug("Executor rejected detached write, writing inline: %s", exc)
            self._guarded_write(point)
            return False
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        return True

    @property
    def pending(self) -> int:
        """Number of detached writes that have not finished yet."""

        return len(self._pending)

    async def wait_pending(self) -> None:
        """Await detached writes submitted on the current loop."""

        loop = asyncio.get_running_loop()
        own = [future for future in self._pending if future.get_loop() is loop]
        if own:
            await asyncio.gather(*own)

    def _guarded_write(self, point: MeasurementPoint) -> None:
        try:
            self._write(point)
        except Exception as exc:  # noqa: BLE001
            self._on_error(WriteDispatchError("write", exc), point)


__all__ = ["PointDispatcher", "running_loop"]
