from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from lib_log_influxdb import runtime
from lib_log_influxdb.domain.point import MeasurementPoint
from lib_log_influxdb.logger import InfluxDBLogger


class RecordingWriteApi:
    """Write API double keeping every point and counting ``close`` calls."""

    def __init__(self) -> None:
        self.points: list[MeasurementPoint] = []
        self.close_calls = 0

    def write(self, point: MeasurementPoint) -> None:
        self.points.append(point)

    def close(self) -> None:
        self.close_calls += 1


class FailingWriteApi(RecordingWriteApi):
    """Write API double raising on ``write`` and optionally on ``close``."""

    def __init__(self, *, fail_close: bool = False) -> None:
        super().__init__()
        self.fail_close = fail_close
        self.write_attempts = 0

    def write(self, point: MeasurementPoint) -> None:
        self.write_attempts += 1
        raise ConnectionError("influx unreachable")

    def close(self) -> None:
        super().close()
        if self.fail_close:
            raise ConnectionError("flush failed")


@pytest.fixture
def write_api() -> RecordingWriteApi:
    return RecordingWriteApi()


@pytest.fixture
def failing_write_api() -> FailingWriteApi:
    return FailingWriteApi()


@pytest.fixture
def make_logger(write_api: RecordingWriteApi) -> Callable[..., InfluxDBLogger]:
    def _factory(**kwargs: Any) -> InfluxDBLogger:
        api = kwargs.pop("write_api", write_api)
        return InfluxDBLogger(api, **kwargs)

    return _factory


@pytest.fixture
def influx_config() -> dict[str, Any]:
    return {
        "url": "http://influx.test:8086",
        "token": "secret-token",
        "org": "acme",
        "bucket": "logs",
    }


@pytest.fixture
def fixed_resolver() -> runtime.EnvironmentResolver:
    return runtime.EnvironmentResolver(environ={}, hostname=lambda: "test-host")


@pytest.fixture(autouse=True)
def _isolated_manager() -> Iterator[None]:
    runtime.clear_manager()
    try:
        yield
    finally:
        runtime.clear_manager()
