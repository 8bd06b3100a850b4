from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from influxdb_client import Point, WriteOptions

from lib_log_influxdb.adapters import influx as influx_module
from lib_log_influxdb.adapters.influx import InfluxWriteApi, coerce_precision, create_write_client, to_influx_point
from lib_log_influxdb.application.ports.write_api import WriteApiPort
from lib_log_influxdb.domain.errors import ConfigurationError
from lib_log_influxdb.domain.point import MeasurementPoint

FIXED = datetime(2025, 1, 1, tzinfo=timezone.utc)


class _FixedClock:
    def now(self) -> datetime:
        return FIXED


class _FakeClientWriteApi:
    def __init__(self, *, fail_close: bool = False) -> None:
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self.fail_close = fail_close

    def write(self, **kwargs: Any) -> None:
        self.calls.append(kwargs)

    def close(self) -> None:
        self.closed = True
        if self.fail_close:
            raise ConnectionError("flush failed")


class _FakeClient:
    instances: list["_FakeClient"] = []

    def __init__(self, *, fail_close: bool = False, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.write_options: WriteOptions | None = None
        self.api = _FakeClientWriteApi(fail_close=fail_close)
        self.closed = False
        _FakeClient.instances.append(self)

    def write_api(self, *, write_options: WriteOptions) -> _FakeClientWriteApi:
        self.write_options = write_options
        return self.api

    def close(self) -> None:
        self.closed = True


def _point() -> MeasurementPoint:
    return MeasurementPoint(
        "logs",
        {"level": "error", "service": "api"},
        {"message": "disk full", "context_extra": 7, "nothing": None},
    )


def test_to_influx_point_renders_tags_fields_and_time() -> None:
    line = to_influx_point(_point(), timestamp=FIXED, precision="s").to_line_protocol()

    assert line.startswith("logs,")
    assert "level=error" in line
    assert "service=api" in line
    assert 'message="disk full"' in line
    assert "context_extra=7i" in line
    assert "nothing" not in line
    assert line.endswith(" 1735689600")


def test_to_influx_point_without_timestamp_leaves_time_to_server() -> None:
    point = to_influx_point(_point())
    assert isinstance(point, Point)
    assert not point.to_line_protocol().rstrip().endswith("1735689600")


def test_write_api_uses_batching_options_and_destination() -> None:
    client = _FakeClient()
    api = InfluxWriteApi(client=client, bucket="logs", org="acme", batch_size=50, flush_interval=250, clock=_FixedClock())

    api.write(_point())

    assert isinstance(api, WriteApiPort)
    assert client.write_options is not None
    assert client.write_options.batch_size == 50
    assert client.write_options.flush_interval == 250
    call = client.api.calls[0]
    assert call["bucket"] == "logs"
    assert call["org"] == "acme"
    assert call["write_precision"] == "s"
    assert isinstance(call["record"], Point)
    assert call["record"].to_line_protocol().endswith(" 1735689600")


def test_close_flushes_write_api_then_closes_client() -> None:
    client = _FakeClient()
    api = InfluxWriteApi(client=client, bucket="logs", org="acme")

    api.close()

    assert client.api.closed is True
    assert client.closed is True


def test_close_still_closes_client_when_flush_fails() -> None:
    client = _FakeClient(fail_close=True)
    api = InfluxWriteApi(client=client, bucket="logs", org="acme")

    with pytest.raises(ConnectionError):
        api.close()

    assert client.closed is True


def test_create_write_client_builds_influx_client(monkeypatch: pytest.MonkeyPatch) -> None:
    _FakeClient.instances.clear()
    monkeypatch.setattr(influx_module, "InfluxDBClient", _FakeClient)

    api = create_write_client(url="http://influx.test:8086", token="tok", org="acme", bucket="logs", precision="ms")

    client = _FakeClient.instances[-1]
    assert client.kwargs == {"url": "http://influx.test:8086", "token": "tok", "org": "acme"}
    assert client.write_options is not None
    assert client.write_options.batch_size == 1000
    assert client.write_options.flush_interval == 1000
    api.write(_point())
    assert client.api.calls[0]["write_precision"] == "ms"


@pytest.mark.parametrize("value, expected", [("s", "s"), ("MS", "ms"), (" us ", "us"), ("ns", "ns"), (None, "s")])
def test_coerce_precision_accepts_known_values(value: str | None, expected: str) -> None:
    assert coerce_precision(value) == expected


def test_coerce_precision_rejects_unknown_values() -> None:
    with pytest.raises(ConfigurationError, match="precision") as excinfo:
        coerce_precision("minutes")
    assert excinfo.value.key == "precision"
