from __future__ import annotations

import asyncio
import logging
import threading

import pytest

from lib_log_influxdb.adapters.formatters import JsonFormatter, LineFormatter
from lib_log_influxdb.domain.levels import LogLevel
from lib_log_influxdb.domain.point import MeasurementPoint
from lib_log_influxdb.logger import InfluxDBLogger
from tests.conftest import FailingWriteApi, RecordingWriteApi

SIDE_CHANNEL = "lib_log_influxdb.logger"


def _side_channel_errors(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [record for record in caplog.records if record.name == SIDE_CHANNEL and record.levelno >= logging.ERROR]


def test_end_to_end_point_for_disk_full(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger(measurement="logs", default_tags={"service": "api"})

    logger.log("error", "disk full", {"tags": {"disk": "sda1"}, "context_extra": 7})

    assert len(write_api.points) == 1
    point = write_api.points[0]
    assert point.measurement == "logs"
    assert point.tags == {"level": "error", "service": "api", "disk": "sda1"}
    assert point.fields == {"message": "disk full", "context_extra": 7}


def test_records_below_threshold_never_reach_write_api(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger(level="warning")

    logger.debug("noise")
    logger.info("noise")
    logger.notice("noise")
    logger.log(LogLevel.DEBUG, "noise")

    assert write_api.points == []

    logger.warning("kept")
    logger.emergency("kept")
    assert [point.tags["level"] for point in write_api.points] == ["warning", "emergency"]


def test_convenience_methods_tag_their_level(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger()
    for name in ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency"):
        getattr(logger, name)(f"{name} message")

    assert [point.tags["level"] for point in write_api.points] == [
        "debug",
        "info",
        "notice",
        "warning",
        "error",
        "critical",
        "alert",
        "emergency",
    ]


def test_unknown_level_is_a_caller_error(make_logger) -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        make_logger().log("verbose", "hello")


def test_write_failure_is_swallowed_and_reported_once(
    make_logger, failing_write_api: FailingWriteApi, caplog: pytest.LogCaptureFixture
) -> None:
    logger = make_logger(write_api=failing_write_api)

    with caplog.at_level(logging.ERROR, logger=SIDE_CHANNEL):
        logger.error("disk full")

    assert failing_write_api.write_attempts == 1
    reports = _side_channel_errors(caplog)
    assert len(reports) == 1
    assert "Error writing to InfluxDB" in reports[0].getMessage()
    assert reports[0].exc_info is not None


def test_write_failure_reaches_diagnostic_hook(make_logger, failing_write_api: FailingWriteApi) -> None:
    diagnostics: list[tuple[str, dict]] = []
    logger = make_logger(write_api=failing_write_api, diagnostic=lambda name, payload: diagnostics.append((name, payload)))

    logger.critical("boom")

    assert len(diagnostics) == 1
    name, payload = diagnostics[0]
    assert name == "influxdb_write_error"
    assert payload["level"] == "critical"
    assert payload["measurement"] == "logs"
    assert "ConnectionError" in payload["exception"]


def test_failing_diagnostic_hook_does_not_escape(make_logger, failing_write_api: FailingWriteApi) -> None:
    def broken_hook(name: str, payload: dict) -> None:
        raise RuntimeError("hook broke")

    logger = make_logger(write_api=failing_write_api, diagnostic=broken_hook)

    logger.error("still fine")


def test_close_calls_write_api_close_exactly_once(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger()

    logger.close()
    logger.close()

    assert write_api.close_calls == 1
    assert logger.closed is True


def test_close_failure_is_swallowed_and_reported(make_logger, caplog: pytest.LogCaptureFixture) -> None:
    api = FailingWriteApi(fail_close=True)
    diagnostics: list[str] = []
    logger = make_logger(write_api=api, diagnostic=lambda name, payload: diagnostics.append(name))

    with caplog.at_level(logging.ERROR, logger=SIDE_CHANNEL):
        logger.close()

    assert api.close_calls == 1
    assert diagnostics == ["influxdb_close_error"]
    reports = _side_channel_errors(caplog)
    assert len(reports) == 1
    assert "Error closing InfluxDB write API" in reports[0].getMessage()


def test_records_after_close_are_dropped(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger()
    logger.close()

    logger.error("late")

    assert write_api.points == []


def test_context_manager_closes_logger(make_logger, write_api: RecordingWriteApi) -> None:
    with make_logger() as logger:
        logger.info("inside")

    assert write_api.close_calls == 1
    assert len(write_api.points) == 1


def test_mutators_affect_subsequent_calls_only(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger(default_tags={"service": "api"})
    logger.info("before")

    result = logger.set_measurement("app_logs").add_default_tags({"service": "worker", "region": "eu"})
    logger.add_default_tags({"region": "us"})
    logger.info("after")

    assert result is logger
    first, second = write_api.points
    assert first.measurement == "logs"
    assert first.tags == {"level": "info", "service": "api"}
    assert second.measurement == "app_logs"
    assert second.tags == {"level": "info", "service": "worker", "region": "us"}


def test_set_measurement_rejects_blank_names(make_logger) -> None:
    with pytest.raises(ValueError, match="measurement"):
        make_logger().set_measurement("  ")


def test_default_tags_property_is_a_copy(make_logger) -> None:
    logger = make_logger(default_tags={"service": "api"})
    logger.default_tags["service"] = "changed"
    assert logger.default_tags == {"service": "api"}


def test_set_level_changes_threshold(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger(level="error")
    logger.info("dropped")
    logger.set_level("debug")
    logger.info("kept")

    assert [point.fields["message"] for point in write_api.points] == ["kept"]
    assert logger.is_enabled_for("debug")


def test_coroutine_mode_outside_loop_writes_inline(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger(use_coroutines=True)

    logger.info("inline")

    assert len(write_api.points) == 1
    assert logger.pending_writes == 0


class _BlockingWriteApi(RecordingWriteApi):
    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def write(self, point: MeasurementPoint) -> None:
        self.release.wait(timeout=5)
        super().write(point)


def test_coroutine_mode_inside_loop_detaches_write() -> None:
    api = _BlockingWriteApi()
    logger = InfluxDBLogger(api, use_coroutines=True)

    async def scenario() -> tuple[int, int]:
        logger.info("detached")
        written_before = len(api.points)
        pending_before = logger.pending_writes
        api.release.set()
        await logger.aclose()
        return written_before, pending_before

    written_before, pending_before = asyncio.run(scenario())

    assert written_before == 0
    assert pending_before == 1
    assert len(api.points) == 1
    assert api.close_calls == 1


def test_set_coroutine_mode_toggles_dispatch(make_logger, write_api: RecordingWriteApi) -> None:
    logger = make_logger()
    assert logger.coroutine_mode is False

    async def scenario() -> int:
        logger.set_coroutine_mode(True)
        logger.info("detached")
        pending = logger.pending_writes
        await logger.aclose()
        return pending

    assert asyncio.run(scenario()) == 1
    assert logger.coroutine_mode is True
    assert len(write_api.points) == 1


def test_detached_write_failure_is_reported_once(caplog: pytest.LogCaptureFixture) -> None:
    api = FailingWriteApi()
    logger = InfluxDBLogger(api, use_coroutines=True)

    async def scenario() -> None:
        logger.error("boom")
        await logger.aclose()

    with caplog.at_level(logging.ERROR, logger=SIDE_CHANNEL):
        asyncio.run(scenario())

    assert len(_side_channel_errors(caplog)) == 1


def test_coroutine_mode_after_executor_shutdown_writes_inline() -> None:
    api = RecordingWriteApi()
    logger = InfluxDBLogger(api, use_coroutines=True)

    async def scenario() -> int:
        await asyncio.get_running_loop().shutdown_default_executor()
        logger.info("late")
        return logger.pending_writes

    assert asyncio.run(scenario()) == 0
    assert [point.fields["message"] for point in api.points] == ["late"]


def test_sync_close_warns_about_detached_writes_in_flight(caplog: pytest.LogCaptureFixture) -> None:
    api = _BlockingWriteApi()
    logger = InfluxDBLogger(api, use_coroutines=True)

    async def scenario() -> None:
        logger.info("detached")
        logger.close()
        api.release.set()
        await logger.aclose()

    with caplog.at_level(logging.WARNING, logger=SIDE_CHANNEL):
        asyncio.run(scenario())

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING and record.name == SIDE_CHANNEL]
    assert len(warnings) == 1
    assert "aclose" in warnings[0].getMessage()
    assert api.close_calls == 1


def test_build_point_does_not_dispatch(make_logger, write_api: RecordingWriteApi) -> None:
    point = make_logger(default_tags={"service": "api"}).build_point("info", "preview", {"n": 1})

    assert point.fields == {"message": "preview", "n": 1}
    assert write_api.points == []


def test_formatter_defaults_to_json(make_logger) -> None:
    assert isinstance(make_logger().formatter, JsonFormatter)


def test_format_uses_configured_formatter(make_logger) -> None:
    logger = make_logger(formatter=LineFormatter("{level_name}|{message}"))
    assert logger.format("error", "disk full") == "ERROR|disk full"
