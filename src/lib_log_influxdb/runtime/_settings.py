"""Resolution of driver configuration into validated settings.

Purpose
-------
Turn the loosely typed configuration mapping handed over by the host logging
manager into an immutable :class:`InfluxDBSettings`, failing loudly on the
first missing mandatory key.

Contents
--------
* :data:`REQUIRED_KEYS` - ``url``, ``token``, ``org``, ``bucket``.
* :class:`EnvironmentResolver` - injected source of default tag values.
* :class:`InfluxDBSettings` / :func:`build_settings`.
* :func:`settings_from_env` - configuration mapping read from ``INFLUXDB_*``.

System Role
-----------
Consumed by :func:`lib_log_influxdb.runtime.create_logger`; validation runs
before any client or logger object exists.
"""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from lib_log_influxdb.adapters.influx import DEFAULT_BATCH_SIZE, DEFAULT_FLUSH_INTERVAL_MS, coerce_precision
from lib_log_influxdb.domain.errors import ConfigurationError
from lib_log_influxdb.domain.levels import LogLevel

REQUIRED_KEYS: tuple[str, ...] = ("url", "token", "org", "bucket")

DEFAULT_SERVICE = "python-service"
DEFAULT_ENVIRONMENT = "production"

_ARTICLES = {"org": "an"}
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(slots=True, frozen=True)
class EnvironmentResolver:
    """Supply ``service``/``environment``/``host`` defaults from the process.

    Examples
    --------
    >>> resolver = EnvironmentResolver(environ={"APP_NAME": "billing"}, hostname=lambda: "box-1")
    >>> resolver.default_tags()
    {'service': 'billing', 'environment': 'production', 'host': 'box-1'}
    """

    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    hostname: Callable[[], str] = socket.gethostname

    def default_tags(self) -> dict[str, str]:
        return {
            "service": self.environ.get("APP_NAME", DEFAULT_SERVICE),
            "environment": self.environ.get("APP_ENV", DEFAULT_ENVIRONMENT),
            "host": self.hostname(),
        }


@dataclass(slots=True, frozen=True)
class InfluxDBSettings:
    """Validated driver configuration."""

    url: str
    token: str
    org: str
    bucket: str
    precision: str
    batch_size: int
    flush_interval: int
    measurement: str
    default_tags: Mapping[str, str]
    use_coroutines: bool
    level: LogLevel
    formatter: Mapping[str, Any] | None


def build_settings(config: Mapping[str, Any], resolver: EnvironmentResolver | None = None) -> InfluxDBSettings:
    """Validate ``config`` and resolve defaults.

    Raises
    ------
    ConfigurationError
        When a mandatory key is absent or a value has the wrong shape.
    """

    for key in REQUIRED_KEYS:
        if config.get(key) is None:
            article = _ARTICLES.get(key, "a")
            raise ConfigurationError(f"InfluxDB2 logger requires {article} '{key}' configuration value", key=key)

    environment = (resolver or EnvironmentResolver()).default_tags()
    default_tags = {
        "service": _explicit_or(config, "service", environment["service"]),
        "environment": _explicit_or(config, "environment", environment["environment"]),
        "host": _explicit_or(config, "host", environment["host"]),
    }
    extra_tags = config.get("tags")
    if extra_tags is not None:
        if not isinstance(extra_tags, Mapping):
            raise ConfigurationError("InfluxDB2 logger 'tags' must be a mapping", key="tags")
        default_tags.update({str(key): str(value) for key, value in extra_tags.items()})

    formatter: Mapping[str, Any] | None = None
    if config.get("formatter") is not None:
        formatter = {
            "formatter": config.get("formatter"),
            "format": config.get("format"),
            "date_format": config.get("date_format"),
        }

    try:
        level = LogLevel.coerce(config.get("level") or LogLevel.DEBUG)
    except ValueError as exc:
        raise ConfigurationError(str(exc), key="level") from exc

    return InfluxDBSettings(
        url=str(config["url"]),
        token=str(config["token"]),
        org=str(config["org"]),
        bucket=str(config["bucket"]),
        precision=coerce_precision(config.get("precision")),
        batch_size=_positive_int(config, "batch_size", DEFAULT_BATCH_SIZE),
        flush_interval=_positive_int(config, "flush_interval", DEFAULT_FLUSH_INTERVAL_MS),
        measurement=str(config.get("measurement") or "logs"),
        default_tags=default_tags,
        use_coroutines=coerce_bool(config.get("use_coroutines", False), key="use_coroutines"),
        level=level,
        formatter=formatter,
    )


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Build a driver configuration mapping from ``INFLUXDB_*`` variables.

    Connection values fall back to local development defaults; optional keys
    are only present when their variable is set.

    Examples
    --------
    >>> settings_from_env({"INFLUXDB_TOKEN": "t", "INFLUXDB_TAGS": "team=core,tier=1"})["tags"]
    {'team': 'core', 'tier': '1'}
    """

    env = os.environ if environ is None else environ
    config: dict[str, Any] = {
        "url": env.get("INFLUXDB_URL", "http://localhost:8086"),
        "token": env.get("INFLUXDB_TOKEN", ""),
        "org": env.get("INFLUXDB_ORG", "organization"),
        "bucket": env.get("INFLUXDB_BUCKET", "logs"),
    }
    optional = {
        "INFLUXDB_MEASUREMENT": "measurement",
        "INFLUXDB_PRECISION": "precision",
        "INFLUXDB_USE_COROUTINES": "use_coroutines",
        "INFLUXDB_LEVEL": "level",
        "INFLUXDB_FORMATTER": "formatter",
    }
    for variable, key in optional.items():
        if env.get(variable):
            config[key] = env[variable]
    if env.get("INFLUXDB_TAGS"):
        config["tags"] = parse_tag_pairs(env["INFLUXDB_TAGS"].split(","))
    return config


def parse_tag_pairs(pairs: Any) -> dict[str, str]:
    """Parse ``key=value`` strings into a mapping.

    Examples
    --------
    >>> parse_tag_pairs(["disk=sda1", " region = eu "])
    {'disk': 'sda1', 'region': 'eu'}
    """

    parsed: dict[str, str] = {}
    for raw in pairs:
        if not raw or not raw.strip():
            continue
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"Expected KEY=VALUE, got {raw!r}", key="tags")
        parsed[key.strip()] = value.strip()
    return parsed


def coerce_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    normalized = str(value).strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ConfigurationError(f"InfluxDB2 logger '{key}' must be a boolean; got {value!r}", key=key)


def _explicit_or(config: Mapping[str, Any], key: str, fallback: str) -> str:
    value = config.get(key)
    return fallback if value is None else str(value)


def _positive_int(config: Mapping[str, Any], key: str, default: int) -> int:
    raw = config.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"InfluxDB2 logger '{key}' must be an integer; got {raw!r}", key=key) from exc
    if value <= 0:
        raise ConfigurationError(f"InfluxDB2 logger '{key}' must be positive; got {value}", key=key)
    return value


__all__ = [
    "DEFAULT_ENVIRONMENT",
    "DEFAULT_SERVICE",
    "EnvironmentResolver",
    "InfluxDBSettings",
    "REQUIRED_KEYS",
    "build_settings",
    "coerce_bool",
    "parse_tag_pairs",
    "settings_from_env",
]
