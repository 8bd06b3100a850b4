"""Optional ``.env`` support for CLI and host configuration.

Purpose
-------
Load ``INFLUXDB_*`` / ``APP_*`` variables from the nearest ``.env`` file so the
CLI and :func:`lib_log_influxdb.runtime.settings_from_env` can be configured
without exporting variables. Real environment variables always win.

Contents
--------
* :data:`DOTENV_ENV_VAR` - environment toggle for automatic loading.
* :func:`should_use_dotenv` - precedence between CLI flag and toggle.
* :func:`enable_dotenv` - locate and load the nearest ``.env`` once.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DOTENV_ENV_VAR = "LIB_LOG_INFLUXDB_USE_DOTENV"

_TRUTHY = {"1", "true", "yes", "on"}

_loaded_path: Path | None = None


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Return whether ``.env`` should be loaded.

    An explicit CLI choice wins; otherwise the environment toggle decides.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` walking up from ``search_from`` (or the cwd).

    Returns the resolved path of the loaded file or ``None`` when no file was
    found. Variables already present in the environment are not overridden.
    """

    global _loaded_path
    if search_from is None:
        found = find_dotenv(usecwd=True)
        candidate = Path(found).resolve() if found else None
    else:
        candidate = _search_upwards(search_from)
    if candidate is None:
        return None
    if _loaded_path != candidate:
        load_dotenv(candidate, override=False)
        _loaded_path = candidate
    return candidate


def _search_upwards(start: Path) -> Path | None:
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _loaded_path
    _loaded_path = None


__all__ = ["DOTENV_ENV_VAR", "enable_dotenv", "should_use_dotenv"]
