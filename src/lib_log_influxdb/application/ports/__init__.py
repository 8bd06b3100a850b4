"""Protocols the application layer depends on."""

from __future__ import annotations

from .formatter import FormatterPort
from .time import ClockPort
from .write_api import WriteApiPort

__all__ = ["ClockPort", "FormatterPort", "WriteApiPort"]
