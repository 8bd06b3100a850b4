"""Use cases: point mapping and dispatch policy."""

from __future__ import annotations

from .dispatch import PointDispatcher, running_loop
from .map_point import build_point, encode_field_value

__all__ = ["PointDispatcher", "build_point", "encode_field_value", "running_loop"]
