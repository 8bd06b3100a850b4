"""Static package metadata surfaced by the CLI ``info`` command."""

from __future__ import annotations

from typing import Callable

name = "lib_log_influxdb"
title = "InfluxDB 2.x log driver that maps structured records onto measurement points"
version = "0.1.0"
author = "bitranox"
shell_command = "lib_log_influxdb"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Emit the metadata banner, one newline-terminated line per call.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_influxdb:\\n'
    """

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    emit = writer or (lambda text: print(text, end=""))
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label:<{pad}} = {value}\n")
