"""Click command line interface for the InfluxDB log driver.

Purpose
-------
Give operators a quick way to check the driver configuration: ``info`` prints
the metadata banner and ``emit`` sends a single record to InfluxDB using the
``INFLUXDB_*`` environment (optionally loaded from ``.env``).

Contents
--------
* :func:`cli` - command group with traceback and dotenv toggles.
* :func:`cli_info` / :func:`cli_emit` - subcommands.
* :func:`main` - entry point wrapped by ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import os
from typing import Any, Sequence

import click
import lib_cli_exit_tools
from rich.console import Console
from rich.table import Table

from . import __init__conf__
from . import config as config_module
from .domain.errors import ConfigurationError
from .domain.levels import LogLevel
from .domain.point import MeasurementPoint
from .runtime import create_logger, parse_tag_pairs, settings_from_env

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_LEVEL_CHOICES = [level.severity for level in LogLevel]


class _NullWriteApi:
    """Write API discarding every point; backs ``emit --dry-run``."""

    def write(self, point: MeasurementPoint) -> None:
        return None

    def close(self) -> None:
        return None


def summary_info() -> str:
    """Return the metadata banner as a single newline-terminated string."""

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(prog)s version %(version)s")
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading INFLUXDB_* variables (default from {config_module.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool | None) -> None:
    """InfluxDB 2.x log driver utilities."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    env_toggle = os.environ.get(config_module.DOTENV_ENV_VAR)
    if config_module.should_use_dotenv(explicit=use_dotenv, env_value=env_toggle):
        config_module.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("emit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("message")
@click.option("--level", type=click.Choice(_LEVEL_CHOICES, case_sensitive=False), default="info", show_default=True)
@click.option("--tag", "tags", multiple=True, metavar="KEY=VALUE", help="Per-record tag; repeatable.")
@click.option("--field", "fields", multiple=True, metavar="KEY=VALUE", help="Extra context field; repeatable.")
@click.option("--dry-run", is_flag=True, help="Print the point without contacting InfluxDB.")
def cli_emit(message: str, level: str, tags: tuple[str, ...], fields: tuple[str, ...], dry_run: bool) -> None:
    """Send MESSAGE to InfluxDB as one log point and print what was sent."""

    try:
        context: dict[str, Any] = dict(parse_tag_pairs(fields))
        tag_map = parse_tag_pairs(tags)
        if tag_map:
            context["tags"] = tag_map
        client_factory = (lambda **_: _NullWriteApi()) if dry_run else None
        logger = create_logger(settings_from_env(), client_factory=client_factory)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    with logger:
        point = logger.build_point(level, message, context)
        logger.log(level, message, context)
    _render_point(point, sent=not dry_run)


def _render_point(point: MeasurementPoint, *, sent: bool) -> None:
    console = Console(highlight=False)
    table = Table(title=f"{point.measurement} ({'sent' if sent else 'dry run'})")
    table.add_column("kind")
    table.add_column("key")
    table.add_column("value")
    for key, value in point.tags.items():
        table.add_row("tag", key, value)
    for key, value in point.fields.items():
        table.add_row("field", key, repr(value))
    console.print(table)


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI through ``lib_cli_exit_tools`` and return the exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    so embedding hosts keep their own settings.
    """

    previous = (
        lib_cli_exit_tools.config.traceback,
        lib_cli_exit_tools.config.traceback_force_color,
    )
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = previous


__all__ = ["cli", "cli_emit", "cli_info", "main", "summary_info"]
