"""CLI adapter for ``lib_log_bridge`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check which backend adapter a configuration selects and push a
test event through it without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_settings` – prints the resolved settings as JSON.
* :func:`cli_resolve` – resolves the backend adapter and reports the outcome.
* :func:`cli_emit` – logs one event and prints its id.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer. Commands go through the composition root
(:func:`lib_log_bridge.core.load_settings`, :class:`lib_log_bridge.core.LogBridge`)
and let ``lib_cli_exit_tools`` turn exceptions into exit codes.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence
from uuid import UUID

import lib_cli_exit_tools
import rich_click as click

from .adapters.memory import MemoryAdapter
from .application.resolver import AdapterRegistry
from .application.settings import Settings
from .core import LogBridge, load_settings
from .domain.context import Context, ContextStore, ScopeKind
from .domain.events import EMPTY_EVENT_ID, LogLocation
from .domain.levels import Level

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DISTRIBUTION: Final[str] = "lib_log_bridge"

LEVEL_CHOICES: Final[tuple[str, ...]] = tuple(level.name.lower() for level in Level)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    default=None,
    help="TOML/JSON/YAML file with a [lib_log_bridge] table; the environment overrides it",
)


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Structured logging facade with pluggable backends",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DISTRIBUTION,
    message="lib_log_bridge version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for ``lib_cli_exit_tools``.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        click.echo("lib_log_bridge (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DISTRIBUTION)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("settings", context_settings=CLICK_CONTEXT_SETTINGS)
@_config_option
@click.option("--indent", type=int, default=2, show_default=True, help="JSON indent size")
def cli_settings(config_path: Optional[Path], indent: int) -> None:
    """Print the settings the bridge would use, as JSON."""

    settings = load_settings(config_path)
    click.echo(json.dumps(settings.as_dict(), indent=indent, sort_keys=True))


@cli.command("resolve", context_settings=CLICK_CONTEXT_SETTINGS)
@_config_option
def cli_resolve(config_path: Optional[Path]) -> None:
    """Resolve the backend adapter and print which one was selected.

    With ``throw_on_resolver_fail`` set a failed resolution exits non-zero.
    """

    bridge = LogBridge(load_settings(config_path))
    registration = bridge.initialize()
    payload = {
        "adapter": registration.name,
        "class": f"{type(registration.adapter).__module__}:{type(registration.adapter).__qualname__}",
        "fallback": registration.is_fallback,
        "candidates": [candidate.name for candidate in bridge.resolver.candidates()],
    }
    click.echo(json.dumps(payload, indent=2))


@cli.command("emit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("level", type=click.Choice(LEVEL_CHOICES, case_sensitive=False))
@click.argument("message")
@click.argument("parameters", nargs=-1)
@_config_option
@click.option("--correlation-id", type=click.UUID, default=None, help="Correlation id for the event")
@click.option(
    "--property",
    "properties",
    multiple=True,
    metavar="NAME=VALUE",
    help="Extended property attached to the event (repeatable)",
)
@click.option(
    "--dry-run/--no-dry-run",
    default=False,
    help="Assemble the event in memory and print it instead of writing it",
)
def cli_emit(
    level: str,
    message: str,
    parameters: Sequence[str],
    config_path: Optional[Path],
    correlation_id: Optional[UUID],
    properties: Sequence[str],
    dry_run: bool,
) -> None:
    """Log MESSAGE at LEVEL, substituting PARAMETERS into ``{0}``, ``{1}`` … placeholders.

    Prints the event id; the zero id means the level was disabled.
    """

    settings = load_settings(config_path)
    extended = _parse_properties(properties) or None
    if dry_run:
        registry = AdapterRegistry()
        registry.register(MemoryAdapter, name="memory")
        settings = replace(settings, adapter_type=None, adapter_module=None)
        bridge = LogBridge(settings, store=_fresh_store(settings), registry=registry, discover=lambda: ())
    else:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        bridge = LogBridge(settings, store=_fresh_store(settings))
    bridge.initialize()
    event_id = bridge.log_entry(
        Level.parse(level),
        message,
        *parameters,
        correlation_id=correlation_id,
        extended_properties=extended,
        location=LogLocation.here(),
    )
    click.echo(str(event_id))
    if dry_run and event_id != EMPTY_EVENT_ID:
        click.echo(json.dumps(bridge.adapter.last_event.as_context(), indent=2, default=str))


def _fresh_store(settings: Settings) -> ContextStore:
    """Return a store whose process context is private to this command."""

    return ContextStore(name=settings.application_name, process_context=Context(ScopeKind.PROCESS))


def _parse_properties(values: Sequence[str]) -> dict[str, str]:
    """Split ``NAME=VALUE`` options into a mapping, preserving order."""

    parsed: dict[str, str] = {}
    for value in values:
        name, sep, item = value.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=VALUE, got {value!r}", param_hint="--property")
        parsed[name.strip()] = item
    return parsed


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DISTRIBUTION,
            )
        except BaseException as exc:  # noqa: BLE001
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
