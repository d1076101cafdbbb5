"""End-to-end CLI coverage for the public ``lib_log_bridge`` commands.

The commands read ``LIB_LOG_BRIDGE_*`` variables, so each test passes its
environment through :class:`click.testing.CliRunner`.
"""

from __future__ import annotations

import json
from pathlib import Path
from uuid import UUID

from click.testing import CliRunner

import lib_cli_exit_tools

from lib_log_bridge import cli
from lib_log_bridge.domain.errors import ResolutionError

MEMORY_ADAPTER = "lib_log_bridge.adapters.memory:MemoryAdapter"


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def test_cli_info_prints_distribution_line() -> None:
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "lib_log_bridge" in result.output


def test_cli_info_handles_missing_metadata(monkeypatch) -> None:
    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_settings_layers_environment_over_file(tmp_path: Path) -> None:
    config = tmp_path / "bridge.toml"
    config.write_text(
        '[lib_log_bridge]\nadapter_type = "memory"\napplication_name = "billing"\n'
        'extended_properties = "team=payments"\n',
        encoding="utf-8",
    )
    result = _runner().invoke(
        cli.cli,
        ["settings", "--config", str(config), "--indent", "0"],
        env={"LIB_LOG_BRIDGE_ADAPTER_TYPE": "stdlib"},
    )
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["adapter_type"] == "stdlib"
    assert payload["application_name"] == "billing"
    assert payload["extended_properties"] == {"team": "payments"}


def test_cli_settings_rejects_missing_file(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["settings", "--config", str(tmp_path / "missing.toml")])
    assert result.exit_code != 0


def test_cli_resolve_reports_the_selected_adapter() -> None:
    result = _runner().invoke(cli.cli, ["resolve"], env={"LIB_LOG_BRIDGE_ADAPTER_TYPE": MEMORY_ADAPTER})
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["class"] == MEMORY_ADAPTER
    assert payload["fallback"] is False


def test_cli_resolve_failure_falls_back_by_default() -> None:
    result = _runner().invoke(cli.cli, ["resolve"], env={"LIB_LOG_BRIDGE_ADAPTER_TYPE": "missing.module:Adapter"})
    assert result.exit_code == 0
    assert json.loads(result.output)["fallback"] is True


def test_cli_resolve_failure_raises_with_throw_flag() -> None:
    env = {
        "LIB_LOG_BRIDGE_ADAPTER_TYPE": "missing.module:Adapter",
        "LIB_LOG_BRIDGE_THROW_ON_RESOLVER_FAIL": "true",
    }
    result = _runner().invoke(cli.cli, ["resolve"], env=env)
    assert result.exit_code != 0
    assert isinstance(result.exception, ResolutionError)


def test_cli_emit_dry_run_prints_the_assembled_event() -> None:
    correlation = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"
    result = _runner().invoke(
        cli.cli,
        [
            "emit",
            "warning",
            "disk {0}% full on {1}",
            "91",
            "sda",
            "--dry-run",
            "--correlation-id",
            correlation,
            "--property",
            "host=web-1",
        ],
        env={"LIB_LOG_BRIDGE_APPLICATION_NAME": "ops"},
    )
    assert result.exit_code == 0
    first_line, _, body = result.output.partition("\n")
    event_id = UUID(first_line.strip())
    payload = json.loads(body)
    assert payload["event_id"] == str(event_id)
    assert payload["level"] == "WARNING"
    assert payload["correlation_id"] == correlation
    assert payload["host"] == "web-1"
    assert payload["application_name"] == "ops"


def test_cli_emit_rejects_malformed_property() -> None:
    result = _runner().invoke(cli.cli, ["emit", "error", "boom", "--dry-run", "--property", "novalue"])
    assert result.exit_code != 0
    assert "NAME=VALUE" in result.output


def test_cli_emit_rejects_unknown_level() -> None:
    result = _runner().invoke(cli.cli, ["emit", "verbose", "boom", "--dry-run"])
    assert result.exit_code != 0


def test_cli_main_restores_traceback_flag() -> None:
    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    exit_code = cli.main(["--traceback", "settings"], restore_traceback=True)
    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_main_returns_non_zero_for_failed_resolution(monkeypatch) -> None:
    monkeypatch.setenv("LIB_LOG_BRIDGE_ADAPTER_TYPE", "missing.module:Adapter")
    monkeypatch.setenv("LIB_LOG_BRIDGE_THROW_ON_RESOLVER_FAIL", "1")
    assert cli.main(["resolve"]) != 0
