"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from maid.cli import cli
from maid.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".maid" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    """Ensure `maid config view` creates the config file and prints YAML."""
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "retention:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_view_no_env_ignores_environment(tmp_path: Path) -> None:
    """Ensure `maid config view --no-env` hides environment overrides."""
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["MAID__LOGGING__LEVEL"] = "DEBUG"

    with_env = runner.invoke(cli, ["config", "view"], env=env)
    without_env = runner.invoke(cli, ["config", "view", "--no-env"], env=env)

    assert "DEBUG" in with_env.output
    assert "DEBUG" not in without_env.output
    assert "WARNING" in without_env.output


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    """Ensure `maid config set` persists the value and prints a diff."""
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "retention.recent_days", "--value", "14"], env=env
    )

    assert result.exit_code == 0
    assert "14" in result.output
    assert "Updated retention.recent_days" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.retention.recent_days == 14


def test_config_set_same_value_reports_no_change(tmp_path: Path) -> None:
    """Ensure setting an unchanged value reports that nothing changed."""
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["config", "set", "naming.rename_unknown", "--value", "true"], env=env)

    result = runner.invoke(
        cli, ["config", "set", "naming.rename_unknown", "--value", "true"], env=env
    )

    assert result.exit_code == 0
    assert "No changes applied" in result.output


def test_config_set_rejects_invalid_values(tmp_path: Path) -> None:
    """Ensure `maid config set` refuses values that fail validation."""
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    negative = runner.invoke(cli, ["config", "set", "retention.recent_days", "--value=-5"], env=env)
    unknown = runner.invoke(cli, ["config", "set", "retention.nonsense", "--value", "1"], env=env)

    assert negative.exit_code == 1
    assert unknown.exit_code == 1
    config = ConfigManager(config_path=_config_path(tmp_path)).load(include_env=False)
    assert config.retention.recent_days == 7
