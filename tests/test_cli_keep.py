"""CLI integration tests for `maid keep`."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

from click.testing import CliRunner

from maid.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _write(path: Path, *, age_days: float) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(path.name, encoding="utf-8")
    stamp = time.time() - age_days * 86400
    os.utime(path, (stamp, stamp))
    return path


def _populate(root: Path) -> Path:
    _write(root / "fresh_notes.md", age_days=1)
    _write(root / "old_notes.md", age_days=20)
    _write(root / "drafts" / "scratch.md", age_days=20)
    _write(root / "CHANGELOG.md", age_days=90)
    return root


def test_cli_keep_moves_disposable_files_to_trash(tmp_path: Path) -> None:
    """Ensure `maid keep` moves disposable files into one timestamped trash run."""
    root = _populate(tmp_path / "data")

    result = CliRunner().invoke(
        cli, ["keep", "--path", str(root), "--recursive"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert "kept=2" in result.output
    assert (root / "fresh_notes.md").exists()
    assert (root / "CHANGELOG.md").exists()
    assert not (root / "old_notes.md").exists()

    runs = list((root / ".maid-trash").iterdir())
    assert len(runs) == 1
    assert (runs[0] / "old_notes.md").read_text(encoding="utf-8") == "old_notes.md"
    assert (runs[0] / "drafts" / "scratch.md").exists()


def test_cli_keep_dry_run_json(tmp_path: Path) -> None:
    """Ensure `maid keep --dry-run --json` reports decisions without moving files."""
    root = _populate(tmp_path / "data")

    result = CliRunner().invoke(
        cli,
        ["keep", "--path", str(root), "--recursive", "--dry-run", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["command"] == "keep"
    assert payload["context"]["dry_run"] is True
    assert payload["counts"] == {
        "scanned": 4,
        "planned": 2,
        "executed": 0,
        "failed": 0,
        "kept": 2,
        "markdown": 4,
        "shell": 0,
    }
    reasons = {Path(entry["path"]).name: entry["reason"] for entry in payload["kept"]}
    assert reasons == {"fresh_notes.md": "recent_modification", "CHANGELOG.md": "explicit_marker"}
    assert {op["kind"] for op in payload["operations"]} == {"trash_move"}
    assert (root / "old_notes.md").exists()
    assert not (root / ".maid-trash").exists()


def test_cli_keep_recent_days_option(tmp_path: Path) -> None:
    """Ensure `--recent-days` widens the recent-modification window."""
    root = _populate(tmp_path / "data")

    result = CliRunner().invoke(
        cli,
        ["keep", "--path", str(root), "--recursive", "--recent-days", "30", "--dry-run", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    assert json.loads(result.output)["counts"]["planned"] == 0


def test_cli_keep_verbose_lists_decisions(tmp_path: Path) -> None:
    """Ensure verbose keep output lists kept files with their reasons."""
    root = _populate(tmp_path / "data")

    result = CliRunner().invoke(
        cli, ["keep", "--path", str(root), "--verbose"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert "KEEP" in result.output
    assert "recent_modification" in result.output
    assert "TRASH" in result.output
    assert "executed" in result.output


def test_cli_keep_missing_path_exits_with_error(tmp_path: Path) -> None:
    """Ensure `maid keep` exits with code 1 for a missing root."""
    result = CliRunner().invoke(
        cli, ["keep", "--path", str(tmp_path / "missing")], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert "Cannot process" in result.output
