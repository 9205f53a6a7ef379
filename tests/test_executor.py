"""Tests for applying and simulating operation plans."""

from __future__ import annotations

import errno
import hashlib
from pathlib import Path

import pytest

from maid.classification import Category
from maid.config import MaidConfig
from maid.errors import RootInaccessibleError
from maid.ingestion import ensure_root
from maid.ingestion.pipeline import IngestionPipeline
from maid.organization import (
    Operation,
    OperationExecutor,
    OperationKind,
    OperationPlan,
    OrganizerPlanner,
    PlanMode,
)


def _digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def _plan(root: Path, mode: PlanMode = PlanMode.IN_PLACE) -> OperationPlan:
    pipeline = IngestionPipeline.from_config(MaidConfig())
    result = pipeline.run(root)
    return OrganizerPlanner(pipeline.namer).build_plan(result.records, root=root, mode=mode)


@pytest.fixture()
def root(tmp_path: Path) -> Path:
    base = tmp_path / "docs"
    base.mkdir()
    (base / "API_GUIDE.md").write_text("# API guide\n", encoding="utf-8")
    (base / "weekly_status.md").write_text("progress: on track\n", encoding="utf-8")
    (base / "build.sh").write_bytes(b"#!/bin/sh\nmake all\n\xff\n")
    return ensure_root(base)


def test_dry_run_predicts_real_run(root: Path) -> None:
    """Ensure a dry run reports exactly the operations a real run executes."""
    plan = _plan(root, PlanMode.RESTRUCTURE)
    executor = OperationExecutor()

    simulated = executor.apply(plan, dry_run=True)

    assert simulated.dry_run is True
    assert all(not op.executed and op.error is None for op in simulated.operations)
    assert (root / "API_GUIDE.md").exists()

    applied = executor.apply(plan)

    simulated_moves = {(op.source, op.destination) for op in simulated.operations}
    applied_moves = {(op.source, op.destination) for op in applied.operations if op.executed}
    assert simulated_moves == applied_moves
    assert applied.counts() == {
        "scanned": 3,
        "planned": 3,
        "executed": 3,
        "failed": 0,
        "kept": 0,
        "markdown": 2,
        "shell": 1,
    }


def test_content_is_preserved_across_moves(root: Path) -> None:
    """Ensure restructuring preserves every file's bytes."""
    before = sorted(_digest(path) for path in root.iterdir())
    plan = _plan(root, PlanMode.RESTRUCTURE)

    OperationExecutor().apply(plan)

    after = sorted(_digest(path) for path in root.rglob("*") if path.is_file())
    assert before == after
    assert (root / "guides" / "guide-api.md").exists()
    assert (root / "status-updates" / "status-weekly.md").exists()
    assert (root / "scripts" / "script-build.sh").exists()


@pytest.mark.parametrize("dry_run", [True, False])
def test_missing_source_fails_only_that_operation(root: Path, dry_run: bool) -> None:
    """Ensure a vanished source fails its operation and the batch continues."""
    plan = _plan(root)
    (root / "API_GUIDE.md").unlink()

    report = OperationExecutor().apply(plan, dry_run=dry_run)

    failures = {op.source.name: op.error for op in report.failed}
    assert failures == {"API_GUIDE.md": "source is missing"}
    if not dry_run:
        assert (root / "script-build.sh").exists()
        assert (root / "status-weekly.md").exists()


@pytest.mark.parametrize("dry_run", [True, False])
def test_existing_destination_is_not_overwritten(root: Path, dry_run: bool) -> None:
    """Ensure an occupied destination is reported and left intact."""
    plan = _plan(root)
    (root / "guide-api.md").write_text("someone else's file", encoding="utf-8")

    report = OperationExecutor().apply(plan, dry_run=dry_run)

    assert [op.error for op in report.failed] == ["destination already exists"]
    assert (root / "guide-api.md").read_text(encoding="utf-8") == "someone else's file"
    assert (root / "API_GUIDE.md").exists()


def test_rename_into_missing_directory_fails(root: Path) -> None:
    """Ensure a rename never creates its destination directory."""
    plan = OperationPlan(
        root=root,
        mode=PlanMode.IN_PLACE,
        operations=[
            Operation(
                kind=OperationKind.RENAME,
                source=root / "API_GUIDE.md",
                destination=root / "missing" / "guide-api.md",
                category=Category.GUIDE,
            )
        ],
    )

    report = OperationExecutor().apply(plan)

    assert report.operations[0].error == "destination directory is missing"
    assert report.operations[0].executed is False


def test_move_under_a_file_fails(root: Path) -> None:
    """Ensure moving beneath a regular file is rejected during validation."""
    plan = OperationPlan(
        root=root,
        mode=PlanMode.RESTRUCTURE,
        operations=[
            Operation(
                kind=OperationKind.MOVE,
                source=root / "API_GUIDE.md",
                destination=root / "build.sh" / "guide-api.md",
                category=Category.GUIDE,
            )
        ],
    )

    report = OperationExecutor().apply(plan, dry_run=True)

    assert report.operations[0].error == f"{root / 'build.sh'} is not a directory"


def test_inaccessible_root_raises_before_any_operation(tmp_path: Path) -> None:
    """Ensure a missing root aborts the run before any operation."""
    plan = OperationPlan(root=tmp_path / "gone", mode=PlanMode.IN_PLACE)

    with pytest.raises(RootInaccessibleError) as excinfo:
        OperationExecutor().apply(plan)

    assert "does not exist" in str(excinfo.value)


def _deny_rename(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    original = Path.rename

    def rename(self: Path, target):
        if self.name == name:
            raise PermissionError(errno.EACCES, "Permission denied", str(self))
        return original(self, target)

    monkeypatch.setattr(Path, "rename", rename)


def test_rename_error_fails_only_that_operation(
    root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure an OS error while renaming one file leaves the rest of the batch running."""
    _deny_rename(monkeypatch, "API_GUIDE.md")

    report = OperationExecutor().apply(_plan(root))

    assert [(op.source.name, op.error) for op in report.failed] == [
        ("API_GUIDE.md", "Permission denied")
    ]
    assert report.counts()["executed"] == 2
    assert report.counts()["failed"] == 1
    assert (root / "API_GUIDE.md").exists()
    assert (root / "status-weekly.md").exists()
    assert (root / "script-build.sh").exists()


def test_failed_move_removes_directories_it_created(
    root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure a move that fails after creating its category directory leaves no empty directory."""
    _deny_rename(monkeypatch, "API_GUIDE.md")

    report = OperationExecutor().apply(_plan(root, PlanMode.RESTRUCTURE))

    assert [op.source.name for op in report.failed] == ["API_GUIDE.md"]
    assert not (root / "guides").exists()
    assert (root / "status-updates" / "status-weekly.md").exists()


def test_failed_move_keeps_existing_directories(
    root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure cleanup after a failed move never removes a directory that already existed."""
    (root / "guides").mkdir()
    _deny_rename(monkeypatch, "API_GUIDE.md")

    OperationExecutor().apply(_plan(root, PlanMode.RESTRUCTURE))

    assert (root / "guides").is_dir()


def test_each_finished_operation_is_reported(root: Path) -> None:
    """Ensure the per-operation callback fires once per operation, including dry runs."""
    plan = _plan(root)
    seen: list[str] = []

    OperationExecutor().apply(
        plan, dry_run=True, on_operation=lambda op: seen.append(op.source.name)
    )

    assert seen == [op.source.name for op in plan.operations]
