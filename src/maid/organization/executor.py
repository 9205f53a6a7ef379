"""Executor for organization plans."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from maid.ingestion.discovery import ensure_root

from .models import ExecutionReport, Operation, OperationKind, OperationPlan
from .paths import exists_as_other, nearest_existing

LOGGER = logging.getLogger(__name__)


class OperationExecutor:
    """Apply or simulate operation plans one file at a time."""

    def apply(
        self,
        plan: OperationPlan,
        dry_run: bool = False,
        on_operation: Optional[Callable[[Operation], None]] = None,
    ) -> ExecutionReport:
        """Apply the given plan by executing rename/move operations in order.

        Failures that can be detected without touching the filesystem are reported in
        both modes, so a dry run predicts the outcome of a real run. A failing operation
        leaves its file untouched and the remaining operations still run.

        Args:
            plan: Operation plan computed by the planner or retention policy.
            dry_run: When true, only validate operations without executing them.
            on_operation: Optional callback invoked with each finished operation.

        Returns:
            ExecutionReport: Operations annotated with ``executed`` and ``error``.

        Raises:
            RootInaccessibleError: If the plan root cannot be processed; raised before any
                operation runs.
        """
        ensure_root(plan.root)
        report = ExecutionReport(
            root=plan.root,
            mode=plan.mode,
            dry_run=dry_run,
            scanned=plan.scanned,
            markdown=plan.markdown,
            shell=plan.shell,
            kept=list(plan.kept),
            notes=list(plan.notes),
        )

        for planned in plan.operations:
            operation = planned.model_copy()
            problem = self._validate(operation)
            if problem is not None:
                operation.error = problem
            elif not dry_run:
                try:
                    self._perform(operation)
                except OSError as exc:
                    operation.error = exc.strerror or str(exc)
                else:
                    operation.executed = True
            if operation.error is not None:
                LOGGER.warning(
                    "%s %s -> %s failed: %s",
                    operation.kind.value,
                    operation.source,
                    operation.destination,
                    operation.error,
                )
            report.operations.append(operation)
            if on_operation is not None:
                on_operation(operation)

        return report

    def _validate(self, operation: Operation) -> Optional[str]:
        source = operation.source
        destination = operation.destination
        if not os.path.lexists(source):
            return "source is missing"
        if exists_as_other(destination, source):
            return "destination already exists"
        if not os.access(source.parent, os.W_OK | os.X_OK):
            return "permission denied on source directory"

        if operation.kind == OperationKind.RENAME:
            if not destination.parent.is_dir():
                return "destination directory is missing"
            anchor = destination.parent
        else:
            anchor = nearest_existing(destination.parent)
            if not anchor.is_dir():
                return f"{anchor} is not a directory"
        if not os.access(anchor, os.W_OK | os.X_OK):
            return f"permission denied on {anchor}"
        return None

    def _perform(self, operation: Operation) -> None:
        created: list[Path] = []
        if operation.kind != OperationKind.RENAME:
            created = _missing_directories(operation.destination.parent)
        try:
            if created:
                operation.destination.parent.mkdir(parents=True, exist_ok=True)
            if exists_as_other(operation.destination, operation.source):
                raise FileExistsError(f"Destination already exists: {operation.destination}")
            operation.source.rename(operation.destination)
        except OSError:
            _remove_empty(created)
            raise


def _missing_directories(directory: Path) -> list[Path]:
    """Return the directories ``mkdir(parents=True)`` would create, deepest first."""
    anchor = nearest_existing(directory)
    missing: list[Path] = []
    for candidate in (directory, *directory.parents):
        if candidate == anchor:
            break
        missing.append(candidate)
    return missing


def _remove_empty(directories: list[Path]) -> None:
    for directory in directories:
        try:
            directory.rmdir()
        except FileNotFoundError:
            continue
        except OSError as exc:
            LOGGER.debug("Leaving directory %s in place: %s", directory, exc)
            return


__all__ = ["OperationExecutor"]
