"""Planner for clean operations."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Iterable

from maid.classification.models import Category
from maid.errors import PlanConflictError
from maid.ingestion.models import FileRecord

from .models import Operation, OperationKind, OperationPlan, PlanMode
from .naming import Namer
from .paths import exists_as_other

LOGGER = logging.getLogger(__name__)


class OrganizerPlanner:
    """Compute the rename/move operations that bring files to their canonical paths."""

    def __init__(self, namer: Namer, *, script_directory: str = "scripts") -> None:
        self._namer = namer
        self._script_directory = script_directory

    def build_plan(
        self,
        records: Iterable[FileRecord],
        *,
        root: Path,
        mode: PlanMode = PlanMode.IN_PLACE,
    ) -> OperationPlan:
        """Produce a collision-free operation plan for ``records``.

        Records already at their canonical location claim their path first and need no
        operation. The others are assigned in ascending ``(modified_at, base_name)`` order;
        a candidate that is already claimed or exists on disk as a different file gets a
        numeric suffix, so the mapping is reproducible for identical inputs.

        Args:
            records: Classified records from the ingestion pipeline.
            root: Root directory of the run.
            mode: ``IN_PLACE`` renames only; ``RESTRUCTURE`` also moves files into
                per-category directories.

        Returns:
            OperationPlan: Plan whose operations have unique destinations.

        Raises:
            ValueError: If ``mode`` is not a clean mode.
            PlanConflictError: If two operations would still share a destination.
        """
        if mode not in (PlanMode.IN_PLACE, PlanMode.RESTRUCTURE):
            raise ValueError(f"Unsupported planning mode: {mode.value}")

        records = list(records)
        plan = OperationPlan(root=root, mode=mode)
        plan.record_scan(records)
        claimed: dict[Path, Path] = {}
        pending: list[FileRecord] = []

        targets: dict[Path, tuple[Path, str]] = {}
        for record in records:
            name = record.canonical_name or self._namer.canonical_name(record)
            directory = self._destination_dir(record, root, mode)
            record.canonical_name = name
            record.destination_dir = directory
            targets[record.path] = (directory, name)
            if directory / name == record.path:
                claimed[record.path] = record.path
            else:
                pending.append(record)

        pending.sort(key=lambda item: (item.modified_at, item.base_name, str(item.path)))
        for record in pending:
            directory, name = targets[record.path]
            destination = self._resolve_conflict(record, directory, name, claimed)
            claimed[destination] = record.path
            record.canonical_name = destination.name
            if destination == record.path:
                continue
            plan.operations.append(self._build_operation(record, destination))

        self._ensure_unique_destinations(plan.operations)
        return plan

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _destination_dir(self, record: FileRecord, root: Path, mode: PlanMode) -> Path:
        if mode == PlanMode.IN_PLACE or record.category == Category.UNKNOWN:
            return record.path.parent
        if record.category == Category.SCRIPT:
            return root / self._script_directory
        rule = self._namer.lexicon.rule_for(record.category)
        if rule is None:
            return record.path.parent
        return root / rule.directory

    def _build_operation(self, record: FileRecord, destination: Path) -> Operation:
        if destination.parent == record.path.parent:
            kind = OperationKind.RENAME
            reason = f"{record.category.value} naming"
        else:
            kind = OperationKind.MOVE
            reason = f"Move to category folder '{destination.parent.name}'"
        return Operation(
            kind=kind,
            source=record.path,
            destination=destination,
            category=record.category,
            reason=reason,
        )

    def _resolve_conflict(
        self,
        record: FileRecord,
        directory: Path,
        base_name: str,
        claimed: dict[Path, Path],
    ) -> Path:
        candidate = directory / base_name
        counter = 2
        while candidate in claimed or exists_as_other(candidate, record.path):
            candidate = directory / self._namer.with_suffix(base_name, counter)
            counter += 1
        if counter > 2:
            LOGGER.info("Resolved name collision for %s -> %s", record.path, candidate.name)
        return candidate

    def _ensure_unique_destinations(self, operations: list[Operation]) -> None:
        duplicates = [
            path
            for path, count in Counter(operation.destination for operation in operations).items()
            if count > 1
        ]
        if duplicates:
            joined = ", ".join(str(path) for path in sorted(duplicates))
            raise PlanConflictError(f"Plan contains duplicate destinations: {joined}")


__all__ = ["OrganizerPlanner"]
