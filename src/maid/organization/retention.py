"""Retention policy for the ``keep`` command."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from maid.classification.models import Category
from maid.classification.tokens import tokenize
from maid.ingestion.models import FileRecord

from .models import (
    Operation,
    OperationKind,
    OperationPlan,
    PlanMode,
    RetentionDecision,
    RetentionReason,
)
from .naming import Namer

LOGGER = logging.getLogger(__name__)


class RetentionPolicy:
    """Split records into important files and disposable ones bound for the trash."""

    def __init__(
        self,
        namer: Namer,
        *,
        recent_days: float = 7,
        markers: Iterable[str] = (),
        trash_dirname: str = ".maid-trash",
        stamp_format: str = "%Y%m%dT%H%M%SZ",
        now: Optional[datetime] = None,
    ) -> None:
        self._namer = namer
        self._recent = timedelta(days=recent_days)
        self._markers = frozenset(marker.lower() for marker in markers)
        self._trash_dirname = trash_dirname
        self._stamp_format = stamp_format
        self._now = now

    def build_plan(self, records: Iterable[FileRecord], *, root: Path) -> OperationPlan:
        """Return trash-move operations for disposable records.

        Disposable files go to ``<root>/<trash>/<run-stamp>/<path relative to root>`` so
        the original layout can be restored by reversing each move.

        Args:
            records: Classified records from the ingestion pipeline.
            root: Root directory of the run.

        Returns:
            OperationPlan: Plan in ``KEEP`` mode; retained files are listed in ``kept``.
        """
        records = sorted(records, key=lambda item: item.path)
        now = self._now or datetime.now(timezone.utc)
        run_dir = self.trash_run_directory(root, now)
        plan = OperationPlan(root=root, mode=PlanMode.KEEP)
        plan.record_scan(records)

        for record in records:
            reason = self.importance(record, now)
            if reason is not None:
                plan.kept.append(RetentionDecision(path=record.path, reason=reason))
                continue
            plan.operations.append(
                Operation(
                    kind=OperationKind.TRASH_MOVE,
                    source=record.path,
                    destination=run_dir / record.path.relative_to(root),
                    category=record.category,
                    reason="Not recent, canonical, or marked",
                )
            )

        if plan.operations:
            plan.notes.append(f"Disposable files will be moved to {run_dir}")
        return plan

    def importance(self, record: FileRecord, now: datetime) -> Optional[RetentionReason]:
        """Return why ``record`` should be kept, or ``None`` when it is disposable."""
        if now - record.modified_at <= self._recent:
            return "recent_modification"
        if record.category != Category.UNKNOWN and record.base_name == self._namer.canonical_name(
            record
        ):
            return "canonical_name_present"
        if self._markers.intersection(token.lower() for token in tokenize(record.stem)):
            return "explicit_marker"
        return None

    def trash_run_directory(self, root: Path, now: datetime) -> Path:
        """Return a trash directory for this run that does not exist yet."""
        stamp = now.astimezone(timezone.utc).strftime(self._stamp_format)
        trash_root = root / self._trash_dirname
        candidate = trash_root / stamp
        counter = 2
        while os.path.lexists(candidate):
            candidate = trash_root / f"{stamp}-{counter}"
            counter += 1
        LOGGER.debug("Trash directory for this run: %s", candidate)
        return candidate


__all__ = ["RetentionPolicy"]
