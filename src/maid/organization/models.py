"""Organization plan data models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

from maid.classification.models import Category
from maid.ingestion.models import FileRecord

MARKDOWN_EXTENSIONS = frozenset({".md"})
SHELL_EXTENSIONS = frozenset({".sh"})


class OperationKind(str, Enum):
    """Kinds of filesystem change an operation can make."""

    RENAME = "rename"
    MOVE = "move"
    TRASH_MOVE = "trash_move"


class PlanMode(str, Enum):
    """Planning modes for ``clean`` and ``keep``."""

    IN_PLACE = "in_place"
    RESTRUCTURE = "restructure"
    KEEP = "keep"


class Operation(BaseModel):
    """A single planned or executed filesystem change.

    Attributes:
        kind: Rename, move or trash-move.
        source: Current absolute path.
        destination: Target absolute path.
        category: Category of the file being changed.
        reason: Short explanation shown in verbose output.
        executed: Whether the executor applied the operation.
        error: Failure message when the operation could not be applied.
    """

    kind: OperationKind
    source: Path
    destination: Path
    category: Category = Category.UNKNOWN
    reason: Optional[str] = None
    executed: bool = False
    error: Optional[str] = None


RetentionReason = Literal["recent_modification", "canonical_name_present", "explicit_marker"]


class RetentionDecision(BaseModel):
    """Records why a file was retained by ``keep``."""

    path: Path
    reason: RetentionReason


class OperationPlan(BaseModel):
    """Ordered operations computed for one run."""

    root: Path
    mode: PlanMode
    operations: List[Operation] = Field(default_factory=list)
    kept: List[RetentionDecision] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    scanned: int = 0
    markdown: int = 0
    shell: int = 0

    def record_scan(self, records: Iterable[FileRecord]) -> None:
        """Store how many files were scanned, split into Markdown documents and shell scripts."""
        extensions = [record.extension for record in records]
        self.scanned = len(extensions)
        self.markdown = sum(1 for extension in extensions if extension in MARKDOWN_EXTENSIONS)
        self.shell = sum(1 for extension in extensions if extension in SHELL_EXTENSIONS)


class ExecutionReport(BaseModel):
    """Outcome of applying (or simulating) a plan.

    Attributes:
        root: Root the plan was computed for.
        mode: Planning mode.
        dry_run: Whether operations were only simulated.
        scanned: Number of files discovered by the scan.
        markdown: Scanned Markdown documents.
        shell: Scanned shell scripts.
        operations: Operations with ``executed``/``error`` populated.
        kept: Files retained by ``keep``.
        notes: Planner notes.
        errors: Per-file scan errors.
    """

    root: Path
    mode: PlanMode
    dry_run: bool = False
    scanned: int = 0
    markdown: int = 0
    shell: int = 0
    operations: List[Operation] = Field(default_factory=list)
    kept: List[RetentionDecision] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def failed(self) -> List[Operation]:
        return [operation for operation in self.operations if operation.error is not None]

    def counts(self) -> Dict[str, int]:
        """Return summary metrics for the run."""
        return {
            "scanned": self.scanned,
            "planned": len(self.operations),
            "executed": sum(1 for operation in self.operations if operation.executed),
            "failed": len(self.failed),
            "kept": len(self.kept),
            "markdown": self.markdown,
            "shell": self.shell,
        }


__all__ = [
    "ExecutionReport",
    "Operation",
    "OperationKind",
    "OperationPlan",
    "PlanMode",
    "RetentionDecision",
    "RetentionReason",
]
