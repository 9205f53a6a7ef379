"""Ingestion data models."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from maid.classification.models import Category


class FileRecord(BaseModel):
    """A discovered file plus the decisions made about it during a run.

    Attributes:
        path: Absolute path; identity key within a run.
        size_bytes: File size from ``stat``.
        modified_at: Modification time (UTC) from ``stat``.
        excerpt: Leading lines of the file when content inspection is enabled.
        category: Assigned category.
        confidence: Ordinal strength of the classification.
        canonical_name: Name the file should carry.
        destination_dir: Directory the file should live in.
    """

    path: Path
    size_bytes: int = 0
    modified_at: datetime
    excerpt: Optional[str] = None
    category: Category = Category.UNKNOWN
    confidence: int = 0
    canonical_name: Optional[str] = None
    destination_dir: Optional[Path] = None

    @property
    def base_name(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem if self.path.suffix else self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()


class IngestionResult(BaseModel):
    """Records produced by a scan plus per-file errors."""

    records: List[FileRecord] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


__all__ = ["FileRecord", "IngestionResult"]
