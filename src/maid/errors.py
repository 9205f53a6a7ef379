"""Errors raised by the organization core."""

from __future__ import annotations

from pathlib import Path


class MaidError(Exception):
    """Base exception for maid operations."""


class RootInaccessibleError(MaidError):
    """Raised when the root directory is missing, not a directory, or unreadable."""

    def __init__(self, root: Path, reason: str) -> None:
        super().__init__(f"Cannot process {root}: {reason}")
        self.root = root
        self.reason = reason


class PlanConflictError(MaidError):
    """Raised when a plan would send two operations to the same destination."""


__all__ = ["MaidError", "PlanConflictError", "RootInaccessibleError"]
