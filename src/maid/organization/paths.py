"""Path helpers shared by the planner and executor."""

from __future__ import annotations

import os
from pathlib import Path


def exists_as_other(candidate: Path, source: Path) -> bool:
    """Return whether ``candidate`` exists and is a different file than ``source``.

    On case-insensitive filesystems ``Report.md`` and ``report.md`` are the same file,
    so a rename between them is not a conflict.
    """
    if candidate == source or not os.path.lexists(candidate):
        return False
    try:
        return not os.path.samefile(candidate, source)
    except OSError:
        return True


def nearest_existing(path: Path) -> Path:
    """Return ``path`` or its closest ancestor that exists."""
    for candidate in (path, *path.parents):
        if os.path.lexists(candidate):
            return candidate
    return path


__all__ = ["exists_as_other", "nearest_existing"]
