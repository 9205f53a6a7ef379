"""File discovery utilities."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

from maid.errors import RootInaccessibleError

from .models import FileRecord

LOGGER = logging.getLogger(__name__)


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts if part not in (".", ".."))


def ensure_root(root: Path) -> Path:
    """Return the resolved root, raising if it cannot be processed.

    Raises:
        RootInaccessibleError: If the root is missing, not a directory, or unreadable.
    """
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise RootInaccessibleError(resolved, "path does not exist")
    if not resolved.is_dir():
        raise RootInaccessibleError(resolved, "path is not a directory")
    if not os.access(resolved, os.R_OK | os.X_OK):
        raise RootInaccessibleError(resolved, "permission denied")
    return resolved


class DirectoryScanner:
    """Discover candidate files under a root directory."""

    def __init__(
        self,
        *,
        recursive: bool,
        include_hidden: bool,
        follow_symlinks: bool,
        extensions: Iterable[str],
        excluded_dirnames: Iterable[str] = (),
    ) -> None:
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks
        self.extensions = frozenset(ext.lower() for ext in extensions)
        self.excluded_dirnames = frozenset(excluded_dirnames)
        self.errors: list[str] = []

    def scan(self, root: Path) -> Iterator[FileRecord]:
        """Yield records for matching files under ``root`` in path order.

        Files that cannot be inspected are skipped and described in ``errors``.

        Raises:
            RootInaccessibleError: If the root itself cannot be listed.
        """
        root = ensure_root(root)
        self.errors = []
        try:
            candidates = sorted(self._iter_paths(root))
        except OSError as exc:
            raise RootInaccessibleError(root, exc.strerror or str(exc)) from exc

        for path in candidates:
            if not self.accepts(root, path):
                continue
            relative = path.relative_to(root)
            try:
                if not path.is_file():
                    continue
                stat = path.stat()
            except OSError as exc:
                LOGGER.debug("Unable to stat %s: %s", path, exc)
                self.errors.append(f"{relative}: {exc.strerror or exc}")
                continue

            yield FileRecord(
                path=path,
                size_bytes=stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            )

    def accepts(self, root: Path, path: Path) -> bool:
        """Return whether ``path`` under ``root`` passes the scan filters.

        The check is purely path based; it does not require ``path`` to still exist.
        """
        try:
            relative = path.relative_to(root)
        except ValueError:
            return False
        if not self.recursive and len(relative.parts) != 1:
            return False
        if self.excluded_dirnames.intersection(relative.parts[:-1]):
            return False
        if not self.include_hidden and _is_hidden(relative):
            return False
        if path.suffix.lower() not in self.extensions:
            return False
        return self.follow_symlinks or not path.is_symlink()

    def _iter_paths(self, root: Path) -> Iterable[Path]:
        if self.recursive:
            return root.rglob("*")
        return root.iterdir()


__all__ = ["DirectoryScanner", "ensure_root"]
