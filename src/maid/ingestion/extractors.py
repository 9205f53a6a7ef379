"""Content sampling helpers."""

from __future__ import annotations

from itertools import islice
from pathlib import Path
from typing import Optional


class ContentSampler:
    """Read short textual excerpts used to refine classification."""

    def excerpt(self, path: Path, max_lines: int) -> Optional[str]:
        """Return the first ``max_lines`` lines of ``path``.

        Args:
            path: File to sample.
            max_lines: Number of lines to read; zero disables sampling.

        Returns:
            Optional[str]: Excerpt text, or ``None`` when nothing could be read.
        """
        if max_lines <= 0:
            return None
        try:
            with path.open("r", encoding="utf-8", errors="replace") as fh:
                snippet = "".join(islice(fh, max_lines)).strip()
        except OSError:
            return None
        return snippet or None


__all__ = ["ContentSampler"]
