"""Canonical file naming."""

from __future__ import annotations

from pathlib import PurePath
from typing import Iterable, Sequence

from maid.classification.models import Category, Lexicon
from maid.classification.tokens import tokenize
from maid.ingestion.models import FileRecord

SCRIPT_SLUG = "script"


class Namer:
    """Derive human-readable names of the form ``<slug>-<subject-tokens><ext>``."""

    def __init__(
        self,
        lexicon: Lexicon,
        *,
        noise_words: Iterable[str] = (),
        rename_unknown: bool = False,
        script_directory: str = "scripts",
    ) -> None:
        self._lexicon = lexicon
        self._noise = frozenset(word.lower() for word in noise_words)
        self._rename_unknown = rename_unknown
        self._script_directory = script_directory

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    def canonical_name(self, record: FileRecord) -> str:
        """Return the canonical name for ``record`` based on its category."""
        return self.name_for(
            record.category,
            tokenize(record.stem),
            record.extension,
            original=record.base_name,
        )

    def name_for(
        self,
        category: Category,
        tokens: Sequence[str],
        extension: str,
        *,
        original: str,
    ) -> str:
        """Build a canonical name from a category, name tokens and an extension.

        Args:
            category: Category assigned to the file.
            tokens: Tokens of the original stem.
            extension: Lower-cased extension including the dot (may be empty).
            original: Current file name, returned for files that are not renamed.

        Returns:
            str: Canonical file name.
        """
        slug = self.slug_for(category)
        if slug is None:
            if not self._rename_unknown:
                return original
            subject = self._subject_tokens(tokens, implied=frozenset())
            return f"{'-'.join(subject)}{extension}" if subject else original

        subject = self._subject_tokens(tokens, implied=self._implied_words(category, slug))
        if not subject:
            return f"{slug}{extension}"
        return f"{slug}-{'-'.join(subject)}{extension}"

    def slug_for(self, category: Category) -> str | None:
        """Return the name prefix for ``category``; ``None`` for unclassified files."""
        if category == Category.SCRIPT:
            return SCRIPT_SLUG
        rule = self._lexicon.rule_for(category)
        return rule.slug if rule is not None else None

    def with_suffix(self, name: str, counter: int) -> str:
        """Return ``name`` with a numeric collision suffix.

        ``report-x.md`` with ``2`` becomes ``report-x-2.md``.
        """
        path = PurePath(name)
        return f"{path.stem}-{counter}{path.suffix}"

    def _implied_words(self, category: Category, slug: str) -> frozenset[str]:
        if category == Category.SCRIPT:
            directory = self._script_directory
        else:
            rule = self._lexicon.rule_for(category)
            directory = rule.directory if rule is not None else ""
        return frozenset({slug, *(token.lower() for token in tokenize(directory))})

    def _subject_tokens(self, tokens: Sequence[str], *, implied: frozenset[str]) -> list[str]:
        subject: list[str] = []
        for token in tokens:
            lowered = token.lower()
            if lowered in implied or lowered in self._noise or lowered in subject:
                continue
            subject.append(lowered)
        return subject


__all__ = ["Namer", "SCRIPT_SLUG"]
