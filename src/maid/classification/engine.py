"""Keyword classification engine.

The classifier assigns every file exactly one category from the closed set in
:class:`~maid.classification.models.Category`. Decisions come from three signals.
Tokens of the file name are matched against the lexicon first. When the name has few
hits, a short content excerpt is consulted and may replace the name category with one
of strictly higher priority. A name with no keyword falls back to the excerpt, and only
then to the file extension (shell scripts). Nothing here touches the filesystem, so
``classify`` is a pure function of its inputs.
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePath
from typing import Iterable, Optional, Sequence

from .models import Category, CategoryRule, Classification, Lexicon
from .tokens import tokenize

LOGGER = logging.getLogger(__name__)

NAME_WEIGHT = 2
EXTENSION_CONFIDENCE = 1


class Classifier:
    """Classify files from their names and, optionally, a content excerpt."""

    def __init__(
        self,
        lexicon: Lexicon,
        *,
        script_extensions: Iterable[str] = (".sh",),
        inspect_content: bool = True,
        low_confidence_hits: int = 1,
    ) -> None:
        """Compile the lexicon into matchers.

        Args:
            lexicon: Ordered keyword table; earlier rules win ties.
            script_extensions: Extensions classified as ``Script`` when neither the name
                nor the excerpt matches a keyword.
            inspect_content: Whether excerpts are consulted for inconclusive names.
            low_confidence_hits: Name hit count at or below which the excerpt is consulted.
        """
        self._lexicon = lexicon
        self._script_extensions = frozenset(ext.lower() for ext in script_extensions)
        self._inspect_content = inspect_content
        self._low_confidence_hits = low_confidence_hits
        self._matchers: list[tuple[CategoryRule, list[re.Pattern[str]]]] = [
            (rule, [re.compile(rf"(?:{keyword})", re.IGNORECASE) for keyword in rule.keywords])
            for rule in lexicon.rules
        ]

    @property
    def lexicon(self) -> Lexicon:
        """Return the lexicon the classifier was built with."""
        return self._lexicon

    def classify(self, base_name: str, excerpt: Optional[str] = None) -> Classification:
        """Classify a file by name and optional excerpt.

        Args:
            base_name: File name including its extension.
            excerpt: Leading lines of the file, when available.

        Returns:
            Classification: Category, ordinal confidence, and the tokens that matched.
        """
        path = PurePath(base_name)
        extension = path.suffix.lower()
        stem = path.stem if extension else base_name

        content_tokens = tokenize(excerpt) if excerpt and self._inspect_content else []
        category, hits = self._best_match(tokenize(stem))
        if category is not None:
            result = Classification(
                category=category,
                confidence=NAME_WEIGHT * len(hits),
                matched=hits,
                source="name",
            )
            if content_tokens and len(hits) <= self._low_confidence_hits:
                override = self._content_match(base_name, content_tokens)
                if override is not None and self._outranks(override.category, category):
                    return override
                result.confidence += len(self._hits_for(category, content_tokens))
            return result

        if content_tokens:
            content = self._content_match(base_name, content_tokens)
            if content is not None:
                return content

        if extension in self._script_extensions:
            return Classification(
                category=Category.SCRIPT,
                confidence=EXTENSION_CONFIDENCE,
                source="extension",
            )

        return Classification()

    def rule_for(self, category: Category) -> Optional[CategoryRule]:
        """Return the lexicon rule for ``category`` if it has one."""
        return self._lexicon.rule_for(category)

    def _outranks(self, candidate: Category, current: Category) -> bool:
        return self._lexicon.priority(candidate) < self._lexicon.priority(current)

    def _content_match(self, base_name: str, tokens: Sequence[str]) -> Optional[Classification]:
        category, hits = self._best_match(tokens)
        if category is None:
            return None
        LOGGER.debug("Content of %s matches %s via %s", base_name, category.value, hits)
        return Classification(
            category=category, confidence=len(hits), matched=hits, source="content"
        )

    def _best_match(self, tokens: Sequence[str]) -> tuple[Optional[Category], list[str]]:
        for rule, patterns in self._matchers:
            hits = [token for token in tokens if _matches(patterns, token)]
            if hits:
                return rule.category, hits
        return None, []

    def _hits_for(self, category: Category, tokens: Sequence[str]) -> list[str]:
        for rule, patterns in self._matchers:
            if rule.category == category:
                return [token for token in tokens if _matches(patterns, token)]
        return []


def _matches(patterns: Sequence[re.Pattern[str]], token: str) -> bool:
    return any(pattern.fullmatch(token) for pattern in patterns)


__all__ = ["Classifier", "NAME_WEIGHT"]
