"""Classification data models."""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Literal, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Closed set of categories a file can be assigned to."""

    RUBRIC = "Rubric"
    REPORT = "Report"
    SUMMARY = "Summary"
    GUIDE = "Guide"
    STATUS_UPDATE = "StatusUpdate"
    SCRIPT = "Script"
    UNKNOWN = "Unknown"


FALLBACK_CATEGORIES = frozenset({Category.SCRIPT, Category.UNKNOWN})


class CategoryRule(BaseModel):
    """Keyword rule describing how a category is recognized and laid out.

    Attributes:
        category: Category assigned when the rule matches.
        slug: Prefix used for canonical file names.
        directory: Directory name used when restructuring.
        keywords: Regular expressions that must match a whole token (case-insensitive).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    category: Category
    slug: str
    directory: str
    keywords: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("slug", "directory")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("keywords")
    @classmethod
    def _compile_keywords(cls, keywords: Tuple[str, ...]) -> Tuple[str, ...]:
        for keyword in keywords:
            try:
                re.compile(keyword)
            except re.error as exc:
                raise ValueError(f"invalid keyword pattern {keyword!r}: {exc}") from exc
        return keywords


def check_rules(rules: Sequence[CategoryRule]) -> None:
    """Reject rules for fallback categories and repeated categories.

    Raises:
        ValueError: If a rule targets `Script`/`Unknown` or a category appears twice.
    """
    seen: set[Category] = set()
    for rule in rules:
        if rule.category in FALLBACK_CATEGORIES:
            raise ValueError(f"{rule.category.value} is a fallback category and takes no keywords")
        if rule.category in seen:
            raise ValueError(f"duplicate lexicon rule for {rule.category.value}")
        seen.add(rule.category)


class Lexicon(BaseModel):
    """Immutable, ordered keyword table; rule order is the priority order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rules: Tuple[CategoryRule, ...]

    @field_validator("rules")
    @classmethod
    def _check_rules(cls, rules: Tuple[CategoryRule, ...]) -> Tuple[CategoryRule, ...]:
        check_rules(rules)
        return rules

    def rule_for(self, category: Category) -> CategoryRule | None:
        """Return the rule registered for ``category`` if any."""
        for rule in self.rules:
            if rule.category == category:
                return rule
        return None

    def priority(self, category: Category) -> int:
        """Return the priority index of ``category`` (lower wins)."""
        for index, rule in enumerate(self.rules):
            if rule.category == category:
                return index
        return len(self.rules) + (0 if category == Category.SCRIPT else 1)


DEFAULT_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        category=Category.RUBRIC,
        slug="rubric",
        directory="rubrics",
        keywords=("rubrics?", "criteria", "scoring", "grading"),
    ),
    CategoryRule(
        category=Category.REPORT,
        slug="report",
        directory="reports",
        keywords=("reports?", "analysis", "assessment", "audit", "complete", "completion"),
    ),
    CategoryRule(
        category=Category.GUIDE,
        slug="guide",
        directory="guides",
        keywords=("guides?", "howto", "manual", "tutorial", "instructions", "walkthrough"),
    ),
    CategoryRule(
        category=Category.SUMMARY,
        slug="summary",
        directory="summaries",
        keywords=("summary", "summaries", "overview", "recap", "synopsis"),
    ),
    CategoryRule(
        category=Category.STATUS_UPDATE,
        slug="status",
        directory="status-updates",
        keywords=("status", "updates?", "progress", "q[0-9]"),
    ),
)


class Classification(BaseModel):
    """Outcome of classifying a single file.

    Attributes:
        category: Assigned category.
        confidence: Ordinal match strength; only meaningful relative to other results.
        matched: Tokens that matched the winning category.
        source: Which signal decided the category.
    """

    category: Category = Category.UNKNOWN
    confidence: int = 0
    matched: List[str] = Field(default_factory=list)
    source: Literal["name", "content", "extension", "fallback"] = "fallback"


__all__ = [
    "Category",
    "CategoryRule",
    "Classification",
    "DEFAULT_RULES",
    "FALLBACK_CATEGORIES",
    "Lexicon",
    "check_rules",
]
