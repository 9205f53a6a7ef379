"""Filename tokenization helpers."""

from __future__ import annotations

import re
from typing import List

_SEPARATORS = re.compile(r"[\W_]+")
_CASE_BOUNDARY = re.compile(
    r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])|(?<=[0-9])(?=[A-Z][a-z])"
)


def tokenize(value: str) -> List[str]:
    """Split ``value`` into tokens on separators and case transitions.

    ``DOCUMENTATION_REFACTORING_SUMMARY`` yields ``DOCUMENTATION``, ``REFACTORING`` and
    ``SUMMARY``; ``StatusReportQ2`` yields ``Status``, ``Report`` and ``Q2``. A digit only
    ends a token when a capitalized word follows it, so ``Q2Report`` yields ``Q2`` and
    ``Report`` while ``v2beta`` stays whole. Non-ASCII letters stay inside their token.

    Args:
        value: File stem or free text to tokenize.

    Returns:
        List[str]: Tokens in their original order and case.
    """
    tokens: List[str] = []
    for chunk in _SEPARATORS.split(value):
        if not chunk:
            continue
        tokens.extend(part for part in _CASE_BOUNDARY.split(chunk) if part)
    return tokens


__all__ = ["tokenize"]
