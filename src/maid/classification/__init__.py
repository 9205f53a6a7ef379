"""Classification package."""

from .engine import Classifier
from .models import Category, CategoryRule, Classification, Lexicon
from .tokens import tokenize

__all__ = [
    "Category",
    "CategoryRule",
    "Classification",
    "Classifier",
    "Lexicon",
    "tokenize",
]
