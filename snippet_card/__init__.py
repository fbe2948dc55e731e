"""Snippet card generator: news article URL in, shareable card image out."""

from .errors import SnippetCardError
from .pipeline import CardResult, SnippetCardGenerator

__all__ = ["CardResult", "SnippetCardError", "SnippetCardGenerator"]

__version__ = "1.0.0"
