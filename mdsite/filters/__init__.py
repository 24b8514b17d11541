"""Source discovery for mdsite.

This module provides pathspec-based gitignore filtering of markdown files.
"""

from mdsite.filters.pathspec_filter import (
    MarkdownFilter,
    DEFAULT_IGNORE_PATTERNS,
)

__all__ = [
    "MarkdownFilter",
    "DEFAULT_IGNORE_PATTERNS",
]
