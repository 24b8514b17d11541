"""Pathspec-based source discovery.

This module finds the markdown documents under a site root, honouring the
root and nested .gitignore files through the pathspec library.
"""

from pathlib import Path

import pathspec


# Default ignore patterns, always applied
DEFAULT_IGNORE_PATTERNS: list[str] = [
    ".git/",
    "node_modules/",
    "venv/",
    ".venv/",
    "__pycache__/",
    "build/",
    "dist/",
    ".tox/",
    ".pytest_cache/",
]

MARKDOWN_SUFFIX = ".md"


def _read_spec(gitignore_path: Path) -> pathspec.PathSpec:
    with open(gitignore_path, encoding="utf-8") as f:
        return pathspec.PathSpec.from_lines("gitwildmatch", f.readlines())


class MarkdownFilter:
    """Select markdown files below a root directory."""

    def __init__(self, root: Path, extra_patterns: list[str] | None = None):
        """
        Initialize the filter.

        Args:
            root: Site root directory
            extra_patterns: Additional gitignore-style patterns to exclude
        """
        self.root = root
        self._root_spec = pathspec.PathSpec.from_lines(
            "gitwildmatch", DEFAULT_IGNORE_PATTERNS + (extra_patterns or [])
        )
        self._nested_specs: dict[Path, pathspec.PathSpec] = {}
        self._load_gitignores()

    def _load_gitignores(self) -> None:
        """Load every .gitignore below the root."""
        for gitignore_path in self.root.rglob(".gitignore"):
            self._nested_specs[gitignore_path.parent] = _read_spec(gitignore_path)

    def should_ignore(self, path: Path) -> bool:
        """
        Check if a file should be skipped.

        Default patterns apply to every file; a .gitignore applies to files
        in its directory and below.
        """
        relative = path.relative_to(self.root)
        if self._root_spec.match_file(relative.as_posix()):
            return True

        for directory, spec in self._nested_specs.items():
            try:
                below = path.relative_to(directory)
            except ValueError:
                continue
            if spec.match_file(below.as_posix()):
                return True
        return False

    def collect(self) -> list[Path]:
        """Markdown files below the root that are not ignored, sorted."""
        return sorted(
            p for p in self.root.rglob("*" + MARKDOWN_SUFFIX)
            if p.is_file() and not self.should_ignore(p)
        )
