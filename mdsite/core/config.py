"""Conversion configuration."""

from dataclasses import dataclass
from typing import Optional


DEFAULT_SITE_URL = "https://mlochbaum.github.io/BQN/"
DEFAULT_REPO_URL = "https://github.com/mlochbaum/BQN/blob/master/"
DEFAULT_BOILERPLATE = "*View this file [with results and syntax highlighting]({url}).*"


@dataclass
class ConversionConfig:
    """Settings for extended-mode conversion."""
    site_url: str = DEFAULT_SITE_URL
    repo_url: str = DEFAULT_REPO_URL
    repl_url: Optional[str] = None          # Defaults to site_url + "try.html"
    require_boilerplate: bool = True        # First line must link to the rendered page
    boilerplate: str = DEFAULT_BOILERPLATE
    check_headings: bool = True             # Exactly one level-1 heading

    @property
    def repl_page(self) -> str:
        return self.repl_url or self.site_url + "try.html"
