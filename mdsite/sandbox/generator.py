"""Generation comments.

A generation comment is an HTML comment whose body starts with ``GEN``.
Its body is handed to a page generator and the comment is replaced by the
HTML the generator returns.
"""

from dataclasses import dataclass, field
import logging
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when a generator cannot produce HTML."""


class PageGenerator(Protocol):
    """Generator protocol"""

    def generate(self, body: str, location: str) -> str:
        """Produce an HTML fragment from a directive body."""
        ...


@dataclass
class GeneratorConfig:
    """Generator configuration."""
    command: list[str] = field(default_factory=list)
    timeout: int = 60


class CommandGenerator:
    """Pipe the directive body to a command and return its stdout.

    The document location is passed as the last argument.
    """

    def __init__(self, config: GeneratorConfig):
        if not config.command:
            raise ValueError("Generator command must not be empty")
        self.config = config

    def generate(self, body: str, location: str) -> str:
        """
        Run the generator command.

        Args:
            body: Directive body, with any referenced file already substituted
            location: Path of the document being converted

        Returns:
            HTML fragment
        """
        logger.debug("Generating for %s", location)
        try:
            result = subprocess.run(
                [*self.config.command, location],
                input=body,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            raise GenerationError(f"Generator timed out after {self.config.timeout} seconds")
        except OSError as e:
            raise GenerationError(str(e)) from e

        if result.returncode != 0:
            raise GenerationError(result.stderr.strip() or f"Exit status {result.returncode}")
        return result.stdout.rstrip("\n")
