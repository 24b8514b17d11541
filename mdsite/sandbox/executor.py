"""Code execution for live code blocks.

This module provides the executor used to show results in live code blocks:
- A protocol that any executor satisfies
- A subprocess-backed executor running an interpreter command
- Timeout handling and output truncation
"""

from dataclasses import dataclass, field
import logging
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)


class ExecutionError(RuntimeError):
    """Raised when a statement fails to evaluate."""


class CodeExecutor(Protocol):
    """Executor protocol"""

    def execute(self, source: str) -> str:
        """Evaluate ``source`` and return its formatted result."""
        ...


@dataclass
class ExecutorConfig:
    """Executor configuration."""
    command: list[str] = field(default_factory=lambda: ["bqn", "-p"])
    timeout: int = 30               # Seconds per statement
    max_output: int = 10000         # Truncate large results


class CommandExecutor:
    """Run each statement through an interpreter command line.

    The statement source is passed as the last argument. A zero exit status
    yields stdout as the result; anything else raises ``ExecutionError``
    carrying the interpreter's error text.
    """

    def __init__(self, config: ExecutorConfig | None = None):
        """Initialize executor with configuration."""
        self.config = config or ExecutorConfig()

    def execute(self, source: str) -> str:
        """
        Execute a statement.

        Args:
            source: Statement source, including any definitions it needs

        Returns:
            Formatted result text

        Raises:
            ExecutionError: If the command fails, times out or cannot start
        """
        logger.debug("Executing %r", source)
        try:
            result = subprocess.run(
                [*self.config.command, source],
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ExecutionError(f"Timed out after {self.config.timeout} seconds")
        except OSError as e:
            raise ExecutionError(str(e)) from e

        if result.returncode != 0:
            message = (result.stderr or result.stdout).strip()
            raise ExecutionError(message[:self.config.max_output] or f"Exit status {result.returncode}")

        return result.stdout[:self.config.max_output].rstrip("\n")
