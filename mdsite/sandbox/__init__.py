"""Sandbox collaborators.

This module provides the code executor for live code blocks and the
page generator for generation comments.
"""

from mdsite.sandbox.executor import (
    CodeExecutor,
    CommandExecutor,
    ExecutionError,
    ExecutorConfig,
)
from mdsite.sandbox.generator import (
    CommandGenerator,
    GenerationError,
    GeneratorConfig,
    PageGenerator,
)

__all__ = [
    "CodeExecutor",
    "CommandExecutor",
    "ExecutionError",
    "ExecutorConfig",
    "CommandGenerator",
    "GenerationError",
    "GeneratorConfig",
    "PageGenerator",
]
