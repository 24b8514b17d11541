import subprocess
import sys

import pytest

from mdsite.sandbox import (
    CommandExecutor,
    CommandGenerator,
    ExecutionError,
    ExecutorConfig,
    GenerationError,
    GeneratorConfig,
)


def python_command(code):
    return [sys.executable, "-c", code]


class TestCommandExecutor:
    """Subprocess-backed execution."""

    def test_result_is_stdout(self):
        executor = CommandExecutor(ExecutorConfig(
            command=python_command("import sys; print(sys.argv[1][::-1])"),
        ))
        assert executor.execute("abc") == "cba"

    def test_failure_raises_with_message(self):
        executor = CommandExecutor(ExecutorConfig(
            command=python_command("import sys; sys.exit(sys.argv[1])"),
        ))
        with pytest.raises(ExecutionError, match="Domain error"):
            executor.execute("Domain error")

    def test_missing_command(self):
        executor = CommandExecutor(ExecutorConfig(command=["mdsite-no-such-interpreter"]))
        with pytest.raises(ExecutionError):
            executor.execute("1")

    def test_output_truncated(self):
        executor = CommandExecutor(ExecutorConfig(
            command=python_command("print('x' * 50)"),
            max_output=10,
        ))
        assert executor.execute("") == "x" * 10

    def test_timeout(self, monkeypatch):
        def fake_run(*args, **kwargs):
            raise subprocess.TimeoutExpired(cmd=args[0], timeout=kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)
        executor = CommandExecutor(ExecutorConfig(timeout=1))
        with pytest.raises(ExecutionError, match="Timed out"):
            executor.execute("1")

    def test_source_passed_as_last_argument(self, monkeypatch):
        seen = {}

        def fake_run(command, **kwargs):
            seen["command"] = command
            return subprocess.CompletedProcess(command, 0, stdout="2\n", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert CommandExecutor().execute("1+1") == "2"
        assert seen["command"] == ["bqn", "-p", "1+1"]


class TestCommandGenerator:
    """Subprocess-backed generation."""

    def test_body_on_stdin_and_location_argument(self):
        generator = CommandGenerator(GeneratorConfig(command=python_command(
            "import sys; print('<b>' + sys.stdin.read() + sys.argv[1] + '</b>')"
        )))
        assert generator.generate("x", "a.md") == "<b>xa.md</b>"

    def test_failure(self):
        generator = CommandGenerator(GeneratorConfig(command=python_command(
            "import sys; sys.exit('bad directive')"
        )))
        with pytest.raises(GenerationError, match="bad directive"):
            generator.generate("", "a.md")

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            CommandGenerator(GeneratorConfig())
