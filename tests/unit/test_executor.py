"""Tests for repodesk command executor."""

import os
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from repodesk.exceptions import ExecutionError
from repodesk.git.executor import CommandExecutor
from repodesk.git.types import CommandResult


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    completed = MagicMock()
    completed.returncode = returncode
    completed.stdout = stdout
    completed.stderr = stderr
    return completed


class TestCommandExecutorInit:
    """Tests for CommandExecutor construction."""

    def test_defaults(self) -> None:
        """Test default initialization."""
        executor = CommandExecutor()

        assert executor.git_binary == "git"
        assert executor.timeout == 300
        assert executor.non_interactive is True

    def test_build_argv_non_interactive(self) -> None:
        """Test --no-pager is added in non-interactive mode."""
        executor = CommandExecutor()

        assert executor.build_argv(["status", "--short"]) == ["git", "--no-pager", "status", "--short"]

    def test_build_argv_interactive(self) -> None:
        """Test no global flags are added otherwise."""
        executor = CommandExecutor(git_binary="/usr/bin/git", non_interactive=False)

        assert executor.build_argv(["log"]) == ["/usr/bin/git", "log"]


class TestCommandExecutorRun:
    """Tests for CommandExecutor.run with a mocked subprocess."""

    def test_success(self, tmp_path: Path) -> None:
        """Test captured output is returned."""
        executor = CommandExecutor()

        with patch("repodesk.git.executor.subprocess.run", return_value=_completed(0, "out\n", "")) as mock_run:
            result = executor.run(["status"], cwd=tmp_path)

        assert isinstance(result, CommandResult)
        assert result.success is True
        assert result.stdout == "out\n"
        assert result.argv == ["git", "--no-pager", "status"]

        kwargs = mock_run.call_args.kwargs
        assert mock_run.call_args.args[0] == ["git", "--no-pager", "status"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["timeout"] == 300
        assert "shell" not in kwargs
        assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"

    def test_argument_with_metacharacters_stays_one_element(self, tmp_path: Path) -> None:
        """Test caller values are never joined into a command line."""
        executor = CommandExecutor()
        message = 'say "hi"; rm -rf / && $(id)'

        with patch("repodesk.git.executor.subprocess.run", return_value=_completed()) as mock_run:
            executor.run(["commit", "-m", message], cwd=tmp_path)

        argv = mock_run.call_args.args[0]
        assert argv[-1] == message
        assert len(argv) == 5

    def test_rejects_command_string(self, tmp_path: Path) -> None:
        """Test a single string is refused instead of being split."""
        executor = CommandExecutor()

        with pytest.raises(TypeError):
            executor.run("status --short", cwd=tmp_path)  # type: ignore[arg-type]

    def test_nonzero_exit_raises(self, tmp_path: Path) -> None:
        """Test nonzero exit becomes ExecutionError with status and stderr."""
        executor = CommandExecutor()
        completed = _completed(128, "", "fatal: not a git repository\n")

        with patch("repodesk.git.executor.subprocess.run", return_value=completed):
            with pytest.raises(ExecutionError) as exc_info:
                executor.run(["status"], cwd=tmp_path)

        error = exc_info.value
        assert error.exit_status == 128
        assert error.stderr == "fatal: not a git repository\n"
        assert error.output == "fatal: not a git repository"
        assert error.argv == ["git", "--no-pager", "status"]

    def test_nonzero_exit_without_check(self, tmp_path: Path) -> None:
        """Test check=False returns the failing result."""
        executor = CommandExecutor()

        with patch("repodesk.git.executor.subprocess.run", return_value=_completed(1)):
            result = executor.run(["rev-parse", "--verify", "MERGE_HEAD"], cwd=tmp_path, check=False)

        assert result.success is False
        assert result.exit_status == 1

    def test_timeout(self, tmp_path: Path) -> None:
        """Test an expired timeout is reported as ExecutionError."""
        executor = CommandExecutor(timeout=5)
        expired = subprocess.TimeoutExpired(cmd=["git"], timeout=5, output=b"partial", stderr=None)

        with patch("repodesk.git.executor.subprocess.run", side_effect=expired):
            with pytest.raises(ExecutionError) as exc_info:
                executor.run(["push", "origin", "main"], cwd=tmp_path)

        assert exc_info.value.timed_out is True
        assert exc_info.value.exit_status == -1
        assert exc_info.value.stdout == "partial"

    def test_no_timeout(self, tmp_path: Path) -> None:
        """Test timeout=None waits without bound."""
        executor = CommandExecutor(timeout=None)

        with patch("repodesk.git.executor.subprocess.run", return_value=_completed()) as mock_run:
            executor.run(["status"], cwd=tmp_path)

        assert mock_run.call_args.kwargs["timeout"] is None

    def test_extra_env(self, tmp_path: Path) -> None:
        """Test extra variables are layered over the inherited environment."""
        executor = CommandExecutor(env={"GIT_AUTHOR_NAME": "Bot"})

        with patch("repodesk.git.executor.subprocess.run", return_value=_completed()) as mock_run:
            executor.run(["status"], cwd=tmp_path)

        env = mock_run.call_args.kwargs["env"]
        assert env["GIT_AUTHOR_NAME"] == "Bot"
        assert env.get("PATH") == os.environ.get("PATH")


class TestCommandExecutorSpawnFailures:
    """Tests for failures before git starts."""

    def test_missing_cwd(self, tmp_path: Path) -> None:
        """Test a missing working directory is an ExecutionError."""
        executor = CommandExecutor()

        with patch("repodesk.git.executor.subprocess.run") as mock_run:
            with pytest.raises(ExecutionError) as exc_info:
                executor.run(["status"], cwd=tmp_path / "gone")

        assert exc_info.value.exit_status is None
        mock_run.assert_not_called()

    def test_missing_binary(self, tmp_path: Path) -> None:
        """Test a git binary that cannot be found is an ExecutionError."""
        executor = CommandExecutor(git_binary="definitely-not-a-real-git-binary")

        with pytest.raises(ExecutionError) as exc_info:
            executor.run(["status"], cwd=tmp_path)

        assert exc_info.value.exit_status is None
        assert "definitely-not-a-real-git-binary" in exc_info.value.message


class TestCommandExecutorReal:
    """Tests running the real git."""

    def test_version(self, tmp_path: Path) -> None:
        """Test git --version runs."""
        result = CommandExecutor().run(["--version"], cwd=tmp_path)

        assert result.stdout.startswith("git version")
        assert result.duration_ms >= 0

    def test_outside_repository(self, tmp_path: Path) -> None:
        """Test git's own failure outside a repository is surfaced."""
        with pytest.raises(ExecutionError) as exc_info:
            CommandExecutor().run(["rev-parse", "--git-dir"], cwd=tmp_path, check=True)

        assert exc_info.value.exit_status != 0
        assert "not a git repository" in exc_info.value.output.lower()


class TestCommandResult:
    """Tests for CommandResult."""

    def test_to_dict_truncates_long_output(self) -> None:
        """Test long output is truncated for logging."""
        long_output = "x" * 3000
        result = CommandResult(argv=["git"], exit_status=0, stdout=long_output, stderr=long_output)

        data = result.to_dict()

        assert len(data["stdout"]) == 2000
        assert len(data["stderr"]) == 2000
        assert data["success"] is True


class TestCommandExecutorLogging:
    """Tests for the structured fields passed to the executor's log records."""

    def test_finished_record_carries_timing(self, tmp_path: Path) -> None:
        """Test completed commands log their status and duration."""
        executor = CommandExecutor()

        with (
            patch("repodesk.git.executor.subprocess.run", return_value=_completed()),
            patch("repodesk.git.executor.logger") as mock_logger,
        ):
            executor.run(["status"], cwd=tmp_path)

        extra = mock_logger.debug.call_args.kwargs["extra"]
        assert extra["command"] == "git --no-pager status"
        assert extra["exit_status"] == 0
        assert extra["duration_ms"] >= 0

    def test_failure_record_carries_exit_status(self, tmp_path: Path) -> None:
        """Test failing commands log their exit status."""
        executor = CommandExecutor()

        with (
            patch("repodesk.git.executor.subprocess.run", return_value=_completed(1, "", "boom")),
            patch("repodesk.git.executor.logger") as mock_logger,
        ):
            with pytest.raises(ExecutionError):
                executor.run(["status"], cwd=tmp_path)

        extra = mock_logger.warning.call_args.kwargs["extra"]
        assert extra["exit_status"] == 1
        assert extra["command"] == "git --no-pager status"
