"""Git subprocess execution.

Every invocation:
1. Uses an argument vector with shell=False, so caller-supplied values are
   never parsed by a shell
2. Runs in the given working directory with the inherited environment
3. Is bounded by an optional timeout
4. Raises ExecutionError on spawn failure, timeout or nonzero exit
"""

from __future__ import annotations

import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from repodesk.constants import DEFAULT_GIT_BINARY, DEFAULT_TIMEOUT_SECONDS, GIT_TERMINAL_PROMPT
from repodesk.exceptions import ExecutionError
from repodesk.git.types import CommandResult
from repodesk.logging import get_logger

logger = get_logger("git.executor")


class CommandExecutor:
    """Runs git commands as subprocesses and captures their output.

    Calls are independent: the executor neither queues nor serializes them.
    Two processes mutating one repository are kept apart only by git's own
    lock file, and losing that race is an ordinary ExecutionError.
    """

    def __init__(
        self,
        git_binary: str = DEFAULT_GIT_BINARY,
        timeout: int | None = DEFAULT_TIMEOUT_SECONDS,
        non_interactive: bool = True,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            git_binary: Executable name or path of git
            timeout: Seconds to wait for a command, None to wait forever
            non_interactive: Disable pager and credential prompts
            env: Extra environment variables layered over the inherited ones
        """
        self.git_binary = git_binary
        self.timeout = timeout
        self.non_interactive = non_interactive
        self.extra_env = dict(env or {})

    def build_argv(self, args: Sequence[str]) -> list[str]:
        """Prefix ``args`` with the git executable and global flags."""
        argv = [self.git_binary]
        if self.non_interactive:
            argv.append("--no-pager")
        argv.extend(args)
        return argv

    def _environment(self) -> dict[str, str]:
        env = os.environ.copy()
        if self.non_interactive:
            env[GIT_TERMINAL_PROMPT] = "0"
        env.update(self.extra_env)
        return env

    def run(
        self,
        args: Sequence[str],
        cwd: str | Path,
        check: bool = True,
    ) -> CommandResult:
        """Run a git command in ``cwd``.

        Args:
            args: Git arguments, one element per argument
            cwd: Working directory
            check: Whether to raise on non-zero exit

        Returns:
            Captured command result

        Raises:
            ExecutionError: If git cannot be started, times out, or exits
                non-zero (when check=True)
        """
        if isinstance(args, str):
            raise TypeError("args must be a sequence of arguments, not a command string")

        argv = self.build_argv(args)
        command = subprocess.list2cmdline(argv)
        cwd = Path(cwd)
        logger.debug(f"Running: {command} (cwd={cwd})", extra={"command": command})

        if not cwd.is_dir():
            raise ExecutionError(
                f"Working directory does not exist: {cwd}",
                argv=argv,
                details={"cwd": str(cwd)},
            )

        start = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                env=self._environment(),
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(
                f"Git command timed out after {self.timeout}s: {' '.join(args)}",
                extra={"command": command, "exit_status": -1},
            )
            raise ExecutionError(
                f"Git command timed out after {self.timeout}s: {' '.join(args)}",
                argv=argv,
                exit_status=-1,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
                timed_out=True,
            ) from e
        except OSError as e:
            logger.warning(f"Failed to start {self.git_binary}: {e}", extra={"command": command})
            raise ExecutionError(
                f"Failed to start {self.git_binary}: {e.strerror or e}",
                argv=argv,
                details={"cwd": str(cwd)},
            ) from e

        duration_ms = int((time.monotonic() - start) * 1000)
        result = CommandResult(
            argv=argv,
            exit_status=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=duration_ms,
        )
        logger.debug(
            f"Finished with status {result.exit_status} in {duration_ms}ms",
            extra={"command": command, "exit_status": result.exit_status, "duration_ms": duration_ms},
        )

        if check and not result.success:
            error = ExecutionError(
                f"Git command failed ({result.exit_status}): {' '.join(args)}",
                argv=argv,
                exit_status=result.exit_status,
                stdout=result.stdout,
                stderr=result.stderr,
            )
            logger.warning(
                f"{error.message}: {error.output}",
                extra={"command": command, "exit_status": result.exit_status, "duration_ms": duration_ms},
            )
            raise error

        return result


def _as_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
