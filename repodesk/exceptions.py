"""repodesk exception hierarchy."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from repodesk.git.types import MergeOutcome


class RepodeskError(Exception):
    """Base exception for all repodesk errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(RepodeskError):
    """Error in repodesk configuration."""

    pass


class SessionUnsetError(RepodeskError):
    """An operation was issued before a repository was selected."""

    def __init__(self, message: str = "Repository path is not set") -> None:
        super().__init__(message)


class PreconditionViolation(RepodeskError):
    """A request was rejected before any git command ran."""

    def __init__(
        self, message: str, field: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.field = field


class NotARepositoryError(PreconditionViolation):
    """The path does not contain a git metadata directory."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Not a git repository: {path}",
            field="path",
            details={"path": path},
        )
        self.path = path


class ExecutionError(RepodeskError):
    """A git subprocess failed to start, exited nonzero, or timed out."""

    def __init__(
        self,
        message: str,
        argv: Sequence[str] = (),
        exit_status: int | None = None,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.argv = list(argv)
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
        self.timed_out = timed_out

    @property
    def command(self) -> str:
        """Printable form of the failed command line."""
        return subprocess.list2cmdline(self.argv)

    @property
    def output(self) -> str:
        """Error text as git reported it.

        Some failures (``nothing to commit``) are printed on stdout, so stdout
        is used when stderr is empty.
        """
        return self.stderr.strip() or self.stdout.strip()


class MergeError(ExecutionError):
    """One of the two steps of a checkout-then-merge failed."""

    def __init__(self, message: str, outcome: MergeOutcome, cause: ExecutionError) -> None:
        super().__init__(
            message,
            argv=cause.argv,
            exit_status=cause.exit_status,
            stdout=cause.stdout,
            stderr=cause.stderr,
            timed_out=cause.timed_out,
            details={
                "source_branch": outcome.source,
                "target_branch": outcome.target,
                "phase": str(outcome.phase),
            },
        )
        self.outcome = outcome


class MergeConflictError(MergeError):
    """Merge stopped with conflicts; the target stays checked out mid-merge."""

    def __init__(self, message: str, outcome: MergeOutcome, cause: ExecutionError) -> None:
        super().__init__(message, outcome, cause)
        self.details["conflicting_files"] = list(outcome.conflicting_files)

    @property
    def conflicting_files(self) -> list[str]:
        return list(self.outcome.conflicting_files)
