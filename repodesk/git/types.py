"""Shared data types for repodesk git operations."""

from dataclasses import dataclass, field
from typing import Any

from repodesk.constants import OUTPUT_TRUNCATE_CHARS, MergePhase


def _truncate(text: str) -> str:
    return text[:OUTPUT_TRUNCATE_CHARS] if len(text) > OUTPUT_TRUNCATE_CHARS else text


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one git invocation."""

    argv: list[str]
    exit_status: int
    stdout: str
    stderr: str
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.exit_status == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "argv": self.argv,
            "exit_status": self.exit_status,
            "stdout": _truncate(self.stdout),
            "stderr": _truncate(self.stderr),
            "duration_ms": self.duration_ms,
            "success": self.success,
        }


@dataclass(frozen=True)
class CommitRecord:
    """One line of the commit log."""

    hash: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"hash": self.hash, "message": self.message}


@dataclass
class MergeOutcome:
    """State reached by a checkout-then-merge.

    The two steps are not atomic. Every phase except ``CHECKOUT_FAILED``
    means the target branch is now checked out, and ``CONFLICTED`` means a
    merge is still in progress on it.
    """

    source: str
    target: str
    phase: MergePhase
    conflicting_files: list[str] = field(default_factory=list)
    fast_forward: bool = False
    commit: str | None = None

    @property
    def checked_out(self) -> bool:
        return self.phase != MergePhase.CHECKOUT_FAILED

    @property
    def merged(self) -> bool:
        return self.phase == MergePhase.MERGED

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "phase": str(self.phase),
            "checked_out": self.checked_out,
            "conflicting_files": list(self.conflicting_files),
            "fast_forward": self.fast_forward,
            "commit": self.commit,
        }
