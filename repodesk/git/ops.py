"""RepositoryOperations -- the named git operations behind repodesk."""

from __future__ import annotations

import threading
from pathlib import Path

from repodesk.config import RepodeskConfig
from repodesk.constants import MergePhase
from repodesk.exceptions import (
    ExecutionError,
    MergeConflictError,
    MergeError,
    NotARepositoryError,
    PreconditionViolation,
)
from repodesk.git.executor import CommandExecutor
from repodesk.git.parsers import (
    parse_branch_list,
    parse_commit_log,
    parse_current_branch,
    parse_merge_output,
    parse_path_list,
    parse_status,
)
from repodesk.git.types import CommandResult, CommitRecord, MergeOutcome
from repodesk.logging import get_logger
from repodesk.session import RepositorySession, has_marker

logger = get_logger("git.ops")


def _require_argument(field: str, value: str) -> str:
    """Reject values git would misread.

    Branch names are otherwise forwarded unvalidated; git enforces its own
    naming rules.
    """
    if not isinstance(value, str) or not value.strip():
        raise PreconditionViolation(f"{field} must not be empty", field=field)
    if value.startswith("-"):
        raise PreconditionViolation(
            f"{field} must not start with '-': {value}",
            field=field,
            details={field: value},
        )
    return value


class RepositoryOperations:
    """Git operations against the repository held by a session.

    Each call checks the session first, then the ``.git`` marker, then its own
    preconditions, and only then spawns git. Calls on one instance are
    serialized by an internal lock so two operations never interleave on the
    shared working tree and index. Selecting a repository takes the same lock,
    and each operation resolves its path once, so every git command of one
    operation runs in the same repository.
    """

    def __init__(
        self,
        session: RepositorySession | None = None,
        executor: CommandExecutor | None = None,
        config: RepodeskConfig | None = None,
    ) -> None:
        """Initialize operations.

        Args:
            session: Session holding the selected repository
            executor: Executor used to spawn git
            config: Configuration; defaults apply when omitted
        """
        self.config = config or RepodeskConfig()
        self.session = session or RepositorySession()
        self.executor = executor or CommandExecutor(
            git_binary=self.config.executor.git_binary,
            timeout=self.config.executor.timeout_seconds,
            non_interactive=self.config.executor.non_interactive,
        )
        self._lock = threading.RLock()

    def _repo(self) -> Path:
        path = self.session.current_path()
        if self.config.operations.verify_marker and not has_marker(path):
            raise NotARepositoryError(str(path))
        return path

    def _run(self, repo: Path, *args: str, check: bool = True) -> CommandResult:
        return self.executor.run(args, cwd=repo, check=check)

    def select_repository(self, path: str | Path) -> Path:
        """Select a git repository once no operation is running.

        Args:
            path: Directory chosen by the user

        Returns:
            The resolved repository path
        """
        with self._lock:
            return self.session.select(path)

    def set_repository(self, path: str | Path) -> None:
        """Store a repository path unchecked once no operation is running."""
        with self._lock:
            self.session.set_path(path)

    def list_commits(self) -> list[CommitRecord]:
        """List commits across all branches, newest first.

        Returns:
            Commit records in the order git emitted them
        """
        with self._lock:
            repo = self._repo()
            result = self._run(repo, "log", "--oneline", "--all", "--no-decorate", "--no-color")
            return parse_commit_log(result.stdout)

    def create_branch(self, name: str) -> None:
        """Create a branch at HEAD and switch to it.

        Args:
            name: Branch name
        """
        with self._lock:
            repo = self._repo()
            _require_argument("name", name)
            self._run(repo, "checkout", "-b", name)
            logger.info(f"Created and switched to branch {name}", extra={"branch": name})

    def commit_all(self, message: str) -> str:
        """Stage every working-tree change and commit it.

        Args:
            message: Commit message

        Returns:
            Full hash of the new commit

        Raises:
            PreconditionViolation: If the message is empty
            ExecutionError: If git refuses, e.g. nothing to commit
        """
        with self._lock:
            repo = self._repo()
            if not isinstance(message, str) or not message.strip():
                raise PreconditionViolation("Commit message must not be empty", field="message")

            self._run(repo, "add", "-A")
            self._run(repo, "commit", "-m", message)
            commit_sha = self._run(repo, "rev-parse", "HEAD").stdout.strip()
            logger.info(f"Created commit {commit_sha[:8]}: {message[:50]}")
            return commit_sha

    def push_branch(self, branch: str | None = None) -> None:
        """Push a branch to the configured remote.

        Args:
            branch: Branch to push (defaults to operations.default_push_branch)
        """
        with self._lock:
            repo = self._repo()
            branch = branch or self.config.operations.default_push_branch
            remote = self.config.operations.default_remote
            _require_argument("branch", branch)
            self._run(repo, "push", remote, branch)
            logger.info(f"Pushed {branch} to {remote}", extra={"branch": branch})

    def delete_branch(self, name: str) -> None:
        """Delete a fully merged, not checked-out branch.

        Args:
            name: Branch name
        """
        with self._lock:
            repo = self._repo()
            _require_argument("name", name)
            self._run(repo, "branch", "-d", name)
            logger.info(f"Deleted branch {name}", extra={"branch": name})

    def get_status(self) -> str:
        """Short-format working tree status as one opaque string."""
        with self._lock:
            result = self._run(self._repo(), "status", "--short")
            return parse_status(result.stdout)

    def list_branches(self) -> list[str]:
        """List local branch names."""
        with self._lock:
            result = self._run(self._repo(), "branch", "--list", "--no-color")
            return parse_branch_list(result.stdout)

    def current_branch(self) -> str:
        """Name of the checked-out branch, empty when HEAD is detached."""
        with self._lock:
            result = self._run(self._repo(), "branch", "--show-current")
            return parse_current_branch(result.stdout)

    def checkout_branch(self, name: str) -> None:
        """Switch the working tree to a branch.

        Args:
            name: Branch name
        """
        with self._lock:
            repo = self._repo()
            _require_argument("name", name)
            self._run(repo, "checkout", name, "--")
            logger.info(f"Checked out {name}", extra={"branch": name})

    def merge_in_progress(self) -> bool:
        """Check whether a merge is waiting for conflict resolution."""
        with self._lock:
            return self._merge_in_progress(self._repo())

    def _merge_in_progress(self, repo: Path) -> bool:
        result = self._run(repo, "rev-parse", "-q", "--verify", "MERGE_HEAD", check=False)
        return result.success

    def conflicting_files(self) -> list[str]:
        """Files with unresolved merge conflicts."""
        with self._lock:
            return self._conflicting_files(self._repo())

    def _conflicting_files(self, repo: Path) -> list[str]:
        result = self._run(repo, "diff", "--name-only", "--diff-filter=U", check=False)
        return parse_path_list(result.stdout)

    def abort_merge(self) -> None:
        """Abort an in-progress merge.

        Raises:
            ExecutionError: If no merge is in progress
        """
        with self._lock:
            self._run(self._repo(), "merge", "--abort")
            logger.info("Aborted merge")

    def merge_branch(self, source: str, target: str) -> MergeOutcome:
        """Check out ``target``, then merge ``source`` into it.

        The two steps are separate git invocations in the same repository and
        nothing is rolled back: if the merge step fails, ``target`` stays
        checked out and, on conflicts, the merge stays in progress until
        resolved or aborted.

        Args:
            source: Branch to merge
            target: Branch to merge into

        Returns:
            Outcome with phase MERGED

        Raises:
            PreconditionViolation: If source and target are the same branch
            MergeError: If checkout or merge failed (see ``outcome.phase``)
            MergeConflictError: If the merge stopped with conflicts
        """
        with self._lock:
            repo = self._repo()
            _require_argument("source", source)
            _require_argument("target", target)
            if source == target:
                raise PreconditionViolation(
                    f"Cannot merge branch {source} into itself",
                    field="source",
                    details={"source": source, "target": target},
                )

            try:
                self._run(repo, "checkout", target, "--")
            except ExecutionError as e:
                outcome = MergeOutcome(source, target, MergePhase.CHECKOUT_FAILED)
                raise MergeError(f"Could not check out {target}: {e.output}", outcome, e) from e
            logger.info(f"Checked out {target} for merge", extra={"branch": target})

            try:
                result = self._run(repo, "merge", "--no-edit", source)
            except ExecutionError as e:
                raise self._merge_failure(repo, source, target, e) from e

            outcome = MergeOutcome(
                source,
                target,
                MergePhase.MERGED,
                fast_forward=parse_merge_output(result.stdout),
                commit=self._run(repo, "rev-parse", "HEAD").stdout.strip(),
            )
            logger.info(
                f"Merged {source} into {target}: {(outcome.commit or '')[:8]}",
                extra={"branch": target},
            )
            return outcome

    def _merge_failure(
        self, repo: Path, source: str, target: str, error: ExecutionError
    ) -> MergeError:
        conflicts = self._conflicting_files(repo)
        if conflicts and self._merge_in_progress(repo):
            outcome = MergeOutcome(
                source, target, MergePhase.CONFLICTED, conflicting_files=conflicts
            )
            logger.warning(f"Merge conflict: {source} into {target} ({len(conflicts)} files)")
            return MergeConflictError(f"Merge conflict: {source} into {target}", outcome, error)

        outcome = MergeOutcome(source, target, MergePhase.MERGE_FAILED)
        return MergeError(f"Merge of {source} into {target} failed: {error.output}", outcome, error)
