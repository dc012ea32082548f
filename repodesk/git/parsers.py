"""Parsers turning raw git output into structured results."""

from repodesk.git.types import CommitRecord

# Leading markers in `git branch --list`: current branch, other worktree
BRANCH_MARKERS = "*+"


def parse_commit_log(output: str) -> list[CommitRecord]:
    """Parse ``git log --oneline`` output.

    Each line is split on its first whitespace run into hash and message.
    Blank lines are dropped and the order git emitted is kept.

    Args:
        output: Raw stdout

    Returns:
        One CommitRecord per non-blank line
    """
    commits = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        sha, *message = line.split(None, 1)
        commits.append(CommitRecord(hash=sha, message=message[0] if message else ""))
    return commits


def parse_branch_list(output: str) -> list[str]:
    """Parse ``git branch --list`` output into branch names.

    The detached-HEAD pseudo entry is not a branch and is skipped.
    """
    branches = []
    for line in output.splitlines():
        name = line.strip()
        if name[:1] in BRANCH_MARKERS and name[1:2] in (" ", ""):
            name = name[1:].strip()
        if not name or name.startswith("("):
            continue
        branches.append(name)
    return branches


def parse_status(output: str) -> str:
    """Return short-format status as one opaque, trimmed string."""
    return output.strip()


def parse_current_branch(output: str) -> str:
    """Parse ``git branch --show-current``; empty when HEAD is detached."""
    return output.strip()


def parse_path_list(output: str) -> list[str]:
    """Parse newline-delimited paths, e.g. from ``git diff --name-only``."""
    return [f.strip() for f in output.splitlines() if f.strip()]


def parse_merge_output(output: str) -> bool:
    """Tell whether a successful ``git merge`` was resolved as a fast-forward."""
    return any(line.strip() == "Fast-forward" for line in output.splitlines())
