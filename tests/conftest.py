"""Pytest configuration and fixtures for repodesk tests."""

import os
import subprocess
from collections.abc import Generator
from pathlib import Path

import pytest

from repodesk.git.ops import RepositoryOperations
from repodesk.session import RepositorySession


def _run_git(*args: str, cwd: Path | None = None) -> str:
    """Run git command safely without shell=True."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def run_git():
    """Expose the plain git helper to tests."""
    return _run_git


@pytest.fixture
def tmp_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository on ``main`` with one commit.

    Yields:
        Path to the temporary repository
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    orig_dir = os.getcwd()
    os.chdir(repo)

    _run_git("init", "-q", "-b", "main", cwd=repo)
    _run_git("config", "user.email", "test@test.com", cwd=repo)
    _run_git("config", "user.name", "Test", cwd=repo)
    _run_git("config", "commit.gpgsign", "false", cwd=repo)

    (repo / "README.md").write_text("# Test Repo")
    _run_git("add", "-A", cwd=repo)
    _run_git("commit", "-q", "-m", "Initial commit", cwd=repo)

    yield repo

    os.chdir(orig_dir)


@pytest.fixture
def ops(tmp_repo: Path) -> RepositoryOperations:
    """RepositoryOperations with ``tmp_repo`` selected."""
    return RepositoryOperations(session=RepositorySession(tmp_repo))


@pytest.fixture
def unset_ops() -> RepositoryOperations:
    """RepositoryOperations with no repository selected."""
    return RepositoryOperations()


@pytest.fixture
def bare_remote(tmp_path: Path, tmp_repo: Path) -> Path:
    """Bare repository registered as ``origin`` of ``tmp_repo``."""
    remote = tmp_path / "remote.git"
    _run_git("init", "-q", "--bare", str(remote))
    _run_git("remote", "add", "origin", str(remote), cwd=tmp_repo)
    return remote
