"""Repository session state -- the single selected working directory."""

from __future__ import annotations

from pathlib import Path

from repodesk.constants import GIT_DIR_MARKER
from repodesk.exceptions import NotARepositoryError, SessionUnsetError
from repodesk.logging import get_logger, set_repository_context

logger = get_logger("session")


def has_marker(path: str | Path) -> bool:
    """Check whether ``path`` holds git metadata.

    A worktree carries a ``.git`` file instead of a directory, so any entry
    counts.
    """
    return (Path(path) / GIT_DIR_MARKER).exists()


class RepositorySession:
    """Holds the currently selected repository path.

    The path lives for as long as the session object does. Operations read it
    through ``current_path()``, which fails fast when nothing was selected.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path: Path | None = None
        if path is not None:
            self.set_path(path)

    @property
    def is_set(self) -> bool:
        return self._path is not None

    def set_path(self, path: str | Path) -> None:
        """Store ``path`` without checking it exists or is a repository.

        Args:
            path: Working directory to operate on
        """
        self._path = Path(path)
        set_repository_context(self._path)
        logger.debug(f"Repository path set to {self._path}")

    def current_path(self) -> Path:
        """Return the selected path.

        Raises:
            SessionUnsetError: If no path was set
        """
        if self._path is None:
            raise SessionUnsetError()
        return self._path

    def select(self, path: str | Path) -> Path:
        """Select a directory after checking it is a git repository.

        Args:
            path: Directory chosen by the user

        Returns:
            The resolved path now held by the session

        Raises:
            NotARepositoryError: If the directory has no git metadata
        """
        resolved = Path(path).expanduser().resolve()
        if not has_marker(resolved):
            raise NotARepositoryError(str(resolved))
        self.set_path(resolved)
        logger.debug(f"Selected repository {resolved}")
        return resolved
