"""repodesk - run everyday git operations against one selected repository.

Spawns the installed git for every operation, parses its output into
structured results, and reports failures as typed errors.
"""

__version__ = "0.1.0"

from repodesk.exceptions import (
    ConfigurationError,
    ExecutionError,
    MergeConflictError,
    MergeError,
    NotARepositoryError,
    PreconditionViolation,
    RepodeskError,
    SessionUnsetError,
)
from repodesk.git import CommandExecutor, CommandResult, CommitRecord, MergeOutcome, RepositoryOperations
from repodesk.session import RepositorySession

__all__ = [
    "__version__",
    # Errors
    "RepodeskError",
    "ConfigurationError",
    "SessionUnsetError",
    "PreconditionViolation",
    "NotARepositoryError",
    "ExecutionError",
    "MergeError",
    "MergeConflictError",
    # Core
    "RepositorySession",
    "CommandExecutor",
    "RepositoryOperations",
    "CommandResult",
    "CommitRecord",
    "MergeOutcome",
]
