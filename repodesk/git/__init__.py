"""repodesk git package -- subprocess execution, output parsing, operations.

Re-exports core classes for convenient access:
    from repodesk.git import RepositoryOperations, CommandExecutor, CommitRecord
"""

from repodesk.git.executor import CommandExecutor
from repodesk.git.ops import RepositoryOperations
from repodesk.git.types import CommandResult, CommitRecord, MergeOutcome

__all__ = [
    "CommandExecutor",
    "RepositoryOperations",
    "CommandResult",
    "CommitRecord",
    "MergeOutcome",
]
