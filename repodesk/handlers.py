"""Request/response boundary between a UI layer and the repository operations.

A caller names a request and passes its arguments; it always gets a Response
back. Failures are reported in the response, never raised, so a UI can render
them as they are.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any

from repodesk.exceptions import (
    ExecutionError,
    MergeError,
    PreconditionViolation,
    RepodeskError,
)
from repodesk.git.ops import RepositoryOperations
from repodesk.logging import get_logger

logger = get_logger("handlers")


@dataclass
class Response:
    """Outcome of one request."""

    ok: bool
    result: Any = None
    error: str | None = None
    error_type: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, result: Any = None) -> Response:
        return cls(ok=True, result=_serialize(result))

    @classmethod
    def failure(cls, error: Exception) -> Response:
        details: dict[str, Any] = {}
        message = str(error)
        if isinstance(error, RepodeskError):
            details = dict(error.details)
            message = error.message
        if isinstance(error, PreconditionViolation):
            details["field"] = error.field
        if isinstance(error, ExecutionError):
            details.update(
                command=error.command,
                exit_status=error.exit_status,
                stderr=error.stderr,
                timed_out=error.timed_out,
            )
        if isinstance(error, MergeError):
            details["outcome"] = error.outcome.to_dict()
        return cls(ok=False, error=message, error_type=type(error).__name__, details=details)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _serialize(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    if hasattr(value, "__fspath__"):
        return str(value)
    return value


class RequestHandler:
    """Routes named requests to a RepositoryOperations instance."""

    def __init__(self, operations: RepositoryOperations | None = None) -> None:
        self.operations = operations or RepositoryOperations()
        self._routes: dict[str, Callable[..., Any]] = {
            "select_repository": self.operations.select_repository,
            "set_repository": self.operations.set_repository,
            "get_repository": self._get_repository,
            "list_commits": self.operations.list_commits,
            "create_branch": self.operations.create_branch,
            "commit_all": self.operations.commit_all,
            "push_branch": self.operations.push_branch,
            "delete_branch": self.operations.delete_branch,
            "get_status": self.operations.get_status,
            "list_branches": self.operations.list_branches,
            "current_branch": self.operations.current_branch,
            "checkout_branch": self.operations.checkout_branch,
            "merge_branch": self.operations.merge_branch,
            "merge_in_progress": self.operations.merge_in_progress,
            "conflicting_files": self.operations.conflicting_files,
            "abort_merge": self.operations.abort_merge,
        }

    @property
    def requests(self) -> list[str]:
        """Names of all supported requests."""
        return sorted(self._routes)

    def _get_repository(self) -> str | None:
        session = self.operations.session
        return str(session.current_path()) if session.is_set else None

    def handle(self, request: str, **arguments: Any) -> Response:
        """Run one request and wrap its result or failure.

        Args:
            request: Request name, e.g. ``list_commits``
            **arguments: Keyword arguments of the operation

        Returns:
            Response with ``ok`` set accordingly
        """
        route = self._routes.get(request)
        if route is None:
            logger.warning(f"Unknown request: {request}")
            return Response(
                ok=False,
                error=f"Unknown request: {request}",
                error_type="UnknownRequest",
                details={"request": request},
            )

        try:
            inspect.signature(route).bind(**arguments)
        except TypeError as e:
            logger.warning(f"Bad arguments for {request}: {e}", extra={"operation": request})
            return Response(
                ok=False,
                error=f"Bad arguments for {request}: {e}",
                error_type="BadArguments",
                details={"request": request},
            )

        try:
            result = route(**arguments)
        except RepodeskError as e:
            logger.info(f"{request} failed: {e.message}", extra={"operation": request})
            return Response.failure(e)

        return Response.success(result)

    async def handle_async(self, request: str, **arguments: Any) -> Response:
        """Run a request in a worker thread so the caller's event loop stays free.

        Requests still execute one at a time, in the order the operations lock
        is acquired.
        """
        return await asyncio.to_thread(self.handle, request, **arguments)
