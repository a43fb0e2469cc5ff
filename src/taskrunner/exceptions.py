"""taskrunner exception hierarchy."""

from __future__ import annotations

from typing import Iterable, List, Optional

__all__ = [
    "LaunchFailed",
    "NamedContainerMissing",
    "QueryFailed",
    "TaskFailed",
    "TaskRunnerError",
    "ValidationError",
    "WaitCanceled",
    "WaitTimeout",
]


class TaskRunnerError(Exception):
    """Base class for taskrunner exceptions."""

    error_type = "error"


class ValidationError(TaskRunnerError):
    """Raised when a task specification is invalid."""

    error_type = "validation"


class LaunchFailed(TaskRunnerError):
    """Raised when the orchestration API rejects a run-task request."""

    error_type = "launch"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class QueryFailed(TaskRunnerError):
    """Raised when task status cannot be queried or resolved."""

    error_type = "query"

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        transient: bool = False,
    ):
        super().__init__(message)
        self.cause = cause
        self.transient = transient


class TaskFailed(TaskRunnerError):
    """Raised when a task stopped abnormally or its command exited non-zero."""

    error_type = "task_failed"

    def __init__(self, handle: str, cause: str) -> None:
        super().__init__(f"TaskFailed(task={handle}): {cause}")
        self.handle = handle
        self.cause = cause


class NamedContainerMissing(TaskFailed):
    """Raised when a stopped task does not report the expected container."""

    error_type = "container_missing"


class WaitTimeout(TaskRunnerError):
    """Raised when tasks do not reach a terminal state before the deadline."""

    error_type = "timeout"

    def __init__(self, handles: Iterable[str], max_wait_seconds: float) -> None:
        handles_list = list(handles)
        super().__init__(
            f"tasks {handles_list} did not stop within {max_wait_seconds:g}s"
        )
        self.handles: List[str] = handles_list
        self.max_wait_seconds = max_wait_seconds


class WaitCanceled(TaskRunnerError):
    """Raised when waiting is aborted through the cancellation signal."""

    error_type = "canceled"

    def __init__(self, handles: Iterable[str]) -> None:
        handles_list = list(handles)
        super().__init__(f"wait for tasks {handles_list} was canceled")
        self.handles: List[str] = handles_list
