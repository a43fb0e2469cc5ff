"""Verdict and run result data structures shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..exceptions import (
    LaunchFailed,
    NamedContainerMissing,
    TaskFailed,
    TaskRunnerError,
    ValidationError,
)
from .spec import TaskSpec
from .status import Outcome
from .type_aliases import TaskHandle


@dataclass(frozen=True)
class Verdict:
    """Single terminal judgement over the waited tasks."""

    outcome: Outcome
    cause: Optional[str] = None
    error_type: Optional[str] = None  # task_failed / container_missing
    task_handle: Optional[TaskHandle] = None
    handles: Tuple[TaskHandle, ...] = ()

    @classmethod
    def success(cls, handles: Iterable[TaskHandle]) -> "Verdict":
        return cls(outcome=Outcome.SUCCESS, handles=tuple(handles))

    @classmethod
    def failure(
        cls,
        cause: str,
        *,
        task_handle: Optional[TaskHandle] = None,
        error_type: str = TaskFailed.error_type,
        handles: Iterable[TaskHandle] = (),
    ) -> "Verdict":
        return cls(
            outcome=Outcome.FAILURE,
            cause=cause,
            error_type=error_type,
            task_handle=task_handle,
            handles=tuple(handles),
        )

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def raise_for_failure(self) -> None:
        """Raise the matching exception when this verdict is a failure."""
        if self.succeeded:
            return
        handle = self.task_handle or (self.handles[0] if self.handles else "")
        cause = self.cause or "task failed"
        if self.error_type == NamedContainerMissing.error_type:
            raise NamedContainerMissing(handle, cause)
        raise TaskFailed(handle, cause)


@dataclass(frozen=True)
class Diagnostic:
    """Short title plus detail message describing a failed run."""

    title: str
    detail: str

    @classmethod
    def from_error(
        cls, error: BaseException, handles: List[TaskHandle] | None = None
    ) -> "Diagnostic":
        if isinstance(error, ValidationError):
            title = "invalid task specification"
        elif isinstance(error, LaunchFailed) or not handles:
            title = "failed to run task"
        else:
            handle = getattr(error, "handle", None) or handles[0]
            title = f"failed to wait for task {handle}"
        return cls(title=title, detail=str(error))


@dataclass
class RunResult:
    """Result of one run-and-wait invocation."""

    success: bool
    spec: TaskSpec
    status: str = "unknown"  # succeeded/failed/timeout/canceled/error/launched
    task_handles: List[TaskHandle] = field(default_factory=list)
    verdict: Optional[Verdict] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    diagnostic: Optional[Diagnostic] = None
    started_at: Optional[str] = None  # ISO timestamp
    completed_at: Optional[str] = None  # ISO timestamp
    duration_seconds: Optional[float] = None

    @classmethod
    def from_error(
        cls, spec: TaskSpec, error: TaskRunnerError, handles: List[TaskHandle]
    ) -> "RunResult":
        status = {
            "timeout": "timeout",
            "canceled": "canceled",
            "task_failed": "failed",
            "container_missing": "failed",
        }.get(error.error_type, "error")
        return cls(
            success=False,
            spec=spec,
            status=status,
            task_handles=list(handles),
            error=str(error),
            error_type=error.error_type,
            diagnostic=Diagnostic.from_error(error, handles),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "status": self.status,
            "task_handles": list(self.task_handles),
            "state": self.spec.to_request(),
            "error": self.error,
            "error_type": self.error_type,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_seconds": self.duration_seconds,
        }
        if self.verdict is not None:
            data["verdict"] = {
                "outcome": self.verdict.outcome.value,
                "cause": self.verdict.cause,
            }
        if self.diagnostic is not None:
            data["diagnostic"] = {
                "title": self.diagnostic.title,
                "detail": self.diagnostic.detail,
            }
        return data


__all__ = ["Diagnostic", "RunResult", "Verdict"]
