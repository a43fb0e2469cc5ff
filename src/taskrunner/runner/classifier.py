"""Pure classification of task status snapshots.

Nothing in this module performs I/O. Each function maps one observation of
remote state (a describe-tasks response, or the error raised while fetching
it) onto a :class:`PollDecision`, which the waiter acts upon.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

from taskrunner.config.models import WaitConfig
from taskrunner.exceptions import (
    NamedContainerMissing,
    QueryFailed,
    TaskFailed,
    TaskRunnerError,
)
from taskrunner.runner.runner_utils import describe_error, is_retryable_query_error
from taskrunner.shared import NORMAL_STOP_CODE, TaskHandle, TaskStatus

CONTAINER_NOT_FOUND = "named container not found in task result"


class PollAction(Enum):
    RETRY = "retry"  # keep polling
    SUCCEED = "succeed"  # stop, verdict success
    FAIL = "fail"  # stop, verdict failure
    ABORT = "abort"  # stop, raise the carried error


@dataclass(frozen=True)
class PollDecision:
    action: PollAction
    cause: Optional[str] = None
    error_type: Optional[str] = None
    task_handle: Optional[TaskHandle] = None
    pending: Tuple[TaskHandle, ...] = ()
    error: Optional[TaskRunnerError] = None


@dataclass(frozen=True)
class ContainerSnapshot:
    name: str
    exit_code: Optional[int] = None
    reason: Optional[str] = None
    last_status: Optional[str] = None


@dataclass(frozen=True)
class TaskSnapshot:
    """Read-only view of one ``describe_tasks`` task record."""

    arn: TaskHandle
    last_status: str
    stop_code: Optional[str] = None
    stopped_reason: Optional[str] = None
    containers: Tuple[ContainerSnapshot, ...] = ()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TaskSnapshot":
        containers = tuple(
            ContainerSnapshot(
                name=str(c.get("name", "")),
                exit_code=c.get("exitCode"),
                reason=c.get("reason"),
                last_status=c.get("lastStatus"),
            )
            for c in record.get("containers") or []
        )
        return cls(
            arn=str(record.get("taskArn", "")),
            last_status=str(record.get("lastStatus", "")),
            stop_code=record.get("stopCode"),
            stopped_reason=record.get("stoppedReason"),
            containers=containers,
        )

    def container(self, name: str) -> Optional[ContainerSnapshot]:
        for c in self.containers:
            if c.name == name:
                return c
        return None


def classify_task(snapshot: TaskSnapshot, container_name: str) -> PollDecision:
    """Classify a single task snapshot against the named container."""
    handle = snapshot.arn
    try:
        status = TaskStatus(snapshot.last_status)
    except ValueError:
        return PollDecision(
            PollAction.ABORT,
            task_handle=handle,
            error=QueryFailed(
                f"task {handle} reported unknown status {snapshot.last_status!r}"
            ),
        )

    if not status.is_terminal:
        return PollDecision(
            PollAction.RETRY,
            cause=f"{handle}: {status.value}",
            task_handle=handle,
            pending=(handle,),
        )

    if snapshot.stop_code != NORMAL_STOP_CODE:
        cause = f"Task failed: {snapshot.stop_code or 'unknown stop code'}"
        if snapshot.stopped_reason:
            cause += f" ({snapshot.stopped_reason})"
        return _failure(handle, cause)

    container = snapshot.container(container_name)
    if container is None:
        return _failure(
            handle,
            f"{CONTAINER_NOT_FOUND}: {container_name!r}",
            error_type=NamedContainerMissing.error_type,
        )

    if container.exit_code is None:
        reason = container.reason or "no exit code reported"
        return _failure(
            handle, f"container {container_name!r} did not exit: {reason}"
        )
    if container.exit_code == 0:
        return PollDecision(PollAction.SUCCEED, task_handle=handle)
    return _failure(handle, f"command returned exit code {container.exit_code}")


def classify_poll(
    handles: Iterable[TaskHandle],
    response: Optional[Mapping[str, Any]],
    error: Optional[BaseException],
    container_name: str,
    wait_config: WaitConfig,
) -> PollDecision:
    """Classify one describe-tasks round covering every unresolved handle.

    A failing handle stops the round at once; success requires every handle
    to have succeeded.
    """
    handles = tuple(handles)
    if error is not None:
        if is_retryable_query_error(error, wait_config):
            return PollDecision(
                PollAction.RETRY, cause=describe_error(error), pending=handles
            )
        if not isinstance(error, QueryFailed):
            error = QueryFailed(
                f"failed to describe tasks: {describe_error(error)}", cause=error
            )
        return PollDecision(PollAction.ABORT, error=error)

    if response is None:
        return PollDecision(
            PollAction.ABORT, error=QueryFailed("cannot resolve task state")
        )

    records = response.get("tasks") or []
    failures = {f.get("arn"): f.get("reason") for f in response.get("failures") or []}
    pending = []
    causes = []
    for handle in handles:
        matches = [r for r in records if r.get("taskArn") == handle]
        if len(matches) != 1:
            reason = failures.get(handle) or f"{len(matches)} matching records"
            return PollDecision(
                PollAction.ABORT,
                task_handle=handle,
                error=QueryFailed(
                    f"cannot resolve task state for {handle}: {reason}"
                ),
            )
        decision = classify_task(TaskSnapshot.from_record(matches[0]), container_name)
        if decision.action in (PollAction.FAIL, PollAction.ABORT):
            return decision
        if decision.action is PollAction.RETRY:
            pending.append(handle)
            causes.append(decision.cause or handle)

    if pending:
        return PollDecision(
            PollAction.RETRY, cause="; ".join(causes), pending=tuple(pending)
        )
    return PollDecision(PollAction.SUCCEED)


def _failure(
    handle: TaskHandle, cause: str, error_type: str = TaskFailed.error_type
) -> PollDecision:
    return PollDecision(
        PollAction.FAIL, cause=cause, error_type=error_type, task_handle=handle
    )


__all__ = [
    "CONTAINER_NOT_FOUND",
    "ContainerSnapshot",
    "PollAction",
    "PollDecision",
    "TaskSnapshot",
    "classify_poll",
    "classify_task",
]
