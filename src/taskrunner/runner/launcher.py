"""Task launcher: one run-task request per task specification."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from taskrunner.client.ecs import AsyncEcsClient
from taskrunner.exceptions import LaunchFailed, ValidationError
from taskrunner.runner.runner_utils import API_ERRORS, describe_error
from taskrunner.shared import TaskHandle, TaskSpec

logger = logging.getLogger(__name__)

STARTED_BY = "taskrunner-aws-ecs"


def validate_spec(spec: TaskSpec) -> None:
    """Reject specs the orchestration API could not act on."""
    if not spec.definition_id.strip():
        raise ValidationError("task_definition must not be empty")
    if not spec.cluster_id.strip():
        raise ValidationError("ecs_cluster_arn must not be empty")
    if spec.command_override and not spec.container_name.strip():
        raise ValidationError("container is required when a command is given")
    if spec.max_wait_seconds <= 0:
        raise ValidationError(
            f"max_wait_time must be positive, got {spec.max_wait_seconds}"
        )


def build_run_task_request(spec: TaskSpec) -> Dict[str, Any]:
    """Translate a spec into ``RunTask`` keyword arguments."""
    request: Dict[str, Any] = {
        "taskDefinition": spec.definition_id,
        "cluster": spec.cluster_id,
        "count": 1,
        "startedBy": STARTED_BY,
    }
    if spec.command_override:
        request["overrides"] = {
            "containerOverrides": [
                {
                    "name": spec.container_name,
                    "command": list(spec.command_override),
                }
            ]
        }
    return request


async def launch_task(client: AsyncEcsClient, spec: TaskSpec) -> List[TaskHandle]:
    """Start one task instance and return its handles (never empty)."""
    validate_spec(spec)
    request = build_run_task_request(spec)
    logger.info(
        "Running task %s on %s (command override: %s)",
        spec.definition_id,
        spec.cluster_id,
        " ".join(spec.command_override) if spec.command_override else "none",
    )
    try:
        response = await client.run_task(**request)
    except API_ERRORS as exc:
        raise LaunchFailed(
            f"failed to run task: {describe_error(exc)}", cause=exc
        ) from exc

    handles = [t["taskArn"] for t in response.get("tasks") or [] if t.get("taskArn")]
    if not handles:
        reasons = [
            f"{f.get('arn') or spec.definition_id}: {f.get('reason', 'unknown')}"
            + (f" ({f['detail']})" if f.get("detail") else "")
            for f in response.get("failures") or []
        ]
        detail = "; ".join(reasons) if reasons else "no tasks were started"
        raise LaunchFailed(f"failed to run task: {detail}")

    logger.info("Started tasks: %s", handles)
    return handles


__all__ = ["STARTED_BY", "build_run_task_request", "launch_task", "validate_spec"]
