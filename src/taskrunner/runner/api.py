"""Public entry point for running a task and waiting for its verdict."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from taskrunner.client.ecs import AsyncEcsClient, EcsApi
from taskrunner.config.models import WaitConfig
from taskrunner.exceptions import TaskRunnerError
from taskrunner.runner.launcher import launch_task
from taskrunner.runner.waiter import TaskWaiter
from taskrunner.shared import (
    EventCallback,
    EventTypes,
    RunResult,
    TaskHandle,
    TaskSpec,
    Verdict,
    emit,
)

logger = logging.getLogger(__name__)


async def run_task(
    client: EcsApi | AsyncEcsClient,
    spec: TaskSpec,
    *,
    wait_config: Optional[WaitConfig] = None,
    event_callback: Optional[EventCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> RunResult:
    """Launch ``spec`` and, unless disabled, wait for its verdict.

    Errors from the launcher and the waiter are folded into the returned
    ``RunResult`` (with a ``Diagnostic``); only ``asyncio.CancelledError``
    escapes.
    """
    wrapped = not isinstance(client, AsyncEcsClient)
    if wrapped:
        client = AsyncEcsClient(client)
    started_at = datetime.now(timezone.utc).isoformat()
    start = time.monotonic()
    handles: List[TaskHandle] = []
    verdict: Optional[Verdict] = None

    try:
        emit(
            event_callback,
            EventTypes.TASK_LAUNCHING,
            {"task_definition": spec.definition_id, "cluster": spec.cluster_id},
        )
        handles = await launch_task(client, spec)
        emit(event_callback, EventTypes.TASK_LAUNCHED, {"handles": list(handles)})

        if not spec.wait_until_completed:
            result = RunResult(
                success=True, spec=spec, status="launched", task_handles=handles
            )
        else:
            waiter = TaskWaiter(
                client,
                wait_config,
                event_callback=event_callback,
                cancel_event=cancel_event,
            )
            verdict = await waiter.wait(
                handles, spec.cluster_id, spec.container_name, spec.max_wait_seconds
            )
            verdict.raise_for_failure()
            result = RunResult(
                success=True,
                spec=spec,
                status="succeeded",
                task_handles=handles,
                verdict=verdict,
            )
    except TaskRunnerError as exc:
        logger.error("Task run failed (%s): %s", exc.error_type, exc)
        result = RunResult.from_error(spec, exc, handles)
        result.verdict = verdict
    finally:
        if wrapped:
            client.close()

    result.started_at = started_at
    result.completed_at = datetime.now(timezone.utc).isoformat()
    result.duration_seconds = time.monotonic() - start
    return result


__all__ = ["run_task"]
