from dataclasses import replace
from typing import Any, Dict, List

import pytest
from botocore.exceptions import ClientError

from ecs_fakes import FakeEcsClient, describe, make_task, stopped
from taskrunner.runner import run_task
from taskrunner.shared import EventTypes, TaskSpec, parse_command


@pytest.mark.asyncio
async def test_successful_run_reports_handles_and_state(spec, fast_wait) -> None:
    fake = FakeEcsClient(
        [
            describe(make_task("PENDING")),
            describe(make_task("RUNNING")),
            describe(stopped(0)),
        ]
    )
    events: List[Dict[str, Any]] = []

    result = await run_task(
        fake, spec, wait_config=fast_wait, event_callback=events.append
    )

    assert result.success is True
    assert result.status == "succeeded"
    assert result.task_handles == ["task-123"]
    assert result.verdict is not None and result.verdict.succeeded
    assert result.diagnostic is None
    assert result.duration_seconds is not None
    assert result.to_dict()["state"]["task_definition"] == "app:3"
    assert events[0]["type"] == EventTypes.TASK_LAUNCHING
    assert events[1]["type"] == EventTypes.TASK_LAUNCHED
    assert events[-1]["type"] == EventTypes.TASK_SUCCEEDED


@pytest.mark.asyncio
async def test_exit_code_failure_becomes_diagnostic(spec, fast_wait) -> None:
    fake = FakeEcsClient([describe(stopped(137))])

    result = await run_task(fake, spec, wait_config=fast_wait)

    assert result.success is False
    assert result.status == "failed"
    assert result.error_type == "task_failed"
    assert result.verdict is not None and not result.verdict.succeeded
    assert result.diagnostic.title == "failed to wait for task task-123"
    assert "137" in result.diagnostic.detail


@pytest.mark.asyncio
async def test_missing_container_is_reported_distinctly(spec, fast_wait) -> None:
    fake = FakeEcsClient([describe(stopped(0, container="other"))])
    result = await run_task(fake, spec, wait_config=fast_wait)
    assert result.status == "failed"
    assert result.error_type == "container_missing"


@pytest.mark.asyncio
async def test_launch_failure_skips_waiting(spec, fast_wait) -> None:
    error = ClientError(
        {"Error": {"Code": "ClusterNotFoundException", "Message": "Not found."}},
        "RunTask",
    )
    fake = FakeEcsClient(run_error=error)

    result = await run_task(fake, spec, wait_config=fast_wait)

    assert result.status == "error"
    assert result.error_type == "launch"
    assert result.diagnostic.title == "failed to run task"
    assert fake.describe_calls == []


@pytest.mark.asyncio
async def test_timeout_leaves_status_timeout(spec, fast_wait) -> None:
    fake = FakeEcsClient([describe(make_task("RUNNING"))])
    result = await run_task(
        fake, replace(spec, max_wait_seconds=0.1), wait_config=fast_wait
    )
    assert result.status == "timeout"
    assert result.diagnostic.title == "failed to wait for task task-123"


@pytest.mark.asyncio
async def test_no_wait_returns_after_launch(spec, fast_wait) -> None:
    fake = FakeEcsClient()
    result = await run_task(
        fake, replace(spec, wait_until_completed=False), wait_config=fast_wait
    )
    assert result.success is True
    assert result.status == "launched"
    assert fake.describe_calls == []


@pytest.mark.asyncio
async def test_command_override_reaches_run_task(spec: TaskSpec, fast_wait) -> None:
    fake = FakeEcsClient([describe(stopped(0))])
    await run_task(
        fake,
        replace(spec, command_override=parse_command("echo hello world")),
        wait_config=fast_wait,
    )
    override = fake.run_calls[0]["overrides"]["containerOverrides"][0]
    assert override == {"name": "worker", "command": ["echo", "hello", "world"]}


@pytest.mark.asyncio
async def test_invalid_spec_is_reported_not_raised(spec, fast_wait) -> None:
    result = await run_task(
        FakeEcsClient(), replace(spec, definition_id=""), wait_config=fast_wait
    )
    assert result.status == "error"
    assert result.error_type == "validation"
    assert result.diagnostic.title == "invalid task specification"
