import asyncio
from typing import Any, Dict, List

import pytest
from botocore.exceptions import ClientError

from ecs_fakes import CLUSTER, FakeEcsClient, describe, make_task, stopped
from taskrunner.client import AsyncEcsClient
from taskrunner.config import WaitConfig
from taskrunner.exceptions import (
    QueryFailed,
    ValidationError,
    WaitCanceled,
    WaitTimeout,
)
from taskrunner.runner.waiter import TaskWaiter
from taskrunner.shared import EventTypes, Outcome


def _waiter(fake: FakeEcsClient, config: WaitConfig, **kwargs: Any) -> TaskWaiter:
    return TaskWaiter(AsyncEcsClient(fake), config, **kwargs)


@pytest.mark.asyncio
async def test_pending_running_then_clean_exit_succeeds(fast_wait) -> None:
    fake = FakeEcsClient(
        [
            describe(make_task("PENDING")),
            describe(make_task("RUNNING")),
            describe(stopped(0)),
        ]
    )
    verdict = await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 60)

    assert verdict.outcome is Outcome.SUCCESS
    assert len(fake.describe_calls) == 3
    assert fake.describe_calls[0] == {"cluster": CLUSTER, "tasks": ["task-123"]}


@pytest.mark.asyncio
@pytest.mark.parametrize("progress_polls", [0, 1, 4])
async def test_verdict_depends_only_on_terminal_snapshot(
    fast_wait, progress_polls: int
) -> None:
    script = [describe(make_task("RUNNING")) for _ in range(progress_polls)]
    fake = FakeEcsClient(script + [describe(stopped(0))])
    verdict = await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 60)
    assert verdict.succeeded
    assert len(fake.describe_calls) == progress_polls + 1


@pytest.mark.asyncio
async def test_non_zero_exit_code_is_a_failure_verdict(fast_wait) -> None:
    fake = FakeEcsClient([describe(stopped(137))])
    verdict = await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 60)

    assert verdict.outcome is Outcome.FAILURE
    assert "137" in verdict.cause
    assert verdict.task_handle == "task-123"


@pytest.mark.asyncio
async def test_abnormal_stop_is_a_failure_verdict(fast_wait) -> None:
    fake = FakeEcsClient(
        [
            describe(make_task("RUNNING")),
            describe(stopped(0, stop_code="SpotInterruption")),
        ]
    )
    verdict = await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 60)
    assert verdict.outcome is Outcome.FAILURE
    assert "SpotInterruption" in verdict.cause


@pytest.mark.asyncio
async def test_timeout_names_unresolved_handles(fast_wait) -> None:
    fake = FakeEcsClient([describe(make_task("RUNNING"))])
    loop = asyncio.get_event_loop()
    started = loop.time()

    with pytest.raises(WaitTimeout) as excinfo:
        await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 0.3)

    elapsed = loop.time() - started
    assert excinfo.value.handles == ["task-123"]
    assert elapsed >= 0.3
    # one poll interval plus scheduling slack
    assert elapsed <= 0.3 + fast_wait.max_delay_seconds + 0.5


@pytest.mark.asyncio
async def test_transient_query_error_is_retried(fast_wait) -> None:
    throttled = ClientError(
        {"Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"}},
        "DescribeTasks",
    )
    events: List[Dict[str, Any]] = []
    fake = FakeEcsClient([throttled, describe(stopped(0))])
    waiter = _waiter(fake, fast_wait, event_callback=events.append)

    verdict = await waiter.wait(["task-123"], CLUSTER, "worker", 60)

    assert verdict.succeeded
    assert [e["type"] for e in events] == [
        EventTypes.TASK_QUERY_RETRY,
        EventTypes.TASK_POLLED,
        EventTypes.TASK_SUCCEEDED,
    ]


@pytest.mark.asyncio
async def test_non_transient_query_error_raises(fast_wait) -> None:
    denied = ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "not allowed"}},
        "DescribeTasks",
    )
    fake = FakeEcsClient([denied])
    with pytest.raises(QueryFailed, match="AccessDeniedException"):
        await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 60)
    assert len(fake.describe_calls) == 1


@pytest.mark.asyncio
async def test_missing_task_record_raises_without_retry(fast_wait) -> None:
    missing = describe(failures=[{"arn": "task-123", "reason": "MISSING"}])
    fake = FakeEcsClient([missing])
    with pytest.raises(QueryFailed, match="MISSING"):
        await _waiter(fake, fast_wait).wait(["task-123"], CLUSTER, "worker", 60)
    assert len(fake.describe_calls) == 1


@pytest.mark.asyncio
async def test_cancel_event_interrupts_sleep() -> None:
    slow = WaitConfig(min_delay_seconds=5, max_delay_seconds=5, jitter=False)
    cancel = asyncio.Event()
    fake = FakeEcsClient([describe(make_task("RUNNING"))])
    waiter = _waiter(fake, slow, cancel_event=cancel)
    loop = asyncio.get_event_loop()
    loop.call_later(0.1, cancel.set)
    started = loop.time()

    with pytest.raises(WaitCanceled) as excinfo:
        await waiter.wait(["task-123"], CLUSTER, "worker", 60)

    assert loop.time() - started < 2
    assert excinfo.value.handles == ["task-123"]


@pytest.mark.asyncio
async def test_cancel_event_interrupts_inflight_query() -> None:
    config = WaitConfig(min_delay_seconds=0.01, max_delay_seconds=5, jitter=False)
    cancel = asyncio.Event()
    fake = FakeEcsClient([describe(make_task("RUNNING"))], describe_delay=0.5)
    waiter = _waiter(fake, config, cancel_event=cancel)
    loop = asyncio.get_event_loop()
    loop.call_later(0.05, cancel.set)
    started = loop.time()

    with pytest.raises(WaitCanceled):
        await waiter.wait(["task-123"], CLUSTER, "worker", 60)
    assert loop.time() - started < 0.4


@pytest.mark.asyncio
async def test_slow_query_counts_as_transient() -> None:
    config = WaitConfig(
        min_delay_seconds=0.01,
        max_delay_seconds=0.05,
        jitter=False,
        query_timeout_seconds=0.05,
    )
    fake = FakeEcsClient([describe(make_task("RUNNING"))], describe_delay=0.2)
    with pytest.raises(WaitTimeout):
        await _waiter(fake, config).wait(["task-123"], CLUSTER, "worker", 0.2)


@pytest.mark.asyncio
async def test_empty_handle_set_is_rejected(fast_wait) -> None:
    with pytest.raises(ValidationError):
        await _waiter(FakeEcsClient(), fast_wait).wait([], CLUSTER, "worker", 60)


def test_delay_grows_and_is_capped() -> None:
    waiter = TaskWaiter(AsyncEcsClient(FakeEcsClient()), WaitConfig(jitter=False))
    assert [waiter.next_delay(n) for n in (1, 2, 3, 10)] == [6.0, 12.0, 15.0, 15.0]


def test_jittered_delay_stays_within_bounds() -> None:
    waiter = TaskWaiter(AsyncEcsClient(FakeEcsClient()), WaitConfig(jitter=True))
    for attempt in range(1, 8):
        assert 6.0 <= waiter.next_delay(attempt) <= 15.0
