"""Completion waiter: poll task status until a verdict or the deadline."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Iterable, Optional

from taskrunner.client.ecs import AsyncEcsClient
from taskrunner.config.models import WaitConfig
from taskrunner.exceptions import (
    QueryFailed,
    ValidationError,
    WaitCanceled,
    WaitTimeout,
)
from taskrunner.runner.classifier import PollAction, PollDecision, classify_poll
from taskrunner.runner.runner_utils import API_ERRORS, describe_error
from taskrunner.shared import EventCallback, EventTypes, TaskHandle, Verdict, emit

logger = logging.getLogger(__name__)


class TaskWaiter:
    """Bounded polling loop over ``describe_tasks``.

    The waiter owns no state beyond one ``wait`` call: the deadline, the
    attempt counter and the handles still unresolved.
    """

    def __init__(
        self,
        client: AsyncEcsClient,
        wait_config: Optional[WaitConfig] = None,
        *,
        event_callback: Optional[EventCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.client = client
        self.config = wait_config or WaitConfig()
        self.event_callback = event_callback
        self.cancel_event = cancel_event or asyncio.Event()

    def next_delay(self, attempt: int) -> float:
        """Delay before poll ``attempt + 1``, capped at ``max_delay_seconds``."""
        cfg = self.config
        grown = cfg.min_delay_seconds * (cfg.exponential_base ** max(attempt - 1, 0))
        capped = min(grown, cfg.max_delay_seconds)
        if cfg.jitter and capped > cfg.min_delay_seconds:
            return random.uniform(cfg.min_delay_seconds, capped)
        return capped

    async def wait(
        self,
        handles: Iterable[TaskHandle],
        cluster_id: str,
        container_name: str,
        max_wait_seconds: float,
    ) -> Verdict:
        """Block until every handle is terminal; return the single verdict.

        Raises ``WaitTimeout`` when the deadline passes first, ``WaitCanceled``
        when the cancel event fires, and ``QueryFailed`` when task state
        cannot be resolved.
        """
        all_handles = tuple(handles)
        if not all_handles:
            raise ValidationError("at least one task handle is required")

        loop = asyncio.get_event_loop()
        deadline = loop.time() + max_wait_seconds
        unresolved = all_handles
        attempt = 0
        logger.info(
            "Waiting up to %ss for tasks: %s", max_wait_seconds, list(unresolved)
        )

        while True:
            attempt += 1
            response, error = await self._query(cluster_id, unresolved)
            decision = classify_poll(
                unresolved, response, error, container_name, self.config
            )
            self._report(attempt, decision, error)

            if decision.action is PollAction.ABORT:
                raise decision.error or QueryFailed("cannot resolve task state")
            if decision.action is PollAction.SUCCEED:
                logger.info("Tasks completed successfully: %s", list(all_handles))
                emit(
                    self.event_callback,
                    EventTypes.TASK_SUCCEEDED,
                    {"handles": list(all_handles), "attempts": attempt},
                )
                return Verdict.success(all_handles)
            if decision.action is PollAction.FAIL:
                logger.warning(
                    "Task %s failed: %s", decision.task_handle, decision.cause
                )
                emit(
                    self.event_callback,
                    EventTypes.TASK_FAILED,
                    {"cause": decision.cause, "error_type": decision.error_type},
                    task_handle=decision.task_handle,
                )
                return Verdict.failure(
                    decision.cause or "task failed",
                    task_handle=decision.task_handle,
                    error_type=decision.error_type or "task_failed",
                    handles=all_handles,
                )

            unresolved = decision.pending or unresolved
            remaining = deadline - loop.time()
            if remaining <= 0:
                self._on_timeout(unresolved, max_wait_seconds)
            await self._pause(min(self.next_delay(attempt), remaining), unresolved)

    async def _query(self, cluster_id: str, handles: tuple) -> tuple[Any, Any]:
        """Describe ``handles``; return ``(response, error)``, never both."""
        try:
            response = await self._guarded(
                self.client.describe_tasks(cluster=cluster_id, tasks=list(handles)),
                self.config.query_timeout,
                handles,
            )
        except API_ERRORS as exc:
            return None, exc
        except asyncio.TimeoutError as exc:
            return None, QueryFailed(
                f"describe_tasks timed out after {self.config.query_timeout:g}s",
                cause=exc,
                transient=True,
            )
        return response, None

    async def _guarded(
        self, awaitable: Awaitable[Any], timeout: float, handles: tuple
    ) -> Any:
        """Await ``awaitable`` unless the cancel event or ``timeout`` fires first."""
        work = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(self.cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, watcher}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            watcher.cancel()
            if not work.done():
                # Only the awaiting future is canceled; the worker thread
                # runs the SDK call to completion.
                work.cancel()
        if work in done:
            return work.result()
        if self.cancel_event.is_set():
            self._on_cancel(handles)
        raise asyncio.TimeoutError()

    async def _pause(self, delay: float, handles: tuple) -> None:
        if self.cancel_event.is_set():
            self._on_cancel(handles)
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=max(delay, 0))
        except asyncio.TimeoutError:
            return
        self._on_cancel(handles)

    def _report(
        self, attempt: int, decision: PollDecision, error: Optional[BaseException]
    ) -> None:
        if error is not None and decision.action is PollAction.RETRY:
            logger.warning(
                "Transient error describing tasks (attempt %s): %s",
                attempt,
                describe_error(error),
            )
            emit(
                self.event_callback,
                EventTypes.TASK_QUERY_RETRY,
                {"attempt": attempt, "error": describe_error(error)},
            )
            return
        logger.debug("Poll %s: %s %s", attempt, decision.action.value, decision.cause)
        emit(
            self.event_callback,
            EventTypes.TASK_POLLED,
            {
                "attempt": attempt,
                "action": decision.action.value,
                "detail": decision.cause,
                "pending": list(decision.pending),
            },
        )

    def _on_timeout(self, handles: tuple, max_wait_seconds: float) -> None:
        # The remote task keeps running; nothing here stops it.
        logger.warning(
            "Gave up waiting for tasks %s after %ss; they are left running",
            list(handles),
            max_wait_seconds,
        )
        emit(
            self.event_callback,
            EventTypes.TASK_TIMEOUT,
            {"handles": list(handles), "max_wait_seconds": max_wait_seconds},
        )
        raise WaitTimeout(handles, max_wait_seconds)

    def _on_cancel(self, handles: tuple) -> None:
        logger.info("Wait canceled for tasks: %s", list(handles))
        emit(self.event_callback, EventTypes.TASK_CANCELED, {"handles": list(handles)})
        raise WaitCanceled(handles)


__all__ = ["TaskWaiter"]
