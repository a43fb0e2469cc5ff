"""ECS API client construction and async dispatch."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Optional, Protocol

import boto3

from taskrunner.config.models import AwsConfig
from taskrunner.shared.type_aliases import ApiResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
THREAD_NAME_PREFIX = "taskrunner-ecs"


class EcsApi(Protocol):
    """The slice of the boto3 ECS client this package depends on."""

    def run_task(self, **kwargs: Any) -> ApiResponse: ...

    def describe_tasks(self, **kwargs: Any) -> ApiResponse: ...


def create_ecs_client(aws_config: AwsConfig | None = None) -> EcsApi:
    """Build a boto3 ECS client from the ambient credential chain."""
    aws_config = aws_config or AwsConfig()
    session = boto3.session.Session(
        profile_name=aws_config.profile, region_name=aws_config.region
    )
    logger.debug(
        "Creating ECS client (region=%s, profile=%s)",
        session.region_name,
        aws_config.profile or "default",
    )
    return session.client("ecs")


class AsyncEcsClient:
    """Run blocking ECS calls on a bounded thread pool.

    boto3 clients are thread-safe, so one instance may serve any number of
    concurrent run-and-wait invocations. A call abandoned by its awaiter
    (query timeout, cancellation) keeps its worker thread until the SDK
    returns; the pool size caps how many such threads can pile up.
    """

    def __init__(
        self,
        client: EcsApi,
        executor: Optional[Executor] = None,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.client = client
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=THREAD_NAME_PREFIX
        )

    async def run_task(self, **kwargs: Any) -> ApiResponse:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            self.executor, lambda: self.client.run_task(**kwargs)
        )

    async def describe_tasks(self, **kwargs: Any) -> ApiResponse:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            self.executor, lambda: self.client.describe_tasks(**kwargs)
        )

    def close(self) -> None:
        """Release the pool if this client created it; in-flight calls finish."""
        if self._owns_executor:
            self.executor.shutdown(wait=False)


__all__ = [
    "DEFAULT_MAX_WORKERS",
    "THREAD_NAME_PREFIX",
    "AsyncEcsClient",
    "EcsApi",
    "create_ecs_client",
]
