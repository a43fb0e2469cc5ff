"""Orchestration API client layer."""

from taskrunner.client.ecs import AsyncEcsClient, EcsApi, create_ecs_client

__all__ = ["AsyncEcsClient", "EcsApi", "create_ecs_client"]
