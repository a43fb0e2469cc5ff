import pytest

from ecs_fakes import CLUSTER
from taskrunner.config import WaitConfig
from taskrunner.shared import TaskSpec


@pytest.fixture
def fast_wait() -> WaitConfig:
    return WaitConfig(min_delay_seconds=0.01, max_delay_seconds=0.05, jitter=False)


@pytest.fixture
def spec() -> TaskSpec:
    return TaskSpec(
        definition_id="app:3",
        cluster_id=CLUSTER,
        container_name="worker",
        command_override=None,
        max_wait_seconds=60,
    )
