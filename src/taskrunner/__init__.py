"""taskrunner public API surface.

Run an ECS task and wait until it stops, turning the stop code and the exit
code of a named container into a single verdict.
"""

from .runner.api import run_task
from .runner.launcher import launch_task
from .runner.waiter import TaskWaiter
from .shared.results import RunResult, Verdict
from .shared.spec import TaskSpec
from .version import __version__

__all__ = [
    "RunResult",
    "TaskSpec",
    "TaskWaiter",
    "Verdict",
    "launch_task",
    "run_task",
    "__version__",
]
