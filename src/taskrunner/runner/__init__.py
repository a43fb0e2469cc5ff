"""Task launcher and completion waiter."""

from taskrunner.runner.api import run_task
from taskrunner.runner.classifier import (
    PollAction,
    PollDecision,
    TaskSnapshot,
    classify_poll,
    classify_task,
)
from taskrunner.runner.launcher import build_run_task_request, launch_task
from taskrunner.runner.waiter import TaskWaiter

__all__ = [
    "PollAction",
    "PollDecision",
    "TaskSnapshot",
    "TaskWaiter",
    "build_run_task_request",
    "classify_poll",
    "classify_task",
    "launch_task",
    "run_task",
]
