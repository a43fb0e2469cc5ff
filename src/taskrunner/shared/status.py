"""Task status enumerations shared across layers."""

from enum import Enum


class TaskStatus(Enum):
    """Lifecycle states reported by ECS for a task (``lastStatus``)."""

    PROVISIONING = "PROVISIONING"
    PENDING = "PENDING"
    ACTIVATING = "ACTIVATING"
    RUNNING = "RUNNING"
    DEACTIVATING = "DEACTIVATING"
    STOPPING = "STOPPING"
    DEPROVISIONING = "DEPROVISIONING"
    STOPPED = "STOPPED"

    @property
    def is_terminal(self) -> bool:
        return self is TaskStatus.STOPPED


class Outcome(Enum):
    """Final verdict of a waited task."""

    SUCCESS = "success"
    FAILURE = "failure"


# The only stop code meaning the task ended because its essential container
# exited on its own.
NORMAL_STOP_CODE = "EssentialContainerExited"


__all__ = ["NORMAL_STOP_CODE", "Outcome", "TaskStatus"]
