"""Event data structures and constants shared across the system."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .type_aliases import EventCallback, EventData


@dataclass
class Event:
    """Base event structure for all taskrunner events."""

    type: str  # e.g., "task.launched", "task.polled"
    timestamp: str  # ISO format timestamp with timezone
    data: EventData
    task_handle: Optional[str] = None

    def to_dict(self) -> EventData:
        """Convert event to dictionary for JSON serialization."""
        result = {
            "type": self.type,
            "timestamp": self.timestamp,
            "data": self.data,
        }
        if self.task_handle:
            result["task_handle"] = self.task_handle
        return result


class EventTypes:
    """Standard event types emitted while running a task."""

    TASK_LAUNCHING = "task.launching"
    TASK_LAUNCHED = "task.launched"
    TASK_POLLED = "task.polled"
    TASK_QUERY_RETRY = "task.query_retry"
    TASK_SUCCEEDED = "task.succeeded"
    TASK_FAILED = "task.failed"
    TASK_TIMEOUT = "task.timeout"
    TASK_CANCELED = "task.canceled"


def emit(
    callback: Optional[EventCallback],
    event_type: str,
    data: EventData,
    task_handle: Optional[str] = None,
) -> None:
    """Build an event and hand it to ``callback`` when one is registered."""
    if callback is None:
        return
    event = Event(
        type=event_type,
        timestamp=datetime.now(timezone.utc).isoformat(),
        data=data,
        task_handle=task_handle,
    )
    callback(event.to_dict())


__all__ = ["Event", "EventTypes", "emit"]
