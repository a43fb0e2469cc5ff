"""Common type aliases shared across taskrunner layers."""

from typing import Any, Callable, Dict, Tuple

TaskHandle = str
Command = Tuple[str, ...]
EventData = Dict[str, Any]
ApiResponse = Dict[str, Any]
ErrorPatterns = Tuple[str, ...]

EventCallback = Callable[[EventData], None]

__all__ = [
    "ApiResponse",
    "Command",
    "ErrorPatterns",
    "EventCallback",
    "EventData",
    "TaskHandle",
]
