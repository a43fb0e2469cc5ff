"""Aggregated shared types and interfaces."""

from taskrunner.shared.events import Event, EventTypes, emit
from taskrunner.shared.results import Diagnostic, RunResult, Verdict
from taskrunner.shared.spec import (
    DEFAULT_MAX_WAIT_SECONDS,
    TaskSpec,
    parse_bool,
    parse_command,
)
from taskrunner.shared.status import NORMAL_STOP_CODE, Outcome, TaskStatus
from taskrunner.shared.type_aliases import (
    ApiResponse,
    Command,
    ErrorPatterns,
    EventCallback,
    EventData,
    TaskHandle,
)

__all__ = [
    "ApiResponse",
    "Command",
    "DEFAULT_MAX_WAIT_SECONDS",
    "Diagnostic",
    "ErrorPatterns",
    "Event",
    "EventCallback",
    "EventData",
    "EventTypes",
    "NORMAL_STOP_CODE",
    "Outcome",
    "RunResult",
    "TaskHandle",
    "TaskSpec",
    "TaskStatus",
    "Verdict",
    "emit",
    "parse_bool",
    "parse_command",
]
