"""Task specification shared across layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .type_aliases import Command

DEFAULT_MAX_WAIT_SECONDS = 300


@dataclass(frozen=True)
class TaskSpec:
    """What to run, where, and how long to wait for it."""

    definition_id: str  # "family:revision" or a task definition ARN
    cluster_id: str
    container_name: str
    command_override: Optional[Command] = None  # None runs the image default
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS
    wait_until_completed: bool = True

    @classmethod
    def from_request(cls, request: Mapping[str, Any]) -> "TaskSpec":
        """Build a spec from the resource-style request mapping.

        ``command`` is a whitespace-delimited string; blank means no override.
        ``max_wait_time`` is in seconds and defaults to 300 when absent.
        """
        max_wait = request.get("max_wait_time")
        wait_flag = request.get("wait_until_completed")
        return cls(
            definition_id=str(request.get("task_definition") or ""),
            cluster_id=str(request.get("ecs_cluster_arn") or ""),
            container_name=str(request.get("container") or ""),
            command_override=parse_command(request.get("command")),
            max_wait_seconds=(
                DEFAULT_MAX_WAIT_SECONDS if max_wait is None else int(max_wait)
            ),
            wait_until_completed=True if wait_flag is None else parse_bool(wait_flag),
        )

    def to_request(self) -> dict[str, Any]:
        """Echo the spec back in request form (durable state)."""
        return {
            "task_definition": self.definition_id,
            "ecs_cluster_arn": self.cluster_id,
            "container": self.container_name,
            "command": " ".join(self.command_override or ()),
            "max_wait_time": self.max_wait_seconds,
            "wait_until_completed": self.wait_until_completed,
        }


def parse_command(command: Any) -> Optional[Command]:
    """Split a command string (or sequence) into tokens; empty yields None."""
    if command is None:
        return None
    if isinstance(command, str):
        tokens = tuple(command.split())
    else:
        tokens = tuple(str(tok) for tok in command)
    return tokens or None


def parse_bool(value: Any) -> bool:
    """Interpret a flag value; strings other than 1/true/yes/on are false."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


__all__ = ["DEFAULT_MAX_WAIT_SECONDS", "TaskSpec", "parse_bool", "parse_command"]
