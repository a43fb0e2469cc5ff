"""The ``run`` subcommand: launch a task, wait, report."""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError
from rich.console import Console

from taskrunner.client import create_ecs_client
from taskrunner.config import AwsConfig, WaitConfig, load_config
from taskrunner.runner import run_task
from taskrunner.shared import EventData, EventTypes, RunResult, TaskSpec
from taskrunner.utils.structured_logging import setup_structured_logging

from .results_display import display_result

__all__ = ["run_command"]

_TASK_KEYS = (
    "task_definition",
    "ecs_cluster_arn",
    "container",
    "command",
    "max_wait_time",
    "wait_until_completed",
)


def _make_run_id() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"run_{ts}_{uuid.uuid4().hex[:8]}"


def _exit_code(result: RunResult) -> int:
    """0 on success, 130 when canceled, 1 for invalid input, 3 otherwise."""
    if result.success:
        return 0
    if result.status == "canceled":
        return 130
    if result.error_type == "validation":
        return 1
    return 3


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "logs_dir": getattr(args, "logs_dir", None),
        "aws": {
            "region": getattr(args, "region", None),
            "profile": getattr(args, "profile", None),
        },
        "task": {key: getattr(args, key, None) for key in _TASK_KEYS},
    }


def build_task_spec(config: Dict[str, Any]) -> TaskSpec:
    """Assemble the task request from the ``task`` section and wait defaults."""
    request = dict(config.get("task") or {})
    if request.get("max_wait_time") is None:
        request["max_wait_time"] = config.get("wait", {}).get("max_wait_time")
    return TaskSpec.from_request(request)


def _streaming_printer(console: Console):
    def _print(event: EventData) -> None:
        etype = event.get("type", "")
        data = event.get("data", {})
        ts = str(event.get("timestamp", ""))[11:19]
        if etype == EventTypes.TASK_LAUNCHING:
            console.print(
                f"[dim]{ts}[/dim] launching {data.get('task_definition')} "
                f"on {data.get('cluster')}"
            )
        elif etype == EventTypes.TASK_LAUNCHED:
            handles = ", ".join(data.get("handles", []))
            console.print(f"[dim]{ts}[/dim] started {handles}")
        elif etype == EventTypes.TASK_POLLED and data.get("action") == "retry":
            console.print(f"[dim]{ts}[/dim] waiting: {data.get('detail')}")
        elif etype == EventTypes.TASK_QUERY_RETRY:
            console.print(
                f"[yellow]{ts} status query failed, retrying:[/yellow] "
                f"{data.get('error')}"
            )
        elif etype == EventTypes.TASK_SUCCEEDED:
            console.print(f"[green]{ts} task completed successfully[/green]")
        elif etype == EventTypes.TASK_FAILED:
            console.print(f"[red]{ts} task failed:[/red] {data.get('cause')}")
        elif etype == EventTypes.TASK_TIMEOUT:
            limit = data.get("max_wait_seconds")
            console.print(f"[red]{ts} timed out after {limit}s[/red]")
        elif etype == EventTypes.TASK_CANCELED:
            console.print(f"[yellow]{ts} wait canceled[/yellow]")

    return _print


def _json_printer(event: EventData) -> None:
    print(json.dumps(event, separators=(",", ":")))


def _install_signal_handlers(cancel_event: asyncio.Event) -> None:
    loop = asyncio.get_event_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on Windows event loops
            continue


async def run_command(console: Console, args: argparse.Namespace) -> int:
    if getattr(args, "json", False):
        args.output = "json"
    mode = getattr(args, "output", "streaming")

    try:
        config = load_config(
            cli_args=_cli_overrides(args), yaml_path=getattr(args, "config", None)
        )
        spec = build_task_spec(config)
        wait_config = WaitConfig.from_dict(config.get("wait", {}))
    except (ValueError, TypeError) as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        return 1

    run_id = _make_run_id()
    log_path = setup_structured_logging(
        Path(config.get("logs_dir") or "./logs"),
        run_id,
        level=str(config.get("logging", {}).get("level", "INFO")),
        debug=bool(getattr(args, "debug", False)),
        quiet=mode != "streaming",
    )

    try:
        client = create_ecs_client(AwsConfig.from_dict(config.get("aws", {})))
    except BotoCoreError as exc:
        console.print(f"[red]Unable to create the ECS client: {exc}[/red]")
        return 1

    callback: Optional[Any] = None
    if mode == "streaming":
        callback = _streaming_printer(console)
    elif mode == "json":
        callback = _json_printer

    cancel_event = asyncio.Event()
    _install_signal_handlers(cancel_event)
    result = await run_task(
        client,
        spec,
        wait_config=wait_config,
        event_callback=callback,
        cancel_event=cancel_event,
    )

    if mode == "json":
        payload = result.to_dict()
        payload["run_id"] = run_id
        print(json.dumps({"type": "result", "data": payload}, default=str))
    elif mode == "streaming":
        display_result(console, result)
        console.print(f"    [dim]log:[/dim] {log_path}")
    return _exit_code(result)
