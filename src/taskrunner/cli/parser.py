"""CLI parser builder for taskrunner."""

from __future__ import annotations

import argparse
from pathlib import Path

from taskrunner.version import __version__

__all__ = ["create_parser"]


def _epilog() -> str:
    return (
        "Quick examples:\n"
        "  # Run the image's default command and wait up to 5 minutes\n"
        "  taskrunner run --task-definition app:3 --cluster prod --container worker\n\n"
        "  # Override the command and wait up to 10 minutes\n"
        '  taskrunner run -t app:3 -c prod --container worker \\\n'
        '      --command "manage.py migrate" --max-wait-time 600\n\n'
        "  # Emit NDJSON events and the result object\n"
        "  taskrunner run -t app:3 -c prod --container worker --json\n\n"
        "  # Show the effective configuration\n"
        "  taskrunner config print\n"
    )


def _add_run_args(parser: argparse.ArgumentParser) -> None:
    task = parser.add_argument_group("task")
    task.add_argument(
        "-t",
        "--task-definition",
        dest="task_definition",
        help="Task definition (family:revision or ARN)",
    )
    task.add_argument(
        "-c", "--cluster", dest="ecs_cluster_arn", help="ECS cluster name or ARN"
    )
    task.add_argument(
        "--container", help="Container whose exit code decides the verdict"
    )
    task.add_argument(
        "--command",
        help="Command override for the container (whitespace separated)",
    )
    task.add_argument(
        "--max-wait-time",
        dest="max_wait_time",
        type=int,
        help="Seconds to wait for the task to stop (default: 300)",
    )
    task.add_argument(
        "--no-wait",
        dest="wait_until_completed",
        action="store_false",
        default=None,
        help="Return as soon as the task is started",
    )

    aws = parser.add_argument_group("aws")
    aws.add_argument("--region", help="AWS region (default: SDK resolution)")
    aws.add_argument("--profile", help="AWS shared-credentials profile")

    out = parser.add_argument_group("output")
    out.add_argument(
        "--output",
        choices=["streaming", "json", "quiet"],
        default="streaming",
        help="Output mode (default: streaming)",
    )
    out.add_argument(
        "--json", action="store_true", help="Shorthand for --output json"
    )
    out.add_argument("--debug", action="store_true", help="Verbose console logs")
    out.add_argument("--logs-dir", type=Path, help="Directory for JSONL logs")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskrunner",
        description="Run an ECS task to completion and report its exit status.",
        epilog=_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", type=Path, help="Project config file (default: taskrunner.yaml)"
    )
    subparsers = parser.add_subparsers(dest="command_name")

    run_parser = subparsers.add_parser(
        "run",
        help="Run a task and wait for it to stop",
        epilog=_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_run_args(run_parser)

    config_parser = subparsers.add_parser("config", help="Configuration helpers")
    config_sub = config_parser.add_subparsers(dest="config_command")
    print_parser = config_sub.add_parser("print", help="Print effective config")
    print_parser.add_argument(
        "--json", action="store_true", help="Print as JSON with sources"
    )
    return parser
