"""Display run results for headless mode."""

from __future__ import annotations

from rich.console import Console

from taskrunner.shared import RunResult

__all__ = ["display_result"]


def _fmt_duration(seconds: float | None) -> str:
    if not seconds:
        return "-"
    if seconds >= 60:
        minutes = int(seconds // 60)
        sec = int(seconds % 60)
        return f"{minutes}m {sec}s"
    return f"{seconds:.0f}s"


def display_result(console: Console, result: RunResult) -> None:
    status = "✓" if result.success else "✗"
    duration = _fmt_duration(result.duration_seconds)
    handles = ", ".join(result.task_handles) or "no task"
    line = f"  {status} {result.spec.definition_id}  {handles}  {duration}"

    console.print("[bold]Summary:[/bold]")
    if result.success:
        console.print(f"{line}  {result.status}", style="green")
        return

    console.print(f"{line}  [red]{result.status}[/red]")
    if result.diagnostic is not None:
        console.print(f"    [red]{result.diagnostic.title}[/red]")
        console.print(f"    {result.diagnostic.detail}")
    if result.status == "timeout":
        console.print(
            "    [dim]the task was left running; stop it from the ECS console "
            "if it should not continue[/dim]"
        )
