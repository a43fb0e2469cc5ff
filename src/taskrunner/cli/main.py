#!/usr/bin/env python3
"""taskrunner CLI entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Final

from rich.console import Console

from . import config_print, run
from .parser import create_parser

__all__: Final = ["main"]


async def _dispatch(
    console: Console, parser: argparse.ArgumentParser, args: argparse.Namespace
) -> int:
    cmd = (args.command_name or "").strip().lower()
    if cmd == "run":
        return await run.run_command(console, args)
    if cmd == "config" and (args.config_command or "") == "print":
        return await config_print.run_config_print(console, args)
    parser.print_help()
    return 2


def main() -> None:
    """CLI entrypoint."""
    parser = create_parser()
    args = parser.parse_args()
    json_mode = getattr(args, "json", False) or getattr(args, "output", "") == "json"
    console = Console(stderr=json_mode)

    try:
        rc = asyncio.run(_dispatch(console, parser, args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        rc = 130
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
