"""Effective configuration printing for the taskrunner CLI."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from rich.console import Console

from taskrunner.config import deep_merge, load_config_layers

__all__ = ["resolve_config", "run_config_print"]


def _flat(d: Dict[str, Any] | None, p: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in (d or {}).items():
        kk = f"{p}.{k}" if p else str(k)
        if isinstance(v, dict):
            out.update(_flat(v, kk))
        else:
            out[kk] = v
    return out


def resolve_config(
    yaml_path: Optional[Path] = None,
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Merge every layer and record which layer last set each dotted key."""
    merged: Dict[str, Any] = {}
    origin: Dict[str, str] = {}
    for name, layer in load_config_layers(yaml_path=yaml_path):
        deep_merge(merged, layer)
        for key in _flat(layer):
            origin[key] = name
    return _flat(merged), origin


async def run_config_print(console: Console, args: argparse.Namespace) -> int:
    try:
        flat, origin = resolve_config(getattr(args, "config", None))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return 1

    if getattr(args, "json", False):
        out = {
            k: {"value": v, "source": origin.get(k, "defaults")}
            for k, v in flat.items()
        }
        console.print_json(json.dumps(out, default=str))
        return 0
    for k in sorted(flat):
        value = "[dim]unset[/dim]" if flat[k] is None else flat[k]
        console.print(f"{k}: {value}  [dim]({origin.get(k, 'defaults')})[/dim]")
    return 0
