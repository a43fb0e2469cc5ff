"""Configuration loading: defaults, YAML files, dotenv, environment, CLI."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import dotenv_values

__all__ = [
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_config_layers",
    "load_dotenv_config",
    "load_env_config",
    "load_global_config",
    "load_yaml_config",
]

logger = logging.getLogger(__name__)

# Environment variable -> (section, key); section None means top level.
_ENV_TO_CONFIG_KEY = {
    "AWS_DEFAULT_REGION": ("aws", "region"),
    "AWS_REGION": ("aws", "region"),
    "AWS_PROFILE": ("aws", "profile"),
    "TASKRUNNER_MAX_WAIT_TIME": ("wait", "max_wait_time"),
    "TASKRUNNER_LOG_LEVEL": ("logging", "level"),
    "TASKRUNNER_LOGS_DIR": (None, "logs_dir"),
}


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place."""
    for key, value in overlay.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = dict(base[key])
            deep_merge(base[key], value)
        else:
            base[key] = value


def load_yaml_config(yaml_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from ``taskrunner.yaml``.

    A missing default file yields an empty dict; an explicitly requested
    file that is missing or malformed raises ``ValueError``.
    """
    path = yaml_path or Path("taskrunner.yaml")
    if not path.exists():
        if yaml_path is not None:
            raise ValueError(f"config file not found: {path}")
        return {}

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (yaml.YAMLError, OSError) as exc:
        raise ValueError(f"failed to read config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"invalid config format (expected mapping): {path}")
    return data


def load_global_config() -> Dict[str, Any]:
    """Load user-level configuration from standard locations."""
    try:
        home = Path.home()
    except (OSError, RuntimeError):
        return {}

    for candidate in (
        home / ".taskrunner" / "config.yaml",
        home / ".config" / "taskrunner" / "config.yaml",
    ):
        try:
            if candidate.exists():
                with candidate.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
                if isinstance(data, dict):
                    return data
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to load %s: %s", candidate, exc)
            continue
    return {}


def load_dotenv_config(dotenv_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load supported variables from a ``.env`` file."""
    path = dotenv_path or Path(".env")
    if not path.exists():
        return {}
    return _from_env_mapping(dotenv_values(path))


def load_env_config() -> Dict[str, Any]:
    """Load supported variables from the current environment."""
    return _from_env_mapping(os.environ)


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return {
        "logs_dir": Path("./logs"),
        "aws": {
            "region": None,
            "profile": None,
        },
        "wait": {
            "max_wait_time": 300,
            "min_delay": 6.0,
            "max_delay": 15.0,
            "exponential_base": 2.0,
            "jitter": True,
            "retry_query_errors": True,
        },
        "logging": {
            "level": "INFO",
        },
        "task": {
            "task_definition": None,
            "ecs_cluster_arn": None,
            "container": None,
            "command": None,
            "max_wait_time": None,
            "wait_until_completed": True,
        },
    }


def load_config_layers(
    cli_args: Optional[Dict[str, Any]] = None,
    yaml_path: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> List[Tuple[str, Dict[str, Any]]]:
    """Return the named configuration layers, lowest precedence first."""
    return [
        ("defaults", get_default_config()),
        ("global", load_global_config()),
        ("project", load_yaml_config(yaml_path)),
        ("dotenv", load_dotenv_config(dotenv_path)),
        ("env", load_env_config()),
        ("cli", _drop_none(cli_args or {})),
    ]


def load_config(
    cli_args: Optional[Dict[str, Any]] = None,
    yaml_path: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load configuration from defaults, files, environment, and CLI."""
    merged: Dict[str, Any] = {}
    for _, layer in load_config_layers(cli_args, yaml_path, dotenv_path):
        deep_merge(merged, layer)
    return merged


def _from_env_mapping(values) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for env_key, (section, key) in _ENV_TO_CONFIG_KEY.items():
        value = values.get(env_key)
        if value is None or value == "":
            continue
        target = config.setdefault(section, {}) if section else config
        target[key] = value
    return config


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            nested = _drop_none(value)
            if nested:
                out[key] = nested
        elif value is not None:
            out[key] = value
    return out
