"""Configuration models, loading, and defaults."""

from taskrunner.config.models import AwsConfig, WaitConfig
from taskrunner.config.defaults import (
    deep_merge,
    get_default_config,
    load_config,
    load_config_layers,
    load_dotenv_config,
    load_env_config,
    load_global_config,
    load_yaml_config,
)

__all__ = [
    "AwsConfig",
    "WaitConfig",
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_config_layers",
    "load_dotenv_config",
    "load_env_config",
    "load_global_config",
    "load_yaml_config",
]
