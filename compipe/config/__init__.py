"""
Configuration for the compile driver.

Values come from a YAML file (COMPIPE_CONFIG or ./compipe.yaml) overlaid
with COMPIPE_* environment variables.
"""

from .config import DriverConfig, collect_env_overrides, find_config_file
from .constants import (
    CONFIG_ENV_VAR,
    DEFAULT_ARTIFACT,
    DEFAULT_COMMAND,
    DEFAULT_CONFIG_FILENAME,
    ENV_PREFIX,
)

__all__ = [
    "DriverConfig",
    "collect_env_overrides",
    "find_config_file",
    "CONFIG_ENV_VAR",
    "DEFAULT_ARTIFACT",
    "DEFAULT_COMMAND",
    "DEFAULT_CONFIG_FILENAME",
    "ENV_PREFIX",
]
