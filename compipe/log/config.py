"""
Immutable logger configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .constants import LogConstants
from .exceptions import InvalidLogLevelError


def resolve_level(level: str | int | bool) -> int | bool:
    """
    Resolve log level from string, numeric value, or boolean.

    Args:
        level: Level name, numeric value, or False to disable logging

    Returns:
        Numeric log level or False to disable logging

    Raises:
        InvalidLogLevelError: If the log level is invalid
    """
    if isinstance(level, bool):
        return False if not level else logging.INFO
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        if level.isnumeric():
            return int(level)
        name = level.lower()
        if name in LogConstants.LEVEL_NAMES:
            return LogConstants.LEVEL_NAMES[name]
    raise InvalidLogLevelError(level)


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable configuration for the driver's loggers.

    Attributes:
        level: Numeric level, or False to disable logging entirely
        micros: Whether timestamps carry sub-second precision
        colors: Whether ANSI colors are allowed (still requires a terminal)
    """

    level: int | bool = logging.WARNING
    micros: bool = False
    colors: bool = True

    @classmethod
    def from_params(
        cls,
        level: str | int | bool,
        micros: bool = False,
        colors: bool = True,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False)
            micros: Whether to show sub-second precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        return cls(
            level=resolve_level(level), micros=bool(micros), colors=bool(colors)
        )

    @classmethod
    def from_config(
        cls, config_dict: dict[str, Any], section: str = "logging"
    ) -> LogConfig:
        """
        Create LogConfig from a configuration dictionary.

        Example:
            log_config = LogConfig.from_config({"logging": {"level": "debug"}})
        """
        current = config_dict.get(section) or {}
        level = current.get("level", LogConstants.DEFAULT_LEVEL)
        micros = current.get("microseconds", current.get("micros", False))
        colors = current.get("colors", True)
        if isinstance(colors, dict):
            colors = colors.get("enabled", True)
        return cls.from_params(level=level, micros=micros, colors=colors)
