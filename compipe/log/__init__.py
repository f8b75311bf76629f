"""
Logging for the compile driver.

Extends Python's standard logging with:
- A custom TRACE level for detailed debugging
- Structured extra fields rendered as [key:value]
- Optional colored output when stderr is a terminal
- Derived loggers sharing the root logger's handlers

Every handler writes to stderr so that stdout carries only the artifact.
Use level False (or "false") to disable logging completely.
"""

import logging

from .config import LogConfig, resolve_level
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .logger import Logger

logging.addLevelName(LogConstants.CUSTOM_LEVELS["TRACE"], "TRACE")


def create_root_lg(
    level: str | int | bool = LogConstants.DEFAULT_LEVEL,
    micros: bool = False,
    colors: bool = True,
) -> Logger:
    """
    Create a root logger with the specified configuration.

    Example:
        >>> lg = create_root_lg("debug")
    """
    config = LogConfig.from_params(level, micros=micros, colors=colors)
    return LoggerFactory.create_root(config)


def derive_lg(lg: Logger, tags: str | list[str]) -> Logger:
    """Derive a logger with tags from a parent logger."""
    return LoggerFactory.derive(lg, tags)


__all__ = [
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogConstants",
    "LogError",
    "InvalidLogLevelError",
    "resolve_level",
    "create_root_lg",
    "derive_lg",
]
