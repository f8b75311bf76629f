"""
Factory for creating and configuring loggers.

All handlers write to stderr: stdout belongs to the compiler artifact.
"""

import collections
import logging
import sys
from typing import Any, TextIO

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # Closed stream
        return False


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(
        config: LogConfig,
        stream: TextIO | None = None,
        logger_class: type[Logger] = Logger,
    ) -> Logger:
        """
        Create a root logger with the specified configuration.

        Example:
            >>> config = LogConfig.from_params(level="debug")
            >>> lg = LoggerFactory.create_root(config)
            >>> lg.debug("spawning compiler", extra={"pid": 1234})
            [12:34:56,789] [D] spawning compiler     [pid:1234] [4321] [/]
        """
        return LoggerFactory.create("/", config, stream, logger_class)

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        stream: TextIO | None = None,
        logger_class: type[Logger] = Logger,
        extra: dict[str, Any] | collections.OrderedDict | None = None,
    ) -> Logger:
        """
        Create a logger writing to stderr (or the given stream).

        Args:
            name: Logger name
            config: Logger configuration
            stream: Output stream, defaults to the current sys.stderr
            logger_class: Logger class to use
            extra: Pre-populated extra fields to include in all log records

        Returns:
            Configured logger instance
        """
        if stream is None:
            stream = sys.stderr

        lg = logger_class(name, config, extra)
        handler = logging.StreamHandler(stream)
        if config.level is not False:
            handler.setLevel(config.level)
        handler.setFormatter(LogFormatter(config, use_colors=_is_tty(stream)))
        lg.addHandler(handler)
        lg.propagate = False

        lg.trace(
            "created logger",
            extra={"level": logging.getLevelName(lg.level), "micros": config.micros},
        )
        return lg

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a logger that delegates to the root's handlers.

        Examples:
            >>> derived = LoggerFactory.derive(root, "supervisor")
            >>> derived.name
            '/supervisor'
            >>> LoggerFactory.derive(root, ["driver", "retriever"]).name
            '/driver/retriever'
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)

        root = parent._root_logger if parent._root_logger else parent
        lg = parent.__class__(name, parent.config, parent.extra)
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False
        return lg
