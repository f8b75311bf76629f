"""
Log formatter for the driver.

Produces lines of the form:

    [12:34:56,789] [I] message        [key:value] [1234] [/supervisor]

with optional ANSI colors when writing to a terminal.
"""

import collections
import logging
from typing import Any

from .config import LogConfig
from .constants import LogConstants
from .logger import EXTRA_ATTR


def _extra_fields(record: logging.LogRecord) -> list[tuple[str, Any]]:
    """Return the record's extra fields in display order."""
    extra = getattr(record, EXTRA_ATTR, None)
    if not extra:
        return []
    keys = list(extra.keys())
    if not isinstance(extra, collections.OrderedDict):
        keys.sort()
    return [(key, extra[key]) for key in keys]


def _render_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return f"{value.__class__.__name__}: {value}"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class LogFormatter(logging.Formatter):
    """
    Formatter rendering message, structured fields, pid and logger name.

    Args:
        config: Logger configuration (micros and colors are read from it)
        use_colors: Whether the target stream supports ANSI colors
    """

    def __init__(self, config: LogConfig, use_colors: bool = False) -> None:
        super().__init__(LogConstants.DEFAULT_FORMAT)
        self._config = config
        self._colors = config.colors and use_colors

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, "%H:%M:%S")
        if self._config.micros:
            s += f",{int((record.created % 1) * 1000000):06d}"
        else:
            s += f",{int(record.msecs):03d}"
        return s

    def format(self, record: logging.LogRecord) -> str:
        head = super().format(record)
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        first_line, sep, rest = head.partition("\n")
        line = first_line + " " * max(1, rule - len(first_line))

        fields = " ".join(
            f"[{key}:{_render_value(value)}]" for key, value in _extra_fields(record)
        )
        if fields:
            line += fields + " "
        meta = f"[{record.process}] [{record.name}]"

        if self._colors:
            col = LogConstants.LEVEL_COLORS.get(record.levelno, "\x1b[38") + "m"
            gray = LogConstants.GRAY + "m"
            line = col + line + gray + meta + LogConstants.RESET
        else:
            line += meta

        return line + sep + rest
