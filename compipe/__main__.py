"""Allow running the driver as `python -m compipe`."""

from .cli import entry_point

entry_point()
