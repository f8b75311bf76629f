"""
compipe - run a compiler as a child process and pipe its artifact to stdout.

The compiler reports its result through a side-channel file rather than its
stdout. compipe spawns it, drains its stdout while waiting, propagates its
exit status, and on success copies the artifact file to its own stdout.
"""

from importlib.metadata import PackageNotFoundError, version

from .config import DriverConfig
from .driver import Driver
from .exceptions import (
    ArtifactReadError,
    CompilerFailedError,
    CompipeError,
    ConfigError,
    LaunchError,
    StateError,
    UsageError,
)
from .invocation import Invocation, Outcome, State
from .output import BufferedOutput, StreamOutput
from .retriever import ResultRetriever
from .supervisor import ChildStatus, ProcessSupervisor, StreamDrainer
from .workspace import Workspace

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("compipe")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

__all__ = [
    "__version__",
    # Core
    "Driver",
    "DriverConfig",
    "Invocation",
    "Outcome",
    "State",
    "ProcessSupervisor",
    "StreamDrainer",
    "ChildStatus",
    "ResultRetriever",
    "Workspace",
    # Output
    "BufferedOutput",
    "StreamOutput",
    # Exceptions
    "CompipeError",
    "UsageError",
    "CompilerFailedError",
    "LaunchError",
    "ArtifactReadError",
    "ConfigError",
    "StateError",
]
