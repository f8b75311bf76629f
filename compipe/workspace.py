"""
Working directory selection for an invocation.

By default the compiler runs in the configured directory (or the current
one) and writes its artifact to a fixed, shared path there. Concurrent runs
in the same directory race on that file. With isolation enabled every
invocation gets a private temporary directory that is removed afterwards.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from types import TracebackType

from .log import LogConfig, Logger, LoggerFactory


class Workspace:
    """
    Context manager yielding the compiler's working directory.

    Example:
        with Workspace(cwd=None, isolate=True) as workdir:
            supervisor = ProcessSupervisor(command, cwd=workdir)
            ...

    Args:
        cwd: Configured working directory (None means the current directory)
        isolate: Use a per-invocation temporary directory
        lg: Logger (a disabled logger is used when omitted)
    """

    def __init__(
        self,
        cwd: Path | None = None,
        isolate: bool = False,
        lg: Logger | None = None,
    ) -> None:
        self._cwd = cwd
        self._isolate = isolate
        self._lg = lg or LoggerFactory.create("/workspace", LogConfig(level=False))
        self._tmp: tempfile.TemporaryDirectory[str] | None = None
        self._path: Path | None = None

    @property
    def isolated(self) -> bool:
        return self._isolate

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("workspace is not active")
        return self._path

    def resolve_input(self, input_path: str) -> str:
        """
        Return the input path as the child should see it.

        The path is passed through unchanged when the child shares the
        driver's working directory; otherwise relative paths are made
        absolute against the driver's current directory.
        """
        if not self._isolate and self._cwd is None:
            return input_path
        if os.path.isabs(input_path):
            return input_path
        return str(Path.cwd() / input_path)

    def __enter__(self) -> Path:
        if self._isolate:
            self._tmp = tempfile.TemporaryDirectory(prefix="compipe-")
            self._path = Path(self._tmp.name)
            self._lg.debug("created isolated workspace", extra={"path": self._tmp.name})
        else:
            self._path = self._cwd if self._cwd is not None else Path.cwd()
        return self._path

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._tmp is not None:
            self._tmp.cleanup()
            self._lg.trace("removed isolated workspace", extra={"path": self._tmp.name})
            self._tmp = None
        self._path = None
