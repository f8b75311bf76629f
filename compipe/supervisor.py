"""
Process supervision for the compiler child.

The supervisor starts exactly one child per invocation. The child's stdout is
drained to end-of-stream by a background thread while the supervisor blocks
on the child's termination; a child that fills its stdout pipe with nobody
reading would otherwise stall forever. Stdout content is discarded.

The child's stdin and stderr are inherited at the OS level, so compiler
diagnostics reach the user's terminal unbuffered.
"""

from __future__ import annotations

import signal
import subprocess
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from .exceptions import CompilerFailedError, LaunchError, UsageError
from .invocation import Invocation, State
from .log import LogConfig, Logger, LoggerFactory

# Shell conventions for launch failures
NOT_FOUND = 127
NOT_EXECUTABLE = 126

_CHUNK_SIZE = 64 * 1024


def normalize_returncode(returncode: int) -> tuple[int, int | None]:
    """
    Map a Popen return code to an exit code and the terminating signal.

    Popen reports death by signal N as -N; this becomes 128 + N.

    Returns:
        Tuple of (exit_code, signal number or None)
    """
    if returncode < 0:
        signum = -returncode
        return 128 + signum, signum
    return returncode, None


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


@dataclass(frozen=True)
class ChildStatus:
    """Termination status of a finished child."""

    exit_code: int
    signal: int | None = None
    drained_bytes: int = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def check(self) -> None:
        """
        Raise if the child did not succeed.

        Raises:
            CompilerFailedError: If the exit code is non-zero
        """
        if not self.succeeded:
            context = {}
            if self.signal is not None:
                context["signal"] = _signal_name(self.signal)
            raise CompilerFailedError(self.exit_code, **context)


class StreamDrainer:
    """
    Reads a stream to EOF in a background thread, discarding its content.

    Example:
        drainer = StreamDrainer(proc.stdout)
        drainer.start()
        proc.wait()
        drained = drainer.join()
    """

    def __init__(
        self, stream: IO[bytes], chunk_size: int = _CHUNK_SIZE, name: str = "drain"
    ) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._name = name
        self._thread: threading.Thread | None = None
        self._count = 0
        self._error: OSError | ValueError | None = None

    @property
    def drained_bytes(self) -> int:
        return self._count

    @property
    def error(self) -> OSError | ValueError | None:
        """Error that stopped the drain early, if any."""
        return self._error

    def start(self) -> None:
        if self._thread is not None:
            return  # Already running

        self._thread = threading.Thread(
            target=self._drain, name=self._name, daemon=True
        )
        self._thread.start()

    def join(self) -> int:
        """Wait for end-of-stream and return the number of bytes discarded."""
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        return self._count

    def _drain(self) -> None:
        try:
            while True:
                chunk = self._stream.read(self._chunk_size)
                if not chunk:
                    break
                self._count += len(chunk)
        except (OSError, ValueError) as e:
            self._error = e
        finally:
            self._stream.close()


class ProcessSupervisor:
    """
    Spawns the compiler child and waits for it while draining its stdout.

    Args:
        command: Compiler command; the input path is appended as last argument
        cwd: Working directory for the child (None means the current directory)
        lg: Logger (a disabled logger is used when omitted)
    """

    def __init__(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        lg: Logger | None = None,
    ) -> None:
        if not command:
            raise ValueError("Command must include at least one argument")
        self._command = list(command)
        self._cwd = cwd
        self._lg = lg or LoggerFactory.create("/supervisor", LogConfig(level=False))

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def build_argv(self, input_path: str) -> list[str]:
        return [*self._command, input_path]

    def spawn(self, invocation: Invocation) -> subprocess.Popen[bytes]:
        """
        Start the child for an invocation.

        Raises:
            UsageError: If the invocation has no input path (nothing is spawned)
            LaunchError: If the child could not be started
        """
        if not invocation.input_path:
            raise UsageError("missing input file")

        argv = self.build_argv(invocation.input_path)
        if self._cwd is not None and not self._cwd.is_dir():
            invocation.transition(State.FAILED)
            raise LaunchError(
                "working directory does not exist", exit_code=1, cwd=str(self._cwd)
            )

        try:
            proc = subprocess.Popen(
                argv,
                stdin=None,
                stdout=subprocess.PIPE,
                stderr=None,
                cwd=self._cwd,
            )
        except OSError as e:
            invocation.transition(State.FAILED)
            raise self._launch_error(e) from e

        invocation.process = proc
        invocation.transition(State.RUNNING)
        self._lg.debug("spawned compiler", extra={"pid": proc.pid, "argv": argv})
        return proc

    def _launch_error(self, e: OSError) -> LaunchError:
        name = self._command[0]
        if isinstance(e, FileNotFoundError):
            return LaunchError(f"{name}: command not found", exit_code=NOT_FOUND)
        if isinstance(e, PermissionError):
            return LaunchError(f"{name}: permission denied", exit_code=NOT_EXECUTABLE)
        return LaunchError(f"{name}: cannot launch: {e.strerror or e}", exit_code=1)

    def wait(self, invocation: Invocation) -> ChildStatus:
        """
        Drain the child's stdout while waiting for it to terminate.

        The drain thread is joined before returning, so the pipe has been
        read to end-of-stream and closed.
        """
        proc = invocation.process
        if proc is None or invocation.state is not State.RUNNING:
            raise RuntimeError("invocation has no running child")
        assert proc.stdout is not None  # stdout=PIPE

        drainer = StreamDrainer(proc.stdout, name=f"drain-{proc.pid}")
        drainer.start()
        try:
            returncode = proc.wait()
        except BaseException:
            # Interrupted while waiting: do not leave the child behind
            proc.kill()
            proc.wait()
            drainer.join()
            raise
        drained = drainer.join()

        if drainer.error is not None:
            self._lg.warning(
                "compiler stdout drain stopped early", extra={"error": drainer.error}
            )

        exit_code, signum = normalize_returncode(returncode)
        invocation.exit_code = exit_code
        invocation.transition(State.SUCCEEDED if exit_code == 0 else State.FAILED)

        status = ChildStatus(exit_code=exit_code, signal=signum, drained_bytes=drained)
        self._log_status(proc.pid, status)
        return status

    def _log_status(self, pid: int, status: ChildStatus) -> None:
        extra: dict[str, object] = {
            "pid": pid,
            "exit_code": status.exit_code,
            "drained": status.drained_bytes,
        }
        if status.signal is not None:
            extra["signal"] = _signal_name(status.signal)
            self._lg.warning("compiler terminated by signal", extra=extra)
        else:
            self._lg.debug("compiler exited", extra=extra)

    def run(self, invocation: Invocation) -> ChildStatus:
        """Spawn the child and wait for its termination."""
        self.spawn(invocation)
        return self.wait(invocation)
