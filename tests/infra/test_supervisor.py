"""
Tests for ProcessSupervisor and StreamDrainer.

Tests key features including:
- Exit code propagation and signal normalization
- Launch failures (missing and non-executable compilers)
- Concurrent draining of large stdout volumes
- Stderr passthrough
"""

import io
import os
import signal
import sys
from unittest.mock import patch

import pytest

from compipe.exceptions import CompilerFailedError, LaunchError, UsageError
from compipe.invocation import Invocation, State
from compipe.supervisor import (
    NOT_EXECUTABLE,
    NOT_FOUND,
    ChildStatus,
    ProcessSupervisor,
    StreamDrainer,
    normalize_returncode,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")


# =============================================================================
# Helpers
# =============================================================================


@pytest.mark.unit
class TestNormalizeReturncode:
    """Test mapping of Popen return codes."""

    @pytest.mark.parametrize("code", [0, 1, 2, 42, 255])
    def test_plain_codes_unchanged(self, code):
        assert normalize_returncode(code) == (code, None)

    def test_signal_death_becomes_128_plus_n(self):
        assert normalize_returncode(-9) == (137, 9)
        assert normalize_returncode(-15) == (143, 15)


@pytest.mark.unit
class TestChildStatus:
    """Test ChildStatus.check()."""

    def test_success_does_not_raise(self):
        status = ChildStatus(exit_code=0)
        assert status.succeeded
        status.check()

    def test_failure_raises_with_code(self):
        with pytest.raises(CompilerFailedError) as exc_info:
            ChildStatus(exit_code=4).check()
        assert exc_info.value.exit_code == 4

    def test_signal_failure_names_signal(self):
        with pytest.raises(CompilerFailedError) as exc_info:
            ChildStatus(exit_code=137, signal=9).check()
        assert exc_info.value.context == {"signal": "SIGKILL"}


@pytest.mark.unit
class TestStreamDrainer:
    """Test StreamDrainer on in-memory streams."""

    def test_drains_to_eof_and_counts(self):
        stream = io.BytesIO(b"x" * 200_000)
        drainer = StreamDrainer(stream, chunk_size=4096)
        drainer.start()

        assert drainer.join() == 200_000
        assert drainer.drained_bytes == 200_000
        assert drainer.error is None
        assert stream.closed

    def test_empty_stream(self):
        drainer = StreamDrainer(io.BytesIO(b""))
        drainer.start()
        assert drainer.join() == 0

    def test_join_without_start(self):
        assert StreamDrainer(io.BytesIO(b"abc")).join() == 0

    def test_records_read_error(self):
        stream = io.BytesIO(b"abc")
        stream.close()
        drainer = StreamDrainer(stream)
        drainer.start()
        drainer.join()
        assert isinstance(drainer.error, ValueError)


# =============================================================================
# ProcessSupervisor with real children
# =============================================================================


@pytest.mark.unit
class TestSupervisorConstruction:
    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            ProcessSupervisor([])

    def test_build_argv_appends_input(self):
        supervisor = ProcessSupervisor(["cargo", "run", "--quiet"])
        assert supervisor.build_argv("prog.js") == [
            "cargo",
            "run",
            "--quiet",
            "prog.js",
        ]

    def test_missing_input_never_spawns(self):
        supervisor = ProcessSupervisor(["cargo", "run"])
        invocation = Invocation("")

        with patch("compipe.supervisor.subprocess.Popen") as popen:
            with pytest.raises(UsageError):
                supervisor.run(invocation)

        popen.assert_not_called()
        assert invocation.state is State.IDLE

    def test_wait_requires_running_child(self):
        with pytest.raises(RuntimeError):
            ProcessSupervisor(["cargo"]).wait(Invocation("prog.js"))


@pytest.mark.integration
class TestSupervisorRun:
    """Test ProcessSupervisor.run() against fake compilers."""

    def test_success(self, make_compiler, workdir, source_file):
        command = make_compiler("sys.exit(0)")
        invocation = Invocation(str(source_file))

        status = ProcessSupervisor(command, workdir).run(invocation)

        assert status == ChildStatus(exit_code=0, signal=None, drained_bytes=0)
        assert invocation.state is State.SUCCEEDED
        assert invocation.exit_code == 0
        assert invocation.process is not None

    @pytest.mark.parametrize("code", [1, 2, 101])
    def test_nonzero_exit_propagated(self, make_compiler, workdir, code):
        command = make_compiler(f"sys.exit({code})")
        invocation = Invocation("prog.js")

        status = ProcessSupervisor(command, workdir).run(invocation)

        assert status.exit_code == code
        assert status.signal is None
        assert invocation.state is State.FAILED

    def test_input_path_is_last_argument(self, make_compiler, workdir):
        command = make_compiler(
            """
            open("argv.txt", "w").write("\\n".join(sys.argv[1:]))
            """
        )
        ProcessSupervisor(command, workdir).run(Invocation("some/prog.js"))

        assert (workdir / "argv.txt").read_text() == "some/prog.js"

    def test_runs_in_working_directory(self, make_compiler, workdir):
        command = make_compiler('open("cwd.txt", "w").write(os.getcwd())')
        ProcessSupervisor(command, workdir).run(Invocation("prog.js"))

        assert os.path.samefile((workdir / "cwd.txt").read_text(), workdir)

    @posix_only
    def test_signal_death_is_failure(self, make_compiler, workdir):
        command = make_compiler("os.kill(os.getpid(), signal.SIGKILL)")
        invocation = Invocation("prog.js")

        status = ProcessSupervisor(command, workdir).run(invocation)

        assert status.exit_code == 128 + signal.SIGKILL
        assert status.signal == signal.SIGKILL
        assert invocation.state is State.FAILED

    @pytest.mark.slow
    def test_large_stdout_is_drained(self, make_compiler, workdir):
        """A child flooding stdout must not deadlock the supervisor."""
        command = make_compiler(
            """
            chunk = b"Compiling... " * 1024
            for _ in range(1024):
                sys.stdout.buffer.write(chunk)
            sys.stdout.flush()
            """
        )
        status = ProcessSupervisor(command, workdir).run(Invocation("prog.js"))

        assert status.exit_code == 0
        assert status.drained_bytes == len(b"Compiling... ") * 1024 * 1024

    def test_stderr_passes_through(self, make_compiler, workdir, capfd):
        command = make_compiler(
            """
            sys.stderr.write("warning: unused variable\\n")
            sys.stdout.write("Successfully wrote output\\n")
            """
        )
        ProcessSupervisor(command, workdir).run(Invocation("prog.js"))

        captured = capfd.readouterr()
        assert "warning: unused variable" in captured.err
        assert captured.out == ""


@pytest.mark.integration
class TestSupervisorLaunchFailures:
    """Test launch failures are mapped to shell-style exit codes."""

    def test_missing_executable(self, temp_dir):
        invocation = Invocation("prog.js")
        supervisor = ProcessSupervisor([str(temp_dir / "no-such-compiler")])

        with pytest.raises(LaunchError) as exc_info:
            supervisor.run(invocation)

        assert exc_info.value.exit_code == NOT_FOUND
        assert "command not found" in str(exc_info.value)
        assert invocation.state is State.FAILED

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_non_executable(self, temp_dir):
        script = temp_dir / "compiler.sh"
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(0o644)
        invocation = Invocation("prog.js")

        with pytest.raises(LaunchError) as exc_info:
            ProcessSupervisor([str(script)]).run(invocation)

        assert exc_info.value.exit_code == NOT_EXECUTABLE
        assert invocation.state is State.FAILED

    def test_missing_working_directory(self, temp_dir):
        invocation = Invocation("prog.js")
        supervisor = ProcessSupervisor([sys.executable], cwd=temp_dir / "gone")

        with patch("compipe.supervisor.subprocess.Popen") as popen:
            with pytest.raises(LaunchError) as exc_info:
                supervisor.run(invocation)

        popen.assert_not_called()
        assert exc_info.value.exit_code == 1
        assert invocation.state is State.FAILED
