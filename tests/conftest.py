"""
Pytest configuration and shared fixtures.

This module provides central pytest configuration, custom markers,
and shared fixtures for the compipe test suite.
"""

import os
import shutil
import sys
import tempfile
import textwrap
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from compipe.config import DriverConfig
from compipe.log import LogConfig

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (spawn real child processes)"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (run the installed CLI as a process)"
    )
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Tests that take >1 second to run")


# =============================================================================
# Shared Fixtures
# =============================================================================

# Every fake compiler starts with this; the input path is sys.argv[1]
_COMPILER_PRELUDE = """\
import os
import signal
import sys

src = sys.argv[1]
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove COMPIPE_* variables so the host environment cannot leak in."""
    for key in list(os.environ):
        if key.startswith("COMPIPE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Provide a temporary directory that is cleaned up after the test.

    Yields:
        Path: Temporary directory path
    """
    temp_path = Path(tempfile.mkdtemp(prefix="compipe-test-"))
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def source_file(temp_dir: Path) -> Path:
    """A source file to hand to the compiler."""
    path = temp_dir / "prog.js"
    path.write_text("let x = 1;\n")
    return path


@pytest.fixture
def make_compiler(temp_dir: Path) -> Callable[..., tuple[str, ...]]:
    """
    Factory for fake compiler scripts.

    The body is Python run with the interpreter under test; it sees the
    input path as `src`. Returns the command to configure.

    Example:
        command = make_compiler('open("output.wat", "wb").write(b"(module)")')
    """
    counter = {"n": 0}

    def _make(body: str) -> tuple[str, ...]:
        counter["n"] += 1
        script = temp_dir / f"fake_compiler_{counter['n']}.py"
        script.write_text(_COMPILER_PRELUDE + textwrap.dedent(body))
        return (sys.executable, str(script))

    return _make


@pytest.fixture
def workdir(temp_dir: Path) -> Path:
    """Working directory the fake compiler runs in."""
    path = temp_dir / "work"
    path.mkdir()
    return path


@pytest.fixture
def driver_config(workdir: Path) -> Callable[..., DriverConfig]:
    """Build a DriverConfig running a given command in workdir."""

    def _config(command: tuple[str, ...], **kwargs) -> DriverConfig:
        kwargs.setdefault("cwd", workdir)
        kwargs.setdefault("log", LogConfig(level=False))
        return DriverConfig(command=command, **kwargs)

    return _config
