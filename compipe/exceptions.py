"""
Exception hierarchy for the compile driver.

Every failure the driver can report derives from CompipeError, so callers can
catch all driver errors with a single except clause. The CLI is the only layer
that turns these exceptions into process exit codes.
"""

from typing import Any


class CompipeError(Exception):
    """
    Base exception for all driver errors.

    Example:
        try:
            outcome = driver.run("prog.js")
        except CompipeError as e:
            lg.error("driver failed", extra={"error": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class UsageError(CompipeError):
    """
    Raised when the driver is invoked without its required input path.

    Detected before any child process is spawned.
    """

    pass


class CompilerFailedError(CompipeError):
    """
    Raised when the compiler child terminates with a non-zero status.

    The exit code is propagated unchanged as the driver's own exit code.
    """

    def __init__(self, exit_code: int, **context: Any) -> None:
        self.exit_code = exit_code
        super().__init__(f"compiler exited with status {exit_code}", **context)


class LaunchError(CompipeError):
    """
    Raised when the compiler child cannot be spawned at all.

    Examples:
        - Executable not found (exit code 127)
        - Executable not runnable (exit code 126)
    """

    def __init__(self, message: str, exit_code: int, **context: Any) -> None:
        self.exit_code = exit_code
        super().__init__(message, **context)


class ArtifactReadError(CompipeError):
    """
    Raised when the compiler reported success but its artifact cannot be read.

    This means the handoff protocol broke, as opposed to the compilation
    itself failing.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read artifact {path}: {reason}")


class ConfigError(CompipeError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Invalid configuration value type
    """

    pass


class StateError(CompipeError):
    """Raised on an illegal invocation state transition."""

    def __init__(self, current: Any, target: Any) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"illegal transition {current.value} -> {target.value}"
        )
