"""
Invocation state and structured outcome of a driver run.

An invocation moves through a small state machine:

    IDLE -> RUNNING -> {SUCCEEDED, FAILED}
    SUCCEEDED -> {EMITTED, READ_FAILED}
    IDLE -> FAILED (the child could not be launched)

Every state reached after RUNNING is terminal for the run; there is no retry
or re-entry.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import StateError


class State(Enum):
    """Lifecycle state of an invocation."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EMITTED = "emitted"
    READ_FAILED = "read_failed"


_TRANSITIONS: dict[State, frozenset[State]] = {
    State.IDLE: frozenset({State.RUNNING, State.FAILED}),
    State.RUNNING: frozenset({State.SUCCEEDED, State.FAILED}),
    State.SUCCEEDED: frozenset({State.EMITTED, State.READ_FAILED}),
    State.FAILED: frozenset(),
    State.EMITTED: frozenset(),
    State.READ_FAILED: frozenset(),
}


@dataclass
class Invocation:
    """
    A single run of the compiler child.

    Attributes:
        input_path: Path passed to the child as its final argument
        process: Child process handle, set once spawned
        state: Current lifecycle state
        exit_code: Child exit code, set once it has terminated
    """

    input_path: str
    process: subprocess.Popen[bytes] | None = None
    state: State = State.IDLE
    exit_code: int | None = None
    history: list[State] = field(default_factory=lambda: [State.IDLE])

    def transition(self, target: State) -> None:
        """
        Move to a new state.

        Raises:
            StateError: If the transition is not allowed from the current state
        """
        if target not in _TRANSITIONS[self.state]:
            raise StateError(self.state, target)
        self.state = target
        self.history.append(target)

    @property
    def finished(self) -> bool:
        """True once the invocation reached a terminal state."""
        return not _TRANSITIONS[self.state]


@dataclass(frozen=True)
class Outcome:
    """
    Structured result of a driver run.

    The CLI translates this into real process behaviour: `content` goes to
    stdout, `diagnostic` goes to stderr, and `exit_code` becomes the process
    exit status.
    """

    state: State
    exit_code: int
    content: bytes | None = None
    diagnostic: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def emitted(cls, content: bytes) -> Outcome:
        return cls(State.EMITTED, 0, content=content)

    @classmethod
    def failed(cls, exit_code: int, diagnostic: str | None = None) -> Outcome:
        return cls(State.FAILED, exit_code, diagnostic=diagnostic)

    @classmethod
    def read_failed(cls, diagnostic: str) -> Outcome:
        return cls(State.READ_FAILED, 1, diagnostic=diagnostic)

    def to_dict(self) -> dict[str, Any]:
        """Summary used for log records (content is reduced to its size)."""
        return {
            "state": self.state.value,
            "exit_code": self.exit_code,
            "size": len(self.content) if self.content is not None else None,
            "diagnostic": self.diagnostic,
        }
