"""
Output abstraction for the artifact stream.

The artifact must reach stdout verbatim and in one piece, so writers deal in
bytes and flush after every write. The buffered writer lets the driver be
tested without capturing the process's stdout.
"""

from __future__ import annotations

import sys
from typing import BinaryIO, Protocol


class ArtifactWriter(Protocol):
    """Protocol for artifact output."""

    def write(self, data: bytes) -> None:
        """Write data as a single write, then flush."""
        ...


class StreamOutput:
    """
    Writer for a binary stream (stdout's buffer by default).

    Example:
        out = StreamOutput()
        out.write(b"(module)\\n")

        # Custom stream for testing
        import io
        buffer = io.BytesIO()
        StreamOutput(buffer).write(b"(module)")
        assert buffer.getvalue() == b"(module)"
    """

    def __init__(self, stream: BinaryIO | None = None) -> None:
        """
        Initialize with optional output stream.

        Args:
            stream: Binary output stream (defaults to sys.stdout.buffer)
        """
        self._stream = stream

    @property
    def stream(self) -> BinaryIO:
        if self._stream is not None:
            return self._stream
        return sys.stdout.buffer

    def write(self, data: bytes) -> None:
        stream = self.stream
        stream.write(data)
        stream.flush()


class BufferedOutput:
    """
    Writer that captures every write in memory.

    Example:
        out = BufferedOutput()
        out.write(b"abc")
        assert out.data == b"abc"
        assert out.writes == 1
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def write(self, data: bytes) -> None:
        self._chunks.append(bytes(data))

    @property
    def data(self) -> bytes:
        return b"".join(self._chunks)

    @property
    def writes(self) -> int:
        return len(self._chunks)
