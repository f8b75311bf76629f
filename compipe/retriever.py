"""
Retrieval of the compiler's side-channel artifact.

The compiler writes its result to a well-known path in its working directory
instead of streaming it. The retriever reads that file once the compiler has
exited successfully; the exit-code-then-read ordering is the only guarantee
that the file is complete.
"""

from __future__ import annotations

from pathlib import Path

from .exceptions import ArtifactReadError, StateError
from .invocation import Invocation, State
from .log import LogConfig, Logger, LoggerFactory


class ResultRetriever:
    """
    Reads the artifact file written by a successful compiler run.

    Args:
        artifact: Artifact path; relative paths resolve against cwd
        cwd: Directory the compiler ran in (None means the current directory)
        lg: Logger (a disabled logger is used when omitted)
    """

    def __init__(
        self,
        artifact: str | Path,
        cwd: Path | None = None,
        lg: Logger | None = None,
    ) -> None:
        self._artifact = Path(artifact)
        self._cwd = cwd
        self._lg = lg or LoggerFactory.create("/retriever", LogConfig(level=False))

    @property
    def path(self) -> Path:
        """Absolute location of the artifact."""
        if self._artifact.is_absolute():
            return self._artifact
        return (self._cwd or Path.cwd()) / self._artifact

    def retrieve(self, invocation: Invocation) -> bytes:
        """
        Read the full artifact content as bytes.

        Only valid for an invocation whose child exited with status 0; the
        content is returned verbatim with no decoding.

        Raises:
            StateError: If the invocation has not succeeded
            ArtifactReadError: If the file is missing or unreadable
        """
        if invocation.state is not State.SUCCEEDED:
            raise StateError(invocation.state, State.EMITTED)

        path = self.path
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ArtifactReadError(str(path), e.strerror or str(e)) from e

        self._lg.debug("read artifact", extra={"path": str(path), "size": len(content)})
        return content
