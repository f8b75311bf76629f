"""
The compile driver: run the compiler, hand its artifact to stdout.

Driver.run() is the outcome propagator. It maps the child's termination
status and any artifact I/O failure onto a structured Outcome:

    child exits 0, artifact readable   -> EMITTED, exit 0, artifact written
    child exits N != 0                 -> FAILED, exit N, nothing written
    child cannot be launched           -> FAILED, exit 127/126/1
    child exits 0, artifact unreadable -> READ_FAILED, exit 1

The artifact is read if and only if the child succeeded, and written to the
output exactly once.
"""

from __future__ import annotations

from .config import DriverConfig
from .exceptions import (
    ArtifactReadError,
    CompilerFailedError,
    LaunchError,
    UsageError,
)
from .invocation import Invocation, Outcome, State
from .log import LogConfig, Logger, LoggerFactory
from .output import ArtifactWriter, StreamOutput
from .retriever import ResultRetriever
from .supervisor import ProcessSupervisor
from .workspace import Workspace


class Driver:
    """
    Runs one compiler invocation per call to run().

    Example:
        config = DriverConfig.load()
        driver = Driver(config, lg)
        outcome = driver.run("programs/factorial.js")
        sys.exit(outcome.exit_code)

    Args:
        config: Driver configuration
        lg: Root logger (a disabled logger is used when omitted)
    """

    def __init__(self, config: DriverConfig | None = None, lg: Logger | None = None):
        self._config = config or DriverConfig()
        self._lg = lg or LoggerFactory.create("/", LogConfig(level=False))
        self._active = False

    @property
    def config(self) -> DriverConfig:
        return self._config

    def run(
        self, input_path: str | None, output: ArtifactWriter | None = None
    ) -> Outcome:
        """
        Compile input_path and write the artifact to output (stdout by default).

        Raises:
            UsageError: If input_path is missing; no child is spawned
            RuntimeError: If called while another run is active
        """
        if not input_path:
            raise UsageError("missing input file")
        if self._active:
            raise RuntimeError("driver is already running an invocation")

        self._active = True
        try:
            return self._run(input_path, output or StreamOutput())
        finally:
            self._active = False

    def _run(self, input_path: str, output: ArtifactWriter) -> Outcome:
        config = self._config
        lg = LoggerFactory.derive(self._lg, "driver")

        workspace = Workspace(
            config.cwd, config.isolate, LoggerFactory.derive(self._lg, "workspace")
        )
        with workspace as workdir:
            invocation = Invocation(workspace.resolve_input(input_path))
            supervisor = ProcessSupervisor(
                config.command, workdir, LoggerFactory.derive(self._lg, "supervisor")
            )

            try:
                status = supervisor.run(invocation)
                status.check()
            except LaunchError as e:
                lg.debug("compiler launch failed", extra={"error": e})
                return Outcome.failed(e.exit_code, diagnostic=str(e))
            except CompilerFailedError as e:
                lg.debug("compilation failed", extra={"exit_code": e.exit_code})
                return Outcome.failed(e.exit_code)

            retriever = ResultRetriever(
                config.artifact, workdir, LoggerFactory.derive(self._lg, "retriever")
            )
            try:
                content = retriever.retrieve(invocation)
            except ArtifactReadError as e:
                invocation.transition(State.READ_FAILED)
                lg.debug("artifact handoff failed", extra={"path": e.path})
                return Outcome.read_failed(str(e))

        output.write(content)
        invocation.transition(State.EMITTED)

        outcome = Outcome.emitted(content)
        lg.debug("emitted artifact", extra=outcome.to_dict())
        return outcome
