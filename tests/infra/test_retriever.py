"""Tests for ResultRetriever."""

from pathlib import Path

import pytest

from compipe.exceptions import ArtifactReadError, StateError
from compipe.invocation import Invocation, State
from compipe.retriever import ResultRetriever


def _succeeded() -> Invocation:
    invocation = Invocation("prog.js")
    invocation.transition(State.RUNNING)
    invocation.transition(State.SUCCEEDED)
    return invocation


@pytest.mark.unit
class TestResultRetriever:
    def test_reads_bytes_verbatim(self, workdir):
        content = "(module\n  ;; café\r\n)\x00\xff".encode("utf-8") + b"\x00\xfe"
        (workdir / "output.wat").write_bytes(content)

        assert ResultRetriever("output.wat", workdir).retrieve(_succeeded()) == content

    def test_relative_path_resolves_against_cwd(self, workdir):
        assert ResultRetriever("output.wat", workdir).path == workdir / "output.wat"

    def test_relative_path_defaults_to_current_dir(self, workdir, monkeypatch):
        monkeypatch.chdir(workdir)
        assert ResultRetriever("output.wat").path == Path.cwd() / "output.wat"

    def test_absolute_path_kept(self, workdir, temp_dir):
        artifact = temp_dir / "elsewhere.wat"
        artifact.write_bytes(b"(module)")
        retriever = ResultRetriever(artifact, workdir)

        assert retriever.path == artifact
        assert retriever.retrieve(_succeeded()) == b"(module)"

    def test_empty_artifact(self, workdir):
        (workdir / "output.wat").write_bytes(b"")
        assert ResultRetriever("output.wat", workdir).retrieve(_succeeded()) == b""

    def test_missing_artifact(self, workdir):
        with pytest.raises(ArtifactReadError) as exc_info:
            ResultRetriever("output.wat", workdir).retrieve(_succeeded())

        assert exc_info.value.path == str(workdir / "output.wat")
        assert "No such file" in exc_info.value.reason

    def test_directory_is_unreadable(self, workdir):
        (workdir / "output.wat").mkdir()
        with pytest.raises(ArtifactReadError):
            ResultRetriever("output.wat", workdir).retrieve(_succeeded())

    @pytest.mark.parametrize(
        "path", [[], [State.RUNNING], [State.RUNNING, State.FAILED]]
    )
    def test_refuses_unsuccessful_invocation(self, workdir, path):
        """The artifact is never read unless the child succeeded."""
        (workdir / "output.wat").write_bytes(b"stale")
        invocation = Invocation("prog.js")
        for state in path:
            invocation.transition(state)

        with pytest.raises(StateError):
            ResultRetriever("output.wat", workdir).retrieve(invocation)
