"""Tests for git and HTTP acquisition (subprocess and network are faked)."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import httpx
import pytest

from docsrag.acquisition import ops
from docsrag.acquisition.ops import (
    Acquirer,
    repository_name,
    validate_name,
    validate_subdirectory,
)
from docsrag.core.errors import AcquisitionError, ErrorCode, InvalidArgumentError


class FakeGit:
    """Records git invocations; 'clone' creates the target with a .git marker."""

    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, command: list[str], *, cwd: Path, **kwargs: Any) -> Any:
        self.calls.append((command, Path(cwd)))
        if self.returncode == 0 and command[1] == "clone":
            (Path(cwd) / command[-1] / ".git").mkdir(parents=True)
        return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    git = FakeGit()
    monkeypatch.setattr(ops.subprocess, "run", git)
    return git


class TestNames:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/org/project.git", "project"),
            ("https://github.com/org/project", "project"),
            ("https://github.com/org/project/", "project"),
            ("git@github.com:org/project.git", "project"),
            ("git@host:project.git", "project"),
        ],
    )
    def test_repository_name(self, url: str, expected: str) -> None:
        assert repository_name(url) == expected

    @pytest.mark.parametrize("name", ["", "  ", ".hidden", "a/b", "a\\b", ".."])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(InvalidArgumentError):
            validate_name(name)

    def test_valid_name(self) -> None:
        assert validate_name("my-docs") == "my-docs"

    @pytest.mark.parametrize("subdirectory", ["/abs", "../up", "a/../../b", " "])
    def test_invalid_subdirectory(self, subdirectory: str) -> None:
        with pytest.raises(InvalidArgumentError):
            validate_subdirectory(subdirectory)

    def test_subdirectory_normalized(self) -> None:
        assert validate_subdirectory("docs/guide/") == "docs/guide"


class TestCloneOrUpdate:
    def test_clones_new_repository(self, tmp_path: Path, fake_git: FakeGit) -> None:
        collection_id = Acquirer(tmp_path).clone_or_update("https://h/org/proj.git")

        assert collection_id == "proj"
        assert fake_git.calls == [(["git", "clone", "https://h/org/proj.git", "proj"], tmp_path)]

    def test_name_overrides_id(self, tmp_path: Path, fake_git: FakeGit) -> None:
        collection_id = Acquirer(tmp_path).clone_or_update("https://h/org/proj.git", name="mine")

        assert collection_id == "mine"
        assert fake_git.calls[0][0][-1] == "mine"

    def test_existing_repository_is_pulled(self, tmp_path: Path, fake_git: FakeGit) -> None:
        (tmp_path / "proj" / ".git").mkdir(parents=True)

        Acquirer(tmp_path).clone_or_update("https://h/org/proj.git")

        assert fake_git.calls == [(["git", "pull"], tmp_path / "proj")]

    def test_subdirectory_uses_sparse_checkout(self, tmp_path: Path, fake_git: FakeGit) -> None:
        Acquirer(tmp_path).clone_or_update("https://h/org/proj.git", subdirectory="docs")

        assert [call[0] for call in fake_git.calls] == [
            ["git", "clone", "--filter=blob:none", "--sparse", "https://h/org/proj.git", "proj"],
            ["git", "sparse-checkout", "set", "docs"],
        ]
        assert fake_git.calls[1][1] == tmp_path / "proj"

    def test_existing_non_repository_rejected(self, tmp_path: Path, fake_git: FakeGit) -> None:
        (tmp_path / "proj").mkdir()

        with pytest.raises(InvalidArgumentError):
            Acquirer(tmp_path).clone_or_update("https://h/org/proj.git")
        assert fake_git.calls == []

    def test_empty_url_rejected(self, tmp_path: Path, fake_git: FakeGit) -> None:
        with pytest.raises(InvalidArgumentError):
            Acquirer(tmp_path).clone_or_update("")

    def test_nonzero_exit_carries_stderr(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            ops.subprocess, "run", FakeGit(returncode=128, stderr="fatal: repository not found\n")
        )

        with pytest.raises(AcquisitionError) as exc_info:
            Acquirer(tmp_path).clone_or_update("https://h/org/gone.git")
        assert exc_info.value.code == ErrorCode.ACQUISITION_COMMAND_FAILED
        assert "repository not found" in exc_info.value.message

    def test_timeout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def slow(command: list[str], **kwargs: Any) -> Any:
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr(ops.subprocess, "run", slow)

        with pytest.raises(AcquisitionError) as exc_info:
            Acquirer(tmp_path, git_timeout_sec=5).clone_or_update("https://h/org/big.git")
        assert "timed out after 5s" in exc_info.value.message

    def test_git_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def missing(command: list[str], **kwargs: Any) -> Any:
            raise FileNotFoundError("git")

        monkeypatch.setattr(ops.subprocess, "run", missing)

        with pytest.raises(AcquisitionError) as exc_info:
            Acquirer(tmp_path).clone_or_update("https://h/org/proj.git")
        assert "git executable not found" in exc_info.value.message


class TestDownload:
    def _acquirer(self, root: Path, handler: Any) -> Acquirer:
        return Acquirer(root, http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_writes_index_file(self, tmp_path: Path) -> None:
        acquirer = self._acquirer(tmp_path, lambda request: httpx.Response(200, text="hello"))

        collection_id = acquirer.download("https://example.com/file.txt", "guide")

        assert collection_id == "guide"
        assert (tmp_path / "guide" / "index.txt").read_text() == "hello"
        assert [p.name for p in (tmp_path / "guide").iterdir()] == ["index.txt"]

    def test_overwrites_existing(self, tmp_path: Path) -> None:
        (tmp_path / "guide").mkdir()
        (tmp_path / "guide" / "index.txt").write_text("old")
        acquirer = self._acquirer(tmp_path, lambda request: httpx.Response(200, text="new"))

        acquirer.download("https://example.com/file.txt", "guide")

        assert (tmp_path / "guide" / "index.txt").read_text() == "new"

    def test_http_error_status(self, tmp_path: Path) -> None:
        acquirer = self._acquirer(tmp_path, lambda request: httpx.Response(404))

        with pytest.raises(AcquisitionError) as exc_info:
            acquirer.download("https://example.com/missing.txt", "guide")
        assert exc_info.value.code == ErrorCode.ACQUISITION_DOWNLOAD_FAILED
        assert "HTTP 404" in exc_info.value.message
        assert not (tmp_path / "guide").exists()

    def test_transport_error(self, tmp_path: Path) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AcquisitionError):
            self._acquirer(tmp_path, refuse).download("https://example.com/x", "guide")
        assert not (tmp_path / "guide").exists()

    def test_failed_download_leaves_name_free_for_clone(
        self, tmp_path: Path, fake_git: FakeGit
    ) -> None:
        """A failed download does not block a later clone under the same name."""
        acquirer = self._acquirer(tmp_path, lambda request: httpx.Response(404))
        with pytest.raises(AcquisitionError):
            acquirer.download("https://example.com/missing.txt", "guide")

        assert acquirer.clone_or_update("https://example.com/org/guide.git") == "guide"

    def test_failed_overwrite_keeps_existing_content(self, tmp_path: Path) -> None:
        (tmp_path / "guide").mkdir()
        (tmp_path / "guide" / "index.txt").write_text("old")
        acquirer = self._acquirer(tmp_path, lambda request: httpx.Response(500))

        with pytest.raises(AcquisitionError):
            acquirer.download("https://example.com/file.txt", "guide")

        assert (tmp_path / "guide" / "index.txt").read_text() == "old"

    @pytest.mark.parametrize("name", ["", ".dot", "a/b"])
    def test_invalid_document_name(self, tmp_path: Path, name: str) -> None:
        acquirer = self._acquirer(tmp_path, lambda request: httpx.Response(200, text="x"))

        with pytest.raises(InvalidArgumentError):
            acquirer.download("https://example.com/x", name)
