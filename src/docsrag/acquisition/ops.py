"""Content acquisition - git clone/pull and HTTP download into the storage root.

Outcome is success or AcquisitionError; transferred content is not inspected.
"""

from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path, PurePosixPath

import httpx
import structlog

from docsrag.config.constants import GIT_MARKER, RESERVED_PREFIX
from docsrag.core.errors import AcquisitionError, InvalidArgumentError

log = structlog.get_logger(__name__)


def repository_name(url: str) -> str:
    """Collection id derived from a repository URL.

    Examples:
        https://github.com/org/project.git -> project
        git@github.com:org/project.git -> project
    """
    tail = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return tail.removesuffix(".git")


def validate_name(name: str, argument: str = "name") -> str:
    """Collection names become top-level directory names."""
    if not name or not name.strip():
        raise InvalidArgumentError.missing(argument)
    if name.startswith(RESERVED_PREFIX):
        raise InvalidArgumentError.invalid(argument, name, "must not start with '.'")
    if "/" in name or "\\" in name or name in ("..",):
        raise InvalidArgumentError.invalid(argument, name, "must not contain path separators")
    return name


def validate_subdirectory(subdirectory: str) -> str:
    path = PurePosixPath(subdirectory.strip())
    if not subdirectory.strip() or path.is_absolute() or ".." in path.parts:
        raise InvalidArgumentError.invalid(
            "subdirectory", subdirectory, "must be a relative path inside the repository"
        )
    return path.as_posix()


class Acquirer:
    """Fetches collections into docs_path."""

    def __init__(
        self,
        docs_path: Path,
        *,
        index_filename: str = "index.txt",
        git_timeout_sec: float = 600.0,
        download_timeout_sec: float = 60.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._docs_path = docs_path
        self._index_filename = index_filename
        self._git_timeout = git_timeout_sec
        self._download_timeout = download_timeout_sec
        self._http_client = http_client

    # =========================================================================
    # Git
    # =========================================================================

    def clone_or_update(
        self,
        url: str,
        subdirectory: str | None = None,
        name: str | None = None,
    ) -> str:
        """Clone url into docs_path/<name>, or pull if it is already there.

        With subdirectory, the working tree is limited to that path via a
        sparse checkout; the ``.git`` marker stays at the top level.

        Returns the collection id.
        """
        if not url or not url.strip():
            raise InvalidArgumentError.missing("repository_url")
        collection_id = validate_name(name or repository_name(url), "name")
        sparse = validate_subdirectory(subdirectory) if subdirectory else None
        target = self._docs_path / collection_id

        self._docs_path.mkdir(parents=True, exist_ok=True)

        if target.exists():
            if not (target / GIT_MARKER).is_dir():
                raise InvalidArgumentError.invalid(
                    "name", collection_id, f"{target} exists and is not a git repository"
                )
            log.info("acquisition.git_pull", collection=collection_id)
            self._run_git(["pull"], cwd=target)
        elif sparse:
            log.info("acquisition.git_clone", collection=collection_id, subdirectory=sparse)
            self._run_git(
                ["clone", "--filter=blob:none", "--sparse", url, collection_id],
                cwd=self._docs_path,
            )
        else:
            log.info("acquisition.git_clone", collection=collection_id)
            self._run_git(["clone", url, collection_id], cwd=self._docs_path)

        if sparse:
            self._run_git(["sparse-checkout", "set", sparse], cwd=target)

        return collection_id

    def _run_git(self, args: list[str], cwd: Path) -> str:
        command = ["git", *args]
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self._git_timeout,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
            )
        except FileNotFoundError as e:
            raise AcquisitionError.command_failed(command, "git executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise AcquisitionError.command_failed(
                command, f"timed out after {self._git_timeout}s"
            ) from e

        if result.returncode != 0:
            log.warning(
                "acquisition.git_failed",
                command=" ".join(command),
                exit_code=result.returncode,
                stderr=result.stderr.strip()[:500],
            )
            raise AcquisitionError.command_failed(command, result.stderr or result.stdout)
        return result.stdout

    # =========================================================================
    # HTTP
    # =========================================================================

    def download(self, url: str, name: str) -> str:
        """Download url to docs_path/<name>/<index file>. Returns the collection id."""
        if not url or not url.strip():
            raise InvalidArgumentError.missing("file_url")
        collection_id = validate_name(name, "document_name")
        target_dir = self._docs_path / collection_id
        created = not target_dir.exists()
        target_dir.mkdir(parents=True, exist_ok=True)

        client = self._http_client or httpx.Client(
            follow_redirects=True, timeout=self._download_timeout
        )
        fd, tmp_name = tempfile.mkstemp(prefix=".download-", dir=target_dir)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out, client.stream("GET", url) as response:
                response.raise_for_status()
                size = 0
                for data in response.iter_bytes():
                    out.write(data)
                    size += len(data)
            os.replace(tmp_path, target_dir / self._index_filename)
        except httpx.HTTPStatusError as e:
            raise AcquisitionError.download_failed(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AcquisitionError.download_failed(url, str(e) or type(e).__name__) from e
        finally:
            tmp_path.unlink(missing_ok=True)
            # Never leave behind an empty directory this call created
            if created and not any(target_dir.iterdir()):
                target_dir.rmdir()
            if self._http_client is None:
                client.close()

        log.info("acquisition.downloaded", collection=collection_id, url=url, bytes=size)
        return collection_id
