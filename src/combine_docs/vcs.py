from __future__ import annotations

import re
import subprocess  # noqa: S404
from pathlib import Path
from typing import Protocol

from combine_docs.config import RepositoryMetadata, RepositorySource
from combine_docs.exceptions import GitCommandError, InvalidRepositoryUrlError, MetadataQueryError
from combine_docs.logging import logger

_REPOSITORY_URL = re.compile(
    r"^(?:https?://(?:[^@/]+@)?|ssh://(?:[^@/]+@)?|git@)"
    r"(?P<host>[\w.-]+(?::\d+)?)[:/]"
    r"(?P<owner>[\w.-]+)/"
    r"(?P<name>[\w.-]+?)(?:\.git)?/?$",
)


class VersionControlClient(Protocol):
    """The version-control operations a run depends on."""

    def fetch_shallow(self, url: str, destination: Path) -> Path: ...

    def read_head_short_hash(self, path: Path) -> str: ...

    def read_head_commit_date(self, path: Path) -> str: ...


def parse_repository_url(url: str) -> RepositorySource:
    """Extract the owner and repository name from a repository URL.

    Accepts `https://host/owner/name[.git]`, `ssh://[user@]host/owner/name[.git]`
    and `git@host:owner/name[.git]`.

    Args:
        url (str): the repository URL

    Raises:
        InvalidRepositoryUrlError: if the URL does not have the expected shape

    Returns:
        RepositorySource: the parsed repository identity
    """
    m = _REPOSITORY_URL.match(url.strip())
    if m is None:
        raise InvalidRepositoryUrlError(url=url)
    return RepositorySource(url=url, owner=m.group("owner"), name=m.group("name"))


def compact_commit_date(raw: str) -> str:
    """Turn a git commit date into a compact sortable token.

    `"2024-01-02 10:20:30 +0000"` becomes `"20240102"`: the time and timezone
    parts are dropped together with the `-` and `:` separators.

    Args:
        raw (str): a commit date as printed by `git log --format=%ci`

    Returns:
        str: the compact date token
    """
    date_part = raw.strip().split(" ", 1)[0]
    return date_part.replace("-", "").replace(":", "")


class GitClient:
    """Shells out to the git command-line client."""

    def __init__(self, executable: str = "git", *, shallow: bool = True) -> None:
        self.executable = executable
        self.shallow = shallow

    def clone_command(self, url: str, destination: Path) -> list[str]:
        cmd = [self.executable, "clone"]
        if self.shallow:
            cmd += ["--depth", "1", "--single-branch", "--no-tags"]
        return [*cmd, url, str(destination)]

    def fetch_shallow(self, url: str, destination: Path) -> Path:
        """Clone `url` into `destination`, streaming git's output to the terminal.

        Args:
            url (str): the repository URL
            destination (Path): directory to clone into; must not exist or be empty

        Raises:
            GitCommandError: if git cannot be spawned or exits non-zero

        Returns:
            Path: the local copy
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.clone_command(url, destination)
        logger.info("cloning repository", url=url, destination=str(destination), shallow=self.shallow)
        try:
            subprocess.run(cmd, check=True)  # noqa: S603
        except subprocess.CalledProcessError as e:
            raise GitCommandError(command=" ".join(cmd), returncode=e.returncode) from e
        except OSError as e:
            raise GitCommandError(command=" ".join(cmd), returncode=-1, stderr=str(e)) from e
        return destination

    def _query(self, path: Path, *args: str) -> str:
        cmd = [self.executable, *args]
        try:
            out = subprocess.run(  # noqa: S603
                cmd,
                cwd=str(path),
                text=True,
                capture_output=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise MetadataQueryError(
                command=" ".join(cmd),
                returncode=e.returncode,
                stdout=e.stdout or "",
                stderr=e.stderr or "",
            ) from e
        except OSError as e:
            raise MetadataQueryError(command=" ".join(cmd), returncode=-1, stderr=str(e)) from e
        return out.stdout.strip()

    def read_head_short_hash(self, path: Path) -> str:
        return self._query(path, "rev-parse", "--short", "HEAD")

    def read_head_commit_date(self, path: Path) -> str:
        return compact_commit_date(self._query(path, "log", "-1", "--format=%ci"))


def read_metadata(client: VersionControlClient, path: Path) -> RepositoryMetadata:
    """Read the HEAD commit identity of a local copy.

    Args:
        client (VersionControlClient): the version-control client to query with
        path (Path): the local copy

    Returns:
        RepositoryMetadata: short hash and compact commit date of HEAD
    """
    return RepositoryMetadata(
        short_hash=client.read_head_short_hash(path),
        commit_date=client.read_head_commit_date(path),
    )
