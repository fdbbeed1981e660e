from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CombineDocsError(Exception):
    """Base exception for errors in the combine_docs package."""


@dataclass(frozen=True)
class InvalidRepositoryUrlError(CombineDocsError):
    """Raised when a repository URL does not look like `host/owner/name[.git]`."""

    url: str
    message: str = "Invalid repository URL, expected https://<host>/<owner>/<name>[.git]."

    def __str__(self) -> str:
        return f"{self.message} Got: {self.url!r}"


@dataclass(frozen=True)
class GitCommandError(CombineDocsError):
    """Raised when a git command fails or cannot be spawned."""

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        text = f"`{self.command}` failed with exit code {self.returncode}"
        if self.stderr.strip():
            text += f": {self.stderr.strip()}"
        return text


@dataclass(frozen=True)
class MetadataQueryError(GitCommandError):
    """Raised when a history query against the scratch copy fails."""


@dataclass(frozen=True)
class IgnoreRuleFileError(CombineDocsError):
    """Raised when an extra ignore-rule file cannot be understood."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"Invalid ignore-rule file {self.path}: {self.reason}"
