from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_FILE = find_dotenv(usecwd=True)
load_dotenv(ENV_FILE)


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name, "").strip()
    return Path(value) if value else None


class Settings(BaseModel):
    """Configuration settings for a combine_docs run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    repo_url: str = Field(default="", description="Repository URL to clone.")
    output: Path | None = Field(default=None, description="Output file; derived from naming when unset.")
    naming: Literal["commit", "fixed"] = Field(
        default="commit",
        description="Name the output after owner/repo/commit, or use docs-combined.md.",
    )
    ignore_policy: Literal["enhanced", "simple"] = Field(
        default="enhanced",
        description="Built-in ignore rules and extensions.",
    )
    ignore_file: Path | None = Field(default=None, description="YAML file with extra ignore rules.")
    full_clone: bool = Field(default=False, description="Clone full history instead of a shallow copy.")
    scratch_root: Path | None = Field(
        default_factory=lambda: _env_path("COMBINE_DOCS_SCRATCH_ROOT"),
        description="Parent directory for the per-run scratch copy (system temp when unset).",
    )
    git_executable: str = Field(
        default_factory=lambda: os.environ.get("COMBINE_DOCS_GIT", "git"),
        description="git binary to invoke.",
    )
    log_file: str = Field(default="", description="Log file path.")
