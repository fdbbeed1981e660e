from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from combine_docs.config import CandidateFile, DiscoveryPolicy, IgnoreRule
from combine_docs.exceptions import IgnoreRuleFileError
from combine_docs.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def find_markdown_files(root: Path, policy: DiscoveryPolicy) -> list[Path]:
    """Recursively collect documentation files under `root`.

    The walk is depth-first and visits siblings in name order. Each entry is
    tested against the policy's ignore rules by name; an ignored directory is
    not descended into. Remaining files are kept when their name ends with one
    of the policy's extensions. Symlinked directories are neither descended
    into nor listed; symlinked files are kept and read through the link.

    Args:
        root (Path): the directory to walk
        policy (DiscoveryPolicy): ignore rules and accepted extensions

    Returns:
        list[Path]: the documentation files found, in traversal order
    """
    found: list[Path] = []
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_symlink() and entry.is_dir():
            continue
        is_dir = entry.is_dir(follow_symlinks=False)
        if policy.is_ignored(entry.name, is_dir=is_dir):
            continue
        if is_dir:
            found.extend(find_markdown_files(Path(entry.path), policy))
        elif policy.accepts(entry.name):
            found.append(Path(entry.path))
    return found


def read_document(path: Path) -> str:
    """Read a documentation file as strict UTF-8, keeping its line endings.

    Args:
        path (Path): the file to read

    Returns:
        str: the file content
    """
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def make_candidates(files: Sequence[Path], root: Path) -> list[CandidateFile]:
    """Read every discovered file into a CandidateFile, keeping discovery order.

    Args:
        files (Sequence[Path]): the discovered files
        root (Path): the repository root used for relative paths

    Returns:
        list[CandidateFile]: one record per file
    """
    return [CandidateFile(path=f, rel=relpath(f, root), content=read_document(f)) for f in files]


def load_ignore_rules(path: Path) -> tuple[IgnoreRule, ...]:
    """Load extra ignore rules from a YAML file.

    The file holds a top-level `rules` list whose items are mappings with a
    `pattern` and optional `scope` (file, dir or any) and `case_sensitive`.

    Args:
        path (Path): the YAML file

    Raises:
        IgnoreRuleFileError: if the file is not valid YAML or a rule is malformed

    Returns:
        tuple[IgnoreRule, ...]: the rules, in file order
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise IgnoreRuleFileError(path=path, reason=str(e)) from e
    if not isinstance(data, dict):
        raise IgnoreRuleFileError(path=path, reason="expected a mapping with a `rules` list")
    items = data.get("rules", [])
    if not isinstance(items, list):
        raise IgnoreRuleFileError(path=path, reason="`rules` must be a list")
    try:
        return tuple(IgnoreRule.model_validate(item) for item in items)
    except ValidationError as e:
        raise IgnoreRuleFileError(path=path, reason=str(e)) from e


def create_scratch_directory(scratch_root: Path | None = None) -> Path:
    """Create a fresh, uniquely named scratch directory for one run.

    Args:
        scratch_root (Path | None): parent directory; the system temp root when None

    Returns:
        Path: the new, empty directory
    """
    if scratch_root is not None:
        scratch_root.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix="combine_docs_", dir=scratch_root))


def cleanup(path: Path) -> None:
    """Remove a scratch directory and everything under it.

    Missing directories are fine; any other removal error propagates.

    Args:
        path (Path): the directory to remove
    """
    if not path.exists():
        return
    shutil.rmtree(path)
    logger.info("removed scratch directory", path=str(path))
