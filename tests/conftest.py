from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from combine_docs.exceptions import GitCommandError


class FakeVcsClient:
    """Stands in for GitClient: "clones" by copying a local tree."""

    def __init__(self, tree: Path, short_hash: str = "abc1234", commit_date: str = "20240102") -> None:
        self.tree = tree
        self.short_hash = short_hash
        self.commit_date = commit_date
        self.fetched: list[tuple[str, Path]] = []

    def fetch_shallow(self, url: str, destination: Path) -> Path:
        self.fetched.append((url, destination))
        shutil.copytree(self.tree, destination)
        return destination

    def read_head_short_hash(self, path: Path) -> str:
        return self.short_hash

    def read_head_commit_date(self, path: Path) -> str:
        return self.commit_date


class FailingVcsClient(FakeVcsClient):
    """Copies the tree, then fails like a clone that died halfway."""

    def fetch_shallow(self, url: str, destination: Path) -> Path:
        super().fetch_shallow(url, destination)
        raise GitCommandError(command=f"git clone {url}", returncode=128, stderr="fatal: early EOF")


def write_files(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    return write_files(
        tmp_path / "source",
        {
            "a.md": "# Title A\nHello world",
            "b.mdx": "Intro line\n\nSome *mdx* content\n",
            "CHANGELOG.md": "# Changelog\n",
            "examples/c.md": "# Example\n",
            "node_modules/pkg/readme.md": "# Vendored\n",
            "button.stories.mdx": "# Button story\n",
            "docs/guide/setup.md": "\n\n## Setup\n\nRun the installer.\n\n",
            "docs/notes.txt": "not markdown",
        },
    )


@pytest.fixture
def empty_tree(tmp_path: Path) -> Path:
    return write_files(tmp_path / "empty", {"src/main.py": "print('no docs')\n"})
