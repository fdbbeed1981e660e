from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from conftest import FakeVcsClient

from combine_docs import cli

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.integration
def test_main_writes_commit_named_document(
    docs_tree: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.delenv("COMBINE_DOCS_GIT", raising=False)
    monkeypatch.chdir(work)
    client_cls = mocker.patch.object(cli, "GitClient", return_value=FakeVcsClient(docs_tree))

    exit_code = cli.main(["https://github.com/foo/bar", "--scratch-root", str(tmp_path / "scratch")])

    assert exit_code == 0
    client_cls.assert_called_once_with("git", shallow=True)
    output = work / "foo__bar__abc1234__20240102.txt"
    assert output.exists()
    assert "Combined documentation saved to foo__bar__abc1234__20240102.txt files=3" in capsys.readouterr().out


@pytest.mark.integration
def test_main_full_clone_with_fixed_name(
    docs_tree: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
) -> None:
    monkeypatch.delenv("COMBINE_DOCS_GIT", raising=False)
    monkeypatch.chdir(tmp_path)
    client_cls = mocker.patch.object(cli, "GitClient", return_value=FakeVcsClient(docs_tree))

    exit_code = cli.main(
        [
            "https://example.org/docs.git",
            "--naming",
            "fixed",
            "--full-clone",
            "--ignore-policy",
            "simple",
            "--scratch-root",
            str(tmp_path / "scratch"),
        ],
    )

    assert exit_code == 0
    client_cls.assert_called_once_with("git", shallow=False)
    content = (tmp_path / "docs-combined.md").read_text(encoding="utf-8")
    assert 'path="CHANGELOG.md"' in content
    assert 'path="b.mdx"' not in content


@pytest.mark.integration
def test_main_reports_invalid_url_without_spawning_git(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    run = mocker.patch("combine_docs.vcs.subprocess.run")

    exit_code = cli.main(["not-a-repository", "--scratch-root", str(tmp_path / "scratch")])

    assert exit_code == 1
    run.assert_not_called()
    assert "Invalid repository URL" in capsys.readouterr().err
    assert not (tmp_path / "scratch").exists()


@pytest.mark.integration
def test_main_reports_clone_failure_and_cleans_up(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    mocker.patch(
        "combine_docs.vcs.subprocess.run",
        side_effect=subprocess.CalledProcessError(128, ["git", "clone"]),
    )
    scratch_root = tmp_path / "scratch"

    exit_code = cli.main(["https://github.com/foo/missing", "--scratch-root", str(scratch_root)])

    assert exit_code == 1
    assert "exit code 128" in capsys.readouterr().err
    assert list(scratch_root.iterdir()) == []
    assert [p.name for p in tmp_path.iterdir()] == ["scratch"]
