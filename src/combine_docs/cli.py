"""
combine_docs: gather a repository's documentation into one annotated file.

Overview
--------
Clones a repository (shallow, single branch, no tags), walks the copy for
markdown and MDX files, and writes them into one document where every file
is wrapped in a `<file>` block carrying its path, title, type and word count.
The document opens with a `<context>` block and ends with a `<context_end>`
sentinel. The scratch copy lives in a per-run temporary directory and is
removed when the run ends, whether it succeeded or not.

Usage
-----
    - Named after the repository and its HEAD commit (owner__repo__hash__date.txt):
        combine-docs https://github.com/owner/repo

    - Fixed name (docs-combined.md), full clone, legacy ignore rules:
        combine-docs https://example.org/repo.git --naming fixed --full-clone --ignore-policy simple

    - Extra ignore rules and a log file:
        combine-docs https://github.com/owner/repo --ignore-file rules.yaml --log-file run.log
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from combine_docs import __version__
from combine_docs.config import DEFAULT_OUTPUT_NAME, POLICIES, DiscoveryPolicy
from combine_docs.file_manipulation import (
    cleanup,
    create_scratch_directory,
    find_markdown_files,
    load_ignore_rules,
    make_candidates,
)
from combine_docs.logging import logger, setup_logging
from combine_docs.output_construction import build_document, output_filename
from combine_docs.settings import Settings
from combine_docs.vcs import GitClient, VersionControlClient, parse_repository_url, read_metadata

if TYPE_CHECKING:
    from collections.abc import Sequence

    from combine_docs.config import RepositoryMetadata, RepositorySource


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="combine-docs",
        description="Combine a repository's markdown/MDX documentation into one annotated file.",
    )
    p.add_argument("repo_url", nargs="?", default="", help="Repository URL to clone.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--output", type=Path, default=None, help="Output file (overrides --naming).")
    p.add_argument(
        "--naming",
        choices=["commit", "fixed"],
        default="commit",
        help="owner__repo__hash__date.txt (commit) or docs-combined.md (fixed).",
    )
    p.add_argument(
        "--ignore-policy",
        choices=sorted(POLICIES),
        default="enhanced",
        help="Built-in ignore rules and extensions.",
    )
    p.add_argument("--ignore-file", type=Path, default=None, help="YAML file with extra ignore rules.")
    p.add_argument("--full-clone", action="store_true", help="Clone full history instead of a shallow copy.")
    p.add_argument("--scratch-root", type=Path, default=None, help="Parent directory for the scratch copy.")
    p.add_argument("--git-executable", type=str, default=None, help="git binary to invoke.")
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(**{k: v for k, v in vars(args).items() if v is not None})


def select_policy(settings: Settings) -> DiscoveryPolicy:
    policy = POLICIES[settings.ignore_policy]
    if settings.ignore_file is not None:
        policy = policy.with_rules(load_ignore_rules(settings.ignore_file))
    return policy


def resolve_output_path(
    settings: Settings,
    source: RepositorySource | None,
    metadata: RepositoryMetadata | None,
) -> Path:
    if settings.output is not None:
        return settings.output
    if source is not None and metadata is not None:
        return Path(output_filename(source, metadata))
    return Path(DEFAULT_OUTPUT_NAME)


def run_pipeline(settings: Settings, client: VersionControlClient) -> tuple[Path, int]:
    """Fetch, discover, aggregate and write, then remove the scratch copy.

    The URL is validated before anything touches the network. The scratch
    directory is removed on every path out of the fetch stage. When a stage
    fails, a removal error is only logged so the stage error is the one raised.

    Args:
        settings (Settings): run configuration
        client (VersionControlClient): version-control collaborator

    Returns:
        tuple[Path, int]: the written output file and the number of files in it
    """
    source = parse_repository_url(settings.repo_url) if settings.naming == "commit" else None
    policy = select_policy(settings)

    scratch = create_scratch_directory(settings.scratch_root)
    try:
        repo_dir = client.fetch_shallow(settings.repo_url, scratch / "repo")
        metadata = read_metadata(client, repo_dir) if source is not None else None

        files = find_markdown_files(repo_dir, policy)
        logger.info("discovered markdown files", count=len(files), policy=policy.name)
        docs = make_candidates(files, repo_dir)
        content = build_document(docs, source=source, metadata=metadata)

        out_path = resolve_output_path(settings, source, metadata)
        out_path.write_text(content, encoding="utf-8", newline="")
        logger.info("wrote document", path=str(out_path), files=len(docs))
    except Exception:
        try:
            cleanup(scratch)
        except OSError:
            logger.exception("failed to remove scratch directory", path=str(scratch))
        raise
    cleanup(scratch)
    return out_path, len(docs)


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file:
        setup_logging(settings.log_file)

    if not settings.repo_url:
        sys.stderr.write(build_parser().format_usage())
        print("Error: please provide a repository URL", file=sys.stderr)
        return 1

    client = GitClient(settings.git_executable, shallow=not settings.full_clone)
    try:
        out_path, count = run_pipeline(settings, client)
    except Exception as e:
        logger.exception("run failed", url=settings.repo_url)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Combined documentation saved to {out_path} files={count}")
    return 0


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
