from __future__ import annotations

import io
from html import escape
from typing import TYPE_CHECKING

from combine_docs.config import CONTEXT_HEADER, CONTEXT_HEADER_END, END_SENTINEL

if TYPE_CHECKING:
    from collections.abc import Sequence

    from combine_docs.config import CandidateFile, RepositoryMetadata, RepositorySource


def _attr(value: str | int) -> str:
    return escape(str(value), quote=True)


def render_header(
    source: RepositorySource | None = None,
    metadata: RepositoryMetadata | None = None,
) -> str:
    """Render the opening context block.

    Args:
        source (RepositorySource | None): repository identity, named in the block when known
        metadata (RepositoryMetadata | None): HEAD commit identity, named next to the repository

    Returns:
        str: the context block followed by a blank line
    """
    out = io.StringIO()
    out.write(CONTEXT_HEADER)
    if source is not None:
        line = f"Repository: {source.slug}"
        if metadata is not None:
            line += f" (commit {metadata.short_hash}, {metadata.commit_date})"
        out.write(line + "\n")
    out.write(CONTEXT_HEADER_END)
    return out.getvalue()


def render_file_block(doc: CandidateFile) -> str:
    """Wrap one file's trimmed content in a `<file>` block carrying its metadata.

    Attribute values are HTML-escaped; the content itself is written verbatim.

    Args:
        doc (CandidateFile): the file to render

    Returns:
        str: the block followed by a blank line
    """
    return (
        "<file\n"
        f'  path="{_attr(doc.rel)}"\n'
        f'  title="{_attr(doc.title)}"\n'
        f'  type="{_attr(doc.doc_type)}"\n'
        f'  word_count="{_attr(doc.word_count)}"\n'
        ">\n"
        f"{doc.content.strip()}\n"
        "</file>\n\n"
    )


def build_document(
    docs: Sequence[CandidateFile],
    *,
    source: RepositorySource | None = None,
    metadata: RepositoryMetadata | None = None,
) -> str:
    """Build the combined document.

    The document is the context header, one block per file in the given order,
    and the end sentinel. With no files it is the header directly followed by
    the sentinel.

    Args:
        docs (Sequence[CandidateFile]): the files, in discovery order
        source (RepositorySource | None): repository identity for the header
        metadata (RepositoryMetadata | None): commit identity for the header

    Returns:
        str: the combined document
    """
    out = io.StringIO()
    out.write(render_header(source, metadata))
    for doc in docs:
        out.write(render_file_block(doc))
    out.write(END_SENTINEL)
    return out.getvalue()


def output_filename(source: RepositorySource, metadata: RepositoryMetadata) -> str:
    """Compose `{owner}__{repo}__{shortHash}__{date}.txt`."""
    return f"{source.owner}__{source.name}__{metadata.short_hash}__{metadata.commit_date}.txt"
