from __future__ import annotations

import re
from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

_ = Path()

DEFAULT_OUTPUT_NAME = "docs-combined.md"
DEFAULT_TITLE = "Untitled"

CONTEXT_HEADER = (
    "<context>\n"
    "This document contains multiple markdown files from a repository.\n"
    "Each file is wrapped with <file> tags and includes metadata about the file.\n"
    "The content of each file maintains its original markdown formatting.\n"
)
CONTEXT_HEADER_END = "</context>\n\n"
END_SENTINEL = "<context_end>End of repository documentation</context_end>"

_DOC_TYPES: dict[str, str] = {
    ".md": "markdown",
    ".mdx": "mdx",
}


class RuleScope(StrEnum):
    """Which kind of directory entry an ignore rule applies to."""

    FILE = auto()
    DIR = auto()
    ANY = auto()


class IgnoreRule(BaseModel):
    """A single declarative ignore rule.

    The pattern is a regular expression searched in one path segment, i.e. the
    name of the entry at the current directory level.
    """

    model_config = ConfigDict(frozen=True)

    scope: RuleScope = Field(default=RuleScope.ANY, description="Entry kind the rule applies to.")
    pattern: str = Field(..., min_length=1, description="Regular expression searched in the entry name.")
    case_sensitive: bool = Field(default=True, description="Whether the pattern is case sensitive.")

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            msg = f"invalid regular expression {value!r}: {e}"
            raise ValueError(msg) from e
        return value

    def matches(self, name: str, *, is_dir: bool) -> bool:
        if self.scope is RuleScope.FILE and is_dir:
            return False
        if self.scope is RuleScope.DIR and not is_dir:
            return False
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.search(self.pattern, name, flags) is not None


class DiscoveryPolicy(BaseModel):
    """Ordered ignore rules plus the file extensions accepted as documentation."""

    model_config = ConfigDict(frozen=True)

    name: str
    extensions: tuple[str, ...] = (".md",)
    rules: tuple[IgnoreRule, ...] = ()

    def is_ignored(self, name: str, *, is_dir: bool) -> bool:
        return any(rule.matches(name, is_dir=is_dir) for rule in self.rules)

    def accepts(self, name: str) -> bool:
        return name.endswith(self.extensions)

    def with_rules(self, extra: tuple[IgnoreRule, ...]) -> DiscoveryPolicy:
        return self.model_copy(update={"rules": (*self.rules, *extra)})


ENHANCED_POLICY = DiscoveryPolicy(
    name="enhanced",
    extensions=(".md", ".mdx"),
    rules=(
        IgnoreRule(scope=RuleScope.FILE, pattern=r"changelog", case_sensitive=False),
        IgnoreRule(scope=RuleScope.ANY, pattern=r"^examples$"),
        IgnoreRule(scope=RuleScope.FILE, pattern=r"\.stories\.mdx?$"),
        IgnoreRule(scope=RuleScope.DIR, pattern=r"^(node_modules|dist|build|\.git)$"),
    ),
)

SIMPLE_POLICY = DiscoveryPolicy(
    name="simple",
    extensions=(".md",),
    rules=(IgnoreRule(scope=RuleScope.DIR, pattern=r"^\."),),
)

POLICIES: dict[str, DiscoveryPolicy] = {
    ENHANCED_POLICY.name: ENHANCED_POLICY,
    SIMPLE_POLICY.name: SIMPLE_POLICY,
}


class RepositorySource(BaseModel):
    """Repository identity parsed from its URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


class RepositoryMetadata(BaseModel):
    """Commit identity read from the scratch copy's HEAD."""

    model_config = ConfigDict(frozen=True)

    short_hash: str = Field(..., min_length=1, description="Abbreviated HEAD hash")
    commit_date: str = Field(..., description="Compact commit date, e.g. 20240102")


class Annotations(BaseModel):
    """Per-file annotations shown in the file block header."""

    model_config = ConfigDict(frozen=True)

    title: str
    word_count: int = Field(..., ge=0)


_HEADING_MARKUP = re.compile(r"^#\s*")


def derive_annotations(content: str) -> Annotations:
    """Derive the title and word count of a documentation file.

    The title is the first line, minus a trailing carriage return, with one
    leading `#` and the whitespace after it removed, so `## Sub` gives
    `# Sub`. An empty result falls back to `DEFAULT_TITLE`. The word count is
    the number of non-empty whitespace-delimited tokens, so blank lines around
    the content add nothing and an empty file counts zero.

    Args:
        content (str): the raw file content

    Returns:
        Annotations: the derived title and word count
    """
    first_line = content.split("\n", 1)[0].rstrip("\r")
    title = _HEADING_MARKUP.sub("", first_line)
    return Annotations(title=title or DEFAULT_TITLE, word_count=len(content.split()))


class CandidateFile(BaseModel):
    """A discovered documentation file and its content.

    Attributes:
        path: Absolute path to the file inside the scratch copy.
        rel: Path relative to the repository root, with POSIX separators.
        content: Raw text content, decoded as UTF-8 without newline translation.
        title: Title derived from the first line.
        word_count: Number of whitespace-delimited words.
        doc_type: "markdown" or "mdx" depending on the extension.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path relative to repository root")
    content: str = Field(..., description="Raw file content")

    @property
    def annotations(self) -> Annotations:
        return derive_annotations(self.content)

    @computed_field
    @property
    def title(self) -> str:
        return self.annotations.title

    @computed_field
    @property
    def word_count(self) -> int:
        return self.annotations.word_count

    @computed_field
    @property
    def doc_type(self) -> str:
        """Categorize the file by extension."""
        return _DOC_TYPES.get(self.path.suffix.lower(), "markdown")
