"""Combine a repository's markdown/MDX documentation into one annotated document."""

__version__ = "0.1.0"
