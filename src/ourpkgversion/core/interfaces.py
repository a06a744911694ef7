"""Collaborator interfaces used by the munger."""

from __future__ import annotations

from typing import Protocol


class IReporter(Protocol):
    """Receive one human-readable outcome per file.

    The exact wording is up to the implementation; callers only rely on
    skip and munge being reported through different methods.
    """

    def skipped(self, name: str, reason: str) -> None:
        """Report that ``name`` was left untouched.

        Args:
            name: Root-relative file name
            reason: Why the file was skipped (see model.SKIP_*)
        """
        ...

    def munged(self, name: str, mutation_count: int) -> None:
        """Report that a $VERSION assignment was written to ``name``."""
        ...
