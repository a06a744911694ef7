"""Tokenize, match, plan and serialize one file; drive a batch of files.

``process`` is the pure core: text in, Outcome out, no I/O. ``munge_file``
and ``munge_files`` add reading, atomic writing and reporting around it.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from ourpkgversion.core.errors import FileError
from ourpkgversion.core.interfaces import IReporter
from ourpkgversion.core.logging import get_logger
from ourpkgversion.core.markers import find_markers
from ourpkgversion.core.model import (
    SKIP_DOC_ONLY,
    SKIP_NO_SENTINEL,
    DistFile,
    FileRole,
    ModeFlags,
    Munged,
    Outcome,
    Skipped,
)
from ourpkgversion.core.planner import plan_rewrites
from ourpkgversion.core.serializer import collect_replacements, serialize
from ourpkgversion.core.tokens import tokenize
from ourpkgversion.core.versions import validate_version

logger = get_logger(__name__)


def process(file_text: str, file_role: FileRole, flags: ModeFlags) -> Outcome:
    """Rewrite every sentinel comment in ``file_text``.

    Args:
        file_text: Full contents of one file
        file_role: Role of the file in the distribution
        flags: Run-wide version and mode flags

    Returns:
        Skipped(reason) or Munged(new_text, mutation_count)

    Raises:
        InvalidVersionError: If flags.version is not a lax version string
    """
    validate_version(flags.version)

    if file_role == FileRole.DOC_ONLY:
        return Skipped(reason=SKIP_DOC_ONLY)

    tokens = tokenize(file_text)
    sites = find_markers(tokens)
    if not sites:
        return Skipped(reason=SKIP_NO_SENTINEL)

    plans = plan_rewrites(tokens, sites, flags)
    new_text = serialize(tokens, collect_replacements(plans))
    return Munged(new_text=new_text, mutation_count=sum(p.mutation_count for p in plans))


class LoggerReporter:
    """Default reporter: skips at info level, munges and pod skips at debug."""

    def skipped(self, name: str, reason: str) -> None:
        if reason == SKIP_DOC_ONLY:
            logger.debug(f'Skipping: "{name}" is pod only')
        else:
            logger.info(f'Skipping: "{name}" has no "# VERSION" comment')

    def munged(self, name: str, mutation_count: int) -> None:
        logger.debug(f"adding $VERSION assignment to {name}")


def read_text(path: Path) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Cannot read '{path}': {e}") from e


def atomic_write_text(path: Path, text: str) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode)
        tmp_path.replace(path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise FileError(f"Cannot write '{path}': {e}") from e


def munge_file(
    dist_file: DistFile,
    flags: ModeFlags,
    reporter: IReporter | None = None,
    *,
    dry_run: bool = False,
) -> Outcome:
    """Munge one file in place and report the outcome."""
    reporter = reporter or LoggerReporter()

    if dist_file.role == FileRole.DOC_ONLY:
        # Doc-only files are never read.
        outcome: Outcome = process("", dist_file.role, flags)
    else:
        outcome = process(read_text(dist_file.path), dist_file.role, flags)

    if isinstance(outcome, Munged):
        if not dry_run:
            atomic_write_text(dist_file.path, outcome.new_text)
        reporter.munged(dist_file.name, outcome.mutation_count)
    else:
        reporter.skipped(dist_file.name, outcome.reason)
    return outcome


def munge_files(
    files: Iterable[DistFile],
    flags: ModeFlags,
    reporter: IReporter | None = None,
    *,
    dry_run: bool = False,
) -> list[tuple[DistFile, Outcome]]:
    """Munge files in order. The version is checked before any file is read."""
    validate_version(flags.version)
    reporter = reporter or LoggerReporter()
    return [(f, munge_file(f, flags, reporter, dry_run=dry_run)) for f in files]
