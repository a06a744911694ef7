from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class FileRole(str, Enum):
    MODULE = "module"
    EXECUTABLE = "executable"
    DOC_ONLY = "doc_only"


@dataclass(frozen=True)
class ModeFlags:
    """Run-wide munging inputs. Immutable, shared read-only by all workers."""

    version: str
    is_trial: bool = False
    overwrite: bool = False
    underscore_eval_version: bool = False


@dataclass(frozen=True)
class Skipped:
    reason: str

    @property
    def munged(self) -> bool:
        return False


@dataclass(frozen=True)
class Munged:
    new_text: str
    mutation_count: int

    @property
    def munged(self) -> bool:
        return True


Outcome = Union[Skipped, Munged]

SKIP_DOC_ONLY = "pod/doc only"
SKIP_NO_SENTINEL = "no sentinel comment"


@dataclass(frozen=True)
class DistFile:
    """One candidate file of a distribution."""

    path: Path
    name: str  # root-relative, POSIX separators
    role: FileRole
