"""ourpkgversion core.

tokenize -> find markers -> plan rewrites -> serialize, plus the file finder,
configuration and logging around it.
"""

from ourpkgversion.core.config import ConfigResolver, MungeSettings
from ourpkgversion.core.errors import (
    ConfigError,
    FileError,
    InvalidVersionError,
    OurPkgVersionError,
)
from ourpkgversion.core.finder import detect_role, find_files
from ourpkgversion.core.interfaces import IReporter
from ourpkgversion.core.logging import (
    VerbosityLevel,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)
from ourpkgversion.core.markers import MarkerSite, find_markers
from ourpkgversion.core.model import (
    DistFile,
    FileRole,
    ModeFlags,
    Munged,
    Outcome,
    Skipped,
)
from ourpkgversion.core.munger import LoggerReporter, munge_file, munge_files, process
from ourpkgversion.core.planner import InsertAssignment, OverwriteValue, plan_rewrites
from ourpkgversion.core.serializer import serialize
from ourpkgversion.core.tokens import Token, TokenKind, tokenize
from ourpkgversion.core.versions import is_lax_version, validate_version

__all__ = [
    # Pipeline
    "tokenize",
    "find_markers",
    "plan_rewrites",
    "serialize",
    "process",
    "munge_file",
    "munge_files",
    "find_files",
    "detect_role",
    # Types
    "Token",
    "TokenKind",
    "MarkerSite",
    "InsertAssignment",
    "OverwriteValue",
    "DistFile",
    "FileRole",
    "ModeFlags",
    "Munged",
    "Skipped",
    "Outcome",
    "IReporter",
    "LoggerReporter",
    # Config
    "ConfigResolver",
    "MungeSettings",
    "is_lax_version",
    "validate_version",
    # Errors
    "OurPkgVersionError",
    "ConfigError",
    "InvalidVersionError",
    "FileError",
    # Logging
    "VerbosityLevel",
    "get_logger",
    "get_verbosity",
    "set_colors",
    "set_verbosity",
]
