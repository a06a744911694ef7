"""Lax version string grammar.

Mirrors the "lax" rules Perl's version.pm applies to ``$VERSION`` values:

    decimal:  1   1.   1.02   .5   1.02_03
    dotted:   v1  v1.2  v1.2.3  1.2.3  v1.2.3_4  .1.2
"""

from __future__ import annotations

import re

from ourpkgversion.core.errors import InvalidVersionError

_INTEGER = r"[0-9]+"
_FRACTION = r"\.[0-9]+"
_ALPHA = r"_[0-9]+"
_DOTTED_PART = r"\.[0-9]+"

_LAX_DECIMAL = rf"{_INTEGER}(?:\.|{_FRACTION}(?:{_ALPHA})?)?|{_FRACTION}(?:{_ALPHA})?"
_LAX_DOTTED = (
    rf"v{_INTEGER}(?:(?:{_DOTTED_PART})+(?:{_ALPHA})?)?"
    rf"|(?:{_INTEGER})?(?:{_DOTTED_PART}){{2,}}(?:{_ALPHA})?"
)

LAX_VERSION_RE = re.compile(rf"(?:{_LAX_DOTTED}|{_LAX_DECIMAL})")


def is_lax_version(version: str) -> bool:
    return isinstance(version, str) and LAX_VERSION_RE.fullmatch(version) is not None


def validate_version(version: str) -> str:
    """Return ``version`` unchanged, or raise InvalidVersionError."""
    if not is_lax_version(version):
        raise InvalidVersionError(str(version))
    return version


def is_underscore_version(version: str) -> bool:
    """Developer releases (``1.02_01``) need ``$VERSION = eval $VERSION``."""
    return "_" in version
