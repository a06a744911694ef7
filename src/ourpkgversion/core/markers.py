"""Sentinel comment detection.

A sentinel is a comment of the form ``# VERSION`` or ``## VERSION``,
optionally followed by free text (``# VERSION: generated by ...``).
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ourpkgversion.core.tokens import Token, TokenKind

# The trailing class is "printable or whitespace": everything except the
# non-whitespace control characters.
SENTINEL_RE = re.compile(
    r"""
    (\s*)                 # leading whitespace of whole-line comments
    (
      \#\#?\s*VERSION     # "# VERSION" or "## VERSION"
      \b                  # ending on a word boundary
      [^\x00-\x08\x0e-\x1f\x7f]*
    )
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class MarkerSite:
    token_index: int
    leading_whitespace: str
    comment_body: str
    line_number: int
    whole_line: bool


def match_sentinel(text: str) -> tuple[str, str] | None:
    """Return ``(leading_whitespace, comment_body)`` for a sentinel comment."""
    m = SENTINEL_RE.fullmatch(text)
    if m is None:
        return None
    return m.group(1), m.group(2)


def find_markers(tokens: Sequence[Token]) -> list[MarkerSite]:
    """Scan comment tokens for sentinels, in source order."""
    sites: list[MarkerSite] = []
    for index, tok in enumerate(tokens):
        if tok.kind != TokenKind.COMMENT:
            continue
        found = match_sentinel(tok.text)
        if found is None:
            continue
        ws, body = found
        sites.append(
            MarkerSite(
                token_index=index,
                leading_whitespace=ws,
                comment_body=body,
                line_number=tok.line_number,
                whole_line=tok.starts_line,
            )
        )
    return sites
