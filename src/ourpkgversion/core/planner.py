"""Decide how each sentinel comment gets rewritten.

Two plans exist:

- InsertAssignment: the comment becomes
  ``our $VERSION = '<version>'; <comment>``.
- OverwriteValue: the line already has ``our $VERSION = VALUE;`` in front
  of an inline sentinel and overwrite mode is on. Only VALUE changes; the
  comment is kept (with TRIAL added for trial releases).

For developer versions (``1.02_01``) with underscore_eval_version enabled,
``$VERSION = eval $VERSION;`` follows the assignment. On a whole-line
sentinel it goes on the same line, before the comment, so the line count is
unchanged. After an inline sentinel it goes on a new line, which adds one.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from ourpkgversion.core.locator import locate_value_token
from ourpkgversion.core.markers import MarkerSite
from ourpkgversion.core.model import ModeFlags
from ourpkgversion.core.tokens import Token
from ourpkgversion.core.versions import is_underscore_version

EVAL_STATEMENT = "$VERSION = eval $VERSION;"

_BEFORE_VERSION = re.compile(r"(?=\bVERSION\b)")


def trial_comment(comment: str) -> str:
    """Insert ``TRIAL`` before the first ``VERSION`` word."""
    return _BEFORE_VERSION.sub("TRIAL ", comment, count=1)


@dataclass(frozen=True)
class InsertAssignment:
    site: MarkerSite
    whitespace: str
    comment_text: str
    version: str
    normalize: bool = False

    mutation_count = 1

    def replacements(self) -> dict[int, str]:
        code = f"{self.whitespace}our $VERSION = '{self.version}'; "
        if self.normalize and self.site.whole_line:
            code += f"{EVAL_STATEMENT} "
        code += self.comment_text
        if self.normalize and not self.site.whole_line:
            code += f"\n{EVAL_STATEMENT}"
        return {self.site.token_index: code}


@dataclass(frozen=True)
class OverwriteValue:
    site: MarkerSite
    value_token_index: int
    new_value_text: str
    whitespace: str
    comment_text: str
    normalize: bool = False

    # The value token and the comment token are each replaced.
    mutation_count = 2

    def replacements(self) -> dict[int, str]:
        code = self.whitespace + self.comment_text
        if self.normalize:
            code += f"\n{EVAL_STATEMENT}"
        return {
            self.value_token_index: self.new_value_text,
            self.site.token_index: code,
        }


RewritePlan = Union[InsertAssignment, OverwriteValue]


def plan_rewrite(tokens: Sequence[Token], site: MarkerSite, flags: ModeFlags) -> RewritePlan:
    comment = site.comment_body
    if flags.is_trial:
        comment = trial_comment(comment)

    normalize = flags.underscore_eval_version and is_underscore_version(flags.version)

    if flags.overwrite and not site.whole_line:
        value_index = locate_value_token(tokens, site.line_number)
        if value_index is not None:
            return OverwriteValue(
                site=site,
                value_token_index=value_index,
                new_value_text=f"'{flags.version}'",
                whitespace=site.leading_whitespace,
                comment_text=comment,
                normalize=normalize,
            )

    return InsertAssignment(
        site=site,
        whitespace=site.leading_whitespace,
        comment_text=comment,
        version=flags.version,
        normalize=normalize,
    )


def plan_rewrites(
    tokens: Sequence[Token],
    sites: Sequence[MarkerSite],
    flags: ModeFlags,
) -> list[RewritePlan]:
    """One plan per marker site, in source order."""
    return [plan_rewrite(tokens, site, flags) for site in sites]
