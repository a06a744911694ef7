"""Locate an existing ``our $VERSION = VALUE;`` on a physical line."""

from __future__ import annotations

from collections.abc import Sequence

from ourpkgversion.core.tokens import Token, TokenKind

# None marks the step that captures the value token.
STATEMENT_SHAPE: tuple[str | None, ...] = ("our", "$VERSION", "=", None, ";")


def tokens_on_line(tokens: Sequence[Token], line_number: int) -> list[int]:
    """Indices of the tokens starting on ``line_number``, in order."""
    return [i for i, tok in enumerate(tokens) if tok.line_number == line_number]


def find_value_token(tokens: Sequence[Token], indices: Sequence[int]) -> int | None:
    """Run the statement matcher over ``indices`` and return the value index.

    Whitespace is ignored. A mismatch part-way through resets the matcher,
    and the mismatching token is immediately re-tried as the first step, so
    ``our our $VERSION = 1;`` still matches. The first complete match wins.
    """
    step = 0
    value_index: int | None = None
    for i in indices:
        tok = tokens[i]
        if tok.kind == TokenKind.WHITESPACE:
            continue

        expected = STATEMENT_SHAPE[step]
        if expected is None:
            value_index = i
            step += 1
            continue

        if tok.text == expected:
            step += 1
        elif step:
            step = 1 if tok.text == STATEMENT_SHAPE[0] else 0
            value_index = None
            continue
        else:
            continue

        if step == len(STATEMENT_SHAPE):
            return value_index
    return None


def locate_value_token(tokens: Sequence[Token], line_number: int) -> int | None:
    """Index of the VALUE in ``our $VERSION = VALUE;`` on the line, if any."""
    return find_value_token(tokens, tokens_on_line(tokens, line_number))
