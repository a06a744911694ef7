"""Perl source tokenizer.

Splits Perl source into a flat, index-addressable list of typed tokens.
Concatenating the token texts always reproduces the input exactly.

The tokenizer only knows as much Perl as is needed to tell comments apart
from everything that merely contains a ``#``: strings, quote-like operators,
regex literals, here-doc bodies, POD blocks and the ``__END__`` section.
It never raises. A construct it cannot close (an unterminated string, say)
degrades to a one-character OTHER token and scanning resumes after it.

Whole-line comments follow PPI's convention: the token carries the line's
indentation and its trailing newline, e.g. ``"    # VERSION\\n"``. Inline
comments run from ``#`` up to, but not including, the newline.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    COMMENT = "comment"
    WHITESPACE = "whitespace"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    LITERAL = "literal"
    TERMINATOR = "terminator"
    OTHER = "other"
    POD = "pod"
    DATA = "data"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line_number: int
    starts_line: bool

    @property
    def significant(self) -> bool:
        return self.kind not in (TokenKind.WHITESPACE, TokenKind.COMMENT, TokenKind.POD)


_WHOLE_LINE_COMMENT = re.compile(r"[ \t]*#[^\n]*\n?")
_INLINE_COMMENT = re.compile(r"#[^\n]*")
_WHITESPACE = re.compile(r"[ \t\r\f\v]*\n|[ \t\r\f\v]+")
_POD_START = re.compile(r"=[A-Za-z]")
_POD_END = re.compile(r"^=cut\b[^\n]*(?:\n|\Z)", re.MULTILINE)
_END_SECTION = re.compile(r"__(?:END|DATA)__\b")
_HEREDOC = re.compile(r"<<(~?)(?:\"([^\"\n]*)\"|'([^'\n]*)'|([A-Za-z_]\w*))")
_VARIABLE = re.compile(
    r"[$@%](?:\#(?=[{$])|\#?(?:"
    r"\{\^\w+\}"
    r"|(?:::)?[A-Za-z_]\w*(?:::\w+)*(?:::)?"
    r"|\^\w"
    r"|\d+"
    r"|\$(?![\w{$])"
    r"|[!@/\\&`'+.<>|?\",]"
    r"))"
)
_FAT_COMMA_KEY = re.compile(r"\w+[ \t]*=>")
_WORD = re.compile(r"[A-Za-z_]\w*(?:::\w+)*(?:::)?")
_VSTRING = re.compile(r"v\d+(?:\.\d+)*(?![\w.])")
_NUMBER = re.compile(
    r"0[xX][0-9a-fA-F_]+"
    r"|0[bB][01_]+"
    r"|\d+(?:\.\d+){2,}"
    r"|\d[\d_]*(?:\.(?!\.)[\d_]*)?(?:[eE][+-]?\d+)?"
    r"|\.\d[\d_]*(?:[eE][+-]?\d+)?"
)
_OPERATORS = (
    "<=>", "**=", "||=", "//=", "&&=", "...", "<<=", ">>=",
    "=>", "->", "++", "--", "**", "=~", "!~", "==", "!=", "<=", ">=",
    "&&", "||", "//", "..", "::", "+=", "-=", "*=", "/=", ".=", "%=",
    "x=", "&=", "|=", "^=", "<<", ">>",
    "=", "+", "-", "*", "/", "%", ".", "<", ">", "!", "~", "\\", "?",
    ":", "&", "|", "^", ",",
)
_STRUCTURE = "(){}[]"
_BRACKETS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_QUOTE_OPS = {"q": 1, "qq": 1, "qw": 1, "qx": 1, "m": 1, "qr": 1, "s": 2, "tr": 2, "y": 2}
_NOT_DELIMITERS = set("=,;)]}>") | {"\n"}

# Keywords after which a ``/`` starts a regex rather than a division.
_REGEX_AFTER = {"split", "if", "unless", "and", "or", "not", "return", "grep", "map", "while", "until", "when", "xor"}


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []
        self.pending_heredocs: list[tuple[str, bool]] = []
        self.prev: Token | None = None

    # -- emission ---------------------------------------------------------

    def emit(self, kind: TokenKind, end: int) -> Token:
        start = self.pos
        chunk = self.text[start:end]
        tok = Token(
            kind=kind,
            text=chunk,
            line_number=self.line,
            starts_line=start == 0 or self.text[start - 1] == "\n",
        )
        self.tokens.append(tok)
        self.pos = end
        self.line += chunk.count("\n")
        if tok.significant:
            self.prev = tok
        if chunk.endswith("\n") and self.pending_heredocs:
            self.read_heredoc_bodies()
        return tok

    @property
    def at_line_start(self) -> bool:
        return self.pos == 0 or self.text[self.pos - 1] == "\n"

    # -- main loop --------------------------------------------------------

    def run(self) -> list[Token]:
        text = self.text
        n = len(text)
        while self.pos < n:
            if self.at_line_start and self.scan_line_start():
                continue

            ch = text[self.pos]

            m = _WHITESPACE.match(text, self.pos)
            if m:
                self.emit(TokenKind.WHITESPACE, m.end())
                continue

            if ch == "#":
                m = _INLINE_COMMENT.match(text, self.pos)
                self.emit(TokenKind.COMMENT, m.end())
                continue

            if ch == ";":
                self.emit(TokenKind.TERMINATOR, self.pos + 1)
                continue

            if ch in "'\"`":
                end = self.scan_delimited(self.pos)
                if end is None:
                    self.emit(TokenKind.OTHER, self.pos + 1)
                else:
                    self.emit(TokenKind.LITERAL, end)
                continue

            if ch == "<" and self.scan_heredoc_start():
                continue

            if ch in "$@%":
                m = _VARIABLE.match(text, self.pos)
                if m and not (ch == "%" and self.value_position()):
                    self.emit(TokenKind.IDENTIFIER, m.end())
                    continue

            if ch == "/" and self.operand_position():
                end = self.scan_delimited(self.pos)
                if end is not None:
                    self.emit(TokenKind.LITERAL, self.scan_flags(end))
                    continue

            if ch.isdigit() or (ch == "." and self.pos + 1 < n and text[self.pos + 1].isdigit()):
                m = _NUMBER.match(text, self.pos)
                if m:
                    self.emit(TokenKind.LITERAL, m.end())
                    continue

            if (ch.isascii() and ch.isalpha()) or ch == "_":
                self.scan_word()
                continue

            if ch in _STRUCTURE:
                self.emit(TokenKind.OTHER, self.pos + 1)
                continue

            for op in _OPERATORS:
                if text.startswith(op, self.pos):
                    self.emit(TokenKind.OPERATOR, self.pos + len(op))
                    break
            else:
                self.emit(TokenKind.OTHER, self.pos + 1)

        return self.tokens

    # -- scanners ---------------------------------------------------------

    def scan_line_start(self) -> bool:
        text = self.text
        m = _WHOLE_LINE_COMMENT.match(text, self.pos)
        if m:
            self.emit(TokenKind.COMMENT, m.end())
            return True

        if _POD_START.match(text, self.pos):
            end_m = _POD_END.search(text, self.pos)
            self.emit(TokenKind.POD, end_m.end() if end_m else len(text))
            return True

        if _END_SECTION.match(text, self.pos):
            self.emit(TokenKind.DATA, len(text))
            return True

        return False

    def scan_word(self) -> None:
        text = self.text
        m = _VSTRING.match(text, self.pos)
        if m:
            self.emit(TokenKind.LITERAL, m.end())
            return

        m = _WORD.match(text, self.pos)
        word = m.group(0)
        sections = _QUOTE_OPS.get(word)
        if sections and not self.after_arrow() and not self.bareword_position():
            end = self.scan_quote_like(m.end(), sections)
            if end is not None:
                self.emit(TokenKind.LITERAL, end)
                return
        self.emit(TokenKind.IDENTIFIER, m.end())

    def scan_quote_like(self, pos: int, sections: int) -> int | None:
        text = self.text
        start = pos
        while pos < len(text) and text[pos] in " \t":
            pos += 1
        if pos >= len(text):
            return None
        delim = text[pos]
        if delim.isalnum() or delim == "_" or delim.isspace() or delim in _NOT_DELIMITERS:
            return None
        if delim == "#" and pos != start:
            return None

        end = self.scan_delimited(pos)
        if end is None:
            return None
        if sections == 2:
            if delim in _BRACKETS:
                pos = end
                while pos < len(text) and text[pos].isspace():
                    pos += 1
                if pos >= len(text):
                    return None
                end = self.scan_delimited(pos)
            else:
                # s/a/b/: the closing delimiter of part one opens part two.
                end = self.scan_delimited(end - 1)
            if end is None:
                return None
        return self.scan_flags(end)

    def scan_delimited(self, pos: int) -> int | None:
        """Return the index just past the construct opened at ``pos``."""
        text = self.text
        opener = text[pos]
        closer = _BRACKETS.get(opener, opener)
        nested = opener != closer
        depth = 1
        i = pos + 1
        while i < len(text):
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if nested and c == opener:
                depth += 1
            elif c == closer:
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return None

    def scan_flags(self, pos: int) -> int:
        while pos < len(self.text) and self.text[pos].isalpha():
            pos += 1
        return pos

    def scan_heredoc_start(self) -> bool:
        m = _HEREDOC.match(self.text, self.pos)
        if not m:
            return False
        terminator = next(g for g in m.groups()[1:] if g is not None)
        self.pending_heredocs.append((terminator, bool(m.group(1))))
        self.emit(TokenKind.LITERAL, m.end())
        return True

    def read_heredoc_bodies(self) -> None:
        pending, self.pending_heredocs = self.pending_heredocs, []
        prev = self.prev
        for terminator, indented in pending:
            if self.pos >= len(self.text):
                return
            pattern = r"^[ \t]*" if indented else r"^"
            end_re = re.compile(pattern + re.escape(terminator) + r"[ \t]*$(?:\n)?", re.MULTILINE)
            m = end_re.search(self.text, self.pos)
            if m:
                self.emit(TokenKind.LITERAL, m.end())
            else:
                self.emit(TokenKind.OTHER, len(self.text))
        # Bodies sit between statements; they do not change operand context.
        self.prev = prev

    # -- context ----------------------------------------------------------

    def operand_position(self) -> bool:
        prev = self.prev
        if prev is None:
            return True
        if prev.kind in (TokenKind.OPERATOR, TokenKind.TERMINATOR):
            return True
        if prev.kind == TokenKind.OTHER and prev.text in ("(", "{", "["):
            return True
        return prev.kind == TokenKind.IDENTIFIER and prev.text in _REGEX_AFTER

    def value_position(self) -> bool:
        prev = self.prev
        if prev is None:
            return False
        if prev.kind == TokenKind.LITERAL:
            return True
        if prev.kind == TokenKind.IDENTIFIER and prev.text[:1] in ("$", "@", "%"):
            return True
        return prev.text in (")", "]", "}")

    def bareword_position(self) -> bool:
        prev = self.prev
        if prev is None:
            return False
        # Filetests such as ``-s $file``.
        if prev.kind == TokenKind.OPERATOR and prev.text == "-" and self.tokens[-1] is prev:
            return True
        # Sub names: ``sub s { ... }``.
        return prev.kind == TokenKind.IDENTIFIER and prev.text == "sub"

    def after_arrow(self) -> bool:
        if self.prev is not None and self.prev.text == "->":
            return True
        # Hash keys: ``s => 1``.
        return _FAT_COMMA_KEY.match(self.text, self.pos) is not None


def tokenize(text: str) -> list[Token]:
    """Tokenize Perl source text.

    Args:
        text: Full contents of one file

    Returns:
        Tokens in source order; ``"".join(t.text for t in tokens) == text``
    """
    return _Lexer(text).run()
