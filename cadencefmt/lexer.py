"""Cadence lexer.

Turns source text into typed, positioned tokens. The reconciliation engine
only ever looks at token kinds and text spans, so this lexer stays
shallow: keywords are plain identifiers and no literal is interpreted.

Whitespace and comments are ordinary tokens. Callers decide what to skip.

Lines are 1-based, columns 0-based; offsets index characters of the source
string and end offsets are exclusive.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class TokenKind(enum.Enum):
    EOF = "EOF"
    SPACE = "SPACE"

    # Comments
    LINE_COMMENT = "LINE_COMMENT"
    BLOCK_COMMENT_START = "BLOCK_COMMENT_START"
    BLOCK_COMMENT_CONTENT = "BLOCK_COMMENT_CONTENT"
    BLOCK_COMMENT_END = "BLOCK_COMMENT_END"

    # Literals
    BINARY_INTEGER_LITERAL = "BINARY_INTEGER_LITERAL"
    OCTAL_INTEGER_LITERAL = "OCTAL_INTEGER_LITERAL"
    DECIMAL_INTEGER_LITERAL = "DECIMAL_INTEGER_LITERAL"
    HEXADECIMAL_INTEGER_LITERAL = "HEXADECIMAL_INTEGER_LITERAL"
    UNKNOWN_BASE_INTEGER_LITERAL = "UNKNOWN_BASE_INTEGER_LITERAL"
    FIXED_POINT_NUMBER_LITERAL = "FIXED_POINT_NUMBER_LITERAL"
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"

    # Grouping
    PAREN_OPEN = "PAREN_OPEN"
    PAREN_CLOSE = "PAREN_CLOSE"
    BRACE_OPEN = "BRACE_OPEN"
    BRACE_CLOSE = "BRACE_CLOSE"
    BRACKET_OPEN = "BRACKET_OPEN"
    BRACKET_CLOSE = "BRACKET_CLOSE"

    # Operators and punctuation
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    PERCENT = "PERCENT"
    DOUBLE_QUESTION_MARK = "DOUBLE_QUESTION_MARK"
    QUESTION_MARK = "QUESTION_MARK"
    QUESTION_MARK_DOT = "QUESTION_MARK_DOT"
    COMMA = "COMMA"
    COLON = "COLON"
    DOT = "DOT"
    SEMICOLON = "SEMICOLON"
    LEFT_ARROW = "LEFT_ARROW"
    LEFT_ARROW_EXCLAMATION = "LEFT_ARROW_EXCLAMATION"
    SWAP_ARROW = "SWAP_ARROW"
    LESS = "LESS"
    LESS_EQUAL = "LESS_EQUAL"
    LESS_LESS = "LESS_LESS"
    GREATER = "GREATER"
    GREATER_EQUAL = "GREATER_EQUAL"
    EQUAL = "EQUAL"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    EXCLAMATION_MARK = "EXCLAMATION_MARK"
    NOT_EQUAL = "NOT_EQUAL"
    AMPERSAND = "AMPERSAND"
    AMPERSAND_AMPERSAND = "AMPERSAND_AMPERSAND"
    CARET = "CARET"
    VERTICAL_BAR = "VERTICAL_BAR"
    VERTICAL_BAR_VERTICAL_BAR = "VERTICAL_BAR_VERTICAL_BAR"
    AT = "AT"
    PRAGMA = "PRAGMA"


COMMENT_KINDS = frozenset({TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT_CONTENT})


# ─── Operator tables ─────────────────────────────────────────────────────────

# Longest match first.
OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    ("<-!", TokenKind.LEFT_ARROW_EXCLAMATION),
    ("<->", TokenKind.SWAP_ARROW),
    ("<-", TokenKind.LEFT_ARROW),
    ("<=", TokenKind.LESS_EQUAL),
    ("<<", TokenKind.LESS_LESS),
    (">=", TokenKind.GREATER_EQUAL),
    ("==", TokenKind.EQUAL_EQUAL),
    ("!=", TokenKind.NOT_EQUAL),
    ("??", TokenKind.DOUBLE_QUESTION_MARK),
    ("?.", TokenKind.QUESTION_MARK_DOT),
    ("&&", TokenKind.AMPERSAND_AMPERSAND),
    ("||", TokenKind.VERTICAL_BAR_VERTICAL_BAR),
    ("+", TokenKind.PLUS),
    ("-", TokenKind.MINUS),
    ("*", TokenKind.STAR),
    ("/", TokenKind.SLASH),
    ("%", TokenKind.PERCENT),
    ("?", TokenKind.QUESTION_MARK),
    ("(", TokenKind.PAREN_OPEN),
    (")", TokenKind.PAREN_CLOSE),
    ("{", TokenKind.BRACE_OPEN),
    ("}", TokenKind.BRACE_CLOSE),
    ("[", TokenKind.BRACKET_OPEN),
    ("]", TokenKind.BRACKET_CLOSE),
    (",", TokenKind.COMMA),
    (":", TokenKind.COLON),
    (".", TokenKind.DOT),
    (";", TokenKind.SEMICOLON),
    ("<", TokenKind.LESS),
    (">", TokenKind.GREATER),
    ("=", TokenKind.EQUAL),
    ("!", TokenKind.EXCLAMATION_MARK),
    ("&", TokenKind.AMPERSAND),
    ("^", TokenKind.CARET),
    ("|", TokenKind.VERTICAL_BAR),
    ("@", TokenKind.AT),
    ("#", TokenKind.PRAGMA),
)

SPACE_CHARS = " \t\r\n"

INTEGER_PREFIXES = {
    "b": (TokenKind.BINARY_INTEGER_LITERAL, "01_"),
    "o": (TokenKind.OCTAL_INTEGER_LITERAL, "01234567_"),
    "x": (TokenKind.HEXADECIMAL_INTEGER_LITERAL, "0123456789abcdefABCDEF_"),
}


# ─── Data classes ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Token:
    """One lexed token and where it sits in its source."""
    kind: TokenKind
    text: str
    start_offset: int
    end_offset: int               # Exclusive
    start_line: int
    start_column: int
    end_line: int                 # Line of the last character
    end_column: int               # Column of the last character


@dataclass(frozen=True)
class Checkpoint:
    """Saved lexing position, see TokenStream.checkpoint()."""
    offset: int
    line: int
    column: int
    mode: str
    error: Optional[str]


# ─── Token stream ────────────────────────────────────────────────────────────

class TokenStream:
    """Lazily lexes a text buffer one token at a time.

    Once the end of input (or a lexing error) is reached every further call
    to next() returns an EOF token. A lexing error is kept in ``error``.
    """

    def __init__(self, text: str):
        self.text = text
        self._offset = 0
        self._line = 1
        self._column = 0
        # "code", or the pending part of a block comment
        self._mode = "code"
        self.error: Optional[str] = None

    # -- cursor ---------------------------------------------------------------

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(self._offset, self._line, self._column, self._mode, self.error)

    def revert(self, checkpoint: Checkpoint) -> None:
        self._offset = checkpoint.offset
        self._line = checkpoint.line
        self._column = checkpoint.column
        self._mode = checkpoint.mode
        self.error = checkpoint.error

    # -- lexing ---------------------------------------------------------------

    def __iter__(self):
        while True:
            token = self.next()
            yield token
            if token.kind is TokenKind.EOF:
                return

    def next(self) -> Token:
        if self.error is not None or self._offset >= len(self.text):
            if self._mode != "code" and self.error is None:
                self.error = f"unterminated block comment at line {self._line}"
            return self._eof()

        if self._mode == "comment_content":
            return self._block_comment_content()
        if self._mode == "comment_end":
            self._mode = "code"
            return self._emit(TokenKind.BLOCK_COMMENT_END, 2)

        text = self.text
        pos = self._offset
        ch = text[pos]

        if ch in SPACE_CHARS:
            end = pos
            while end < len(text) and text[end] in SPACE_CHARS:
                end += 1
            return self._emit(TokenKind.SPACE, end - pos)

        if text.startswith("//", pos):
            end = text.find("\n", pos)
            if end == -1:
                end = len(text)
            return self._emit(TokenKind.LINE_COMMENT, end - pos)

        if text.startswith("/*", pos):
            self._mode = "comment_content"
            return self._emit(TokenKind.BLOCK_COMMENT_START, 2)

        if ch == '"':
            return self._string()

        if ch.isdigit():
            return self._number()

        if ch == "_" or ch.isalpha():
            end = pos + 1
            while end < len(text) and (text[end] == "_" or text[end].isalnum()):
                end += 1
            return self._emit(TokenKind.IDENTIFIER, end - pos)

        for op, kind in OPERATORS:
            if text.startswith(op, pos):
                return self._emit(kind, len(op))

        self.error = f"unexpected character {ch!r} at line {self._line}, column {self._column}"
        return self._eof()

    def _block_comment_content(self) -> Token:
        """Everything up to the matching ``*/``; nested pairs stay inside."""
        text = self.text
        pos = self._offset
        depth = 1
        while pos < len(text):
            if text.startswith("/*", pos):
                depth += 1
                pos += 2
            elif text.startswith("*/", pos):
                depth -= 1
                if depth == 0:
                    break
                pos += 2
            else:
                pos += 1
        if pos >= len(text):
            self.error = f"unterminated block comment at line {self._line}"
            return self._eof()
        self._mode = "comment_end"
        # /**/ still yields an (empty) content token
        return self._emit(TokenKind.BLOCK_COMMENT_CONTENT, pos - self._offset)

    def _string(self) -> Token:
        text = self.text
        end = self._offset + 1
        while end < len(text):
            ch = text[end]
            if ch == "\\":
                end += 2
                continue
            if ch == "\n":
                break
            end += 1
            if ch == '"':
                break
        return self._emit(TokenKind.STRING, min(end, len(text)) - self._offset)

    def _number(self) -> Token:
        text = self.text
        pos = self._offset
        if text[pos] == "0" and pos + 1 < len(text) and text[pos + 1].isalpha():
            prefix = text[pos + 1]
            kind, digits = INTEGER_PREFIXES.get(prefix, (TokenKind.UNKNOWN_BASE_INTEGER_LITERAL, None))
            end = pos + 2
            while end < len(text) and (
                text[end] in digits if digits else (text[end] == "_" or text[end].isalnum())
            ):
                end += 1
            return self._emit(kind, end - pos)

        end = pos
        while end < len(text) and (text[end].isdigit() or text[end] == "_"):
            end += 1
        if end + 1 < len(text) and text[end] == "." and text[end + 1].isdigit():
            end += 1
            while end < len(text) and (text[end].isdigit() or text[end] == "_"):
                end += 1
            return self._emit(TokenKind.FIXED_POINT_NUMBER_LITERAL, end - pos)
        return self._emit(TokenKind.DECIMAL_INTEGER_LITERAL, end - pos)

    def _emit(self, kind: TokenKind, length: int) -> Token:
        start_offset = self._offset
        start_line = self._line
        start_column = self._column
        value = self.text[start_offset:start_offset + length]

        line = self._line
        column = self._column
        end_line, end_column = line, column
        for ch in value:
            end_line, end_column = line, column
            if ch == "\n":
                line += 1
                column = 0
            else:
                column += 1

        self._offset = start_offset + length
        self._line = line
        self._column = column
        return Token(
            kind=kind,
            text=value,
            start_offset=start_offset,
            end_offset=self._offset,
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
        )

    def _eof(self) -> Token:
        return Token(
            kind=TokenKind.EOF,
            text="",
            start_offset=self._offset,
            end_offset=self._offset,
            start_line=self._line,
            start_column=self._column,
            end_line=self._line,
            end_column=self._column,
        )


def lex(text: str) -> TokenStream:
    return TokenStream(text)


def tokenize(text: str) -> list[Token]:
    """All tokens of *text*, EOF included."""
    return list(lex(text))


def kind_by_name(name: str) -> TokenKind:
    """Look up a TokenKind by its name (used by the YAML config)."""
    try:
        return TokenKind[name.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown token kind: {name!r}") from None
