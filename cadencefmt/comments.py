"""Comment classification.

Decides, for every comment found in the original source, how it should be
re-inserted into the re-rendered program:

  - Trailing line comments (code before them on the same line) stay on the
    line of the token they followed, separated by a single space.
  - Leading line comments (alone on their line) are re-emitted on their own
    line, above the next token, keeping one blank line before/after them
    when the original had one.
  - Block comments are re-emitted verbatim. One alone on its line keeps its
    own line, one spanning several lines becomes its own paragraph. One that
    ends a line of code stays there like a trailing line comment; one with
    code after it keeps a space before that code.
"""

from __future__ import annotations

from dataclasses import dataclass

from cadencefmt.lexer import Token, TokenKind


@dataclass
class CommentRecord:
    """A classified comment, ready for insertion."""
    text: str                     # Verbatim comment text, delimiters included
    block: bool                   # /* */ comment (otherwise //)
    trailing: bool                # Shares its line with preceding code
    blank_line_before: bool       # Original has a blank line right above
    blank_line_after: bool        # Original has a blank line right below
    multiline: bool = False       # Block comment spanning several lines
    own_line: bool = False        # Block comment alone on its line
    code_after: bool = False      # Code follows the closing */ on its line


def split_lines(source: str) -> list[str]:
    return source.split("\n")


def is_blank(line: str) -> bool:
    return not line.strip(" \t\r")


def _block_surroundings(token: Token, lines: list[str]) -> tuple[str, str]:
    """Source text before the ``/*`` and after the ``*/`` of a content token."""
    before = lines[token.start_line - 1][:max(0, token.start_column - 2)]
    # Position of the closing */
    if not token.text:
        close_line, close_column = token.start_line, token.start_column
    elif token.text.endswith("\n"):
        close_line, close_column = token.end_line + 1, 0
    else:
        close_line, close_column = token.end_line, token.end_column + 1
    after = lines[close_line - 1][close_column + 2:] if close_line <= len(lines) else ""
    return before, after


def classify_comment(token: Token, lines: list[str]) -> CommentRecord:
    """Classify a LINE_COMMENT or BLOCK_COMMENT_CONTENT token.

    *lines* is the original source split on line breaks.
    """
    if token.kind is TokenKind.BLOCK_COMMENT_CONTENT:
        before, after = _block_surroundings(token, lines)
        return CommentRecord(
            text=f"/*{token.text}*/",
            block=True,
            # Code before and nothing after: stays at the end of that line
            trailing=not is_blank(before) and is_blank(after),
            blank_line_before=False,
            blank_line_after=False,
            multiline="\n" in token.text,
            own_line=is_blank(before) and is_blank(after),
            code_after=not is_blank(after),
        )
    if token.kind is not TokenKind.LINE_COMMENT:
        raise ValueError(f"Not a comment token: {token.kind.name}")

    line_index = token.start_line - 1
    before = lines[line_index][:token.start_column]
    trailing = not is_blank(before)

    blank_before = (
        not trailing
        and line_index > 0
        and is_blank(lines[line_index - 1])
    )
    blank_after = (
        not trailing
        and line_index + 1 < len(lines)
        and is_blank(lines[line_index + 1])
    )
    return CommentRecord(
        text=token.text.rstrip("\r"),
        block=False,
        trailing=trailing,
        blank_line_before=blank_before,
        blank_line_after=blank_after,
    )


def comment_text(record: CommentRecord, pending_spaces: str) -> str:
    """Text to insert for *record*.

    *pending_spaces* is the whitespace the rendering already holds in front
    of the next token; a blank line already present there is not doubled.
    """
    if record.block:
        if record.trailing:
            return record.text
        if record.multiline:
            return record.text + "\n\n"
        if record.own_line:
            return record.text + "\n"
        # Code follows on the same line
        return record.text + " "

    if record.trailing:
        return record.text

    parts = []
    if record.blank_line_before and not pending_spaces.replace(" ", "").endswith("\n\n"):
        parts.append("\n")
    parts.append(record.text)
    if record.blank_line_after:
        parts.append("\n")
    parts.append("\n")
    return "".join(parts)
