"""Output buffers for the merge loop.

Three independent buffers:
  - spaces:  whitespace copied from the rendering since the last emitted token
  - comment: classified comment text not yet attached to a token
  - result:  the final output, append-only
"""

from __future__ import annotations


def indent_lines(padding: str, text: str) -> str:
    """Prefix every non-blank line of *text* with *padding*."""
    if not padding or not text:
        return text
    out = []
    for line in text.splitlines(keepends=True):
        if line.strip(" \t\n"):
            out.append(padding + line)
        else:
            out.append(line)
    return "".join(out)


class Accumulator:
    def __init__(self):
        self._spaces: list[str] = []
        self._comment: list[str] = []
        self._result: list[str] = []
        self.pending_comments = 0
        # The result ends in a // comment with no line break after it yet
        self._in_line_comment = False
        self._started = False

    # ─── spaces ──────────────────────────────────────────────────────────

    def add_spaces(self, text: str) -> None:
        self._spaces.append(text)

    @property
    def spaces(self) -> str:
        return "".join(self._spaces)

    # ─── comments ────────────────────────────────────────────────────────

    def add_comment(self, text: str) -> None:
        self._comment.append(text)
        self.pending_comments += 1

    def attach_trailing(self, text: str) -> None:
        """Put a trailing comment (and anything pending) after the last token."""
        self._result.append(" ")
        self._result.extend(self._comment)
        self._result.append(text)
        self._in_line_comment = text.startswith("//")
        self._clear_comment()

    def finish(self) -> str:
        """Final flush: trailing whitespace of the rendering, then leftovers.

        Comments still pending here followed the last token of the program;
        they go on their own lines, ending with a single line break.
        """
        self._result.append(self.spaces.rstrip(" \t"))
        self._spaces.clear()
        if self._comment:
            text = self.getvalue()
            if text and not text.endswith("\n"):
                self._result.append("\n")
            self._result.append("".join(self._comment).rstrip("\n") + "\n")
            self._clear_comment()
        return self.getvalue()

    def _clear_comment(self) -> None:
        self._comment.clear()
        self.pending_comments = 0

    # ─── emission ────────────────────────────────────────────────────────

    def _break_line_comment(self, spaces: str, column: int) -> str:
        """Spacing to emit before the next text.

        After a // comment the next text must start a new line; if the
        rendering joined it onto the comment's line, break and pad to
        *column* instead.
        """
        if self._in_line_comment and "\n" not in spaces:
            spaces = "\n" + " " * column
        self._in_line_comment = False
        return spaces

    def emit_verbatim(self, text: str, column: int = 0) -> None:
        """Spaces exactly as rendered, then *text*."""
        spaces = self._break_line_comment(self.spaces, column)
        self._spaces.clear()
        self._result.append(spaces)
        self._result.append(text)
        self._started = True

    def emit_token(self, text: str, column: int) -> None:
        """Emit a synchronized token, placing pending comments before it.

        *column* is the token's column in the rendering. At the start of a
        line, comments are indented to it and the token is re-padded to it
        after them. Mid-line, comments go inline between the rendered
        spacing and the token.
        """
        spaces = self._break_line_comment(self.spaces, column)
        head = spaces.rstrip(" \t")
        existing_indent = spaces[len(head):]
        self._result.append(head)
        self._spaces.clear()

        if self._comment:
            comments = "".join(self._comment)
            padding = " " * column
            if head.endswith("\n") or not self._started:
                self._result.append(indent_lines(padding, comments))
                self._result.append(padding)
            else:
                self._result.append(existing_indent)
                self._result.append(comments)
                if comments.endswith("\n"):
                    self._result.append(padding)
            self._clear_comment()
        else:
            self._result.append(existing_indent)

        self._result.append(text)
        self._started = True

    def getvalue(self) -> str:
        return "".join(self._result)
