"""Reconciliation engine.

Merges two token streams of the same program:

  - the ORIGINAL source, which carries the developer's comments and blank
    lines, and
  - the RENDERED source produced by the canonical pretty-printer, which has
    the right line breaks and indentation but no comments at all.

The output keeps the rendering's layout and re-inserts the original's
comments. Both streams are walked together by a TokenZipper: every
significant rendered token pulls the original stream forward until a token
of the same kind shows up, collecting the comments passed on the way.

Resynchronization contract:
  Apart from whitespace, comments, structural-bypass kinds and fixup
  replacements, the rendered kinds must be an order-preserving subsequence
  of the original kinds. When the renderer breaks this (inserts or reorders
  another kind) the original stream runs out early. Comments then end up on
  the wrong token or in the final flush. That state is reported as a
  DesyncEvent in ReconcileStats; with ``strict=True`` it raises DesyncError.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Callable, Optional

from cadencefmt.accumulator import Accumulator
from cadencefmt.comments import classify_comment, comment_text, split_lines
from cadencefmt.layout import DEFAULT_BYPASS_KINDS, DEFAULT_FIXUPS, FixupRule, apply_fixups
from cadencefmt.lexer import COMMENT_KINDS, Token, TokenKind, TokenStream, lex


# ─── Configuration and diagnostics ───────────────────────────────────────────

@dataclass(frozen=True)
class MergeConfig:
    bypass_kinds: frozenset = DEFAULT_BYPASS_KINDS
    fixups: tuple[FixupRule, ...] = DEFAULT_FIXUPS
    strict: bool = False


@dataclass
class DesyncEvent:
    """The original stream ran out before the rendered one."""
    kind: str                     # Rendered token kind being synchronized
    text: str                     # Its text
    line: int                     # Its position in the rendering
    column: int
    pending_comments: int         # Comments that will attach to it


@dataclass
class ReconcileStats:
    comments_seen: int = 0
    leading_comments: int = 0
    trailing_comments: int = 0
    block_comments: int = 0
    flushed_comments: int = 0     # Only placed by the final flush
    desync_events: list[DesyncEvent] = field(default_factory=list)

    @property
    def desynchronized(self) -> bool:
        return bool(self.desync_events)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["desynchronized"] = self.desynchronized
        return data


class DesyncError(RuntimeError):
    def __init__(self, event: DesyncEvent):
        super().__init__(
            f"Original token stream exhausted while synchronizing {event.kind} "
            f"{event.text!r} at line {event.line}, column {event.column}"
        )
        self.event = event


# ─── Two-stream cursor ───────────────────────────────────────────────────────

class TokenZipper:
    """The original and rendered streams, advanced together.

    ``new`` is only moved by advance_new(); ``old`` is only moved by
    resync(), never past the first token matching the rendered kind.
    """

    def __init__(self, old: TokenStream, new: TokenStream):
        self.old = old
        self.new = new
        self.old_token: Optional[Token] = None
        self.new_token: Optional[Token] = None

    @property
    def old_exhausted(self) -> bool:
        return self.old_token is not None and self.old_token.kind is TokenKind.EOF

    @property
    def new_exhausted(self) -> bool:
        return self.new_token is not None and self.new_token.kind is TokenKind.EOF

    def advance_new(self) -> Token:
        if not self.new_exhausted:
            self.new_token = self.new.next()
        return self.new_token

    def resync(self, kind: TokenKind, on_comment: Callable[[Token], None]) -> bool:
        """Advance the original stream to the next token of *kind*.

        Comments passed on the way go to *on_comment*. Returns False when
        the original stream ran out first (for EOF this is a match).
        """
        while not self.old_exhausted:
            self.old_token = self.old.next()
            if self.old_token.kind in COMMENT_KINDS:
                on_comment(self.old_token)
            if self.old_token.kind is kind:
                return True
        return kind is TokenKind.EOF


# ─── Merge loop ──────────────────────────────────────────────────────────────

class Reconciler:
    def __init__(
        self,
        original: str,
        rendered: str,
        config: MergeConfig | None = None,
        stats: ReconcileStats | None = None,
    ):
        self.config = config or MergeConfig()
        self.stats = stats if stats is not None else ReconcileStats()
        self.lines = split_lines(original)
        self.zipper = TokenZipper(lex(original), lex(rendered))
        self.out = Accumulator()

    def run(self) -> str:
        zipper = self.zipper
        out = self.out
        while True:
            token = zipper.advance_new()

            if token.kind is TokenKind.SPACE:
                out.add_spaces(token.text)
                continue

            replacement = apply_fixups(self.config.fixups, token, zipper.new)
            if replacement is not None:
                out.emit_verbatim(replacement, token.start_column)
                continue

            if token.kind in self.config.bypass_kinds:
                out.emit_verbatim(token.text, token.start_column)
                continue

            self._resync(token)

            if zipper.old_exhausted and zipper.new_exhausted:
                self.stats.flushed_comments += out.pending_comments
                return out.finish()

            out.emit_token(token.text, token.start_column)

    def _resync(self, token: Token) -> None:
        if self.zipper.old_exhausted:
            return
        if self.zipper.resync(token.kind, self._take_comment):
            return
        event = DesyncEvent(
            kind=token.kind.name,
            text=token.text,
            line=token.start_line,
            column=token.start_column,
            pending_comments=self.out.pending_comments,
        )
        self.stats.desync_events.append(event)
        if self.config.strict:
            raise DesyncError(event)

    def _take_comment(self, token: Token) -> None:
        record = classify_comment(token, self.lines)
        text = comment_text(record, self.out.spaces)
        self.stats.comments_seen += 1
        if record.block:
            self.stats.block_comments += 1
        if record.trailing:
            self.stats.trailing_comments += 1
            self.out.attach_trailing(text)
            return
        if not record.block:
            self.stats.leading_comments += 1
        self.out.add_comment(text)


def reconcile(
    original: str,
    rendered: str,
    config: MergeConfig | None = None,
    stats: ReconcileStats | None = None,
) -> str:
    """Lay out *original* like *rendered*, keeping the original's comments."""
    return Reconciler(original, rendered, config=config, stats=stats).run()
