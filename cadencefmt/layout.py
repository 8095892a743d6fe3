"""Layout rules applied to the rendered token stream.

Structural bypass: grouping punctuation the renderer adds, drops or moves
freely. These tokens are copied from the rendering as-is and never matched
against the original source.

Fixup rules: small rewrites of renderer quirks, checked before the bypass.
Each rule looks at most one significant token ahead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from cadencefmt.lexer import Token, TokenKind, TokenStream


DEFAULT_BYPASS_KINDS = frozenset({
    TokenKind.PAREN_OPEN,
    TokenKind.PAREN_CLOSE,
    TokenKind.BRACKET_OPEN,
    TokenKind.BRACKET_CLOSE,
    # An open brace is only reached here when no fixup consumed it
    TokenKind.BRACE_OPEN,
})


@dataclass(frozen=True)
class FixupRule:
    """Replace ``trigger`` + ``follower`` (whitespace between ignored)."""
    name: str
    trigger: TokenKind
    follower: TokenKind
    replacement: str


# The renderer breaks the braces of a body-less member onto two lines.
EMPTY_BLOCK = FixupRule(
    name="empty_block",
    trigger=TokenKind.BRACE_OPEN,
    follower=TokenKind.BRACE_CLOSE,
    replacement="{}",
)

DEFAULT_FIXUPS: tuple[FixupRule, ...] = (EMPTY_BLOCK,)


def apply_fixups(rules: Iterable[FixupRule], token: Token, stream: TokenStream) -> Optional[str]:
    """Return the replacement text of the first rule matching *token*.

    On a match the follower (and the whitespace before it) stays consumed.
    Otherwise *stream* is rewound to just after *token*.
    """
    for rule in rules:
        if token.kind is not rule.trigger:
            continue
        checkpoint = stream.checkpoint()
        follower = stream.next()
        while follower.kind is TokenKind.SPACE:
            follower = stream.next()
        if follower.kind is rule.follower:
            return rule.replacement
        stream.revert(checkpoint)
    return None
