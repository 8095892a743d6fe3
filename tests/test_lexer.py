"""Tests for cadencefmt/lexer.py — Cadence lexer and token stream."""

import pytest

from cadencefmt.lexer import TokenKind, kind_by_name, lex, tokenize


def _kinds(text: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(text)]


def _significant(text: str) -> list[TokenKind]:
    return [k for k in _kinds(text) if k is not TokenKind.SPACE]


class TestBasicTokens:
    def test_declaration(self):
        assert _kinds("let x = 1") == [
            TokenKind.IDENTIFIER, TokenKind.SPACE,
            TokenKind.IDENTIFIER, TokenKind.SPACE,
            TokenKind.EQUAL, TokenKind.SPACE,
            TokenKind.DECIMAL_INTEGER_LITERAL,
            TokenKind.EOF,
        ]

    def test_whitespace_run_is_one_token(self):
        tokens = tokenize("a \n\t\n  b")
        assert tokens[1].kind is TokenKind.SPACE
        assert tokens[1].text == " \n\t\n  "

    def test_texts_cover_source(self):
        source = 'pub fun f(a: Int): String { return "x" }\n'
        assert "".join(t.text for t in tokenize(source)) == source

    def test_grouping_punctuation(self):
        assert _significant("({[]})") == [
            TokenKind.PAREN_OPEN, TokenKind.BRACE_OPEN, TokenKind.BRACKET_OPEN,
            TokenKind.BRACKET_CLOSE, TokenKind.BRACE_CLOSE, TokenKind.PAREN_CLOSE,
            TokenKind.EOF,
        ]

    def test_multi_char_operators(self):
        assert _significant("<-! <-> <- <= << >= == != ?? ?. && ||") == [
            TokenKind.LEFT_ARROW_EXCLAMATION,
            TokenKind.SWAP_ARROW,
            TokenKind.LEFT_ARROW,
            TokenKind.LESS_EQUAL,
            TokenKind.LESS_LESS,
            TokenKind.GREATER_EQUAL,
            TokenKind.EQUAL_EQUAL,
            TokenKind.NOT_EQUAL,
            TokenKind.DOUBLE_QUESTION_MARK,
            TokenKind.QUESTION_MARK_DOT,
            TokenKind.AMPERSAND_AMPERSAND,
            TokenKind.VERTICAL_BAR_VERTICAL_BAR,
            TokenKind.EOF,
        ]

    def test_shift_right_is_two_greater(self):
        assert _significant("a >> b")[1:3] == [TokenKind.GREATER, TokenKind.GREATER]

    def test_numbers(self):
        assert _significant("0b101 0o17 0xFF 1_000 1.5 0z1") == [
            TokenKind.BINARY_INTEGER_LITERAL,
            TokenKind.OCTAL_INTEGER_LITERAL,
            TokenKind.HEXADECIMAL_INTEGER_LITERAL,
            TokenKind.DECIMAL_INTEGER_LITERAL,
            TokenKind.FIXED_POINT_NUMBER_LITERAL,
            TokenKind.UNKNOWN_BASE_INTEGER_LITERAL,
            TokenKind.EOF,
        ]

    def test_member_access_after_integer(self):
        assert _significant("1.foo") == [
            TokenKind.DECIMAL_INTEGER_LITERAL, TokenKind.DOT, TokenKind.IDENTIFIER, TokenKind.EOF,
        ]

    def test_string_with_escaped_quote(self):
        tokens = tokenize('"a\\"b" x')
        assert tokens[0].kind is TokenKind.STRING
        assert tokens[0].text == '"a\\"b"'

    def test_unterminated_string_stops_at_line_end(self):
        tokens = tokenize('"abc\nx')
        assert tokens[0].kind is TokenKind.STRING
        assert tokens[0].text == '"abc'
        assert tokens[2].kind is TokenKind.IDENTIFIER

    def test_unicode_identifier(self):
        assert _significant("größe") == [TokenKind.IDENTIFIER, TokenKind.EOF]


class TestPositions:
    def test_line_and_column(self):
        tokens = tokenize("a\n  bc")
        bc = tokens[2]
        assert (bc.start_line, bc.start_column) == (2, 2)
        assert (bc.end_line, bc.end_column) == (2, 3)
        assert (bc.start_offset, bc.end_offset) == (4, 6)

    def test_space_with_newline_ends_on_newline_line(self):
        space = tokenize("a \nb")[1]
        assert (space.start_line, space.end_line) == (1, 1)

    def test_eof_position(self):
        eof = tokenize("ab\n")[-1]
        assert eof.kind is TokenKind.EOF
        assert (eof.start_line, eof.start_column) == (2, 0)


class TestComments:
    def test_line_comment_excludes_newline(self):
        tokens = tokenize("x // hi\ny")
        assert tokens[2].kind is TokenKind.LINE_COMMENT
        assert tokens[2].text == "// hi"
        assert tokens[3].text == "\n"

    def test_block_comment_tokens(self):
        assert [(t.kind, t.text) for t in tokenize("/* a */")] == [
            (TokenKind.BLOCK_COMMENT_START, "/*"),
            (TokenKind.BLOCK_COMMENT_CONTENT, " a "),
            (TokenKind.BLOCK_COMMENT_END, "*/"),
            (TokenKind.EOF, ""),
        ]

    def test_nested_block_comment_is_one_content(self):
        tokens = tokenize("/* a /* b */ c */x")
        assert tokens[1].text == " a /* b */ c "
        assert tokens[2].kind is TokenKind.BLOCK_COMMENT_END
        assert tokens[3].kind is TokenKind.IDENTIFIER

    def test_empty_block_comment_has_content_token(self):
        assert _kinds("/**/") == [
            TokenKind.BLOCK_COMMENT_START,
            TokenKind.BLOCK_COMMENT_CONTENT,
            TokenKind.BLOCK_COMMENT_END,
            TokenKind.EOF,
        ]

    def test_multiline_block_comment_positions(self):
        content = tokenize("/* a\n b */")[1]
        assert content.start_line == 1
        assert content.end_line == 2


class TestErrors:
    def test_unterminated_block_comment(self):
        stream = lex("/* never closed")
        kinds = [t.kind for t in stream]
        assert kinds == [TokenKind.BLOCK_COMMENT_START, TokenKind.EOF]
        assert "unterminated" in stream.error

    def test_unknown_character(self):
        stream = lex("let $")
        kinds = [t.kind for t in stream]
        assert kinds[-1] is TokenKind.EOF
        assert TokenKind.IDENTIFIER in kinds
        assert "'$'" in stream.error

    def test_clean_input_has_no_error(self):
        stream = lex("let x = 1")
        list(stream)
        assert stream.error is None


class TestTokenStream:
    def test_eof_repeats(self):
        stream = lex("a")
        assert stream.next().kind is TokenKind.IDENTIFIER
        assert stream.next().kind is TokenKind.EOF
        assert stream.next().kind is TokenKind.EOF

    def test_checkpoint_and_revert(self):
        stream = lex("a b")
        stream.next()
        cp = stream.checkpoint()
        first = stream.next()
        second = stream.next()
        assert second.text == "b"
        stream.revert(cp)
        assert stream.next() == first
        assert stream.next() == second

    def test_revert_inside_block_comment(self):
        stream = lex("/* c */ x")
        stream.next()
        cp = stream.checkpoint()
        content = stream.next()
        stream.next()
        stream.revert(cp)
        assert stream.next() == content
        assert stream.next().kind is TokenKind.BLOCK_COMMENT_END


class TestKindByName:
    def test_case_insensitive(self):
        assert kind_by_name("paren_open") is TokenKind.PAREN_OPEN

    def test_unknown(self):
        with pytest.raises(ValueError):
            kind_by_name("NOT_A_KIND")
