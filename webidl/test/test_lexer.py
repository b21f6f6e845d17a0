"""Tests for the WebIDL tokenizer."""

import pytest

from webidl.errors import LexError
from webidl.lexer import (tokenize, TOK_EOF, TOK_FLOAT, TOK_IDENT,
                          TOK_INTEGER, TOK_KEYWORD, TOK_PUNCT, TOK_STRING)

from .conftest import DOM_IDL, FEATURES_IDL


def kinds_and_text(text):
    return [(t.kind, t.text) for t in tokenize(text)]


# -- Classification ---------------------------------------------------------

class TestClassification:
    def test_empty_input_is_only_eof(self):
        assert kinds_and_text("") == [(TOK_EOF, "")]

    def test_keyword_vs_identifier(self):
        assert kinds_and_text("interface Foo") == [
            (TOK_KEYWORD, "interface"),
            (TOK_IDENT, "Foo"),
            (TOK_EOF, ""),
        ]

    def test_identifier_with_underscore_and_dash(self):
        toks = list(tokenize("_interface data-id"))
        assert toks[0].kind == TOK_IDENT and toks[0].text == "_interface"
        assert toks[1].kind == TOK_IDENT and toks[1].text == "data-id"

    def test_string(self):
        toks = list(tokenize('"smooth"'))
        assert toks[0].kind == TOK_STRING
        assert toks[0].text == '"smooth"'

    def test_integers(self):
        for text in ("0", "42", "-7", "0x1F", "017"):
            tok = next(tokenize(text))
            assert tok.kind == TOK_INTEGER, text
            assert tok.text == text

    def test_floats(self):
        for text in ("1.5", ".5", "3.", "1e10", "-2.5E-3"):
            tok = next(tokenize(text))
            assert tok.kind == TOK_FLOAT, text
            assert tok.text == text

    def test_negative_infinity_is_keyword(self):
        tok = next(tokenize("-Infinity"))
        assert tok.kind == TOK_KEYWORD
        assert tok.text == "-Infinity"

    def test_ellipsis_longest_match(self):
        assert kinds_and_text("any... x")[1] == (TOK_PUNCT, "...")

    def test_single_punctuation(self):
        texts = [t.text for t in tokenize("( ) , : ; < = > ? [ ] { } *")]
        assert texts[:-1] == ["(", ")", ",", ":", ";", "<", "=", ">", "?",
                              "[", "]", "{", "}", "*"]

    def test_comments_are_skipped(self):
        text = "// line\nlong /* block\n comment */ x"
        assert kinds_and_text(text) == [
            (TOK_KEYWORD, "long"),
            (TOK_IDENT, "x"),
            (TOK_EOF, ""),
        ]


# -- Positions --------------------------------------------------------------

class TestPositions:
    @pytest.mark.parametrize("text", [DOM_IDL, FEATURES_IDL])
    def test_slice_matches_token_text(self, text):
        for tok in tokenize(text):
            assert text[tok.start:tok.end] == tok.text

    def test_line_and_column(self):
        toks = list(tokenize("enum E {\n  \"a\"\n};"))
        a = toks[3]
        assert a.text == '"a"'
        assert (a.line, a.column) == (2, 3)

    def test_block_comment_advances_lines(self):
        toks = list(tokenize("/* one\ntwo\n*/ x"))
        assert (toks[0].line, toks[0].column) == (3, 4)

    def test_eof_position(self):
        toks = list(tokenize("a\nbc"))
        eof = toks[-1]
        assert eof.kind == TOK_EOF
        assert (eof.start, eof.line, eof.column) == (4, 2, 3)


# -- Laziness and determinism -----------------------------------------------

class TestStream:
    def test_lazy(self):
        # The bad character is never reached when only the head is consumed.
        stream = tokenize("interface @")
        assert next(stream).text == "interface"

    def test_restartable(self):
        assert list(tokenize(DOM_IDL)) == list(tokenize(DOM_IDL))


# -- Errors -----------------------------------------------------------------

class TestLexErrors:
    def test_unterminated_string(self):
        with pytest.raises(LexError) as exc:
            list(tokenize('enum E { "abc };'))
        assert exc.value.span.start == 9
        assert "unterminated string" in exc.value.message

    def test_string_cannot_span_lines(self):
        with pytest.raises(LexError) as exc:
            list(tokenize('"abc\ndef"'))
        assert exc.value.line == 1

    def test_unterminated_block_comment(self):
        with pytest.raises(LexError):
            list(tokenize("long /* never closed"))

    def test_illegal_character(self):
        with pytest.raises(LexError) as exc:
            list(tokenize("interface A {\n  @x\n};"))
        assert (exc.value.line, exc.value.column) == (2, 3)
        assert exc.value.span.start == 16
        assert exc.value.kind == "LexError"
