"""Tests for balanced block extraction."""

from dartwin.core.blocks import extract_block
from dartwin.core.lexer import TokenType, tokenize


class TestExtractBlock:
    """Tests for extract_block."""

    def test_nested_text_block(self):
        """Test the body keeps nested blocks intact."""
        block = extract_block("a { b { c } } d", 2)

        assert block.body == " b { c } "
        assert block.end == 12
        assert block.closed

    def test_empty_block(self):
        """Test an empty block has an empty body."""
        block = extract_block("{}", 0)

        assert block.body == ""
        assert block.end == 1

    def test_unclosed_block(self):
        """Test an unbalanced block yields an empty body at source end."""
        block = extract_block("a { b { c }", 2)

        assert block.body == ""
        assert block.end == len("a { b { c }")
        assert not block.closed

    def test_sequence_of_strings(self):
        """Test extraction over a list keeps the list type."""
        block = extract_block(["x", "{", "y", "}", "z"], 1)

        assert block.body == ["y"]
        assert block.end == 3

    def test_tokens_with_predicates(self):
        """Test extraction over tokens with custom brace predicates."""
        tokens = tokenize("part P { port a; } port b;")
        start = next(i for i, t in enumerate(tokens) if t.type == TokenType.LBRACE)

        block = extract_block(
            tokens,
            start,
            is_open=lambda t: t.type == TokenType.LBRACE,
            is_close=lambda t: t.type == TokenType.RBRACE,
        )

        assert [t.value for t in block.body] == ["port", "a", ";"]
        assert tokens[block.end].type == TokenType.RBRACE
