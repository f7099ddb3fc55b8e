"""
Base parser class for the DarTwin DSL.

Provides token navigation, error recovery and diagnostics used by all
parser mixins. A malformed statement raises ``ParseError``; the enclosing
block loop catches it, records a diagnostic and resynchronises, so the
parser as a whole never raises.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

from .. import ir
from ..blocks import extract_block
from ..errors import ParseError, make_parse_error
from ..lexer import KEYWORD_AS_IDENTIFIER_TYPES, Token, TokenType

logger = logging.getLogger(__name__)

# Tokens that start a statement; recovery stops in front of them
STATEMENT_STARTS = frozenset(
    {
        TokenType.DARTWIN,
        TokenType.TWINSYSTEM,
        TokenType.DIGITALTWIN,
        TokenType.PART,
        TokenType.PORT,
        TokenType.CONNECT,
        TokenType.GOAL,
        TokenType.ALLOCATE,
        TokenType.DARTRANS,
        TokenType.BEFORE,
        TokenType.CORE,
        TokenType.AFTER,
    }
)


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    This allows mypy to understand that mixins will have access to
    BaseParser methods when combined in the final Parser class.
    """

    tokens: list[Token]
    file: Path | None
    pos: int
    line_comments: dict[int, Token]

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def advance(self) -> Token: ...
    def expect(self, token_type: TokenType) -> Token: ...
    def expect_identifier_or_keyword(self) -> Token: ...
    def match(self, *token_types: TokenType) -> bool: ...
    def accept(self, token_type: TokenType) -> Token | None: ...
    def skip_block(self) -> None: ...
    def close_block(self, owner: str, opened_at: Token) -> None: ...
    def parse_statements(self, handlers: dict[TokenType, Callable[[], None]]) -> None: ...


def split_comments(tokens: list[Token]) -> tuple[list[Token], dict[int, Token]]:
    """
    Separate comments from the statement stream.

    Line comments are indexed by line so a statement can look up its
    trailing ``// name: x``. Block comments are dropped unless they directly
    follow ``doc``, where they carry a goal's documentation.
    """
    stream: list[Token] = []
    line_comments: dict[int, Token] = {}
    for token in tokens:
        if token.type == TokenType.LINE_COMMENT:
            line_comments[token.line] = token
            continue
        if token.type == TokenType.BLOCK_COMMENT and not (
            stream and stream[-1].type == TokenType.DOC
        ):
            continue
        stream.append(token)
    return stream, line_comments


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    This class provides the foundation for recursive descent parsing,
    including token navigation, matching, recovery and diagnostics.
    """

    def __init__(self, tokens: list[Token], file: Path | None = None):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer (comments included)
            file: Source file path (for diagnostics)
        """
        self.tokens, self.line_comments = split_comments(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            last_line = self.tokens[-1].line if self.tokens else 1
            self.tokens.append(Token(TokenType.EOF, "", last_line, 1))
        self.file = file
        self.pos = 0
        self.diagnostics: list[ir.Diagnostic] = []

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def accept(self, token_type: TokenType) -> Token | None:
        """Consume the current token if it has the given type."""
        if self.match(token_type):
            return self.advance()
        return None

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            ParseError: If token doesn't match
        """
        token = self.current_token()
        if token.type != token_type:
            found = "end of input" if token.type == TokenType.EOF else repr(token.value)
            raise make_parse_error(
                f"Expected '{token_type.value}', got {found}",
                self.file,
                token.line,
                token.column,
            )
        return self.advance()

    def expect_identifier_or_keyword(self) -> Token:
        """
        Expect a name.

        Statement keywords (``port``, ``to``, ``doc``...) are accepted as
        names so a port may be called ``doc``; declaration keywords are not.
        """
        token = self.current_token()
        if token.type == TokenType.IDENTIFIER or token.type in KEYWORD_AS_IDENTIFIER_TYPES:
            return self.advance()

        found = "end of input" if token.type == TokenType.EOF else repr(token.value)
        raise make_parse_error(
            f"Expected a name, got {found}",
            self.file,
            token.line,
            token.column,
        )

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    def skip_block(self) -> None:
        """Skip a whole ``{ ... }`` block starting at the current token."""
        block = extract_block(
            self.tokens,
            self.pos,
            is_open=lambda token: token.type == TokenType.LBRACE,
            is_close=lambda token: token.type == TokenType.RBRACE,
        )
        if not block.closed:
            opened = self.current_token()
            self.report(
                "unterminated-block",
                "Unclosed '{' skipped to end of input",
                line=opened.line,
                column=opened.column,
            )
            self.pos = len(self.tokens) - 1
            return
        self.pos = block.end + 1

    def close_block(self, owner: str, opened_at: Token) -> None:
        """
        Consume the ``}`` closing ``owner``.

        At end of input the block is reported as unterminated and whatever
        was parsed so far is kept.
        """
        if self.accept(TokenType.RBRACE):
            return
        self.report(
            "unterminated-block",
            f"Block of {owner} is never closed",
            reference=owner,
            line=opened_at.line,
            column=opened_at.column,
        )

    def recover(self, start: int) -> None:
        """
        Resynchronise after a failed statement.

        Skips to just past the next ``;``, in front of the enclosing ``}``
        or the next statement keyword, or past a nested block. Always makes
        progress when the failure happened on the statement's first token.
        """
        if self.pos == start and not self.match(TokenType.RBRACE, TokenType.EOF):
            self.advance()

        while not self.match(TokenType.RBRACE, TokenType.EOF):
            token = self.current_token()
            if token.type == TokenType.SEMICOLON:
                self.advance()
                return
            if token.type == TokenType.LBRACE:
                self.skip_block()
                return
            if token.type in STATEMENT_STARTS:
                return
            self.advance()

    def skip_unknown(self) -> None:
        """Skip one unrecognised token, or a whole unrecognised block."""
        token = self.current_token()
        if token.type == TokenType.LBRACE:
            self.skip_block()
            return
        logger.debug("Skipping %r at %d:%d", token.value, token.line, token.column)
        self.advance()

    def parse_statements(self, handlers: dict[TokenType, Callable[[], None]]) -> None:
        """
        Parse statements until the enclosing ``}`` or end of input.

        Each handler parses one statement starting at its keyword. Tokens
        no handler claims are skipped silently.
        """
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            start = self.pos
            handler = handlers.get(self.current_token().type)
            if handler is None:
                self.skip_unknown()
                continue
            try:
                handler()
            except ParseError as exc:
                self.report_error(exc)
                self.recover(start)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def report(
        self,
        code: str,
        message: str,
        *,
        reference: str | None = None,
        line: int | None = None,
        column: int | None = None,
        severity: str = "warning",
    ) -> None:
        diagnostic = ir.Diagnostic(
            severity=ir.DiagnosticSeverity(severity),
            code=ir.DiagnosticCode(code),
            message=message,
            reference=reference,
            line=line,
            column=column,
        )
        self.diagnostics.append(diagnostic)
        logger.debug("%s", diagnostic.format())

    def report_error(self, exc: ParseError) -> None:
        context = exc.context
        self.report(
            "syntax",
            exc.message,
            line=context.line if context else None,
            column=context.column if context else None,
        )
