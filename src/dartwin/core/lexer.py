"""
Lexer/Tokenizer for the DarTwin DSL.

Converts raw DSL text into a stream of tokens with source location tracking.
Unlike a compiler front end, the lexer never rejects input: the DSL is read
from a live editor buffer, so anything it does not recognise becomes an
UNKNOWN token that the parser skips.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class TokenType(Enum):
    """Token types in the DarTwin DSL."""

    # Literals
    IDENTIFIER = "IDENTIFIER"

    # Declaration keywords
    DARTWIN = "#dartwin"
    TWINSYSTEM = "#twinsystem"
    DIGITALTWIN = "#digitaltwin"
    GOAL = "#goal"
    DARTRANS = "#dartrans"
    BEFORE = "#before"
    CORE = "#core"
    AFTER = "#after"

    # Statement keywords
    PART = "part"
    PORT = "port"
    CONNECT = "connect"
    TO = "to"
    NAME = "name"
    DOC = "doc"
    ALLOCATE = "allocate"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    SEMICOLON = ";"
    DOT = "."
    COLON = ":"

    # Comments are kept as tokens: `// name: x` and `doc /* ... */` carry meaning
    LINE_COMMENT = "LINE_COMMENT"
    BLOCK_COMMENT = "BLOCK_COMMENT"

    # Anything else
    UNKNOWN = "UNKNOWN"
    EOF = "EOF"


# Keywords are matched case-insensitively
KEYWORDS = {
    "#dartwin": TokenType.DARTWIN,
    "#twinsystem": TokenType.TWINSYSTEM,
    "#digitaltwin": TokenType.DIGITALTWIN,
    "#goal": TokenType.GOAL,
    "#dartrans": TokenType.DARTRANS,
    "#before": TokenType.BEFORE,
    "#core": TokenType.CORE,
    "#after": TokenType.AFTER,
    "part": TokenType.PART,
    "port": TokenType.PORT,
    "connect": TokenType.CONNECT,
    "to": TokenType.TO,
    "name": TokenType.NAME,
    "doc": TokenType.DOC,
    "allocate": TokenType.ALLOCATE,
}

# Statement keywords that may still appear as names (e.g. a port called `doc`)
KEYWORD_AS_IDENTIFIER_TYPES = frozenset(
    {
        TokenType.PART,
        TokenType.PORT,
        TokenType.CONNECT,
        TokenType.TO,
        TokenType.NAME,
        TokenType.DOC,
        TokenType.ALLOCATE,
    }
)

PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
}


@dataclass
class Token:
    """
    A single token in the DSL.

    Attributes:
        type: Type of token
        value: String value of the token (comment text for comments)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"


def is_identifier_start(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch in ("_", "-")


class Lexer:
    """
    Lexer for the DarTwin DSL.

    Converts source text into a flat token stream. Whitespace (including
    newlines) is insignificant; line numbers are kept on each token.
    """

    def __init__(self, text: str, file: Path | None = None):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for diagnostics), None for editor buffers
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < len(self.text):
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def skip_whitespace(self) -> None:
        """Skip whitespace characters, newlines included."""
        while (ch := self.current_char()) is not None and ch.isspace():
            self.advance()

    def read_line_comment(self) -> str:
        """Read a `//` comment up to (not including) the end of line."""
        chars = []
        while (ch := self.current_char()) is not None and ch != "\n":
            chars.append(ch)
            self.advance()
        return "".join(chars)

    def read_block_comment(self) -> str:
        """
        Read a `/* ... */` comment and return its inner text.

        An unterminated comment runs to the end of input.
        """
        self.advance()  # /
        self.advance()  # *
        chars = []
        while (ch := self.current_char()) is not None:
            if ch == "*" and self.peek_char() == "/":
                self.advance()
                self.advance()
                break
            chars.append(ch)
            self.advance()
        return "".join(chars)

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        chars = []
        while (ch := self.current_char()) is not None and is_identifier_char(ch):
            chars.append(ch)
            self.advance()
        return "".join(chars)

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF
        """
        while True:
            self.skip_whitespace()

            ch = self.current_char()
            if ch is None:
                break

            token_line = self.line
            token_col = self.column

            # Comments
            if ch == "/" and self.peek_char() == "/":
                value = self.read_line_comment()
                self.tokens.append(Token(TokenType.LINE_COMMENT, value, token_line, token_col))

            elif ch == "/" and self.peek_char() == "*":
                value = self.read_block_comment()
                self.tokens.append(Token(TokenType.BLOCK_COMMENT, value, token_line, token_col))

            # Declaration keywords: #word
            elif ch == "#":
                self.advance()
                word = "#" + self.read_identifier()
                token_type = KEYWORDS.get(word.lower(), TokenType.UNKNOWN)
                self.tokens.append(Token(token_type, word, token_line, token_col))

            # Identifiers and statement keywords
            elif is_identifier_start(ch):
                value = self.read_identifier()
                token_type = KEYWORDS.get(value.lower(), TokenType.IDENTIFIER)
                self.tokens.append(Token(token_type, value, token_line, token_col))

            elif ch in PUNCTUATION:
                self.advance()
                self.tokens.append(Token(PUNCTUATION[ch], ch, token_line, token_col))

            else:
                self.advance()
                self.tokens.append(Token(TokenType.UNKNOWN, ch, token_line, token_col))

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column))

        return self.tokens


def tokenize(text: str, file: Path | None = None) -> list[Token]:
    """
    Convenience function to tokenize DSL text.

    Args:
        text: Source text
        file: Source file path

    Returns:
        List of tokens
    """
    lexer = Lexer(text, file)
    return lexer.tokenize()
