"""
Twin system parsing for DarTwin DSL.

Handles ``#twinsystem`` blocks with their digital twins, original twins
(``part``) and ``connect`` statements.
"""

import re
from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import Token, TokenType

# Trailing `// name: <id>` after a connect statement
TRAILING_NAME_RE = re.compile(r"//\s*name\s*:\s*([\w-]+)", re.IGNORECASE)


class SystemParserMixin:
    """
    Mixin providing twin system parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        accept: Any
        advance: Any
        match: Any
        current_token: Any
        expect_identifier_or_keyword: Any
        close_block: Any
        parse_statements: Any
        line_comments: dict[int, Token]

    def parse_twin_system(self) -> ir.TwinSystem:
        """
        Parse a twin system.

        Syntax:
            #twinsystem Strawberry {
                #digitaltwin StrawberryDT { port multisensor_input; }
                part Cultivation { port MultiSensor; }
                connect Strawberry.Cultivation.MultiSensor to StrawberryDT.multisensor_input;
            }
        """
        self.expect(TokenType.TWINSYSTEM)
        name = self.expect_identifier_or_keyword().value
        opened = self.expect(TokenType.LBRACE)

        digital_twins: list[ir.DigitalTwin] = []
        original_twins: list[ir.OriginalTwin] = []
        connections: list[ir.Connection] = []

        self.parse_statements(
            {
                TokenType.DIGITALTWIN: lambda: digital_twins.append(self.parse_digital_twin()),
                TokenType.PART: lambda: original_twins.append(self.parse_original_twin()),
                TokenType.CONNECT: lambda: connections.append(self.parse_connection()),
            }
        )
        self.close_block(f"#twinsystem {name}", opened)

        return ir.TwinSystem(
            name=name,
            digital_twins=digital_twins,
            original_twins=original_twins,
            connections=connections,
        )

    def parse_digital_twin(self) -> ir.DigitalTwin:
        """Parse ``#digitaltwin <name> { port <name>; ... }``."""
        self.expect(TokenType.DIGITALTWIN)
        name = self.expect_identifier_or_keyword().value
        return ir.DigitalTwin(name=name, ports=self.parse_port_block(f"#digitaltwin {name}"))

    def parse_original_twin(self) -> ir.OriginalTwin:
        """Parse ``part <name> { port <name>; ... }``."""
        self.expect(TokenType.PART)
        name = self.expect_identifier_or_keyword().value
        return ir.OriginalTwin(name=name, ports=self.parse_port_block(f"part {name}"))

    def parse_port_block(self, owner: str) -> list[str]:
        """Parse a twin body; only ``port`` statements are meaningful."""
        opened = self.expect(TokenType.LBRACE)
        ports: list[str] = []
        self.parse_statements({TokenType.PORT: lambda: ports.append(self.parse_port())})
        self.close_block(owner, opened)
        return ports

    def parse_port(self) -> str:
        self.expect(TokenType.PORT)
        name = self.expect_identifier_or_keyword().value
        self.expect(TokenType.SEMICOLON)
        return name

    def parse_reference(self) -> str:
        """Parse a dotted reference like ``System.Twin.port``."""
        parts = [self.expect_identifier_or_keyword().value]
        while self.accept(TokenType.DOT):
            parts.append(self.expect_identifier_or_keyword().value)
        return ".".join(parts)

    def parse_connection(self) -> ir.Connection:
        """
        Parse a connection.

        Syntax:
            connect <ref> to <ref> [name <id>] ;  [// name: <id>]

        The trailing comment only names the connection when no inline name
        was given.
        """
        self.expect(TokenType.CONNECT)
        source = self.parse_reference()
        self.expect(TokenType.TO)
        target = self.parse_reference()

        name = None
        if self.accept(TokenType.NAME):
            name = self.expect_identifier_or_keyword().value

        semicolon = self.expect(TokenType.SEMICOLON)
        if name is None:
            name = self._trailing_name(semicolon)

        return ir.Connection(from_=source, to=target, name=name)

    def _trailing_name(self, semicolon: Token) -> str | None:
        comment = self.line_comments.get(semicolon.line)
        if comment is None:
            return None

        # Another statement between the `;` and the comment owns it
        following = self.current_token()
        if following.line == semicolon.line and following.column < comment.column:
            return None

        match = TRAILING_NAME_RE.search(comment.value)
        return match.group(1) if match else None
