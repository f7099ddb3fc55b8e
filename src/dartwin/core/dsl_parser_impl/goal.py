"""
Goal and allocation parsing for DarTwin DSL.
"""

from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import TokenType


def normalize_doc(text: str) -> str | None:
    """
    Collapse documentation text onto one line.

    Lines are trimmed, blank lines dropped and whitespace runs reduced to a
    single space. Returns None when nothing is left.

    >>> normalize_doc('''
    ...     Keep the plants
    ...        well watered.
    ... ''')
    'Keep the plants well watered.'
    """
    normalized = " ".join(text.split())
    return normalized or None


class GoalParserMixin:
    """
    Mixin providing goal and allocation parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        accept: Any
        advance: Any
        match: Any
        peek_token: Any
        expect_identifier_or_keyword: Any
        skip_block: Any
        close_block: Any
        parse_reference: Any

    def parse_goal(self) -> ir.Goal:
        """
        Parse a goal.

        Syntax:
            #goal Irrigation
            #goal Irrigation { doc /* Keep the soil moist. */ }

        Only the first ``doc`` comment in the block is used; anything else
        in the block is ignored.
        """
        self.expect(TokenType.GOAL)
        name = self.expect_identifier_or_keyword().value

        doc = None
        if self.match(TokenType.LBRACE):
            opened = self.advance()
            while not self.match(TokenType.RBRACE, TokenType.EOF):
                if self.match(TokenType.DOC) and self.peek_token().type == TokenType.BLOCK_COMMENT:
                    self.advance()
                    comment = self.advance()
                    if doc is None:
                        doc = normalize_doc(comment.value)
                elif self.match(TokenType.LBRACE):
                    self.skip_block()
                else:
                    self.advance()
            self.close_block(f"#goal {name}", opened)
        else:
            self.accept(TokenType.SEMICOLON)

        return ir.Goal(name=name, doc=doc)

    def parse_allocation(self) -> ir.Allocation:
        """
        Parse an allocation.

        Syntax:
            allocate <goal> to <ref> ;
        """
        self.expect(TokenType.ALLOCATE)
        goal = self.expect_identifier_or_keyword().value
        self.expect(TokenType.TO)
        target = self.parse_reference()
        self.expect(TokenType.SEMICOLON)
        return ir.Allocation(goal=goal, target=target)
