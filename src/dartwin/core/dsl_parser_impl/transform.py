"""
Transformation section parsing for DarTwin DSL.

A ``#dartrans`` block describes an architecture change with up to three
slices (``#before``, ``#core``, ``#after``), each holding the same
declarations as the document root.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import TokenType

SECTION_TOKENS = (TokenType.BEFORE, TokenType.CORE, TokenType.AFTER)


@dataclass
class Declarations:
    """Declarations collected from one block, in source order."""

    systems: list[ir.TwinSystem] = field(default_factory=list)
    goals: list[ir.Goal] = field(default_factory=list)
    allocations: list[ir.Allocation] = field(default_factory=list)

    def to_slice(self) -> ir.DarTwinSlice:
        return ir.DarTwinSlice(
            systems=self.systems or None,
            goals=self.goals or None,
            allocations=self.allocations or None,
        )


class TransformParserMixin:
    """
    Mixin providing ``#dartrans`` parsing and the shared declaration handlers.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        close_block: Any
        parse_statements: Any
        report: Any
        parse_twin_system: Any
        parse_goal: Any
        parse_allocation: Any

    def declaration_handlers(self, found: Declarations) -> dict[TokenType, Callable[[], None]]:
        """Statement handlers for systems, goals and allocations."""
        return {
            TokenType.TWINSYSTEM: lambda: found.systems.append(self.parse_twin_system()),
            TokenType.GOAL: lambda: found.goals.append(self.parse_goal()),
            TokenType.ALLOCATE: lambda: found.allocations.append(self.parse_allocation()),
        }

    def parse_dartrans(self) -> ir.DarTrans | None:
        """
        Parse a transformation section.

        Syntax:
            #dartrans {
                #before { ... }
                #core { ... }
                #after { ... }
            }

        Returns None when the section declares no sub-section.
        """
        self.expect(TokenType.DARTRANS)
        opened = self.expect(TokenType.LBRACE)

        sections: dict[str, ir.DarTwinSlice] = {}
        self.parse_statements(
            {
                token_type: (lambda token_type=token_type: self.parse_section(token_type, sections))
                for token_type in SECTION_TOKENS
            }
        )
        self.close_block("#dartrans", opened)

        if not sections:
            return None
        return ir.DarTrans(**sections)

    def parse_section(self, token_type: TokenType, sections: dict[str, ir.DarTwinSlice]) -> None:
        """Parse one sub-section into ``sections``; a repeated one is ignored."""
        keyword = self.expect(token_type)
        opened = self.expect(TokenType.LBRACE)

        found = Declarations()
        self.parse_statements(self.declaration_handlers(found))
        self.close_block(token_type.value, opened)

        label = token_type.value.lstrip("#")
        if label in sections:
            self.report(
                "duplicate-section",
                f"Repeated {token_type.value} section ignored",
                reference=token_type.value,
                line=keyword.line,
                column=keyword.column,
            )
            return
        sections[label] = found.to_slice()
