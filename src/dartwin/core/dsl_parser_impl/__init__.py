"""
DarTwin DSL Parser Package.

This package provides a recursive descent parser for the DarTwin DSL.
The parser is built using mixins to separate parsing logic by construct type.

The main exports are:
- Parser: The complete parser class
- parse_dartwin: Convenience function to parse DSL text into a model
- parse_dartwin_with_diagnostics: Same, also returning the diagnostics

Usage:
    from dartwin.core.dsl_parser_impl import parse_dartwin

    model = parse_dartwin(text)
"""

import logging
from pathlib import Path

from .. import ir
from ..errors import ParseError
from ..lexer import TokenType, tokenize
from .base import BaseParser
from .goal import GoalParserMixin, normalize_doc
from .system import SystemParserMixin
from .transform import Declarations, TransformParserMixin

logger = logging.getLogger(__name__)


class Parser(
    BaseParser,
    SystemParserMixin,
    GoalParserMixin,
    TransformParserMixin,
):
    """
    Complete DarTwin DSL Parser.

    Each mixin provides parsing for a specific construct type:

    - SystemParserMixin: Twin systems, twins, ports and connections
    - GoalParserMixin: Goals with documentation, and allocations
    - TransformParserMixin: The ``#dartrans`` section and its slices

    ``parse`` never raises. Malformed statements are skipped and recorded
    in ``diagnostics``.
    """

    def parse(self) -> ir.DarTwinModel:
        """
        Parse the document and return its model.

        Returns:
            DarTwinModel, empty when the text has no ``#dartwin`` header
        """
        if not self.seek_root():
            self.report(
                "missing-root",
                "No '#dartwin <name> {' declaration found",
                severity="info",
            )
            return ir.DarTwinModel()

        self.expect(TokenType.DARTWIN)
        name = self.expect_identifier_or_keyword().value
        opened = self.expect(TokenType.LBRACE)

        found = Declarations()
        dartrans: list[ir.DarTrans | None] = []
        handlers = self.declaration_handlers(found)
        handlers[TokenType.DARTRANS] = lambda: self.parse_root_dartrans(dartrans)

        self.parse_statements(handlers)
        self.close_block(f"#dartwin {name}", opened)

        model = ir.DarTwinModel(
            name=name,
            systems=found.systems,
            goals=found.goals,
            allocations=found.allocations,
            dartrans=dartrans[0] if dartrans else None,
        )
        logger.debug(
            "Parsed %s: %d systems, %d goals, %d allocations, %d diagnostics",
            name,
            len(model.systems),
            len(model.goals),
            len(model.allocations),
            len(self.diagnostics),
        )
        return model

    def seek_root(self) -> bool:
        """Move to the first complete ``#dartwin <name> {`` header."""
        for index, token in enumerate(self.tokens):
            if token.type != TokenType.DARTWIN:
                continue
            self.pos = index
            try:
                self.advance()
                self.expect_identifier_or_keyword()
                self.expect(TokenType.LBRACE)
            except ParseError:
                continue
            self.pos = index
            return True
        self.pos = 0
        return False

    def parse_root_dartrans(self, dartrans: list[ir.DarTrans | None]) -> None:
        keyword = self.current_token()
        section = self.parse_dartrans()
        if dartrans:
            self.report(
                "duplicate-section",
                "Repeated #dartrans section ignored",
                reference="#dartrans",
                line=keyword.line,
                column=keyword.column,
            )
            return
        dartrans.append(section)


def parse_dartwin_with_diagnostics(
    text: str, file: Path | None = None
) -> tuple[ir.DarTwinModel, list[ir.Diagnostic]]:
    """
    Parse DarTwin DSL text.

    Args:
        text: DSL source (possibly incomplete editor content)
        file: Source file path, used only in diagnostics

    Returns:
        Tuple of (model, diagnostics)
    """
    parser = Parser(tokenize(text, file), file)
    model = parser.parse()
    return model, parser.diagnostics


def parse_dartwin(text: str, file: Path | None = None) -> ir.DarTwinModel:
    """Parse DarTwin DSL text into a model. Never raises on malformed text."""
    model, _ = parse_dartwin_with_diagnostics(text, file)
    return model


__all__ = [
    "Parser",
    "BaseParser",
    "parse_dartwin",
    "parse_dartwin_with_diagnostics",
    "normalize_doc",
    "SystemParserMixin",
    "GoalParserMixin",
    "TransformParserMixin",
]
