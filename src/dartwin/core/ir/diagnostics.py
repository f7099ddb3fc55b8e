"""
Advisory diagnostics.

Parsing and graph building never fail on malformed text; instead they
collect diagnostics describing what was skipped or dropped.
"""

from __future__ import annotations

from enum import Enum

from .base import IRModel


class DiagnosticSeverity(str, Enum):
    """How much attention a diagnostic deserves."""

    INFO = "info"
    WARNING = "warning"


class DiagnosticCode(str, Enum):
    """Stable identifiers for each kind of diagnostic."""

    MISSING_ROOT = "missing-root"
    SYNTAX = "syntax"
    UNTERMINATED_BLOCK = "unterminated-block"
    DUPLICATE_SECTION = "duplicate-section"
    DUPLICATE_NODE = "duplicate-node"
    DUPLICATE_EDGE = "duplicate-edge"
    AMBIGUOUS_REFERENCE = "ambiguous-reference"
    UNRESOLVED_CONNECTION = "unresolved-connection"
    UNRESOLVED_ALLOCATION = "unresolved-allocation"


class Diagnostic(IRModel):
    """
    A non-fatal finding about the document.

    Attributes:
        severity: Info or warning
        code: Kind of finding
        message: Human-readable description
        reference: Offending textual reference, when there is one
        line: Source line (1-indexed), when known
        column: Source column (1-indexed), when known
    """

    severity: DiagnosticSeverity
    code: DiagnosticCode
    message: str
    reference: str | None = None
    line: int | None = None
    column: int | None = None

    def format(self) -> str:
        location = f"{self.line}:{self.column}: " if self.line is not None else ""
        return f"{location}{self.severity.value}[{self.code.value}] {self.message}"
