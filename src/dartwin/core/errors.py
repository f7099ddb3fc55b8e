"""
Error types for DarTwin DSL parsing, interchange and configuration.

Malformed DSL text is an expected state while a document is being edited,
so ``ParseError`` never escapes the parser: it is raised inside a statement
and recovered by the enclosing block. ``InterchangeError`` is the one error
surfaced to callers, for externally supplied JSON that does not match the
model shape.
"""

from dataclasses import dataclass
from pathlib import Path


class DarTwinError(Exception):
    """Base exception for all DarTwin errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(DarTwinError):
    """
    Raised when a DSL statement cannot be parsed.

    Examples:
    - Declaration header missing its name
    - Connection without a ``to`` target
    - Port statement missing its terminating ``;``
    """

    pass


class InterchangeError(DarTwinError):
    """
    Raised when externally supplied JSON does not match the expected shape.

    Examples:
    - Missing ``type: "DarTwin"`` discriminant
    - Port list containing a non-string entry
    - Unexpected keys on a nested record
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConfigError(DarTwinError):
    """Raised when a ``dartwin.toml`` manifest cannot be read."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file (None for editor buffers)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    file: Path | None
    line: int
    column: int

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "model.dartwin:10:5"
        """
        return f"{self.file or '<text>'}:{self.line}:{self.column}"


def make_parse_error(
    message: str,
    file: Path | None,
    line: int,
    column: int,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        file: Source file path (None when parsing an editor buffer)
        line: Line number (1-indexed)
        column: Column number (1-indexed)

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(file=file, line=line, column=column)
    return ParseError(message, context)
