from pathlib import Path

from . import ir
from .dsl_parser_impl import parse_dartwin_with_diagnostics


def parse_file(path: Path) -> tuple[ir.DarTwinModel, list[ir.Diagnostic]]:
    """
    Parse a DarTwin DSL file.

    Args:
        path: Path to a .dartwin file

    Returns:
        Tuple of (model, diagnostics)
    """
    text = path.read_text(encoding="utf-8")
    return parse_dartwin_with_diagnostics(text, path)

