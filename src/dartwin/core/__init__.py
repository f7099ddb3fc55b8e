"""Core DarTwin functionality: IR, lexer, parser, graph builder, interchange, manifest."""

from . import ir
from .dsl_parser_impl import parse_dartwin, parse_dartwin_with_diagnostics
from .errors import (
    ConfigError,
    DarTwinError,
    ErrorContext,
    InterchangeError,
    ParseError,
)
from .graph_builder import GraphBuilder, build_graph, build_graph_with_diagnostics
from .interchange import (
    InterchangeResult,
    load_graph_data,
    load_model_data,
    validate_graph_data,
    validate_model_data,
)
from .manifest import DarTwinManifest, load_manifest
from .parser import parse_file

__all__ = [
    "ir",
    "DarTwinError",
    "ParseError",
    "InterchangeError",
    "ConfigError",
    "ErrorContext",
    "parse_dartwin",
    "parse_dartwin_with_diagnostics",
    "parse_file",
    "GraphBuilder",
    "build_graph",
    "build_graph_with_diagnostics",
    "InterchangeResult",
    "validate_model_data",
    "validate_graph_data",
    "load_model_data",
    "load_graph_data",
    "DarTwinManifest",
    "load_manifest",
]
