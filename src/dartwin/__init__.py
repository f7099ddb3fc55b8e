"""
DarTwin - a DSL and diagram pipeline for digital twin architectures.

Parses DarTwin DSL text into a model, builds a render-ready graph from it
and lays that graph out for a diagram renderer.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.errors import ConfigError, DarTwinError, InterchangeError, ParseError

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "DarTwinError",
    "ParseError",
    "InterchangeError",
    "ConfigError",
]
