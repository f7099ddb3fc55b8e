"""
DarTwin UI Module.

This module provides the layout engine that turns a DarTwin graph into
positioned nodes and styled edges for a diagram renderer.
"""

from dartwin.ui.layout_engine import (
    LayoutMetrics,
    layout_graph,
)

__all__ = [
    "LayoutMetrics",
    "layout_graph",
]
