"""
DarTwin Layout Engine.

Deterministic placement of DarTwin graph nodes for rendering.

Key components:
- Layout metrics (metrics.py)
- Port role classification (roles.py)
- Display labels (labels.py)
- Edge styles (styles.py)
- Layout plan assembly (plan.py)
"""

from dartwin.ui.layout_engine.cache import LayoutCache, get_layout_cache
from dartwin.ui.layout_engine.labels import (
    display_label,
    format_label,
    format_port_label,
    format_twin_label,
)
from dartwin.ui.layout_engine.metrics import DEFAULT_METRICS, LayoutMetrics, metrics_from_config
from dartwin.ui.layout_engine.plan import ENGINE_VERSION, layout_graph
from dartwin.ui.layout_engine.roles import canonical_key, classify_port, order_ports, side_for_role
from dartwin.ui.layout_engine.styles import ALLOCATION_STYLE, CONNECTION_STYLE, edge_style

__all__ = [
    # Core functions
    "layout_graph",
    "ENGINE_VERSION",
    # Metrics
    "DEFAULT_METRICS",
    "LayoutMetrics",
    "metrics_from_config",
    # Roles
    "canonical_key",
    "classify_port",
    "order_ports",
    "side_for_role",
    # Labels
    "display_label",
    "format_label",
    "format_port_label",
    "format_twin_label",
    # Styles
    "ALLOCATION_STYLE",
    "CONNECTION_STYLE",
    "edge_style",
    # Caching
    "LayoutCache",
    "get_layout_cache",
]
