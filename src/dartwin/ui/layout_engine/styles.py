"""
Edge styles.

Edges are not routed; the renderer draws a straight line between the two
endpoints using these constant attributes.
"""

from dartwin.core import ir

ALLOCATION_DASH = "6 4"

CONNECTION_STYLE = ir.EdgeStyle()
ALLOCATION_STYLE = ir.EdgeStyle(dash_array=ALLOCATION_DASH)


def is_allocation(edge: ir.Edge) -> bool:
    # Graphs from other tools carry only the label
    return edge.kind == ir.EdgeKind.ALLOCATION or edge.label == ir.ALLOCATION_LABEL


def edge_style(edge: ir.Edge) -> ir.EdgeStyle:
    """Dashed for allocations, solid for connections."""
    return ALLOCATION_STYLE if is_allocation(edge) else CONNECTION_STYLE


def style_edges(edges: list[ir.Edge]) -> list[ir.PositionedEdge]:
    return [ir.PositionedEdge(edge=edge, style=edge_style(edge)) for edge in edges]
