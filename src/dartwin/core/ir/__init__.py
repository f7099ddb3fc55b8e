"""
DarTwin Intermediate Representation (IR) types.

Three value representations flow one way through the pipeline:
text -> DarTwinModel (parser) -> Graph (graph builder) -> PositionedGraph
(layout engine). All types are re-exported from this package.
"""

# Diagnostics
from .diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticSeverity,
)

# Graph (builder output)
from .graph import (
    ALLOCATION_LABEL,
    DigitalTwinNode,
    Edge,
    EdgeKind,
    GoalNode,
    Graph,
    Node,
    NodeKind,
    OriginalTwinNode,
    PortNode,
    RootNode,
    SystemNode,
    parent_of,
)

# Positioned graph (layout output)
from .layout import (
    CoordinateFrame,
    EdgeStyle,
    PortRole,
    PortSide,
    Position,
    PositionedEdge,
    PositionedGraph,
    PositionedNode,
    Size,
)

# Model (parser output)
from .model import (
    MODEL_TYPE,
    Allocation,
    Connection,
    DarTrans,
    DarTwinModel,
    DarTwinSlice,
    DigitalTwin,
    Goal,
    OriginalTwin,
    TwinSystem,
)

__all__ = [
    # Model
    "MODEL_TYPE",
    "Allocation",
    "Connection",
    "DarTrans",
    "DarTwinModel",
    "DarTwinSlice",
    "DigitalTwin",
    "Goal",
    "OriginalTwin",
    "TwinSystem",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSeverity",
    # Graph
    "ALLOCATION_LABEL",
    "DigitalTwinNode",
    "Edge",
    "EdgeKind",
    "GoalNode",
    "Graph",
    "Node",
    "NodeKind",
    "OriginalTwinNode",
    "PortNode",
    "RootNode",
    "SystemNode",
    "parent_of",
    # Layout
    "CoordinateFrame",
    "EdgeStyle",
    "PortRole",
    "PortSide",
    "Position",
    "PositionedEdge",
    "PositionedGraph",
    "PositionedNode",
    "Size",
]
