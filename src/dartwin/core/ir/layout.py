"""
Positioned graph types for DarTwin IR.

The layout engine's output: the graph plus, per node, a position and an
optional size. Nodes that nest inside a container in the final rendering
carry coordinates relative to their parent; the absolute position is kept
alongside for consumers that do not nest.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .base import IRModel
from .graph import Edge, Node, parent_of


class PortRole(str, Enum):
    """Layout role of a port, derived from its name."""

    SENSOR = "sensor"
    ACTUATOR = "actuator"
    UNCLASSIFIED = "unclassified"


class PortSide(str, Enum):
    """Side of the owning rectangle a port sits on (and its handle faces)."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class CoordinateFrame(str, Enum):
    """Whether ``position`` is absolute or relative to the parent node."""

    ABSOLUTE = "absolute"
    RELATIVE = "relative"


class Position(IRModel):
    x: float
    y: float


class Size(IRModel):
    width: float
    height: float


class PositionedNode(IRModel):
    """
    A graph node with its geometry.

    Attributes:
        node: The graph node
        position: Position in ``frame`` coordinates
        absolute: Absolute canvas position
        frame: Coordinate frame of ``position``
        size: Width/height for container and box nodes
        display_label: Human-friendly label for the renderer
        port_role: Role classification (ports only)
        port_side: Side of the owner the port sits on (ports only)
    """

    node: Node
    position: Position
    absolute: Position
    frame: CoordinateFrame = CoordinateFrame.ABSOLUTE
    size: Size | None = None
    display_label: str = ""
    port_role: PortRole | None = None
    port_side: PortSide | None = None

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def parent_id(self) -> str | None:
        return parent_of(self.node)


class EdgeStyle(IRModel):
    """Constant visual attributes of an edge; edges are not routed."""

    stroke: str = "#000"
    stroke_width: float = 1.2
    dash_array: str | None = None
    marker_end: str = "arrowclosed"


class PositionedEdge(IRModel):
    edge: Edge
    style: EdgeStyle = Field(default_factory=EdgeStyle)

    @property
    def id(self) -> str:
        return self.edge.id


class PositionedGraph(IRModel):
    """
    Layout result.

    Attributes:
        nodes: Positioned nodes in graph order
        edges: Styled edges in graph order
        width: Canvas width (bounding box of all nodes plus margin)
        height: Canvas height
    """

    nodes: list[PositionedNode] = Field(default_factory=list)
    edges: list[PositionedEdge] = Field(default_factory=list)
    width: float = 0.0
    height: float = 0.0

    def get(self, node_id: str) -> PositionedNode | None:
        for positioned in self.nodes:
            if positioned.id == node_id:
                return positioned
        return None

    def positions(self) -> dict[str, tuple[float, float]]:
        """Map node id to its ``position`` as an (x, y) tuple."""
        return {p.id: (p.position.x, p.position.y) for p in self.nodes}
