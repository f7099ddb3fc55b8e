"""
Layout plan assembly.

Computes a deterministic position for every node of a DarTwin graph:

1. Goals in one row at the top, sorted by label
2. Systems in one row below, in graph order, each a fixed-size region
3. Digital twins centred as a group inside their system
4. Digital twin ports on the side given by their role
5. Original twins as the boundary frame of their system, with their
   ports just outside the matching digital twin port row
6. Anything else on a fallback grid relative to its parent

Positions are computed in absolute canvas coordinates, then every node
with a parent is re-expressed relative to that parent.
"""

import logging
from dataclasses import dataclass

from dartwin.core import ir

from .labels import display_label
from .metrics import DEFAULT_METRICS, LayoutMetrics
from .roles import classify_port, order_ports, side_for_role
from .styles import style_edges

logger = logging.getLogger(__name__)

ENGINE_VERSION = "1.0"


@dataclass
class _Box:
    """Absolute geometry of a placed node."""

    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    role: ir.PortRole | None = None
    side: ir.PortSide | None = None


class _LayoutPass:
    """State of one ``layout_graph`` call."""

    def __init__(self, graph: ir.Graph, metrics: LayoutMetrics):
        self.graph = graph
        self.metrics = metrics
        self.index = graph.node_index()
        self.boxes: dict[str, _Box] = {}

    # ------------------------------------------------------------------
    # Rule-based placement
    # ------------------------------------------------------------------

    def place_goals(self) -> None:
        m = self.metrics
        goals = sorted(self.graph.nodes_of_kind(ir.NodeKind.GOAL), key=lambda g: (g.label, g.id))
        for index, goal in enumerate(goals):
            self.boxes[goal.id] = _Box(
                x=m.goal_row_x + index * m.goal_pitch,
                y=m.goal_row_y,
                width=m.goal_width,
                height=m.goal_height,
            )

    def place_systems(self) -> None:
        m = self.metrics
        for index, system in enumerate(self.graph.nodes_of_kind(ir.NodeKind.SYSTEM)):
            box = _Box(
                x=m.system_row_x + index * (m.system_width + m.system_gap),
                y=m.system_row_y,
                width=m.system_width,
                height=m.system_height,
            )
            self.boxes[system.id] = box
            twins = self._children(system.id, ir.NodeKind.DIGITAL_TWIN)
            self.place_digital_twins(box, twins)
            for part in self._children(system.id, ir.NodeKind.ORIGINAL_TWIN):
                self.place_original_twin(box, part, twins)

    def place_digital_twins(self, system: _Box, twins: list[ir.Node]) -> None:
        if not twins:
            return
        m = self.metrics
        count = len(twins)
        available = system.width - 2 * m.system_padding - (count - 1) * m.twin_gap
        width = max(min(m.twin_width, available / count), m.port_size)
        group = count * width + (count - 1) * m.twin_gap
        start_x = system.x + (system.width - group) / 2

        for index, twin in enumerate(twins):
            box = _Box(
                x=start_x + index * (width + m.twin_gap),
                y=system.y + m.twin_offset_y,
                width=width,
                height=m.twin_height,
            )
            self.boxes[twin.id] = box
            self.place_twin_ports(box, self._children(twin.id, ir.NodeKind.PORT))

    def place_twin_ports(self, twin: _Box, ports: list[ir.Node]) -> None:
        """Spread each role group evenly along its side of the twin."""
        half = self.metrics.port_size / 2
        for role, group in self._role_groups(ports):
            side = side_for_role(role)
            for slot, port in enumerate(group):
                x, y = self._slot_on_side(twin, side, slot, len(group))
                self.boxes[port.id] = self._port_box(x - half, y - half, role, side)

    def place_original_twin(self, system: _Box, part: ir.Node, twins: list[ir.Node]) -> None:
        """
        Draw the part as the system's boundary frame.

        Its ports sit ``boundary_offset`` beyond the port row of the digital
        twin they connect to, aligned with that port. Unconnected ports are
        spread evenly along the row of the first digital twin, or along the
        system edge when the system has none.
        """
        m = self.metrics
        half = m.port_size / 2
        self.boxes[part.id] = _Box(x=system.x, y=system.y, width=system.width, height=system.height)

        reference = self.boxes.get(twins[0].id) if twins else None
        for role, group in self._role_groups(self._children(part.id, ir.NodeKind.PORT)):
            side = side_for_role(role)
            unconnected = [port for port in group if self._connected_twin_port(port.id) is None]
            for port in group:
                partner = self._connected_twin_port(port.id)
                if partner is not None:
                    x, y = self._beyond(partner, side)
                elif reference is not None:
                    x, y = self._slot_on_side(reference, side, unconnected.index(port), len(unconnected))
                    x, y = self._offset(x - half, y - half, side)
                else:
                    x, y = self._slot_on_side(system, side, unconnected.index(port), len(unconnected))
                    x, y = x - half, y - half
                self.boxes[port.id] = self._port_box(x, y, role, side)

    # ------------------------------------------------------------------
    # Fallback placement
    # ------------------------------------------------------------------

    def place_remaining(self) -> None:
        """Root at the origin; nodes without a rule on a grid inside their parent."""
        for node in self.graph.nodes:
            if node.type == ir.NodeKind.ROOT.value and node.id not in self.boxes:
                self.boxes[node.id] = _Box(x=0.0, y=0.0)

        slots: dict[str | None, int] = {}
        for node in self.graph.nodes:
            self._place_fallback(node, slots, set())

    def _place_fallback(self, node: ir.Node, slots: dict[str | None, int], seen: set[str]) -> _Box:
        box = self.boxes.get(node.id)
        if box is not None:
            return box

        m = self.metrics
        seen.add(node.id)
        parent_id = ir.parent_of(node)
        parent = self.index.get(parent_id or "")
        origin_x, origin_y = 0.0, 0.0
        if parent is not None and parent.id not in seen:
            # A parent listed after its child is placed first
            parent_box = self._place_fallback(parent, slots, seen)
            origin_x, origin_y = parent_box.x, parent_box.y

        slot = slots.get(parent_id, 0)
        slots[parent_id] = slot + 1
        box = _Box(
            x=origin_x + m.fallback_x + (slot % m.fallback_columns) * m.fallback_pitch,
            y=origin_y + m.fallback_y + (slot // m.fallback_columns) * m.fallback_pitch,
        )
        self.boxes[node.id] = box
        return box

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def canvas_size(self) -> tuple[float, float]:
        m = self.metrics
        right = max((box.x + box.width for box in self.boxes.values()), default=0.0)
        bottom = max((box.y + box.height for box in self.boxes.values()), default=0.0)
        return right + m.margin, bottom + m.margin

    def assemble(self) -> ir.PositionedGraph:
        width, height = self.canvas_size()
        for root in self.graph.nodes_of_kind(ir.NodeKind.ROOT):
            self.boxes[root.id].width = width
            self.boxes[root.id].height = height

        nodes = [self._positioned(node) for node in self.graph.nodes]
        return ir.PositionedGraph(
            nodes=nodes,
            edges=style_edges(self.graph.edges),
            width=width,
            height=height,
        )

    def _positioned(self, node: ir.Node) -> ir.PositionedNode:
        box = self.boxes[node.id]
        absolute = ir.Position(x=box.x, y=box.y)
        parent = self.boxes.get(ir.parent_of(node) or "")

        if parent is None:
            position, frame = absolute, ir.CoordinateFrame.ABSOLUTE
        else:
            position = ir.Position(x=box.x - parent.x, y=box.y - parent.y)
            frame = ir.CoordinateFrame.RELATIVE

        size = ir.Size(width=box.width, height=box.height) if box.width or box.height else None
        return ir.PositionedNode(
            node=node,
            position=position,
            absolute=absolute,
            frame=frame,
            size=size,
            display_label=display_label(node),
            port_role=box.role,
            port_side=box.side,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _children(self, parent_id: str, kind: ir.NodeKind) -> list[ir.Node]:
        return [node for node in self.graph.children_of(parent_id) if node.type == kind.value]

    def _role_groups(self, ports: list[ir.Node]) -> list[tuple[ir.PortRole, list[ir.Node]]]:
        """Ports grouped by role, each group in canonical drawing order."""
        groups: list[tuple[ir.PortRole, list[ir.Node]]] = []
        for role in ir.PortRole:
            members = [port for port in ports if classify_port(port.label) == role]
            if not members:
                continue
            order = order_ports([port.label for port in members], self.metrics.actuator_order)
            groups.append((role, [members[index] for index in order]))
        return groups

    def _port_box(self, x: float, y: float, role: ir.PortRole, side: ir.PortSide) -> _Box:
        size = self.metrics.port_size
        return _Box(x=x, y=y, width=size, height=size, role=role, side=side)

    @staticmethod
    def _slot_on_side(box: _Box, side: ir.PortSide, slot: int, count: int) -> tuple[float, float]:
        """Centre of slot ``slot`` of ``count`` evenly spaced along one side."""
        if side in (ir.PortSide.TOP, ir.PortSide.BOTTOM):
            x = box.x + box.width * (slot + 1) / (count + 1)
            y = box.y if side == ir.PortSide.TOP else box.y + box.height
            return x, y
        y = box.y + box.height * (slot + 1) / (count + 1)
        x = box.x if side == ir.PortSide.LEFT else box.x + box.width
        return x, y

    def _offset(self, x: float, y: float, side: ir.PortSide) -> tuple[float, float]:
        """Move a point ``boundary_offset`` outward on ``side``."""
        offset = self.metrics.boundary_offset
        if side == ir.PortSide.TOP:
            return x, y - offset
        if side == ir.PortSide.BOTTOM:
            return x, y + offset
        if side == ir.PortSide.LEFT:
            return x - offset, y
        return x + offset, y

    def _beyond(self, partner: _Box, side: ir.PortSide) -> tuple[float, float]:
        """Boundary position aligned with a digital twin port, on its own role side."""
        return self._offset(partner.x, partner.y, side)

    def _connected_twin_port(self, port_id: str) -> _Box | None:
        """Box of the first digital twin port connected to ``port_id``."""
        for edge in self.graph.edges_of_kind(ir.EdgeKind.CONNECTION):
            if edge.source == port_id:
                other = edge.target
            elif edge.target == port_id:
                other = edge.source
            else:
                continue
            node = self.index.get(other)
            owner = self.index.get(ir.parent_of(node) or "") if node is not None else None
            if owner is not None and owner.type == ir.NodeKind.DIGITAL_TWIN.value:
                box = self.boxes.get(other)
                if box is not None:
                    return box
        return None


def layout_graph(graph: ir.Graph, metrics: LayoutMetrics | None = None) -> ir.PositionedGraph:
    """
    Compute positions for every node of ``graph``.

    Pure and deterministic: the same graph and metrics always give the same
    positions. Never fails; nodes without a placement rule land on the
    fallback grid.

    Args:
        graph: Graph from the graph builder (or loaded from JSON)
        metrics: Geometry constants, defaults to ``DEFAULT_METRICS``

    Returns:
        PositionedGraph with one positioned node per graph node, in graph order
    """
    layout = _LayoutPass(graph, metrics or DEFAULT_METRICS)
    layout.place_goals()
    layout.place_systems()
    layout.place_remaining()
    positioned = layout.assemble()

    logger.debug(
        "Laid out %d nodes and %d edges on a %.0fx%.0f canvas",
        len(positioned.nodes),
        len(positioned.edges),
        positioned.width,
        positioned.height,
    )
    return positioned
