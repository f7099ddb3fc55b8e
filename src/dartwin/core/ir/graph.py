"""
Graph types for DarTwin IR.

The graph builder's output: a flat list of typed nodes (one per declared
entity) and typed edges (one per resolved connection and allocation).
Nodes are a tagged union on ``type`` so each kind carries exactly the
fields it needs; ``doc`` only exists on goals and the root has no parent.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import ConfigDict, Field, StrictStr, model_validator
from pydantic_core import PydanticCustomError

from .base import IRModel

ALLOCATION_LABEL = "allocate"


class NodeKind(str, Enum):
    """Discriminant values of graph nodes."""

    ROOT = "dartwin"
    SYSTEM = "twinsystem"
    DIGITAL_TWIN = "dt"
    ORIGINAL_TWIN = "at"
    PORT = "port"
    GOAL = "goal"


class EdgeKind(str, Enum):
    """Kinds of graph edges."""

    CONNECTION = "connection"
    ALLOCATION = "allocation"


class _NodeBase(IRModel):
    id: StrictStr
    label: StrictStr

    interchange_required = ("id", "type", "label")

    model_config = ConfigDict(populate_by_name=True)


class _ChildNode(_NodeBase):
    parent_id: StrictStr = Field(alias="parentId")

    interchange_required = ("id", "type", "label", "parentId")


class RootNode(_NodeBase):
    """The single top-level declaration."""

    type: Literal["dartwin"] = "dartwin"


class SystemNode(_ChildNode):
    """A twin system; its parent is the root."""

    type: Literal["twinsystem"] = "twinsystem"


class DigitalTwinNode(_ChildNode):
    """A digital twin; its parent is its system."""

    type: Literal["dt"] = "dt"


class OriginalTwinNode(_ChildNode):
    """A physical part; its parent is its system."""

    type: Literal["at"] = "at"


class PortNode(_ChildNode):
    """A port; its parent is the owning digital or original twin."""

    type: Literal["port"] = "port"


class GoalNode(_ChildNode):
    """A goal; its parent is the root."""

    type: Literal["goal"] = "goal"
    doc: StrictStr | None = None


Node = Annotated[
    Union[RootNode, SystemNode, DigitalTwinNode, OriginalTwinNode, PortNode, GoalNode],
    Field(discriminator="type"),
]


def parent_of(node: Node) -> str | None:
    """Return the containing node id, or None for the root."""
    return getattr(node, "parent_id", None)


class Edge(IRModel):
    """
    A directed edge between two existing nodes.

    Attributes:
        id: Unique id derived from the edge's resolved endpoints
        kind: Connection or allocation
        source: Source node id
        target: Target node id
        label: Connection name, or ``"allocate"`` for allocations
    """

    id: StrictStr
    kind: EdgeKind = EdgeKind.CONNECTION
    source: StrictStr
    target: StrictStr
    label: StrictStr | None = None

    interchange_required = ("id", "source", "target")


class Graph(IRModel):
    """
    Render-ready graph.

    Every edge endpoint references an existing node id; nodes and edges
    appear in first-declared-first order. Repeated node ids and dangling
    edge endpoints are rejected; errors carry the failing field in their
    ``field`` context (e.g. ``edges.0.target``).
    """

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    interchange_required = ("nodes", "edges")

    @model_validator(mode="after")
    def _check_references(self) -> Graph:
        node_ids: set[str] = set()
        for index, node in enumerate(self.nodes):
            if node.id in node_ids:
                raise PydanticCustomError(
                    "duplicate_id",
                    "Duplicate node id '{node_id}'",
                    {"node_id": node.id, "field": f"nodes.{index}.id"},
                )
            node_ids.add(node.id)

        for index, edge in enumerate(self.edges):
            for end in ("source", "target"):
                node_id = getattr(edge, end)
                if node_id not in node_ids:
                    raise PydanticCustomError(
                        "unknown_node",
                        "Edge {end} references unknown node '{node_id}'",
                        {"end": end, "node_id": node_id, "field": f"edges.{index}.{end}"},
                    )
        return self

    def node_index(self) -> dict[str, Node]:
        """Map node id to node."""
        return {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def children_of(self, parent_id: str) -> list[Node]:
        """Nodes directly contained by ``parent_id``, in graph order."""
        return [node for node in self.nodes if parent_of(node) == parent_id]

    def nodes_of_kind(self, kind: NodeKind) -> list[Node]:
        return [node for node in self.nodes if node.type == kind.value]

    def edges_of_kind(self, kind: EdgeKind) -> list[Edge]:
        return [edge for edge in self.edges if edge.kind == kind]
