"""
Graph builder for DarTwin models.

Turns a parsed ``DarTwinModel`` into a render-ready ``Graph``: one node per
declared entity, one edge per resolvable connection and allocation.
References are resolved through a symbol table built in a single pass
over the model, holding every form the DSL lets an entity be referred to by.
"""

import logging
import re
from dataclasses import dataclass, field

from . import ir

logger = logging.getLogger(__name__)

ID_SEPARATOR = "::"
DEFAULT_ROOT_SEGMENT = "dartwin"

_WHITESPACE_RE = re.compile(r"\s+")


def to_segment(value: str) -> str:
    """
    Normalise a name for use inside a node id.

    >>> to_segment("  Green house  ")
    'Green_house'
    """
    return _WHITESPACE_RE.sub("_", value.strip())


def make_id(tag: str, *names: str) -> str:
    """Build an id from a type tag and the names of every containing entity."""
    return ID_SEPARATOR.join([tag, *(to_segment(name) for name in names)])


def make_path(*names: str) -> str:
    return ".".join(to_segment(name) for name in names)


@dataclass
class SymbolTable:
    """
    Lookup of every referable entity under each of its textual forms.

    Ports are registered as ``Twin.port`` and ``System.Twin.port``; digital
    twins as ``Twin`` and ``System.Twin``; goals by name. An unqualified
    alias declared in more than one system is ambiguous and removed, so only
    its qualified forms resolve.
    """

    ports: dict[str, str] = field(default_factory=dict)
    twins: dict[str, str] = field(default_factory=dict)
    goals: dict[str, str] = field(default_factory=dict)

    # node id -> canonical dotted path, used to derive edge ids
    paths: dict[str, str] = field(default_factory=dict)

    # unqualified alias -> system that declared it
    port_systems: dict[str, str] = field(default_factory=dict)
    twin_systems: dict[str, str] = field(default_factory=dict)

    ambiguous_ports: set[str] = field(default_factory=set)
    ambiguous_twins: set[str] = field(default_factory=set)

    def add_port(self, system: str, owner: str, port: str, node_id: str) -> None:
        self._add_qualified(self.ports, f"{system}.{owner}.{port}", node_id)
        self._add_unqualified(
            self.ports, self.port_systems, self.ambiguous_ports, f"{owner}.{port}", system, node_id
        )
        self.paths.setdefault(node_id, make_path(system, owner, port))

    def add_twin(self, system: str, twin: str, node_id: str) -> None:
        self._add_qualified(self.twins, f"{system}.{twin}", node_id)
        self._add_unqualified(self.twins, self.twin_systems, self.ambiguous_twins, twin, system, node_id)
        self.paths.setdefault(node_id, make_path(system, twin))

    def add_goal(self, goal: str, node_id: str) -> None:
        self.goals.setdefault(goal, node_id)

    @staticmethod
    def _add_qualified(table: dict[str, str], alias: str, node_id: str) -> None:
        table.setdefault(alias, node_id)

    @staticmethod
    def _add_unqualified(
        table: dict[str, str],
        systems: dict[str, str],
        ambiguous: set[str],
        alias: str,
        system: str,
        node_id: str,
    ) -> None:
        if alias in ambiguous:
            return
        if alias not in table:
            table[alias] = node_id
            systems[alias] = system
        elif systems[alias] != system:
            del table[alias]
            ambiguous.add(alias)

    def resolve_port(self, system: str, reference: str) -> str | None:
        """
        Resolve a connection endpoint written inside ``system``.

        Tries, first match wins: the reference as written, the reference
        prefixed with the system name, and the reference with a leading
        ``<system>.`` removed.
        """
        reference = reference.strip()
        if reference in self.ports:
            return self.ports[reference]

        with_system = f"{system}.{reference}"
        if with_system in self.ports:
            return self.ports[with_system]

        prefix = f"{system}."
        if reference.startswith(prefix):
            return self.ports.get(reference[len(prefix) :])
        return None

    def resolve_twin(self, reference: str) -> str | None:
        """
        Resolve an allocation target.

        The leading path segment is taken as the owning system name and
        stripped for a second lookup when the reference as written is unknown.
        """
        reference = reference.strip()
        if reference in self.twins:
            return self.twins[reference]

        system = reference.split(".")[0]
        prefix = f"{system}."
        if reference.startswith(prefix):
            return self.twins.get(reference[len(prefix) :])
        return None

    def is_ambiguous_port(self, system: str, reference: str) -> bool:
        reference = reference.strip()
        prefix = f"{system}."
        if reference.startswith(prefix):
            reference = reference[len(prefix) :]
        return reference in self.ambiguous_ports

    def is_ambiguous_twin(self, reference: str) -> bool:
        return reference.strip() in self.ambiguous_twins


class GraphBuilder:
    """
    Builds a ``Graph`` from a ``DarTwinModel``.

    Nodes are emitted root first, then each system followed by its digital
    twins, original twins and their ports, then goals. Edges are emitted
    connections first (per system, in order) then allocations. The same
    model always yields the same ids in the same order.

    Nothing raises: duplicate declarations and unresolvable references are
    skipped and recorded in ``diagnostics``.
    """

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.diagnostics: list[ir.Diagnostic] = []
        self.symbols = SymbolTable()
        self._nodes: list[ir.Node] = []
        self._node_ids: set[str] = set()
        self._edges: list[ir.Edge] = []
        self._edge_ids: set[str] = set()
        self._root = DEFAULT_ROOT_SEGMENT
        self._root_id = ""

    def build(self, model: ir.DarTwinModel) -> ir.Graph:
        self._reset()

        self._root = model.name or DEFAULT_ROOT_SEGMENT
        self._root_id = make_id("dw", self._root)
        self._add_node(ir.RootNode(id=self._root_id, label=model.name))

        systems = [system for system in model.systems if self._add_system(system)]
        for goal in model.goals:
            self._add_goal(goal)

        for system in systems:
            for connection in system.connections:
                self._add_connection(system.name, connection)
        for allocation in model.allocations:
            self._add_allocation(allocation)

        graph = ir.Graph(nodes=self._nodes, edges=self._edges)
        logger.debug(
            "Built graph for %s: %d nodes, %d edges, %d diagnostics",
            self._root,
            len(graph.nodes),
            len(graph.edges),
            len(self.diagnostics),
        )
        return graph

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _add_node(self, node: ir.Node) -> bool:
        if node.id in self._node_ids:
            self._report(
                ir.DiagnosticCode.DUPLICATE_NODE,
                f"Duplicate {node.type} '{node.label}' ignored",
                reference=node.label,
            )
            return False
        self._node_ids.add(node.id)
        self._nodes.append(node)
        return True

    def _add_system(self, system: ir.TwinSystem) -> bool:
        system_id = make_id("ts", self._root, system.name)
        if not self._add_node(ir.SystemNode(id=system_id, label=system.name, parent_id=self._root_id)):
            return False

        for twin in system.digital_twins:
            twin_id = make_id("dt", self._root, system.name, twin.name)
            node = ir.DigitalTwinNode(id=twin_id, label=twin.name, parent_id=system_id)
            if self._add_node(node):
                self.symbols.add_twin(system.name, twin.name, twin_id)
                self._add_ports(system.name, "dt", twin.name, twin.ports, twin_id)

        for part in system.original_twins:
            part_id = make_id("at", self._root, system.name, part.name)
            node = ir.OriginalTwinNode(id=part_id, label=part.name, parent_id=system_id)
            if self._add_node(node):
                self._add_ports(system.name, "at", part.name, part.ports, part_id)
        return True

    def _add_ports(
        self, system: str, owner_tag: str, owner: str, ports: list[str], owner_id: str
    ) -> None:
        for port in ports:
            port_id = make_id("port", self._root, system, owner_tag, owner, port)
            if self._add_node(ir.PortNode(id=port_id, label=port, parent_id=owner_id)):
                self.symbols.add_port(system, owner, port, port_id)

    def _add_goal(self, goal: ir.Goal) -> None:
        goal_id = make_id("goal", self._root, goal.name)
        node = ir.GoalNode(id=goal_id, label=goal.name, parent_id=self._root_id, doc=goal.doc)
        if self._add_node(node):
            self.symbols.add_goal(goal.name, goal_id)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _add_edge(self, edge: ir.Edge) -> None:
        if edge.id in self._edge_ids:
            self._report(
                ir.DiagnosticCode.DUPLICATE_EDGE,
                f"Duplicate {edge.kind.value} '{edge.id}' ignored",
                reference=edge.id,
            )
            return
        self._edge_ids.add(edge.id)
        self._edges.append(edge)

    def _add_connection(self, system: str, connection: ir.Connection) -> None:
        source = self.symbols.resolve_port(system, connection.from_)
        target = self.symbols.resolve_port(system, connection.to)
        if source is None or target is None:
            unresolved = connection.from_ if source is None else connection.to
            ambiguous = self.symbols.is_ambiguous_port(system, unresolved)
            self._report(
                ir.DiagnosticCode.AMBIGUOUS_REFERENCE
                if ambiguous
                else ir.DiagnosticCode.UNRESOLVED_CONNECTION,
                f"Connection '{connection.from_} -> {connection.to}' dropped: "
                f"{'ambiguous' if ambiguous else 'unknown'} port '{unresolved}'",
                reference=unresolved,
            )
            return

        edge_id = make_id("connect", self._root, system) + (
            f"{ID_SEPARATOR}{self.symbols.paths[source]}->{self.symbols.paths[target]}"
        )
        if connection.name:
            edge_id += ID_SEPARATOR + to_segment(connection.name)
        self._add_edge(
            ir.Edge(
                id=edge_id,
                kind=ir.EdgeKind.CONNECTION,
                source=source,
                target=target,
                label=connection.name,
            )
        )

    def _add_allocation(self, allocation: ir.Allocation) -> None:
        goal_id = self.symbols.goals.get(allocation.goal)
        twin_id = self.symbols.resolve_twin(allocation.target)
        if goal_id is None or twin_id is None:
            unresolved = allocation.goal if goal_id is None else allocation.target
            ambiguous = goal_id is not None and self.symbols.is_ambiguous_twin(allocation.target)
            self._report(
                ir.DiagnosticCode.AMBIGUOUS_REFERENCE
                if ambiguous
                else ir.DiagnosticCode.UNRESOLVED_ALLOCATION,
                f"Allocation of '{allocation.goal}' to '{allocation.target}' dropped: "
                f"{'ambiguous' if ambiguous else 'unknown'} reference '{unresolved}'",
                reference=unresolved,
            )
            return

        edge_id = ID_SEPARATOR.join(
            ["allocate", to_segment(self._root), self.symbols.paths[twin_id], to_segment(allocation.goal)]
        )
        self._add_edge(
            ir.Edge(
                id=edge_id,
                kind=ir.EdgeKind.ALLOCATION,
                source=twin_id,
                target=goal_id,
                label=ir.ALLOCATION_LABEL,
            )
        )

    def _report(self, code: ir.DiagnosticCode, message: str, reference: str | None = None) -> None:
        logger.warning("%s", message)
        self.diagnostics.append(
            ir.Diagnostic(
                severity=ir.DiagnosticSeverity.WARNING,
                code=code,
                message=message,
                reference=reference,
            )
        )


def build_graph(model: ir.DarTwinModel) -> ir.Graph:
    """Build the render-ready graph of ``model``."""
    return GraphBuilder().build(model)


def build_graph_with_diagnostics(
    model: ir.DarTwinModel,
) -> tuple[ir.Graph, list[ir.Diagnostic]]:
    builder = GraphBuilder()
    graph = builder.build(model)
    return graph, builder.diagnostics
