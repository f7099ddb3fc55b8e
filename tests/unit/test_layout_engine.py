"""Tests for the DarTwin layout engine."""

import pytest

from dartwin.core import ir
from dartwin.core.dsl_parser_impl import parse_dartwin
from dartwin.core.errors import ConfigError
from dartwin.core.graph_builder import build_graph
from dartwin.core.manifest import LayoutConfig
from dartwin.ui.layout_engine import (
    ALLOCATION_STYLE,
    CONNECTION_STYLE,
    DEFAULT_METRICS,
    canonical_key,
    classify_port,
    display_label,
    edge_style,
    format_label,
    format_port_label,
    format_twin_label,
    layout_graph,
    metrics_from_config,
    order_ports,
    side_for_role,
)

ROOT = "StrawberryCultivationTrans"
DT = f"port::{ROOT}::Strawberry::dt::StrawberryDT"
AT = f"port::{ROOT}::Strawberry::at::Cultivation"


def absolute(positioned: ir.PositionedGraph, node_id: str) -> tuple[float, float]:
    node = positioned.get(node_id)
    return node.absolute.x, node.absolute.y


def layout_text(text: str) -> ir.PositionedGraph:
    return layout_graph(build_graph(parse_dartwin(text)))


@pytest.fixture
def strawberry_layout(strawberry_graph) -> ir.PositionedGraph:
    return layout_graph(strawberry_graph)


class TestPortRoles:
    """Tests for port classification and ordering."""

    @pytest.mark.parametrize(
        "name, role",
        [
            ("multisensor_input", ir.PortRole.SENSOR),
            ("MultiSensor", ir.PortRole.SENSOR),
            ("actuator_output_human", ir.PortRole.ACTUATOR),
            ("IrrigationActuator", ir.PortRole.ACTUATOR),
            ("sensor_output", ir.PortRole.SENSOR),
            ("power", ir.PortRole.UNCLASSIFIED),
        ],
    )
    def test_classify_port(self, name, role):
        assert classify_port(name) == role

    def test_role_sides(self):
        assert side_for_role(ir.PortRole.SENSOR) == ir.PortSide.TOP
        assert side_for_role(ir.PortRole.ACTUATOR) == ir.PortSide.BOTTOM
        assert side_for_role(ir.PortRole.UNCLASSIFIED) == ir.PortSide.LEFT

    def test_canonical_key(self):
        """Test differently written names reduce to the same key."""
        assert canonical_key("actuator_output_irrigation") == "irrigation"
        assert canonical_key("IrrigationActuator") == "irrigation"
        assert canonical_key("Human-Actuator") == "human"

    def test_known_names_first_in_canonical_order(self):
        labels = ["b_extra", "VentilationActuator", "IrrigationActuator", "a_extra"]

        order = order_ports(labels, ("irrigation", "human", "ventilation"))

        assert [labels[i] for i in order] == [
            "IrrigationActuator",
            "VentilationActuator",
            "a_extra",
            "b_extra",
        ]


class TestLabels:
    """Tests for display labels."""

    def test_format_label(self):
        assert format_label("increase_yield") == "Increase Yield"
        assert format_label("StrawberryDT") == "Strawberry DT"
        assert format_label("") == ""

    def test_twin_label(self):
        assert format_twin_label("greenhouse_dt") == "Greenhouse DT"

    def test_port_label(self):
        assert format_port_label("MultiSensor") == "Multi-sensor"
        assert format_port_label("multisensor_input") == "Multisensor Input"

    def test_display_label_by_kind(self, strawberry_graph):
        index = strawberry_graph.node_index()

        assert display_label(index[f"dt::{ROOT}::Strawberry::StrawberryDT"]) == "Strawberry DT"
        assert display_label(index[f"{AT}::MultiSensor"]) == "Multi-sensor"
        assert display_label(index[f"goal::{ROOT}::increase_yield"]) == "Increase Yield"


class TestStrawberryLayout:
    """Tests for the rule-based placement of the Strawberry graph."""

    def test_every_node_positioned_in_graph_order(self, strawberry_graph, strawberry_layout):
        assert [p.id for p in strawberry_layout.nodes] == [n.id for n in strawberry_graph.nodes]

    def test_goals_row_sorted_by_label(self, strawberry_layout):
        assert absolute(strawberry_layout, f"goal::{ROOT}::apply_decreased_water") == (120, 28)
        assert absolute(strawberry_layout, f"goal::{ROOT}::increase_yield") == (380, 28)

    def test_system_and_twin(self, strawberry_layout):
        system = strawberry_layout.get(f"ts::{ROOT}::Strawberry")
        twin = strawberry_layout.get(f"dt::{ROOT}::Strawberry::StrawberryDT")

        assert (system.absolute.x, system.absolute.y) == (100, 188)
        assert system.size == ir.Size(width=520, height=360)
        assert (twin.absolute.x, twin.absolute.y) == (210, 278)
        assert (twin.position.x, twin.position.y) == (110, 90)
        assert twin.size == ir.Size(width=300, height=160)

    def test_digital_twin_ports(self, strawberry_layout):
        """Test sensors on top, actuators along the bottom in canonical order."""
        sensor = strawberry_layout.get(f"{DT}::multisensor_input")

        assert (sensor.absolute.x, sensor.absolute.y) == (351, 269)
        assert (sensor.position.x, sensor.position.y) == (141, -9)
        assert sensor.port_role == ir.PortRole.SENSOR
        assert sensor.port_side == ir.PortSide.TOP

        assert absolute(strawberry_layout, f"{DT}::actuator_output_irrigation") == (276, 429)
        assert absolute(strawberry_layout, f"{DT}::actuator_output_human") == (351, 429)
        assert absolute(strawberry_layout, f"{DT}::actuator_output_ventilation") == (426, 429)

    def test_original_twin_is_system_frame(self, strawberry_layout):
        part = strawberry_layout.get(f"at::{ROOT}::Strawberry::Cultivation")

        assert (part.absolute.x, part.absolute.y) == (100, 188)
        assert (part.position.x, part.position.y) == (0, 0)
        assert part.size == ir.Size(width=520, height=360)

    def test_boundary_ports_align_with_partner(self, strawberry_layout):
        """Test connected part ports sit just beyond their twin port."""
        sensor = strawberry_layout.get(f"{AT}::MultiSensor")
        irrigation = strawberry_layout.get(f"{AT}::IrrigationActuator")

        assert (sensor.absolute.x, sensor.absolute.y) == (351, 215)
        assert (sensor.position.x, sensor.position.y) == (251, 27)
        assert (irrigation.absolute.x, irrigation.absolute.y) == (276, 483)
        assert (irrigation.position.x, irrigation.position.y) == (176, 295)
        assert irrigation.port_side == ir.PortSide.BOTTOM

    def test_canvas_and_root(self, strawberry_layout):
        root = strawberry_layout.get(f"dw::{ROOT}")

        assert (strawberry_layout.width, strawberry_layout.height) == (640, 568)
        assert root.frame == ir.CoordinateFrame.ABSOLUTE
        assert (root.position.x, root.position.y) == (0, 0)
        assert root.size == ir.Size(width=640, height=568)

    def test_children_are_relative(self, strawberry_layout):
        for positioned in strawberry_layout.nodes:
            if positioned.parent_id is None:
                continue
            assert positioned.frame == ir.CoordinateFrame.RELATIVE

    def test_edge_styles(self, strawberry_layout):
        styles = [edge.style for edge in strawberry_layout.edges]

        assert styles == [CONNECTION_STYLE] * 4 + [ALLOCATION_STYLE] * 2
        assert ALLOCATION_STYLE.dash_array == "6 4"
        assert CONNECTION_STYLE.dash_array is None

    def test_deterministic(self, strawberry_graph):
        assert layout_graph(strawberry_graph) == layout_graph(strawberry_graph)


class TestPlacementRules:
    """Tests for systems, twins and ports beyond the Strawberry shape."""

    def test_systems_in_a_row(self):
        positioned = layout_text("#dartwin F { #twinsystem A { } #twinsystem B { } }")

        assert absolute(positioned, "ts::F::A") == (100, 188)
        assert absolute(positioned, "ts::F::B") == (660, 188)

    def test_several_twins_shrink_to_fit(self):
        positioned = layout_text(
            "#dartwin F { #twinsystem S { #digitaltwin A { } #digitaltwin B { } } }"
        )

        first = positioned.get("dt::F::S::A")
        second = positioned.get("dt::F::S::B")
        assert (first.absolute.x, second.absolute.x) == (140, 380)
        assert first.size.width == 200

    def test_sensor_opposite_actuators(self):
        """Test unknown actuator names fall back to label order."""
        positioned = layout_text(
            "#dartwin F { #twinsystem S { #digitaltwin D { "
            "port actuator_output_y; port sensor_input; port actuator_output_x; } } }"
        )

        sensor = positioned.get("port::F::S::dt::D::sensor_input")
        x = positioned.get("port::F::S::dt::D::actuator_output_x")
        y = positioned.get("port::F::S::dt::D::actuator_output_y")
        assert sensor.port_side == ir.PortSide.TOP
        assert x.port_side == y.port_side == ir.PortSide.BOTTOM
        assert x.absolute.x < y.absolute.x
        assert sensor.absolute.y < x.absolute.y

    def test_unclassified_port_on_left(self):
        positioned = layout_text(
            "#dartwin F { #twinsystem S { #digitaltwin D { port power; } } }"
        )

        port = positioned.get("port::F::S::dt::D::power")
        assert (port.absolute.x, port.absolute.y) == (201, 349)
        assert port.port_side == ir.PortSide.LEFT

    def test_part_without_twin_uses_system_edge(self):
        positioned = layout_text("#dartwin F { #twinsystem S { part P { port s_input; } } }")

        port = positioned.get("port::F::S::at::P::s_input")
        assert (port.absolute.x, port.absolute.y) == (351, 179)
        assert (port.position.x, port.position.y) == (251, -9)

    def test_unconnected_part_port_follows_twin_row(self):
        positioned = layout_text(
            "#dartwin F { #twinsystem S { #digitaltwin D { } part P { port s_input; } } }"
        )

        assert absolute(positioned, "port::F::S::at::P::s_input") == (351, 215)

    def test_custom_metrics(self, strawberry_graph):
        metrics = metrics_from_config(LayoutConfig(metrics={"goal_pitch": 300, "margin": 0}))

        positioned = layout_graph(strawberry_graph, metrics)

        assert absolute(positioned, f"goal::{ROOT}::increase_yield") == (420, 28)
        assert positioned.width == 630


class TestFallbackPlacement:
    """Tests for nodes without a placement rule."""

    def test_grid_inside_parent(self):
        graph = ir.Graph(
            nodes=[
                ir.RootNode(id="root", label="R"),
                ir.PortNode(id="a", label="a", parent_id="root"),
                ir.PortNode(id="b", label="b", parent_id="root"),
            ]
        )

        positioned = layout_graph(graph)

        assert absolute(positioned, "a") == (120, 160)
        assert absolute(positioned, "b") == (260, 160)
        assert positioned.get("b").frame == ir.CoordinateFrame.RELATIVE

    def test_grid_wraps_rows(self):
        nodes = [ir.RootNode(id="root", label="R")]
        nodes += [ir.PortNode(id=f"p{i}", label=f"p{i}", parent_id="root") for i in range(5)]

        positioned = layout_graph(ir.Graph(nodes=nodes))

        assert absolute(positioned, "p4") == (120, 300)

    def test_missing_parent_is_absolute(self):
        graph = ir.Graph(nodes=[ir.PortNode(id="orphan", label="o", parent_id="ghost")])

        positioned = layout_graph(graph)
        orphan = positioned.get("orphan")

        assert orphan.frame == ir.CoordinateFrame.ABSOLUTE
        assert (orphan.position.x, orphan.position.y) == (120, 160)
        assert orphan.size is None

    def test_parent_listed_after_child(self):
        """Test a child is placed inside a parent declared later."""
        graph = ir.Graph(
            nodes=[
                ir.PortNode(id="child", label="c", parent_id="owner"),
                ir.PortNode(id="owner", label="o", parent_id="ghost"),
            ]
        )

        positioned = layout_graph(graph)

        assert absolute(positioned, "owner") == (120, 160)
        assert absolute(positioned, "child") == (240, 320)

    def test_empty_graph(self):
        positioned = layout_graph(ir.Graph())

        assert positioned.nodes == []
        assert positioned.width == DEFAULT_METRICS.margin


class TestEdgeStyles:
    """Tests for edge styling."""

    def test_allocation_recognised_by_label(self):
        """Test graphs from other tools are styled by the edge label."""
        edge = ir.Edge(id="e", source="a", target="b", label="allocate")

        assert edge_style(edge) == ALLOCATION_STYLE

    def test_named_connection_is_solid(self):
        edge = ir.Edge(id="e", source="a", target="b", label="feed")

        assert edge_style(edge) == CONNECTION_STYLE


class TestMetricsFromConfig:
    """Tests for manifest-driven metrics."""

    def test_defaults(self):
        assert metrics_from_config(LayoutConfig()) == DEFAULT_METRICS

    def test_unknown_metric(self):
        with pytest.raises(ConfigError, match="goal_spacing"):
            metrics_from_config(LayoutConfig(metrics={"goal_spacing": 1}))

    def test_actuator_order_is_canonicalised(self):
        metrics = metrics_from_config(LayoutConfig(actuator_order=["Human_Actuator", "irrigation"]))

        assert metrics.actuator_order == ("human", "irrigation")

    def test_fallback_columns_at_least_one(self):
        metrics = metrics_from_config(LayoutConfig(metrics={"fallback_columns": 0}))

        assert metrics.fallback_columns == 1
