"""
Layout metrics.

Every constant the layout engine uses lives on ``LayoutMetrics`` so a
project can tune the drawing from its manifest without touching code.
"""

from dataclasses import dataclass, fields, replace

from dartwin.core.errors import ConfigError
from dartwin.core.manifest import DEFAULT_ACTUATOR_ORDER, LayoutConfig

from .roles import canonical_key


@dataclass(frozen=True)
class LayoutMetrics:
    """
    Geometry of the DarTwin drawing, in canvas units.

    Attributes:
        margin: Padding added around the bounding box of all nodes
        goal_row_x: X of the first goal
        goal_row_y: Y of the goal row
        goal_pitch: Distance between consecutive goals
        goal_width: Goal box width
        goal_height: Goal box height
        system_row_x: X of the first system
        system_row_y: Y of the system row (below the goals)
        system_width: System region width
        system_height: System region height
        system_gap: Horizontal space between system regions
        system_padding: Minimum inset of digital twins from the system edge
        twin_offset_y: Y of the digital twin row inside its system
        twin_width: Digital twin width (shrunk when several do not fit)
        twin_height: Digital twin height
        twin_gap: Horizontal space between digital twins
        port_size: Port square size
        boundary_offset: Distance of system-boundary ports beyond the
            digital twin's port row
        fallback_x: X of the first fallback grid cell
        fallback_y: Y of the first fallback grid cell
        fallback_pitch: Fallback grid cell pitch
        fallback_columns: Fallback grid columns per row
        actuator_order: Canonical order of known port names
    """

    margin: float = 20.0

    goal_row_x: float = 120.0
    goal_row_y: float = 28.0
    goal_pitch: float = 260.0
    goal_width: float = 210.0
    goal_height: float = 88.0

    system_row_x: float = 100.0
    system_row_y: float = 188.0
    system_width: float = 520.0
    system_height: float = 360.0
    system_gap: float = 40.0
    system_padding: float = 40.0

    twin_offset_y: float = 90.0
    twin_width: float = 300.0
    twin_height: float = 160.0
    twin_gap: float = 40.0

    port_size: float = 18.0
    boundary_offset: float = 54.0

    fallback_x: float = 120.0
    fallback_y: float = 160.0
    fallback_pitch: float = 140.0
    fallback_columns: int = 4

    actuator_order: tuple[str, ...] = tuple(DEFAULT_ACTUATOR_ORDER)


DEFAULT_METRICS = LayoutMetrics()

_NUMERIC_FIELDS = {f.name for f in fields(LayoutMetrics) if f.name != "actuator_order"}


def metrics_from_config(config: LayoutConfig) -> LayoutMetrics:
    """
    Build metrics from the ``[layout]`` manifest section.

    Raises:
        ConfigError: If an override names an unknown metric
    """
    unknown = sorted(set(config.metrics) - _NUMERIC_FIELDS)
    if unknown:
        raise ConfigError(f"Unknown layout metric(s): {', '.join(unknown)}")

    overrides: dict[str, object] = dict(config.metrics)
    if "fallback_columns" in overrides:
        overrides["fallback_columns"] = max(1, int(config.metrics["fallback_columns"]))
    return replace(
        DEFAULT_METRICS,
        actuator_order=tuple(canonical_key(name) for name in config.actuator_order),
        **overrides,  # type: ignore[arg-type]
    )
