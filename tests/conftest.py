"""Shared pytest fixtures for DarTwin tests."""

from pathlib import Path

import pytest

from dartwin.core import ir
from dartwin.core.dsl_parser_impl import parse_dartwin
from dartwin.core.graph_builder import build_graph

STRAWBERRY = """#dartwin StrawberryCultivationTrans {
  #twinsystem Strawberry {
    connect Strawberry.Cultivation.MultiSensor        to StrawberryDT.multisensor_input;
    connect StrawberryDT.actuator_output_irrigation   to Strawberry.Cultivation.IrrigationActuator;
    connect StrawberryDT.actuator_output_human        to Strawberry.Cultivation.HumanActuator;
    connect StrawberryDT.actuator_output_ventilation  to Strawberry.Cultivation.VentilationActuator;

    #digitaltwin StrawberryDT {
      port multisensor_input;
      port actuator_output_irrigation;
      port actuator_output_human;
      port actuator_output_ventilation;
    }

    part Cultivation {
      port MultiSensor;
      port IrrigationActuator;
      port HumanActuator;
      port VentilationActuator;
    }
  }

  #goal increase_yield { doc /* yield y higher y than before */ }
  #goal apply_decreased_water { doc /* water consumption w lower w than before */ }

  allocate increase_yield to Strawberry.StrawberryDT;
  allocate apply_decreased_water to Strawberry.StrawberryDT;
}
"""


@pytest.fixture
def strawberry_text() -> str:
    """Return the canonical Strawberry cultivation document."""
    return STRAWBERRY


@pytest.fixture
def strawberry_model() -> ir.DarTwinModel:
    """Return the parsed Strawberry model."""
    return parse_dartwin(STRAWBERRY)


@pytest.fixture
def strawberry_graph(strawberry_model: ir.DarTwinModel) -> ir.Graph:
    """Return the graph built from the Strawberry model."""
    return build_graph(strawberry_model)


@pytest.fixture
def strawberry_file(tmp_path: Path) -> Path:
    """Write the Strawberry document to a temporary .dartwin file."""
    path = tmp_path / "strawberry.dartwin"
    path.write_text(STRAWBERRY, encoding="utf-8")
    return path
