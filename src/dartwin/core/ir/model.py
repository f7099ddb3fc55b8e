"""
DarTwin model types.

The parser's output: the DSL's own vocabulary (systems, twins, ports,
connections, goals, allocations and the optional transformation section),
independent of any rendering concern. Field names match the JSON
interchange format exactly.
"""

from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field, StrictStr

from .base import IRModel

MODEL_TYPE = "DarTwin"


class DigitalTwin(IRModel):
    """
    Virtual counterpart of a physical part.

    Attributes:
        name: Twin name, unique within its system
        ports: Port names in declaration order (duplicates are kept)
    """

    name: StrictStr
    ports: list[StrictStr] = Field(default_factory=list)

    interchange_required = ("name", "ports")


class OriginalTwin(IRModel):
    """
    Physical (original) twin, declared with ``part``.

    Attributes:
        name: Part name
        ports: Port names in declaration order (duplicates are kept)
    """

    name: StrictStr
    ports: list[StrictStr] = Field(default_factory=list)

    interchange_required = ("name", "ports")


class Connection(IRModel):
    """
    A wire between two ports.

    Both ends are dotted references exactly as written, e.g.
    ``Strawberry.Cultivation.MultiSensor`` or ``StrawberryDT.multisensor_input``.
    The name comes from an inline ``name <id>`` or a trailing
    ``// name: <id>`` comment.
    """

    from_: StrictStr = Field(alias="from")
    to: StrictStr
    name: StrictStr | None = None

    interchange_required = ("from", "to")

    model_config = ConfigDict(populate_by_name=True)


class Goal(IRModel):
    """
    A named objective with optional whitespace-normalised documentation.
    """

    name: StrictStr
    doc: StrictStr | None = None

    interchange_required = ("name",)


class Allocation(IRModel):
    """
    Assignment of a goal to a digital twin.

    Attributes:
        goal: Goal name
        target: Dotted reference to a digital twin, optionally system-qualified
    """

    goal: StrictStr
    target: StrictStr

    interchange_required = ("goal", "target")


class TwinSystem(IRModel):
    """
    A system owning digital twins, original twins and their connections.
    """

    name: StrictStr
    digital_twins: list[DigitalTwin] = Field(default_factory=list)
    original_twins: list[OriginalTwin] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)

    interchange_required = ("name", "digital_twins", "original_twins", "connections")


class DarTwinSlice(IRModel):
    """
    Partial model used by a transformation sub-section.

    Any of the three lists may be absent; the parser leaves a list unset
    rather than empty when the sub-section declares none.
    """

    systems: list[TwinSystem] | None = None
    goals: list[Goal] | None = None
    allocations: list[Allocation] | None = None


class DarTrans(IRModel):
    """
    Transformation section: an architecture change expressed in one document.

    Attributes:
        before: Slice describing the architecture before the change
        core: Slice shared by both sides
        after: Slice describing the architecture after the change
    """

    before: DarTwinSlice | None = None
    core: DarTwinSlice | None = None
    after: DarTwinSlice | None = None

    def sections(self) -> list[tuple[str, DarTwinSlice]]:
        """Present sub-sections in before/core/after order."""
        present = [("before", self.before), ("core", self.core), ("after", self.after)]
        return [(label, section) for label, section in present if section is not None]


class DarTwinModel(IRModel):
    """
    Complete parsed document.

    The ``type`` discriminant identifies the JSON as this DSL's model.

    Attributes:
        type: Always ``"DarTwin"``
        name: Root declaration name (empty when no root was found)
        systems: Systems in declaration order
        goals: Goals in declaration order
        allocations: Allocations in declaration order
        dartrans: Optional transformation section
    """

    type: Literal["DarTwin"] = MODEL_TYPE
    name: StrictStr = ""
    systems: list[TwinSystem] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    allocations: list[Allocation] = Field(default_factory=list)
    dartrans: DarTrans | None = None

    interchange_required = ("type", "name", "systems", "goals", "allocations")

    @property
    def is_empty(self) -> bool:
        """True when nothing beyond an (optional) name was parsed."""
        return not (self.systems or self.goals or self.allocations or self.dartrans)

    def get_system(self, name: str) -> TwinSystem | None:
        """Get the first system declared with this name."""
        for system in self.systems:
            if system.name == name:
                return system
        return None

    def get_goal(self, name: str) -> Goal | None:
        """Get the first goal declared with this name."""
        for goal in self.goals:
            if goal.name == name:
                return goal
        return None
