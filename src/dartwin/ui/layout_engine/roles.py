"""
Port role classification.

A port's role is read from its name, case-insensitively: a name containing
``sensor`` or ``input`` is sensor-like; otherwise one containing
``actuator`` or ``output`` is actuator-like; anything else is unclassified.
Each role is drawn on its own side of the owning twin.
"""

import re
from collections.abc import Sequence

from dartwin.core.ir import PortRole, PortSide

SENSOR_WORDS = ("sensor", "input")
ACTUATOR_WORDS = ("actuator", "output")

ROLE_SIDES = {
    PortRole.SENSOR: PortSide.TOP,
    PortRole.ACTUATOR: PortSide.BOTTOM,
    PortRole.UNCLASSIFIED: PortSide.LEFT,
}

_ROLE_WORD_RE = re.compile("|".join(SENSOR_WORDS + ACTUATOR_WORDS))
_SEPARATOR_RE = re.compile(r"[\s_\-]+")


def classify_port(name: str) -> PortRole:
    """
    Classify a port by name.

    >>> classify_port("multisensor_input").value
    'sensor'
    >>> classify_port("IrrigationActuator").value
    'actuator'
    >>> classify_port("power").value
    'unclassified'
    """
    lowered = name.lower()
    if any(word in lowered for word in SENSOR_WORDS):
        return PortRole.SENSOR
    if any(word in lowered for word in ACTUATOR_WORDS):
        return PortRole.ACTUATOR
    return PortRole.UNCLASSIFIED


def side_for_role(role: PortRole) -> PortSide:
    return ROLE_SIDES[role]


def canonical_key(name: str) -> str:
    """
    Reduce a port name to the key matched against the canonical order.

    Role words and separators are removed, so ``actuator_output_irrigation``
    and ``IrrigationActuator`` both become ``irrigation``.
    """
    return _SEPARATOR_RE.sub("", _ROLE_WORD_RE.sub("", name.lower()))


def order_ports(labels: Sequence[str], canonical_order: Sequence[str]) -> list[int]:
    """
    Return the indexes of ``labels`` in drawing order.

    Names whose key appears in ``canonical_order`` come first, in that
    order; the rest follow sorted by label. Ties keep declaration order.
    """
    rank = {key: index for index, key in enumerate(canonical_order)}
    unknown = len(rank)

    def sort_key(index: int) -> tuple[int, str, int]:
        label = labels[index]
        return (rank.get(canonical_key(label), unknown), label, index)

    return sorted(range(len(labels)), key=sort_key)
