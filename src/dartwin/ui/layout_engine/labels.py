"""
Display labels.

Node labels in the graph are the names exactly as written; the renderer
shows a prettier form computed here.
"""

import re

from dartwin.core import ir

_CAMEL_RE = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SPLIT_LETTERS_RE = re.compile(r"\b([A-Z])\s+([A-Z])\b")
_UPPER_RE = re.compile(r"[A-Z]+")
_TWIN_SUFFIX_RE = re.compile(r"Dt\b", re.IGNORECASE)
_MULTI_SENSOR_RE = re.compile(r"Multi Sensor", re.IGNORECASE)


def format_label(label: str) -> str:
    """
    Split snake_case and camelCase names into Title Case words.

    All-caps words (acronyms) are kept as written.

    Examples:
        >>> format_label("increase_yield")
        'Increase Yield'
        >>> format_label("StrawberryDT")
        'Strawberry DT'
        >>> format_label("HTTPServer")
        'HTTP Server'
    """
    if not label:
        return ""

    spaced = label.replace("_", " ")
    spaced = _CAMEL_RE.sub(r"\1 \2", spaced)
    spaced = _ACRONYM_RE.sub(r"\1 \2", spaced)
    collapsed = _SPLIT_LETTERS_RE.sub(r"\1\2", spaced)

    words = []
    for part in collapsed.split():
        if _UPPER_RE.fullmatch(part):
            words.append(part)
        else:
            words.append(part[0].upper() + part[1:].lower())
    return " ".join(words)


def format_twin_label(label: str) -> str:
    """
    >>> format_twin_label("greenhouse_dt")
    'Greenhouse DT'
    """
    return _TWIN_SUFFIX_RE.sub("DT", format_label(label), count=1)


def format_port_label(label: str) -> str:
    """
    >>> format_port_label("MultiSensor")
    'Multi-sensor'
    """
    return _MULTI_SENSOR_RE.sub("Multi-sensor", format_label(label), count=1)


def display_label(node: ir.Node) -> str:
    """Display label for any graph node."""
    if isinstance(node, ir.DigitalTwinNode):
        return format_twin_label(node.label)
    if isinstance(node, ir.PortNode):
        return format_port_label(node.label)
    return format_label(node.label)
