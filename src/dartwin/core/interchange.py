"""
JSON interchange for DarTwin models and graphs.

The model and graph are exchanged as plain JSON objects whose keys match
the IR field names (``from`` and ``parentId`` being the published spellings).
Validators answer yes/no plus the failing field and never raise; loaders
raise ``InterchangeError`` so the failure reaches the caller unambiguously.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from . import ir
from .errors import InterchangeError
from .ir.base import INTERCHANGE_CONTEXT


@dataclass(frozen=True)
class InterchangeResult:
    """
    Outcome of validating externally supplied data.

    Attributes:
        valid: True when the data has exactly the expected shape
        field: Dotted path of the first failing field (e.g. ``systems.0.name``)
        message: Description of the first failure
    """

    valid: bool
    field: str | None = None
    message: str | None = None

    def __bool__(self) -> bool:
        return self.valid


def _error_field(error: Any) -> str | None:
    loc = [str(part) for part in error.get("loc", ())]
    ctx = error.get("ctx") or {}
    key = ctx.get("key")
    if error.get("type") in ("missing_key", "unexpected_key") and key:
        loc.append(str(key))
    elif error.get("type") in ("duplicate_id", "unknown_node") and ctx.get("field"):
        loc.append(str(ctx["field"]))
    return ".".join(loc) or None


def _first_error(exc: ValidationError) -> tuple[str | None, str]:
    error = exc.errors()[0]
    return _error_field(error), error["msg"]


def _validate(model_type: type[BaseModel], data: Any) -> Any:
    if isinstance(data, (str, bytes)):
        return model_type.model_validate_json(data, context=INTERCHANGE_CONTEXT)
    return model_type.model_validate(data, context=INTERCHANGE_CONTEXT)


def _check(model_type: type[BaseModel], data: Any) -> InterchangeResult:
    try:
        _validate(model_type, data)
    except ValidationError as exc:
        field, message = _first_error(exc)
        return InterchangeResult(valid=False, field=field, message=message)
    return InterchangeResult(valid=True)


def _load(model_type: type[BaseModel], data: Any, what: str) -> Any:
    try:
        return _validate(model_type, data)
    except ValidationError as exc:
        field, message = _first_error(exc)
        where = f" at '{field}'" if field else ""
        raise InterchangeError(f"Invalid {what}{where}: {message}", field=field) from exc


# =============================================================================
# Validation
# =============================================================================


def validate_model_data(data: Any) -> InterchangeResult:
    """
    Check that ``data`` is a well-formed model.

    Accepts a decoded JSON object or raw JSON text. Rejects missing keys,
    wrong value types, unexpected keys at any depth and a ``type`` other than
    ``"DarTwin"``.

    Examples:
        >>> validate_model_data({"type": "DarTwin", "name": "x", "systems": [],
        ...                      "goals": [], "allocations": []}).valid
        True
        >>> validate_model_data({"type": "DarTwin"}).field
        'name'
    """
    return _check(ir.DarTwinModel, data)


def validate_graph_data(data: Any) -> InterchangeResult:
    """
    Check that ``data`` is a well-formed graph (``{"nodes": [...], "edges": [...]}``).

    Besides the record shapes, node ids must be unique and every edge
    endpoint must name one of the nodes.
    """
    return _check(ir.Graph, data)


# =============================================================================
# Loading
# =============================================================================


def load_model_data(data: Any) -> ir.DarTwinModel:
    """
    Load a model from a decoded JSON object or JSON text.

    Raises:
        InterchangeError: If the data does not have the model shape
    """
    return _load(ir.DarTwinModel, data, "DarTwin model")


def load_graph_data(data: Any) -> ir.Graph:
    """
    Load a graph from a decoded JSON object or JSON text.

    Raises:
        InterchangeError: If the data does not have the graph shape
    """
    return _load(ir.Graph, data, "graph")


# =============================================================================
# Serialisation
# =============================================================================


def model_to_data(model: ir.DarTwinModel) -> dict[str, Any]:
    """Convert a model to its JSON object; absent optional fields are omitted."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def model_to_json(model: ir.DarTwinModel, indent: int | None = 2) -> str:
    return json.dumps(model_to_data(model), indent=indent)


def graph_to_data(graph: ir.Graph) -> dict[str, Any]:
    """Convert a graph to flat node and edge records."""
    return graph.model_dump(mode="json", by_alias=True, exclude_none=True)


def graph_to_json(graph: ir.Graph, indent: int | None = 2) -> str:
    return json.dumps(graph_to_data(graph), indent=indent)


def positioned_graph_to_data(positioned: ir.PositionedGraph) -> dict[str, Any]:
    return positioned.model_dump(mode="json", by_alias=True, exclude_none=True)


def positioned_graph_to_json(positioned: ir.PositionedGraph, indent: int | None = 2) -> str:
    return json.dumps(positioned_graph_to_data(positioned), indent=indent)
