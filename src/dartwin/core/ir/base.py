"""
Shared base for DarTwin IR records.

IR records are frozen values. When validated with the interchange context
(see ``dartwin.core.interchange``) every key listed in ``interchange_required``
must be present in the input, even where the Python constructor supplies a
default, and aliased fields only accept their published key (``from``,
``parentId``), so externally supplied JSON is held to the exact shape.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationInfo, model_validator
from pydantic_core import PydanticCustomError

INTERCHANGE_CONTEXT = {"interchange": True}


class IRModel(BaseModel):
    """Frozen record that rejects unknown keys."""

    interchange_required: ClassVar[tuple[str, ...]] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _require_interchange_keys(cls, data: Any, info: ValidationInfo) -> Any:
        if not (info.context and info.context.get("interchange")):
            return data
        if not isinstance(data, dict):
            return data
        for key in cls.interchange_required:
            if key not in data:
                raise PydanticCustomError(
                    "missing_key",
                    "Field required: {key}",
                    {"key": key},
                )
        for name, field_info in cls.model_fields.items():
            if field_info.alias and field_info.alias != name and name in data:
                raise PydanticCustomError(
                    "unexpected_key",
                    "Unexpected key: {key}",
                    {"key": name},
                )
        return data
