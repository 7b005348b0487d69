"""
Declarative response-schema descriptors.

A :class:`SchemaNode` tree describes the JSON shape a caller expects back from
a generative backend. It is sent verbatim (as Gemini's ``responseSchema``) to
the primary backend and serialised into the system instruction for the
fallback LLM. Nothing here validates model *output*; the executor only checks
that output parses as JSON.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from ..utils.error_handling import SchemaDefinitionError


class SchemaType(str, Enum):
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"


class SchemaNode(BaseModel):
    """One node of a response schema (object/array/scalar, arbitrarily nested)."""

    type: SchemaType
    description: Optional[str] = None
    properties: Optional[Dict[str, SchemaNode]] = None
    items: Optional[SchemaNode] = None
    enum: Optional[List[str]] = None
    required: Optional[List[str]] = None
    nullable: Optional[bool] = None

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, v: Any) -> Any:
        # Accept JSON-Schema style lower-case names ("object", "string", ...)
        if isinstance(v, str):
            return v.upper()
        return v

    @model_validator(mode="after")
    def _check_shape(self) -> "SchemaNode":
        if self.type is SchemaType.OBJECT:
            if self.properties is None:
                raise ValueError("object node must declare properties")
            if self.required is None:
                raise ValueError("object node must declare its required fields")
            missing = [name for name in self.required if name not in self.properties]
            if missing:
                raise ValueError(f"required fields not declared in properties: {missing}")
        else:
            if self.properties is not None or self.required is not None:
                raise ValueError(f"{self.type.value} node cannot declare properties/required")

        if self.type is SchemaType.ARRAY:
            if self.items is None:
                raise ValueError("array node must declare items")
        elif self.items is not None:
            raise ValueError(f"{self.type.value} node cannot declare items")

        if self.enum is not None and self.type is not SchemaType.STRING:
            raise ValueError("enum is only allowed on string nodes")
        return self

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_provider_dict(self) -> Dict[str, Any]:
        """Gemini ``responseSchema`` shape (upper-case types, no null fields)."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_provider_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SchemaNode":
        """Parse an external descriptor, raising :class:`SchemaDefinitionError`."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise SchemaDefinitionError(str(exc)) from exc


SchemaNode.model_rebuild()


# ────────────────────────────────────────────────────────────
#  Builders
# ────────────────────────────────────────────────────────────

def _build(**fields: Any) -> SchemaNode:
    try:
        return SchemaNode(**fields)
    except ValidationError as exc:
        raise SchemaDefinitionError(str(exc)) from exc


def obj(
    properties: Mapping[str, SchemaNode],
    *,
    required: Optional[Sequence[str]] = None,
    description: Optional[str] = None,
) -> SchemaNode:
    """Object node; every property is required unless ``required`` narrows it."""
    req = list(properties) if required is None else list(required)
    return _build(
        type=SchemaType.OBJECT,
        properties=dict(properties),
        required=req,
        description=description,
    )


def arr(items: SchemaNode, *, description: Optional[str] = None) -> SchemaNode:
    return _build(type=SchemaType.ARRAY, items=items, description=description)


def string(*, enum: Optional[Sequence[str]] = None, description: Optional[str] = None) -> SchemaNode:
    return _build(
        type=SchemaType.STRING,
        enum=list(enum) if enum is not None else None,
        description=description,
    )


def number(*, description: Optional[str] = None) -> SchemaNode:
    return _build(type=SchemaType.NUMBER, description=description)


def integer(*, description: Optional[str] = None) -> SchemaNode:
    return _build(type=SchemaType.INTEGER, description=description)


def boolean(*, description: Optional[str] = None) -> SchemaNode:
    return _build(type=SchemaType.BOOLEAN, description=description)
