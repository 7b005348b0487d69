"""
Request/result entities of the grounded-query executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..utils.error_handling import StructuredOutputError
from .schema import SchemaNode


class Engine(str, Enum):
    """Which backend actually served a query."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class Citation(BaseModel):
    title: str
    uri: str


class QueryRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    response_schema: Optional[SchemaNode] = None
    use_grounded_search: bool = False
    model: Optional[str] = Field(default=None, description="Primary model override")

    @field_validator("prompt")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("prompt must not be blank")
        return v


@dataclass(frozen=True)
class ParsedJson:
    value: Any


@dataclass(frozen=True)
class ParseFailure:
    raw_text: str
    error: str


ParseOutcome = Union[ParsedJson, ParseFailure]


class QueryResult(BaseModel):
    raw_text: str = ""
    parsed_json: Optional[Any] = None
    sources: List[Citation] = Field(default_factory=list)
    engine_used: Engine
    schema_requested: bool = False
    parse_error: Optional[str] = None

    @property
    def outcome(self) -> Optional[ParseOutcome]:
        """Tagged parse result; ``None`` when no schema was requested."""
        if not self.schema_requested:
            return None
        if self.parse_error is not None:
            return ParseFailure(raw_text=self.raw_text, error=self.parse_error)
        return ParsedJson(self.parsed_json)

    def require_json(self) -> Any:
        outcome = self.outcome
        if isinstance(outcome, ParsedJson):
            return outcome.value
        if isinstance(outcome, ParseFailure):
            raise StructuredOutputError(
                f"backend returned unparseable JSON: {outcome.error}",
                raw_text=outcome.raw_text,
            )
        raise StructuredOutputError("no response schema was requested", raw_text=self.raw_text)
