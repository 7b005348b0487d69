"""
Models package for the Accountable India backend
"""

from .query import (
    Citation,
    Engine,
    ParsedJson,
    ParseFailure,
    QueryRequest,
    QueryResult,
)
from .schema import SchemaNode, SchemaType, arr, boolean, integer, number, obj, string

__all__ = [
    "Citation",
    "Engine",
    "ParsedJson",
    "ParseFailure",
    "QueryRequest",
    "QueryResult",
    "SchemaNode",
    "SchemaType",
    "arr",
    "boolean",
    "integer",
    "number",
    "obj",
    "string",
]
