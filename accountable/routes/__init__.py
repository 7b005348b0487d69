"""
API routes for the Accountable India backend
"""

from .assistant import router as assistant_router
from .intel import router as intel_router
from .leaders import router as leaders_router
from .places import router as places_router
from .query import router as query_router

__all__ = [
    "assistant_router",
    "intel_router",
    "leaders_router",
    "places_router",
    "query_router",
]
