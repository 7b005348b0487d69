"""
Common dependencies for the Accountable India API
"""

from fastapi import HTTPException, Request

from ..services.grounded_query import GroundedQueryExecutor
from ..services.intelligence import IntelligenceService


def get_executor(request: Request) -> GroundedQueryExecutor:
    """Return the executor created during application startup."""
    executor = getattr(request.app.state, "executor", None)
    if executor is None:
        raise HTTPException(status_code=503, detail="Query executor not initialised")
    return executor


def get_intelligence_service(request: Request) -> IntelligenceService:
    service = getattr(request.app.state, "intelligence", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Intelligence service not initialised")
    return service
