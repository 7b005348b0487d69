"""
Grounded query route: one prompt in, one normalised result out
"""

import structlog
from fastapi import APIRouter, Depends

from ..core.dependencies import get_executor
from ..models.query import QueryRequest, QueryResult
from ..services.grounded_query import GroundedQueryExecutor

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["query"])


@router.post("/query", response_model=QueryResult)
async def run_query(
    request: QueryRequest,
    executor: GroundedQueryExecutor = Depends(get_executor),
) -> QueryResult:
    """Execute a prompt, with search grounding and JSON output when requested.

    Grounded queries fall back to search + fallback LLM when the primary
    backend fails; ungrounded failures surface as 503.
    """
    return await executor.run(request)
