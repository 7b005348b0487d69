"""
Civic assistant chat route
"""

from fastapi import APIRouter, Depends

from ..core.dependencies import get_intelligence_service
from ..models.intel import AssistantReply, AssistantRequest
from ..services.intelligence import IntelligenceService

router = APIRouter(tags=["assistant"])


@router.post("/assistant", response_model=AssistantReply)
async def ask_assistant(
    request: AssistantRequest,
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.ask_assistant(request.message, request.user_name, request.language)
