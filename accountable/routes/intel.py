"""
Civic intelligence routes: elections, governance, notifications, events
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from ..core.dependencies import get_intelligence_service
from ..models.intel import (
    CivicNotification,
    ElectionIntelligence,
    Insight,
    IntelResult,
    LiveEvent,
    NationalIntel,
    PromiseVerification,
    StateIntel,
)
from ..services.intelligence import IntelligenceService

router = APIRouter(prefix="/intel", tags=["intel"])


@router.get("/elections", response_model=IntelResult[ElectionIntelligence])
async def election_intelligence(
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.fetch_election_intelligence()


@router.get("/national", response_model=IntelResult[NationalIntel])
async def national_intelligence(
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.fetch_national_intelligence()


@router.get("/states/{state}", response_model=IntelResult[StateIntel])
async def state_intelligence(
    state: str,
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.fetch_state_intelligence(state)


@router.get("/notifications", response_model=List[CivicNotification])
async def civic_notifications(
    state: Optional[str] = None,
    mode: Literal["Centre", "State"] = "Centre",
    followed: List[str] = Query([]),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    """Fresh notifications; ``followed`` may be repeated per leader."""
    return await service.fetch_civic_notifications(state, mode, followed)


@router.get("/insights", response_model=List[Insight])
async def dashboard_insights(
    user: str = Query("Citizen", min_length=1),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.get_dashboard_insights(user)


@router.get("/promises", response_model=PromiseVerification)
async def political_promises(
    query: str = Query("latest political manifestos India", min_length=1),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.fetch_and_verify_promises(query)


@router.get("/events", response_model=IntelResult[List[LiveEvent]])
async def live_events(
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.fetch_live_events()
