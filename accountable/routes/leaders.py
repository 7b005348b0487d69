"""
Leader routes: discovery, profiles, legal standing and comparisons
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.dependencies import get_intelligence_service
from ..models.intel import LeaderCandidate, LeaderLegalStanding, LeaderProfile, TextAnswer
from ..services.intelligence import IntelligenceService

router = APIRouter(prefix="/leaders", tags=["leaders"])


@router.get("/discover", response_model=List[LeaderCandidate])
async def discover_leaders(
    exclude: List[str] = Query([]),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.discover_batch_leaders(exclude)


@router.get("/search", response_model=TextAnswer)
async def search_leader(
    q: str = Query(..., min_length=1),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.search_leader_info(q)


@router.get("/compare", response_model=TextAnswer)
async def compare_leaders(
    a: str = Query(..., min_length=1),
    b: str = Query(..., min_length=1),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.compare_leaders(a, b)


@router.get("/{name}/legal", response_model=LeaderLegalStanding)
async def legal_standing(
    name: str,
    constituency: str = Query(..., min_length=1),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    standing = await service.fetch_leader_legal_standing(name, constituency)
    if standing is None:
        raise HTTPException(status_code=404, detail=f"No legal record found for {name}")
    return standing


@router.get("/{name}/profile", response_model=LeaderProfile)
async def leader_profile(
    name: str,
    service: IntelligenceService = Depends(get_intelligence_service),
):
    profile = await service.discover_leader_profile(name)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"No profile found for {name}")
    return profile
