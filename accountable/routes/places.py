"""
Maps-grounded place lookups
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.dependencies import get_intelligence_service
from ..models.intel import NearbyService, PlaceLookup
from ..services.intelligence import IntelligenceService

router = APIRouter(prefix="/places", tags=["places"])


@router.get("/search", response_model=PlaceLookup)
async def search_place(
    q: str = Query(..., min_length=1),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.search_place_on_maps(q, lat, lng)


@router.get("/nearby", response_model=List[NearbyService])
async def nearby_services(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    service: IntelligenceService = Depends(get_intelligence_service),
):
    return await service.find_nearby_civic_services(lat, lng)
