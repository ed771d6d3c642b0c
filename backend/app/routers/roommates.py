"""
API endpoints for roommate post search, matches and compatibility.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.auth import get_current_user, get_optional_user, UserContext
from app.schemas import (
    CompatibilityResponse,
    RankedRoommatePost,
    RoommateMatchesResponse,
    RoommateSearchResponse,
)
from app.services.geo_service import Coordinate
from app.services.roommate_service import (
    HousingType,
    PostNotFoundError,
    ROOMMATE_SORTS,
    RoommateFilters,
    RoommateService,
    ViewerPostRequiredError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roommates", tags=["Roommates"])

_roommate_service = RoommateService()


@router.get("/search", response_model=RoommateSearchResponse)
async def search_posts(
    q: Optional[str] = Query(None, max_length=100),
    budget_min: Optional[int] = Query(None, ge=0, description="Posts whose budget reaches at least this (cents)"),
    budget_max: Optional[int] = Query(None, ge=0, description="Posts whose budget starts at most this (cents)"),
    from_date: Optional[date] = Query(None, description="Earliest move-in date"),
    to_date: Optional[date] = Query(None, description="Latest move-in date"),
    housing: Optional[HousingType] = Query(None),
    gender: Optional[str] = Query(None, description="Only posts accepting this gender (or any)"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    radius_km: Optional[float] = Query(None, gt=0, le=100),
    sort: str = Query("newest", description=" | ".join(ROOMMATE_SORTS)),
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None),
    user: Optional[UserContext] = Depends(get_optional_user),
) -> RoommateSearchResponse:
    """Search active roommate posts. A radius only applies together with lat/lon.

    A signed-in viewer does not see their own posts.
    """
    center = Coordinate(latitude=lat, longitude=lon) if lat is not None and lon is not None else None
    filters = RoommateFilters(
        q=q,
        budget_min=budget_min,
        budget_max=budget_max,
        from_date=from_date,
        to_date=to_date,
        housing=housing,
        gender=gender,
        center=center,
        radius_km=radius_km,
        sort=sort,
        exclude_user_id=user.user_id if user else None,
    )
    try:
        result = await _roommate_service.search_posts(filters, page=page, page_size=page_size)
    except Exception as e:
        logger.exception(f"Error searching roommate posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to search roommate posts")

    return RoommateSearchResponse(**result)


@router.get("/matches", response_model=RoommateMatchesResponse)
async def top_matches(
    limit: Optional[int] = Query(None, description="Matches per page (clamped to 1-12, default 3)"),
    min_score: Optional[int] = Query(0, description="Minimum match score (clamped to 0-100)"),
    page: Optional[int] = Query(None, description="Page number (clamped to >= 1)"),
    user: UserContext = Depends(get_current_user),
) -> RoommateMatchesResponse:
    """Other users' posts ranked by distance from the viewer, paginated."""
    try:
        result = await _roommate_service.top_matches(user.user_id, limit, min_score=min_score, page=page)
    except Exception as e:
        logger.exception(f"Error computing roommate matches: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute roommate matches")
    return RoommateMatchesResponse(**result)


@router.get("/{post_id}/compatibility", response_model=CompatibilityResponse)
async def post_compatibility(
    post_id: str,
    user: UserContext = Depends(get_current_user),
) -> CompatibilityResponse:
    """Compatibility breakdown between the viewer's latest post and post_id."""
    try:
        result = await _roommate_service.compatibility_for_post(user.user_id, post_id)
    except ViewerPostRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PostNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CompatibilityResponse(**result)


@router.get("/{post_id}", response_model=RankedRoommatePost)
async def get_post(post_id: str) -> RankedRoommatePost:
    post = await _roommate_service.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail=f"Roommate post {post_id} not found")
    return RankedRoommatePost(**post)
