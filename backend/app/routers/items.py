"""
API endpoints for marketplace item search and nearby ranking.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.auth import get_current_user, get_optional_user, UserContext
from app.schemas import ItemSearchResponse, NearbyItemsResponse, RankedItem
from app.services.geo_service import Coordinate
from app.services.item_service import ITEM_SORTS, ItemCondition, ItemFilters, ItemService, ItemStatus
from app.services.viewer_service import ViewerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items", tags=["Items"])

_item_service = ItemService()
_viewer_service = ViewerService()


@router.get("/search", response_model=ItemSearchResponse)
async def search_items(
    q: Optional[str] = Query(None, max_length=100, description="Text to match in title or description"),
    category_id: Optional[int] = Query(None, ge=1),
    condition: Optional[ItemCondition] = Query(None),
    status: Optional[ItemStatus] = Query(None, description="Defaults to active"),
    min_price: Optional[int] = Query(None, ge=0, description="Minimum price in cents"),
    max_price: Optional[int] = Query(None, ge=0, description="Maximum price in cents"),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Search center latitude"),
    lon: Optional[float] = Query(None, ge=-180, le=180, description="Search center longitude"),
    within_km: Optional[float] = Query(None, gt=0, le=200, description="Only items within this radius"),
    sort: str = Query("newest", description=" | ".join(ITEM_SORTS)),
    page: Optional[int] = Query(None, description="Page number (clamped to >= 1)"),
    page_size: Optional[int] = Query(None, description="Results per page (clamped to 1-50, default 20)"),
    user: Optional[UserContext] = Depends(get_optional_user),
) -> ItemSearchResponse:
    """
    Search active marketplace items.

    The geo center is the explicit lat/lon if both are given, otherwise the
    signed-in viewer's last known location. Without any center, results are
    plain (no distance or score) and distance sorting falls back to newest.
    """
    if lat is not None and lon is not None:
        center = Coordinate(latitude=lat, longitude=lon)
    else:
        center = await _viewer_service.get_location(user.user_id if user else None)

    filters = ItemFilters(
        q=q,
        category_id=category_id,
        condition=condition,
        status=status,
        min_price=min_price,
        max_price=max_price,
        center=center,
        radius_km=within_km,
        sort=sort,
    )
    try:
        result = await _item_service.search_items(filters, page=page, page_size=page_size)
    except Exception as e:
        logger.exception(f"Error searching items: {e}")
        raise HTTPException(status_code=500, detail="Failed to search items")

    return ItemSearchResponse(**result)


@router.get("/nearby", response_model=NearbyItemsResponse)
async def nearby_items(
    limit: Optional[int] = Query(None, description="Number of items (clamped to 1-50, default 20)"),
    radius_km: Optional[float] = Query(None, gt=0, le=200, description="Only items within this radius of the viewer"),
    user: UserContext = Depends(get_current_user),
) -> NearbyItemsResponse:
    """Active items closest to the viewer; newest first if their location is unknown."""
    viewer = await _viewer_service.get_location(user.user_id)
    try:
        items = await _item_service.nearby_items(viewer, limit, radius_km=radius_km)
    except Exception as e:
        logger.exception(f"Error ranking nearby items: {e}")
        raise HTTPException(status_code=500, detail="Failed to rank nearby items")
    return NearbyItemsResponse(items=items)


@router.get("/{item_id}", response_model=RankedItem)
async def get_item(item_id: str) -> RankedItem:
    """
    Get a single item by its ID.

    Raises:
        HTTPException: 404 if item not found
    """
    item = await _item_service.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
    return RankedItem(**item)
