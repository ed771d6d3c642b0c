from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class HealthResponse(BaseModel):
    """Response model for health check endpoint"""
    status: str
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "message": "Campus Cart API is running"
            }
        }


class RankedItem(BaseModel):
    """Marketplace item with its distance from the viewer and match score"""
    id: str
    title: str
    price_cents: int
    description: str = ""
    category_id: Optional[int] = None
    condition: Optional[str] = None
    status: str = "active"
    seller_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[str] = None
    distance_km: Optional[float] = Field(None, ge=0, description="Distance from the viewer; null if either location is unknown")
    score_percent: Optional[int] = Field(None, ge=0, le=100, description="Distance-based match score")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "item-002",
                "title": "Calculus textbook, 8th edition",
                "price_cents": 4500,
                "description": "Stewart. Light highlighting in chapters 1-3.",
                "category_id": 2,
                "condition": "like_new",
                "status": "active",
                "latitude": 39.9566,
                "longitude": -75.1899,
                "created_at": "2026-09-10T09:30:00+00:00",
                "distance_km": 0.54,
                "score_percent": 100
            }
        }


class RankedRoommatePost(BaseModel):
    """Roommate post with its distance from the viewer and match score"""
    id: str
    title: str
    user_id: Optional[str] = None
    description: str = ""
    budget_min_cents: Optional[int] = None
    budget_max_cents: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    move_in_date: Optional[str] = None
    housing: Optional[str] = None
    gender_pref: Optional[str] = None
    created_at: Optional[str] = None
    distance_km: Optional[float] = Field(None, ge=0)
    score_percent: Optional[int] = Field(None, ge=0, le=100)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "rp-002",
                "title": "Grad student seeking roommate in University City",
                "budget_min_cents": 90000,
                "budget_max_cents": 130000,
                "move_in_date": "2026-08-20",
                "housing": "apartment",
                "gender_pref": "any",
                "distance_km": 0.44,
                "score_percent": 100
            }
        }


class ItemSearchResponse(BaseModel):
    """One page of item search results"""
    items: List[RankedItem]
    page: int
    page_size: int
    total: int = Field(..., description="Number of matching items across all pages")


class RoommateSearchResponse(BaseModel):
    """One page of roommate post search results"""
    items: List[RankedRoommatePost]
    page: int
    page_size: int
    total: int = Field(..., description="Number of matching posts across all pages")


class NearbyItemsResponse(BaseModel):
    items: List[RankedItem]


class RoommateMatchesResponse(BaseModel):
    """One page of ranked roommate matches"""
    matches: List[RankedRoommatePost]
    page: int
    page_size: int
    total: int = Field(..., description="Matches at or above min_score across all pages")


class CompatibilityBreakdown(BaseModel):
    lifestyle: int
    practical: int
    preferences: int
    details: Dict[str, float]


class CompatibilityResponse(BaseModel):
    """Detailed compatibility of a roommate post with the viewer's own post"""
    post_id: str
    distance_km: Optional[float] = None
    score_percent: int = Field(..., ge=0, le=100)
    breakdown: CompatibilityBreakdown

    class Config:
        json_schema_extra = {
            "example": {
                "post_id": "rp-002",
                "distance_km": 0.44,
                "score_percent": 96,
                "breakdown": {
                    "lifestyle": 45,
                    "practical": 36,
                    "preferences": 15,
                    "details": {"cleanliness": 1.0, "budget_overlap": 0.75, "distance_factor": 1.0}
                }
            }
        }
