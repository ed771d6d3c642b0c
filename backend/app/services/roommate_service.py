"""Roommate post search, top matches and compatibility."""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from app.database import is_database_enabled, get_session_context
from app.services.dataset import load_dataset
from app.services.geo_service import Coordinate, coordinate_of, distance_between
from app.services.ranking_service import created_at_of, rank_nearby
from app.services.scoring_service import ScoringService
from app.services.search_service import (
    SearchFilters,
    sort_key_asc,
    sort_key_desc,
    normalize_pagination,
    search,
)
from app.services.viewer_service import ViewerService

logger = logging.getLogger(__name__)

MATCH_DEFAULT_LIMIT = 3
MATCH_MAX_LIMIT = 12

HousingType = Literal["dorm", "apartment", "house", "studio"]
ROOMMATE_SORTS = ("newest", "distance", "budget_low", "budget_high", "move_in_date")


class PostNotFoundError(LookupError):
    """The requested roommate post does not exist."""


class ViewerPostRequiredError(ValueError):
    """The viewer needs their own roommate post before compatibility can be computed."""


@dataclass
class RoommateFilters(SearchFilters):
    """Roommate post filters.

    Budget bounds test for overlap with the post's budget range; posts with
    no move-in date pass any date window. exclude_user_id hides the signed-in
    viewer's own posts.
    """
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    housing: Optional[str] = None
    gender: Optional[str] = None
    exclude_user_id: Optional[str] = None

    EXTRA_SORTS = {
        "budget_low": sort_key_asc("budget_min_cents"),
        "budget_high": sort_key_desc("budget_max_cents"),
        "move_in_date": sort_key_asc("move_in_date"),
    }

    def matches(self, row: Dict[str, Any]) -> bool:
        if row.get("status", "active") != "active":
            return False
        if self.exclude_user_id and row.get("user_id") == self.exclude_user_id:
            return False
        if self.budget_min is not None:
            post_max = row.get("budget_max_cents")
            if post_max is None or post_max < self.budget_min:
                return False
        if self.budget_max is not None:
            post_min = row.get("budget_min_cents")
            if post_min is None or post_min > self.budget_max:
                return False
        move_in = row.get("move_in_date")
        if move_in:
            move_in_iso = str(move_in)[:10]
            if self.from_date and move_in_iso < self.from_date.isoformat():
                return False
            if self.to_date and move_in_iso > self.to_date.isoformat():
                return False
        if self.housing and row.get("housing") != self.housing:
            return False
        if self.gender and row.get("gender_pref") not in ("any", self.gender):
            return False
        return super().matches(row)


class RoommateService:
    """Roommate posts from PostgreSQL or the JSON dataset."""

    def __init__(self, viewer_service: Optional[ViewerService] = None):
        self._use_database = is_database_enabled()
        self._posts_data: Optional[List[Dict]] = None if self._use_database else load_dataset("roommate_posts")
        self._viewer_service = viewer_service or ViewerService()

    async def search_posts(
        self,
        filters: RoommateFilters,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Filter, sort and paginate active roommate posts."""
        if self._use_database:
            return await self._search_database(filters, page, page_size)
        return search(self._posts_data, filters, page, page_size)

    async def get_post(self, post_id: str) -> Optional[Dict]:
        if self._use_database:
            from app.models.roommate_post import RoommatePostModel

            async with get_session_context() as session:
                post = await session.get(RoommatePostModel, post_id)
                return post.to_dict() if post else None
        return next((p for p in self._posts_data if p.get("id") == post_id), None)

    async def get_latest_post_for_user(self, user_id: str) -> Optional[Dict]:
        if self._use_database:
            from sqlalchemy import select
            from app.models.roommate_post import RoommatePostModel

            async with get_session_context() as session:
                stmt = (
                    select(RoommatePostModel)
                    .where(RoommatePostModel.user_id == user_id)
                    .order_by(RoommatePostModel.created_at.desc())
                    .limit(1)
                )
                post = (await session.execute(stmt)).scalars().first()
                return post.to_dict() if post else None

        own = [p for p in self._posts_data if p.get("user_id") == user_id]
        return max(own, key=created_at_of) if own else None

    async def viewer_location(self, viewer_id: str) -> Optional[Coordinate]:
        """Where to rank from: the viewer's latest post, else their last location."""
        own_post = await self.get_latest_post_for_user(viewer_id)
        if own_post is not None:
            point = coordinate_of(own_post)
            if point is not None:
                return point
        return await self._viewer_service.get_location(viewer_id)

    async def top_matches(
        self,
        viewer_id: str,
        limit: Optional[int] = None,
        min_score: Optional[int] = None,
        page: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Rank other users' active posts by distance from the viewer.

        Args:
            viewer_id: Authenticated user asking for matches
            limit: Matches per page (clamped to [1, 12], default 3)
            min_score: Drop matches scoring below this (clamped to [0, 100])
            page: 1-based page number (clamped to >= 1)

        Returns:
            Dict with matches (carrying distance_km and score_percent), page,
            page_size and total (matches at or above min_score)
        """
        page, limit = normalize_pagination(page, limit, MATCH_DEFAULT_LIMIT, MATCH_MAX_LIMIT)
        min_score = max(0, min(100, min_score or 0))
        viewer = await self.viewer_location(viewer_id)

        if self._use_database:
            candidates = await self._candidate_posts_from_database(viewer_id)
        else:
            candidates = [
                p for p in self._posts_data
                if p.get("user_id") != viewer_id and p.get("status", "active") == "active"
            ]

        ranked = rank_nearby(viewer, candidates, max(1, len(candidates)))
        ranked = [m for m in ranked if m["score_percent"] >= min_score]

        offset = (page - 1) * limit
        matches = ranked[offset : offset + limit]
        logger.info(
            f"Computed {len(ranked)} roommate matches >= {min_score} for {viewer_id}, "
            f"returning page {page}"
        )
        return {"matches": matches, "page": page, "page_size": limit, "total": len(ranked)}

    async def compatibility_for_post(self, viewer_id: str, post_id: str) -> Dict[str, Any]:
        """Full compatibility breakdown of post_id against the viewer's own post."""
        viewer_post = await self.get_latest_post_for_user(viewer_id)
        if viewer_post is None:
            raise ViewerPostRequiredError("Create your roommate post first to compute compatibility")
        target = await self.get_post(post_id)
        if target is None:
            raise PostNotFoundError(f"Roommate post {post_id} not found")

        viewer_point, target_point = coordinate_of(viewer_post), coordinate_of(target)
        distance = None
        if viewer_point is not None and target_point is not None:
            distance = distance_between(viewer_point, target_point)

        result = ScoringService.compute_compatibility(viewer_post, target, distance)
        return {"post_id": post_id, "distance_km": distance, **result}

    async def _candidate_posts_from_database(self, viewer_id: str) -> List[Dict]:
        from sqlalchemy import select
        from app.models.roommate_post import RoommatePostModel

        async with get_session_context() as session:
            stmt = select(RoommatePostModel).where(
                RoommatePostModel.user_id != viewer_id,
                RoommatePostModel.status == "active",
            )
            result = await session.execute(stmt)
            return [post.to_dict() for post in result.scalars()]

    async def _search_database(
        self,
        filters: RoommateFilters,
        page: Optional[int],
        page_size: Optional[int],
    ) -> Dict[str, Any]:
        from sqlalchemy import select, func, or_
        from app.models.roommate_post import RoommatePostModel as Post

        conditions = [Post.status == "active"]
        if filters.exclude_user_id:
            conditions.append(Post.user_id != filters.exclude_user_id)
        if filters.q and filters.q.strip():
            pattern = f"%{filters.q.strip()}%"
            conditions.append(or_(Post.title.ilike(pattern), Post.description.ilike(pattern)))
        if filters.budget_min is not None:
            conditions.append(Post.budget_max_cents >= filters.budget_min)
        if filters.budget_max is not None:
            conditions.append(Post.budget_min_cents <= filters.budget_max)
        if filters.from_date:
            conditions.append(or_(Post.move_in_date.is_(None), Post.move_in_date >= filters.from_date))
        if filters.to_date:
            conditions.append(or_(Post.move_in_date.is_(None), Post.move_in_date <= filters.to_date))
        if filters.housing:
            conditions.append(Post.housing == filters.housing)
        if filters.gender:
            conditions.append(Post.gender_pref.in_(["any", filters.gender]))

        async with get_session_context() as session:
            if filters.center is not None:
                if filters.radius_km is not None:
                    conditions.append(Post.preferred_lat.isnot(None))
                    conditions.append(Post.preferred_lon.isnot(None))
                result = await session.execute(select(Post).where(*conditions))
                rows = [post.to_dict() for post in result.scalars()]
                return search(rows, filters, page, page_size)

            page, page_size = normalize_pagination(page, page_size)

            if filters.sort == "budget_low":
                order_by = [Post.budget_min_cents.asc().nulls_last(), Post.created_at.desc()]
            elif filters.sort == "budget_high":
                order_by = [Post.budget_max_cents.desc().nulls_last(), Post.created_at.desc()]
            elif filters.sort == "move_in_date":
                order_by = [Post.move_in_date.asc().nulls_last(), Post.created_at.desc()]
            else:
                order_by = [Post.created_at.desc()]

            total = (await session.execute(select(func.count(Post.id)).where(*conditions))).scalar() or 0
            stmt = (
                select(Post)
                .where(*conditions)
                .order_by(*order_by)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            result = await session.execute(stmt)
            posts = [
                {**post.to_dict(), "distance_km": None, "score_percent": None}
                for post in result.scalars()
            ]

        logger.info(f"Roommate search matched {total} rows (page {page})")
        return {"items": posts, "page": page, "page_size": page_size, "total": total}
