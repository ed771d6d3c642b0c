"""Marketplace item search and nearby ranking."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from app.database import is_database_enabled, get_session_context
from app.services.dataset import load_dataset
from app.services.geo_service import Coordinate, find_nearby
from app.services.ranking_service import rank_nearby
from app.services.search_service import (
    SearchFilters,
    sort_key_asc,
    sort_key_desc,
    clamp_limit,
    normalize_pagination,
    search,
)

logger = logging.getLogger(__name__)

NEARBY_DEFAULT_LIMIT = 20
NEARBY_MAX_LIMIT = 50

ItemCondition = Literal["new", "like_new", "good", "fair", "poor"]
ItemStatus = Literal["active", "reserved", "sold"]
ITEM_SORTS = ("newest", "distance", "price_asc", "price_desc")


@dataclass
class ItemFilters(SearchFilters):
    """Item search filters. Only active items match unless status is given."""
    category_id: Optional[int] = None
    condition: Optional[str] = None
    status: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None

    EXTRA_SORTS = {
        "price_asc": sort_key_asc("price_cents"),
        "price_desc": sort_key_desc("price_cents"),
    }

    def matches(self, row: Dict[str, Any]) -> bool:
        if row.get("status") != (self.status or "active"):
            return False
        if self.category_id is not None and row.get("category_id") != self.category_id:
            return False
        if self.condition and row.get("condition") != self.condition:
            return False
        price = row.get("price_cents", 0)
        if self.min_price is not None and price < self.min_price:
            return False
        if self.max_price is not None and price > self.max_price:
            return False
        return super().matches(row)


class ItemService:
    """Search and rank marketplace items from PostgreSQL or the JSON dataset."""

    def __init__(self):
        self._use_database = is_database_enabled()
        self._items_data: Optional[List[Dict]] = None if self._use_database else load_dataset("items")

    async def search_items(
        self,
        filters: ItemFilters,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Filter, sort and paginate items.

        Args:
            filters: Item filters, optionally with a geo center and radius
            page: 1-based page number (clamped to >= 1)
            page_size: Results per page (clamped to [1, 50], default 20)

        Returns:
            Dict with items, page, page_size and total (count across all pages)
        """
        if self._use_database:
            return await self._search_database(filters, page, page_size)
        return search(self._items_data, filters, page, page_size)

    async def nearby_items(
        self,
        viewer: Optional[Coordinate],
        limit: Optional[int] = None,
        radius_km: Optional[float] = None,
    ) -> List[Dict]:
        """Rank active items by distance from the viewer (newest first if unknown).

        With a radius and a known viewer, only located items inside it are ranked.
        """
        limit = clamp_limit(limit, NEARBY_DEFAULT_LIMIT, NEARBY_MAX_LIMIT)
        if self._use_database:
            candidates = await self._active_items_from_database()
        else:
            candidates = [i for i in self._items_data if i.get("status") == "active"]
        if viewer is not None and radius_km is not None:
            candidates = find_nearby(viewer, candidates, radius_km)
        return rank_nearby(viewer, candidates, limit)

    async def get_item(self, item_id: str) -> Optional[Dict]:
        if self._use_database:
            from app.models.item import ItemModel

            async with get_session_context() as session:
                item = await session.get(ItemModel, item_id)
                return item.to_dict() if item else None
        return next((i for i in self._items_data if i.get("id") == item_id), None)

    async def _active_items_from_database(self) -> List[Dict]:
        from sqlalchemy import select
        from app.models.item import ItemModel

        async with get_session_context() as session:
            result = await session.execute(select(ItemModel).where(ItemModel.status == "active"))
            return [item.to_dict() for item in result.scalars()]

    async def _search_database(
        self,
        filters: ItemFilters,
        page: Optional[int],
        page_size: Optional[int],
    ) -> Dict[str, Any]:
        """Search PostgreSQL.

        Without a center, filtering, ordering and pagination all run in SQL.
        With one, matching rows are fetched and the geo cutoff, distance
        sort and pagination run in memory so total stays exact.
        """
        from sqlalchemy import select, func, or_
        from app.models.item import ItemModel

        conditions = [ItemModel.status == (filters.status or "active")]
        if filters.q and filters.q.strip():
            pattern = f"%{filters.q.strip()}%"
            conditions.append(or_(ItemModel.title.ilike(pattern), ItemModel.description.ilike(pattern)))
        if filters.category_id is not None:
            conditions.append(ItemModel.category_id == filters.category_id)
        if filters.condition:
            conditions.append(ItemModel.condition == filters.condition)
        if filters.min_price is not None:
            conditions.append(ItemModel.price_cents >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(ItemModel.price_cents <= filters.max_price)

        async with get_session_context() as session:
            if filters.center is not None:
                if filters.radius_km is not None:
                    conditions.append(ItemModel.latitude.isnot(None))
                    conditions.append(ItemModel.longitude.isnot(None))
                result = await session.execute(select(ItemModel).where(*conditions))
                rows = [item.to_dict() for item in result.scalars()]
                return search(rows, filters, page, page_size)

            page, page_size = normalize_pagination(page, page_size)

            if filters.sort == "price_asc":
                order_by = [ItemModel.price_cents.asc(), ItemModel.created_at.desc()]
            elif filters.sort == "price_desc":
                order_by = [ItemModel.price_cents.desc(), ItemModel.created_at.desc()]
            else:
                order_by = [ItemModel.created_at.desc()]

            count_stmt = select(func.count(ItemModel.id)).where(*conditions)
            total = (await session.execute(count_stmt)).scalar() or 0

            stmt = (
                select(ItemModel)
                .where(*conditions)
                .order_by(*order_by)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            result = await session.execute(stmt)
            items = [
                {**item.to_dict(), "distance_km": None, "score_percent": None}
                for item in result.scalars()
            ]

        logger.info(f"Item search matched {total} rows (page {page})")
        return {"items": items, "page": page, "page_size": page_size, "total": total}
