"""Filtering, geo cutoff, sorting and pagination over candidate snapshots.

The search layer is a *filter*: with a radius, candidates outside it are
dropped outright. The nearby ranker (ranking_service) is a *ranker*: it
keeps everything and orders by distance. Both share geo_service.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Tuple

from app.services.geo_service import Coordinate, coordinate_of, is_within_radius
from app.services.ranking_service import sort_by_distance, sort_newest, with_distance
from app.services.scoring_service import ScoringService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50


def clamp_limit(value: Optional[int], default: int, maximum: int) -> int:
    """Clamp a requested size into [1, maximum]. Missing or 0 means default."""
    if not value:
        return default
    return max(1, min(maximum, value))


def normalize_pagination(
    page: Optional[int],
    page_size: Optional[int],
    default_size: int = DEFAULT_PAGE_SIZE,
    max_size: int = MAX_PAGE_SIZE,
) -> Tuple[int, int]:
    """Return (page, page_size) with page >= 1 and page_size in [1, max_size].

    Out-of-range values are clamped, never rejected.
    """
    page = max(1, page or 1)
    return page, clamp_limit(page_size, default_size, max_size)


def text_matches(row: Mapping[str, Any], q: Optional[str]) -> bool:
    """Case-insensitive substring match against title or description."""
    if not q:
        return True
    needle = q.strip().lower()
    if not needle:
        return True
    haystack = f"{row.get('title') or ''} {row.get('description') or ''}".lower()
    return needle in haystack


def sort_key_asc(field: str) -> Callable[[List[dict]], None]:
    """Sorter by field ascending, None last, newest first on ties."""
    def sorter(rows: List[dict]) -> None:
        sort_newest(rows)
        rows.sort(key=lambda r: (r.get(field) is None, r.get(field) or 0))
    return sorter


def sort_key_desc(field: str) -> Callable[[List[dict]], None]:
    """Sorter by field descending, None last, newest first on ties."""
    def sorter(rows: List[dict]) -> None:
        sort_newest(rows)
        present = [r for r in rows if r.get(field) is not None]
        missing = [r for r in rows if r.get(field) is None]
        present.sort(key=lambda r: r[field], reverse=True)
        rows[:] = present + missing
    return sorter


@dataclass
class SearchFilters:
    """Filters shared by every candidate type.

    Subclasses add their own fields, extend matches() and register extra
    sort keys in EXTRA_SORTS.
    """
    q: Optional[str] = None
    center: Optional[Coordinate] = None
    radius_km: Optional[float] = None
    sort: str = "newest"

    EXTRA_SORTS: ClassVar[Dict[str, Callable[[List[dict]], None]]] = {}

    def matches(self, row: Mapping[str, Any]) -> bool:
        return text_matches(row, self.q)

    def sort_rows(self, rows: List[dict]) -> None:
        if self.sort == "distance" and self.center is not None:
            sort_by_distance(rows)
        elif self.sort in self.EXTRA_SORTS:
            self.EXTRA_SORTS[self.sort](rows)
        else:
            sort_newest(rows)


def apply_geo_filter(
    rows: List[Mapping[str, Any]],
    center: Optional[Coordinate],
    radius_km: Optional[float],
) -> List[dict]:
    """Copy rows with 'distance_km'; with center and radius, drop rows outside it.

    Rows without a location are dropped whenever a radius cutoff applies.
    """
    decorated = [with_distance(row, center) for row in rows]
    if center is None or radius_km is None:
        return decorated
    return [
        row for row in decorated
        if row["distance_km"] is not None
        and is_within_radius(center, coordinate_of(row), radius_km)
    ]


def search(
    candidates: List[Mapping[str, Any]],
    filters: SearchFilters,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    """Filter, sort and paginate candidates.

    Returns {"items", "page", "page_size", "total"} where total counts every
    match before pagination. Items carry 'distance_km'; when a center was
    given they also carry 'score_percent', otherwise it is None.
    """
    page, page_size = normalize_pagination(page, page_size)

    matched = [row for row in candidates if filters.matches(row)]
    matched = apply_geo_filter(matched, filters.center, filters.radius_km)
    filters.sort_rows(matched)

    total = len(matched)
    offset = (page - 1) * page_size
    items = matched[offset : offset + page_size]

    for row in items:
        row["score_percent"] = (
            ScoringService.score_from_distance(row["distance_km"])
            if filters.center is not None
            else None
        )

    logger.debug(f"Search matched {total} of {len(candidates)} candidates (page {page})")
    return {
        "items": items,
        "page": page,
        "page_size": page_size,
        "total": total,
    }
