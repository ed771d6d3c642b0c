"""Nearby ranking: order candidates by distance from the viewer.

Candidates are plain dicts (as produced by the ORM models' to_dict() or the
JSON dataset) with 'id', 'created_at' and optional 'latitude'/'longitude'.
Results are shallow copies; input candidates are never modified.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from app.services.geo_service import Coordinate, coordinate_of, distance_between
from app.services.scoring_service import ScoringService

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def created_at_of(candidate: Mapping[str, Any]) -> datetime:
    """Parse a candidate's created_at into an aware datetime (naive = UTC).

    Missing or unparseable timestamps sort as the oldest.
    """
    value = candidate.get("created_at")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
    if not isinstance(value, datetime):
        return _EPOCH
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def sort_newest(rows: List[dict]) -> None:
    """Sort in place by created_at, newest first."""
    rows.sort(key=created_at_of, reverse=True)


def sort_by_distance(rows: List[dict]) -> None:
    """Sort in place by distance_km ascending, None last, newest first on ties."""
    sort_newest(rows)
    rows.sort(key=lambda r: (r["distance_km"] is None, r["distance_km"] or 0.0))


def with_distance(candidate: Mapping[str, Any], viewer: Optional[Coordinate]) -> dict:
    """Copy of candidate with 'distance_km' (None without both locations)."""
    point = coordinate_of(candidate)
    dist = None
    if viewer is not None and point is not None:
        dist = distance_between(viewer, point)
    return {**candidate, "distance_km": dist}


def rank_nearby(
    viewer: Optional[Coordinate],
    candidates: List[Mapping[str, Any]],
    limit: int,
) -> List[dict]:
    """Rank candidates by proximity to viewer and attach match scores.

    With a viewer location: closest first, unlocated candidates last,
    newest first on ties. Without one: newest first. Each result carries
    'distance_km' and 'score_percent'. Callers clamp limit beforehand.
    """
    if limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit}")

    ranked = [with_distance(c, viewer) for c in candidates]
    if viewer is None:
        sort_newest(ranked)
    else:
        sort_by_distance(ranked)

    top = ranked[:limit]
    for row in top:
        row["score_percent"] = ScoringService.score_from_distance(row["distance_km"])

    logger.debug(
        f"Ranked {len(candidates)} candidates (viewer located: {viewer is not None}), "
        f"returning {len(top)}"
    )
    return top
