"""Great-circle distance helpers for location-aware search and ranking.

Distances use the haversine formula on a spherical Earth and are rounded
to 2 decimals, half away from zero. No range validation happens here:
coordinates are validated where they enter the system (schemas/routers).
"""

import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional


EARTH_RADIUS_KM = 6371.0
DEFAULT_NEARBY_RADIUS_KM = 25.0


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero.

    Python's round() uses banker's rounding (round(2.5) == 2); scores and
    distances here must round 2.5 to 3.
    """
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)


def _to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180)


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two points in kilometres, 2 decimals."""
    d_lat = _to_radians(lat2 - lat1)
    d_lon = _to_radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(_to_radians(lat1)) * math.cos(_to_radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return round_half_up(EARTH_RADIUS_KM * c * 100) / 100


def distance_between(a: Coordinate, b: Coordinate) -> float:
    return distance_km(a.latitude, a.longitude, b.latitude, b.longitude)


def coordinate_of(candidate: Mapping[str, Any]) -> Optional[Coordinate]:
    """Read a candidate's location. None unless both components are set."""
    lat = candidate.get("latitude")
    lon = candidate.get("longitude")
    if lat is None or lon is None:
        return None
    return Coordinate(latitude=float(lat), longitude=float(lon))


def is_within_radius(center: Coordinate, point: Coordinate, radius_km: float) -> bool:
    """True when point lies within radius_km of center (inclusive)."""
    return distance_between(center, point) <= radius_km


def find_nearby(
    center: Coordinate,
    candidates: List[dict],
    radius_km: float = DEFAULT_NEARBY_RADIUS_KM,
) -> List[dict]:
    """Return copies of located candidates within radius_km, closest first.

    Candidates without coordinates are dropped. Each copy gains 'distance_km'.
    """
    nearby = []
    for candidate in candidates:
        point = coordinate_of(candidate)
        if point is None:
            continue
        dist = distance_between(center, point)
        if dist <= radius_km:
            nearby.append({**candidate, "distance_km": dist})

    nearby.sort(key=lambda x: x["distance_km"])
    return nearby
