"""Heuristic scoring for roommate posts and marketplace items.

Two scorers live here:

- score_from_distance: the 0-100 "match score" shown next to every ranked
  result. Pure function of distance; 70 when location is unknown.
- compute_compatibility: the detailed roommate compatibility breakdown
  (lifestyle, practical, preferences) shown on a post's detail page.

Both are business rules, not fitted models. The tier boundaries are kept
exactly as product defined them.
"""

from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Union

from app.services.geo_service import round_half_up


NO_LOCATION_SCORE = 70

# Roommate compatibility weights (points out of 100)
LIFESTYLE_POINTS_EACH = 9  # 5 signals * 9 = 45
BUDGET_POINTS = 18
MOVE_IN_POINTS = 10
DISTANCE_POINTS = 12
PREFERENCE_POINTS = 15

LEVEL_SPREAD = 4  # levels are 1-5, so max difference is 4


class ScoringService:
    """Stateless heuristic scoring."""

    @staticmethod
    def score_from_distance(distance_km: Optional[float]) -> int:
        """Map a distance in km to a 0-100 match score.

        None -> 70. 0-10 km -> 90-100 (1 point per km, floored at 90).
        10-30 km -> linear decay from 90 to 70. Beyond 30 km -> half a
        point per km, never more than 20 points below 70.
        """
        if distance_km is None:
            return NO_LOCATION_SCORE

        d = distance_km
        if d <= 10:
            return max(90, 100 - round_half_up(d))
        if d <= 30:
            return 90 - round_half_up(d - 10)
        return 70 - min(20, round_half_up((d - 30) * 0.5))

    @staticmethod
    def level_similarity(a: Optional[int], b: Optional[int]) -> float:
        """1.0 for identical 1-5 levels, 0.0 for opposite ends, 0.5 if unknown."""
        if a is None or b is None:
            return 0.5
        return 1 - min(1.0, abs(a - b) / LEVEL_SPREAD)

    @staticmethod
    def sleep_match(a: Optional[str], b: Optional[str]) -> float:
        if not a or not b:
            return 0.6
        if a == "flexible" or b == "flexible":
            return 0.9
        return 1.0 if a == b else 0.4

    @staticmethod
    def budget_overlap(viewer: Mapping[str, Any], target: Mapping[str, Any]) -> float:
        """Fraction of the wider budget range both posts share."""
        a_min, a_max = viewer.get("budget_min_cents"), viewer.get("budget_max_cents")
        b_min, b_max = target.get("budget_min_cents"), target.get("budget_max_cents")
        if any(v is None for v in (a_min, a_max, b_min, b_max)):
            return 0.6
        lo, hi = max(a_min, b_min), min(a_max, b_max)
        if hi <= lo:
            return 0.0
        spread = max(a_max - a_min, b_max - b_min, 1)
        return min(1.0, (hi - lo) / spread)

    @staticmethod
    def move_in_alignment(
        a: Optional[Union[str, date]],
        b: Optional[Union[str, date]],
    ) -> float:
        a_date, b_date = _parse_date(a), _parse_date(b)
        if a_date is None or b_date is None:
            return 0.6
        delta = abs((a_date - b_date).days)
        if delta <= 15:
            return 1.0
        if delta <= 45:
            return 0.8
        if delta <= 90:
            return 0.5
        return 0.2

    @staticmethod
    def distance_factor(distance_km: Optional[float]) -> float:
        if distance_km is None:
            return 0.6
        meters = distance_km * 1000
        if meters <= 500:
            return 1.0
        if meters <= 2000:
            return 0.9
        if meters <= 5000:
            return 0.8
        if meters <= 10000:
            return 0.6
        if meters <= 20000:
            return 0.4
        return 0.25

    @staticmethod
    def preference_match(a: Optional[bool], b: Optional[bool]) -> float:
        if a is None or b is None:
            return 0.7
        return 1.0 if a == b else 0.25

    @staticmethod
    def gender_match(viewer_pref: Optional[str], target_pref: Optional[str]) -> float:
        target = target_pref or "any"
        if target == "any":
            return 1.0
        if not viewer_pref:
            return 0.8
        return 1.0 if viewer_pref in ("any", target) else 0.4

    @staticmethod
    def compute_compatibility(
        viewer: Mapping[str, Any],
        target: Mapping[str, Any],
        distance_km: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Score how compatible target's post is with the viewer's own post.

        Weights: lifestyle 45, practical 40 (budget 18, move-in 10,
        distance 12), preferences 15.
        """
        S = ScoringService

        clean = S.level_similarity(viewer.get("cleanliness_level"), target.get("cleanliness_level"))
        noise = S.level_similarity(viewer.get("noise_tolerance"), target.get("noise_tolerance"))
        guests = S.level_similarity(viewer.get("guests_level"), target.get("guests_level"))
        social = S.level_similarity(viewer.get("social_level"), target.get("social_level"))
        sleep = S.sleep_match(viewer.get("sleep"), target.get("sleep"))
        lifestyle = LIFESTYLE_POINTS_EACH * (clean + noise + guests + social + sleep)

        overlap = S.budget_overlap(viewer, target)
        move_in = S.move_in_alignment(viewer.get("move_in_date"), target.get("move_in_date"))
        dist = S.distance_factor(distance_km)
        practical = overlap * BUDGET_POINTS + move_in * MOVE_IN_POINTS + dist * DISTANCE_POINTS

        habits = (
            S.preference_match(viewer.get("smoking"), target.get("smoking"))
            + S.preference_match(viewer.get("pets"), target.get("pets"))
            + S.preference_match(viewer.get("alcohol"), target.get("alcohol"))
            + S.gender_match(viewer.get("gender_pref"), target.get("gender_pref"))
        )
        preferences = habits / 4 * PREFERENCE_POINTS

        score = round_half_up(lifestyle + practical + preferences)
        return {
            "score_percent": max(0, min(100, score)),
            "breakdown": {
                "lifestyle": round_half_up(lifestyle),
                "practical": round_half_up(practical),
                "preferences": round_half_up(preferences),
                "details": {
                    "cleanliness": clean,
                    "noise": noise,
                    "guests": guests,
                    "social": social,
                    "sleep": sleep,
                    "budget_overlap": overlap,
                    "move_in_alignment": move_in,
                    "distance_factor": dist,
                },
            },
        }


def _parse_date(value: Optional[Union[str, date]]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None
