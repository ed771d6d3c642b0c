"""Tests for distance match scores and roommate compatibility.

The tier boundaries are product policy, not a derived model; these tests
pin the policy as it stands.
"""
import pytest

from app.services.scoring_service import ScoringService


class TestScoreFromDistance:

    def test_unknown_location_scores_70(self):
        assert ScoringService.score_from_distance(None) == 70

    @pytest.mark.parametrize("distance,expected", [
        (0, 100),
        (2, 98),
        (2.5, 97),
        (9.4, 91),
        (10, 90),
    ])
    def test_first_tier_floors_at_90(self, distance, expected):
        assert ScoringService.score_from_distance(distance) == expected

    @pytest.mark.parametrize("distance,expected", [
        (10.4, 90),
        (10.5, 89),
        (15, 85),
        (30, 70),
    ])
    def test_second_tier_decays_one_point_per_km(self, distance, expected):
        assert ScoringService.score_from_distance(distance) == expected

    @pytest.mark.parametrize("distance,expected", [
        (31, 69),
        (45, 62),
        (70, 50),
        (500, 50),
    ])
    def test_third_tier_half_point_per_km_capped(self, distance, expected):
        assert ScoringService.score_from_distance(distance) == expected

    def test_non_increasing_in_distance(self):
        distances = [i * 0.25 for i in range(0, 400)]
        scores = [ScoringService.score_from_distance(d) for d in distances]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_bounds(self):
        for d in [0, 0.01, 5, 10, 10.01, 29.99, 30, 30.01, 60, 69.9, 1000, 20000]:
            score = ScoringService.score_from_distance(d)
            assert isinstance(score, int)
            assert 50 <= score <= 100


class TestComponentScores:

    def test_level_similarity(self):
        assert ScoringService.level_similarity(3, 3) == 1.0
        assert ScoringService.level_similarity(1, 5) == 0.0
        assert ScoringService.level_similarity(2, 4) == 0.5
        assert ScoringService.level_similarity(None, 4) == 0.5

    def test_sleep_match(self):
        assert ScoringService.sleep_match("early", "early") == 1.0
        assert ScoringService.sleep_match("early", "flexible") == 0.9
        assert ScoringService.sleep_match("early", "late") == 0.4
        assert ScoringService.sleep_match(None, "late") == 0.6

    def test_budget_overlap(self):
        viewer = {"budget_min_cents": 80000, "budget_max_cents": 120000}
        target = {"budget_min_cents": 90000, "budget_max_cents": 130000}
        assert ScoringService.budget_overlap(viewer, target) == 0.75

    def test_disjoint_budgets_score_zero(self):
        viewer = {"budget_min_cents": 50000, "budget_max_cents": 60000}
        target = {"budget_min_cents": 90000, "budget_max_cents": 130000}
        assert ScoringService.budget_overlap(viewer, target) == 0.0

    def test_move_in_alignment(self):
        assert ScoringService.move_in_alignment("2026-08-15", "2026-08-20") == 1.0
        assert ScoringService.move_in_alignment("2026-08-01", "2026-09-10") == 0.8
        assert ScoringService.move_in_alignment("2026-06-01", "2026-08-20") == 0.5
        assert ScoringService.move_in_alignment("2026-01-01", "2026-08-20") == 0.2
        assert ScoringService.move_in_alignment(None, "2026-08-20") == 0.6

    def test_distance_factor(self):
        assert ScoringService.distance_factor(0.44) == 1.0
        assert ScoringService.distance_factor(1.5) == 0.9
        assert ScoringService.distance_factor(4.9) == 0.8
        assert ScoringService.distance_factor(10) == 0.6
        assert ScoringService.distance_factor(19) == 0.4
        assert ScoringService.distance_factor(64) == 0.25
        assert ScoringService.distance_factor(None) == 0.6

    def test_gender_match(self):
        assert ScoringService.gender_match("male", "any") == 1.0
        assert ScoringService.gender_match(None, "female") == 0.8
        assert ScoringService.gender_match("any", "female") == 1.0
        assert ScoringService.gender_match("male", "female") == 0.4


class TestComputeCompatibility:

    PROFILE = {
        "cleanliness_level": 3, "noise_tolerance": 3, "guests_level": 3, "social_level": 3,
        "sleep": "early", "budget_min_cents": 80000, "budget_max_cents": 100000,
        "move_in_date": "2026-08-01", "smoking": False, "pets": False, "alcohol": False,
        "gender_pref": "any",
    }

    def test_identical_nearby_posts_score_100(self):
        result = ScoringService.compute_compatibility(self.PROFILE, dict(self.PROFILE), 0.3)
        assert result["score_percent"] == 100
        assert result["breakdown"]["lifestyle"] == 45
        assert result["breakdown"]["practical"] == 40
        assert result["breakdown"]["preferences"] == 15

    def test_unknown_everything_uses_neutral_defaults(self):
        result = ScoringService.compute_compatibility({}, {})
        assert result["score_percent"] == 59
        assert result["breakdown"]["lifestyle"] == 23
        assert result["breakdown"]["practical"] == 24
        assert result["breakdown"]["preferences"] == 12
        assert result["breakdown"]["details"]["distance_factor"] == 0.6

    def test_mismatched_habits_lower_score(self):
        other = {**self.PROFILE, "smoking": True, "pets": True, "cleanliness_level": 5, "sleep": "late"}
        matched = ScoringService.compute_compatibility(self.PROFILE, dict(self.PROFILE), 0.3)
        mismatched = ScoringService.compute_compatibility(self.PROFILE, other, 0.3)
        assert mismatched["score_percent"] < matched["score_percent"]
        assert 0 <= mismatched["score_percent"] <= 100
