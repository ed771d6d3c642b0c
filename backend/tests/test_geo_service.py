"""Tests for haversine distance and radius helpers."""
import pytest

from app.services.geo_service import (
    Coordinate,
    coordinate_of,
    distance_km,
    find_nearby,
    is_within_radius,
    round_half_up,
)

PENN = (39.9522, -75.1932)
TEMPLE = (39.9812, -75.1554)
PRINCETON = (40.3431, -74.6551)


class TestRoundHalfUp:

    def test_ties_round_away_from_zero(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -3

    def test_non_ties_round_to_nearest(self):
        assert round_half_up(2.4999) == 2
        assert round_half_up(7.51) == 8
        assert round_half_up(0.0) == 0


class TestDistanceKm:

    def test_zero_distance(self):
        assert distance_km(*PENN, *PENN) == 0

    def test_symmetric(self):
        assert distance_km(*PENN, *PRINCETON) == distance_km(*PRINCETON, *PENN)
        assert distance_km(*TEMPLE, *PENN) == distance_km(*PENN, *TEMPLE)

    def test_one_degree_of_latitude(self):
        # 6371 * pi / 180 = 111.1949...
        assert distance_km(0, 0, 1, 0) == 111.19

    def test_rounded_to_two_decimals(self):
        d = distance_km(*PENN, *TEMPLE)
        assert d == round(d, 2)
        assert 4 < d < 5

    def test_antimeridian_is_short(self):
        assert distance_km(0, 179.5, 0, -179.5) == pytest.approx(111.19, abs=0.01)


class TestCoordinateOf:

    def test_reads_latitude_longitude(self):
        assert coordinate_of({"latitude": 39.95, "longitude": -75.19}) == Coordinate(39.95, -75.19)

    def test_missing_component_is_unknown(self):
        assert coordinate_of({"latitude": 39.95, "longitude": None}) is None
        assert coordinate_of({}) is None

    def test_zero_is_a_real_location(self):
        assert coordinate_of({"latitude": 0.0, "longitude": 0.0}) == Coordinate(0.0, 0.0)


class TestRadiusHelpers:

    def test_is_within_radius_inclusive(self):
        center = Coordinate(0, 0)
        assert is_within_radius(center, Coordinate(1, 0), 111.19)
        assert not is_within_radius(center, Coordinate(1, 0), 111.18)

    def test_find_nearby_filters_and_sorts(self):
        candidates = [
            {"id": "far", "latitude": PRINCETON[0], "longitude": PRINCETON[1]},
            {"id": "temple", "latitude": TEMPLE[0], "longitude": TEMPLE[1]},
            {"id": "unknown", "latitude": None, "longitude": None},
            {"id": "here", "latitude": PENN[0], "longitude": PENN[1]},
        ]
        nearby = find_nearby(Coordinate(*PENN), candidates)

        assert [c["id"] for c in nearby] == ["here", "temple"]
        assert nearby[0]["distance_km"] == 0
        assert "distance_km" not in candidates[3]
