"""Tests for filtering, geo cutoff, sorting and pagination."""
from app.services.geo_service import Coordinate
from app.services.search_service import (
    SearchFilters,
    apply_geo_filter,
    clamp_limit,
    normalize_pagination,
    search,
    text_matches,
)

CENTER = Coordinate(39.9522, -75.1932)


def _rows():
    return [
        {"id": "a", "title": "Desk lamp", "description": "", "latitude": 39.9522, "longitude": -75.1932,
         "created_at": "2026-09-01T00:00:00+00:00"},
        {"id": "b", "title": "Mini fridge", "description": "Cold", "latitude": 39.9812, "longitude": -75.1554,
         "created_at": "2026-09-03T00:00:00+00:00"},
        {"id": "c", "title": "Bike", "description": "Road bike with a lamp", "latitude": None, "longitude": None,
         "created_at": "2026-09-05T00:00:00+00:00"},
        {"id": "d", "title": "Sheets", "description": "", "latitude": 40.3431, "longitude": -74.6551,
         "created_at": "2026-09-02T00:00:00+00:00"},
    ]


class TestPagination:

    def test_defaults(self):
        assert normalize_pagination(None, None) == (1, 20)

    def test_clamps_out_of_range(self):
        assert normalize_pagination(-3, 500) == (1, 50)
        assert normalize_pagination(2, -5) == (2, 1)

    def test_zero_page_size_means_default(self):
        assert normalize_pagination(1, 0) == (1, 20)
        assert clamp_limit(0, 3, 12) == 3
        assert clamp_limit(20, 3, 12) == 12


class TestTextMatches:

    def test_case_insensitive_title_or_description(self):
        row = {"title": "Calculus textbook", "description": "Stewart"}
        assert text_matches(row, "CALCULUS")
        assert text_matches(row, "stew")
        assert not text_matches(row, "physics")

    def test_blank_query_matches_everything(self):
        assert text_matches({"title": "x"}, None)
        assert text_matches({"title": "x"}, "   ")


class TestGeoFilter:

    def test_without_center_keeps_everything(self):
        rows = apply_geo_filter(_rows(), None, 10)
        assert len(rows) == 4
        assert all(r["distance_km"] is None for r in rows)

    def test_radius_drops_far_and_unlocated(self):
        rows = apply_geo_filter(_rows(), CENTER, 10)
        assert {r["id"] for r in rows} == {"a", "b"}

    def test_radius_boundary_is_inclusive(self):
        rows = [{"id": "edge", "latitude": 1.0, "longitude": 0.0}]
        assert len(apply_geo_filter(rows, Coordinate(0, 0), 111.19)) == 1
        assert apply_geo_filter(rows, Coordinate(0, 0), 111.18) == []


class TestSearch:

    def test_newest_first_without_center(self):
        result = search(_rows(), SearchFilters())
        assert [r["id"] for r in result["items"]] == ["c", "b", "d", "a"]
        assert result["total"] == 4
        assert all(r["score_percent"] is None for r in result["items"])

    def test_distance_sort_with_radius(self):
        result = search(_rows(), SearchFilters(center=CENTER, radius_km=10, sort="distance"))
        assert [r["id"] for r in result["items"]] == ["a", "b"]
        assert result["items"][0]["distance_km"] == 0
        assert result["items"][0]["score_percent"] == 100

    def test_center_without_radius_keeps_unlocated_last(self):
        result = search(_rows(), SearchFilters(center=CENTER, sort="distance"))
        assert [r["id"] for r in result["items"]] == ["a", "b", "d", "c"]
        assert result["items"][-1]["score_percent"] == 70

    def test_distance_sort_without_center_falls_back_to_newest(self):
        result = search(_rows(), SearchFilters(sort="distance"))
        assert [r["id"] for r in result["items"]] == ["c", "b", "d", "a"]

    def test_unknown_sort_falls_back_to_newest(self):
        result = search(_rows(), SearchFilters(sort="bogus"))
        assert result["items"][0]["id"] == "c"

    def test_text_filter(self):
        result = search(_rows(), SearchFilters(q="lamp"))
        assert {r["id"] for r in result["items"]} == {"a", "c"}

    def test_pagination_total_counts_all_pages(self):
        result = search(_rows(), SearchFilters(), page=2, page_size=3)
        assert result["page"] == 2
        assert result["page_size"] == 3
        assert result["total"] == 4
        assert [r["id"] for r in result["items"]] == ["a"]

    def test_page_past_the_end_is_empty(self):
        result = search(_rows(), SearchFilters(), page=9, page_size=3)
        assert result["items"] == []
        assert result["total"] == 4
