"""Tests for Redis-based rate limiting middleware."""
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import app.middleware.rate_limit as rl_module
from app.middleware.rate_limit import (
    ANON_LIMIT,
    GLOBAL_LIMIT,
    RANKING_LIMIT,
    RateLimitMiddleware,
)


@pytest.fixture(autouse=True)
def _clear_testing_env(monkeypatch):
    """Clear TESTING so the middleware actually runs in this module."""
    monkeypatch.delenv("TESTING", raising=False)


def _make_mock_redis(counter_value=1):
    mock = MagicMock()
    mock.incr.return_value = counter_value
    mock.expire.return_value = True
    return mock


@pytest.fixture
def build_client():
    """Factory for a TestClient over a minimal app with the middleware installed."""
    patchers = []

    def _build(mock_redis_client=None):
        app = FastAPI()

        @app.get("/health")
        async def health():
            return {"status": "ok"}

        @app.get("/api/items/search")
        async def search():
            return {"items": []}

        @app.get("/api/items/nearby")
        async def nearby():
            return {"items": []}

        @app.get("/api/roommates/matches")
        async def matches():
            return {"matches": []}

        patcher = patch.object(rl_module, "redis")
        mock_redis_mod = patcher.start()
        patchers.append(patcher)
        if mock_redis_client is None:
            mock_redis_mod.from_url.side_effect = Exception("No Redis")
        else:
            mock_redis_mod.from_url.return_value = mock_redis_client

        app.add_middleware(RateLimitMiddleware)
        return TestClient(app)

    yield _build
    for patcher in patchers:
        patcher.stop()


AUTH = {"Authorization": "Bearer test-token"}


class TestUnderLimit:

    def test_authenticated_request_passes(self, build_client):
        client = build_client(_make_mock_redis(1))
        response = client.get("/health", headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_anonymous_request_passes(self, build_client):
        client = build_client(_make_mock_redis(1))
        assert client.get("/health").status_code == 200

    def test_counter_increments_per_request(self, build_client):
        mock_redis = MagicMock()
        mock_redis.incr.side_effect = [1, 2, 3, 4, 5]
        client = build_client(mock_redis)
        for _ in range(5):
            assert client.get("/api/items/search").status_code == 200
        assert mock_redis.incr.call_count == 5


class TestLimitExceeded:

    def test_authenticated_429_over_global_limit(self, build_client):
        client = build_client(_make_mock_redis(GLOBAL_LIMIT + 1))
        response = client.get("/api/items/search", headers=AUTH)
        assert response.status_code == 429
        assert "Rate limit exceeded" in response.json()["detail"]

    def test_anonymous_429_at_lower_limit(self, build_client):
        client = build_client(_make_mock_redis(ANON_LIMIT + 1))
        assert client.get("/api/items/search").status_code == 429

    def test_authenticated_above_anon_limit_still_passes(self, build_client):
        client = build_client(_make_mock_redis(ANON_LIMIT + 1))
        assert client.get("/api/items/search", headers=AUTH).status_code == 200


class TestRankingPaths:

    @pytest.mark.parametrize("path", ["/api/items/nearby", "/api/roommates/matches"])
    def test_ranking_paths_get_stricter_limit(self, build_client, path):
        client = build_client(_make_mock_redis(RANKING_LIMIT + 1))
        assert client.get(path, headers=AUTH).status_code == 429

    def test_ranking_paths_use_their_own_counter(self, build_client):
        mock_redis = _make_mock_redis(1)
        client = build_client(mock_redis)
        client.get("/api/roommates/matches", headers=AUTH)
        key = mock_redis.incr.call_args[0][0]
        assert key.startswith("ratelimit:user:")
        assert ":ranking:" in key

    def test_search_not_limited_at_ranking_threshold(self, build_client):
        client = build_client(_make_mock_redis(RANKING_LIMIT + 1))
        assert client.get("/api/items/search", headers=AUTH).status_code == 200


class TestRedisUnavailable:
    """Fail open when Redis is unavailable."""

    def test_no_redis_passes_through(self, build_client):
        client = build_client(None)
        assert client.get("/api/roommates/matches").status_code == 200

    def test_redis_error_passes_through(self, build_client):
        mock_redis = MagicMock()
        mock_redis.incr.side_effect = Exception("Redis connection lost")
        client = build_client(mock_redis)
        assert client.get("/health").status_code == 200


class TestRedisKeyManagement:

    def test_expire_set_on_first_request(self, build_client):
        mock_redis = _make_mock_redis(1)
        client = build_client(mock_redis)
        client.get("/health")
        mock_redis.expire.assert_called_once()
        assert mock_redis.expire.call_args[0][1] == 120

    def test_expire_not_set_on_subsequent_requests(self, build_client):
        mock_redis = _make_mock_redis(5)
        client = build_client(mock_redis)
        client.get("/health")
        mock_redis.expire.assert_not_called()
