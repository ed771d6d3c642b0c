"""Redis-based rate limiting middleware."""
import os
import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import redis

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
GLOBAL_LIMIT = 60       # requests per minute per signed-in user
RANKING_LIMIT = 10      # requests per minute for ranking endpoints
ANON_LIMIT = 10         # requests per minute per anonymous client
WINDOW_SECONDS = 60

RANKING_PATHS = {"/api/roommates/matches", "/api/items/nearby"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed one-minute window counters in Redis; fails open without Redis."""

    def __init__(self, app):
        super().__init__(app)
        try:
            self.redis = redis.from_url(REDIS_URL)
        except Exception as e:
            logger.warning(f"Rate limiting disabled, Redis unavailable: {e}")
            self.redis = None

    def _identity_and_limit(self, request: Request) -> tuple[str, int]:
        auth = request.headers.get("authorization", "")
        if auth.startswith("Bearer "):
            identity, limit = f"user:{hash(auth)}", GLOBAL_LIMIT
        else:
            host = request.client.host if request.client else "unknown"
            identity, limit = f"anon:{host}", ANON_LIMIT

        if request.url.path in RANKING_PATHS:
            identity += ":ranking"
            limit = min(limit, RANKING_LIMIT)
        return identity, limit

    async def dispatch(self, request: Request, call_next):
        if not self.redis or os.getenv("TESTING"):
            return await call_next(request)

        identity, limit = self._identity_and_limit(request)
        key = f"ratelimit:{identity}:{int(time.time()) // WINDOW_SECONDS}"
        try:
            current = self.redis.incr(key)
            if current == 1:
                self.redis.expire(key, WINDOW_SECONDS * 2)
            if current > limit:
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Rate limit exceeded. Please slow down."},
                )
        except Exception as e:
            logger.warning(f"Rate limit check failed: {e}")

        return await call_next(request)
