"""JWT verification for FastAPI (tokens issued by the Campus Cart auth service)."""
import os
import jwt
import logging
from dataclasses import dataclass
from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = "HS256"


@dataclass
class UserContext:
    """Authenticated viewer extracted from an access token."""
    user_id: str
    email: str | None = None


def _decode_token(token: str) -> UserContext:
    """Verify an HS256 access token and build the viewer context.

    Raises jwt.InvalidTokenError (or a subclass) and KeyError when 'sub' is missing.
    """
    if not JWT_SECRET:
        raise jwt.InvalidTokenError("JWT_SECRET not configured")
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    return UserContext(user_id=str(payload["sub"]), email=payload.get("email"))


async def get_current_user(
    authorization: str | None = Header(None),
) -> UserContext:
    """FastAPI dependency: requires a valid Bearer token.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing authorization token")
    token = authorization.removeprefix("Bearer ")
    try:
        return _decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired. Please sign in again.")
    except (jwt.InvalidTokenError, KeyError) as e:
        logger.warning(f"JWT verification failed: {type(e).__name__}: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def get_optional_user(
    authorization: str | None = Header(None),
) -> UserContext | None:
    """FastAPI dependency: the viewer if a valid token is present, else None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    try:
        return _decode_token(authorization.removeprefix("Bearer "))
    except (jwt.InvalidTokenError, KeyError):
        return None
