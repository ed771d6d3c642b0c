"""Viewer context lookups: who is asking and where they last were."""
import logging
from typing import Dict, List, Optional

from app.database import is_database_enabled, get_session_context
from app.services.dataset import load_dataset
from app.services.geo_service import Coordinate

logger = logging.getLogger(__name__)


class ViewerService:
    """Resolves a viewer's last-known location from users storage."""

    def __init__(self):
        self._use_database = is_database_enabled()
        self._users_data: Optional[List[Dict]] = None if self._use_database else load_dataset("users")

    async def get_location(self, user_id: Optional[str]) -> Optional[Coordinate]:
        """Return the user's last shared location, or None if unknown."""
        if not user_id:
            return None
        if self._use_database:
            user = await self._get_user_from_database(user_id)
        else:
            user = next((u for u in self._users_data if u.get("id") == user_id), None)

        if not user:
            return None
        lat, lon = user.get("last_latitude"), user.get("last_longitude")
        if lat is None or lon is None:
            return None
        return Coordinate(latitude=lat, longitude=lon)

    async def _get_user_from_database(self, user_id: str) -> Optional[Dict]:
        from app.models.user import UserModel

        async with get_session_context() as session:
            user = await session.get(UserModel, user_id)
            return user.to_dict() if user else None
