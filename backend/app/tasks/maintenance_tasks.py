"""
Celery tasks that keep the marketplace candidate pool fresh.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

from app.celery_app import celery_app
from app.database import get_session_context, is_database_enabled

logger = logging.getLogger(__name__)

RESERVATION_HOLD_HOURS = 72
LISTING_MAX_AGE_DAYS = 120


def run_async(coro):
    """Run an async coroutine from a sync Celery task."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task
def expire_stale_listings(
    hold_hours: int = RESERVATION_HOLD_HOURS,
    max_age_days: int = LISTING_MAX_AGE_DAYS,
) -> Dict[str, Any]:
    """
    Release stale reservations and retire old listings.

    - reserved items untouched for hold_hours go back to active
    - active items older than max_age_days are soft-deleted

    Returns:
        Dict with the number of items reopened and expired
    """
    if not is_database_enabled():
        return {"status": "skipped", "reason": "Database not enabled"}

    async def _expire():
        from sqlalchemy import update
        from app.models.item import ItemModel

        now = datetime.now(timezone.utc)
        async with get_session_context() as session:
            reopened = await session.execute(
                update(ItemModel)
                .where(
                    ItemModel.status == "reserved",
                    ItemModel.updated_at < now - timedelta(hours=hold_hours),
                )
                .values(status="active", updated_at=now)
            )
            expired = await session.execute(
                update(ItemModel)
                .where(
                    ItemModel.status == "active",
                    ItemModel.created_at < now - timedelta(days=max_age_days),
                )
                .values(status="deleted", updated_at=now)
            )
            return reopened.rowcount, expired.rowcount

    reopened, expired = run_async(_expire())
    logger.info(f"Listing cleanup: reopened {reopened} reservations, expired {expired} listings")
    return {"status": "completed", "reopened": reopened, "expired": expired}
