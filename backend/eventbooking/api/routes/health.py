"""
Liveness plus database and cache connectivity.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.db.session import get_db
from eventbooking.services.cache_service import event_cache
from eventbooking.core.config import get_settings
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
@router.get("/", include_in_schema=False)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Always answers; a broken database is reported, not raised."""
    settings = get_settings()
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
    except Exception as e:
        logger.error("health_database_unreachable", error=str(e))
        database = "disconnected"

    return {
        "server": "running",
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": await event_cache.stats(),
    }
