"""Health endpoints: liveness plus the database and booking-lock backends"""
import logging

import redis
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from appointly.config.database import get_db
from appointly.config.redis import get_redis
from appointly.config.settings import get_settings

logger = logging.getLogger(__name__)

health_router = APIRouter()


def check_booking_lock_backend() -> str:
    """The local lock is always available; the Redis lock needs a reachable server."""
    backend = get_settings().BOOKING_LOCK_BACKEND
    if backend != "redis":
        return "healthy"
    try:
        get_redis().ping()
    except redis.RedisError as e:
        # Bookings still serialize per process through the local fallback
        logger.warning(f"Booking lock Redis unreachable: {e}")
        return "degraded: local fallback"
    return "healthy"


@health_router.get("/")
async def health_check():
    """Liveness"""
    return {"status": "healthy", "service": "appointly-api"}


@health_router.get("/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """Database reachability and booking-lock backend state"""
    settings = get_settings()
    checks = {
        "database": "healthy",
        "booking_lock": check_booking_lock_backend(),
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        checks["database"] = "unhealthy"

    return {
        "status": "healthy" if all(v == "healthy" for v in checks.values()) else "degraded",
        "checks": checks,
        "booking_lock_backend": settings.BOOKING_LOCK_BACKEND,
        "slot_granularity_minutes": settings.SLOT_GRANULARITY_MINUTES,
    }
