"""Health checks and monitoring endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from booking.config.database import get_db, NO_OVERLAP_CONSTRAINT
from booking.config.redis import get_redis

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "booking-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with dependencies.

    On PostgreSQL also verifies the appointment overlap constraint exists,
    since nothing else stops double bookings.
    """
    checks = {
        "api": "healthy",
        "database": "unknown",
        "overlap_constraint": "unknown",
        "redis": "unknown",
        "overall": "unknown"
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    # Check overlap constraint
    if db.get_bind().dialect.name != "postgresql":
        checks["overlap_constraint"] = "skipped"
    else:
        try:
            found = db.execute(
                text("SELECT 1 FROM pg_constraint WHERE conname = :name"),
                {"name": NO_OVERLAP_CONSTRAINT}
            ).first()
            checks["overlap_constraint"] = "healthy" if found else "unhealthy: missing"
        except Exception as e:
            checks["overlap_constraint"] = f"unhealthy: {str(e)}"

    # Check Redis
    try:
        redis_client = await get_redis()
        await redis_client.ping()
        checks["redis"] = "healthy"
        await redis_client.close()
    except Exception as e:
        checks["redis"] = f"unhealthy: {str(e)}"

    # Overall status
    if all(status in ("healthy", "skipped") for key, status in checks.items() if key != "overall"):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    return checks
