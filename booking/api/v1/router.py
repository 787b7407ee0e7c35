"""
API v1 router setup
Organized into: availability (slots, day statuses, blocked dates),
appointments (booking) and services (timing checks)
"""
from fastapi import APIRouter

from booking.api.v1 import availability, appointments, services

api_v1_router = APIRouter()

# ============================================================================
# AVAILABILITY ROUTES
# ============================================================================
api_v1_router.include_router(
    availability.router,
    # No prefix needed - availability.router already has "/availability" prefix
    tags=["Availability"]
)

# ============================================================================
# BOOKING ROUTES
# ============================================================================
api_v1_router.include_router(
    appointments.router,
    tags=["Appointments"]
)

api_v1_router.include_router(
    services.router,
    tags=["Services"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoint groups"""
    return {
        "version": "1.0",
        "endpoints": {
            "availability": "/api/v1/availability",
            "appointments": "/api/v1/appointments",
            "services": "/api/v1/services",
        }
    }
