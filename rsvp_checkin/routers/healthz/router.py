from fastapi import APIRouter, Depends
from pydantic import BaseModel

from rsvp_checkin.live_updates.bus import LiveUpdateBus, get_live_update_bus

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    dashboards_connected: int = 0
    live_updates_dropped: int = 0


@router.get("/", response_model=HealthCheckResponse)
async def health_check(bus: LiveUpdateBus = Depends(get_live_update_bus)) -> HealthCheckResponse:
    """
    Health check endpoint to verify the API is running.
    """
    return HealthCheckResponse(
        status="healthy",
        dashboards_connected=bus.subscriber_count,
        live_updates_dropped=bus.dropped_events,
    )
