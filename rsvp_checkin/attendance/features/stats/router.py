from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.features.stats.read_model import StatsReadModel, StoreStatsReadModel
from rsvp_checkin.attendance.repository.store import AttendanceStore, get_attendance_store
from rsvp_checkin.attendance.urls import STATS_URL

router = APIRouter()


class StatsResponse(BaseModel):
    total_registrations: int
    total_attending: int
    total_checked_in: int
    veg_count: int
    non_veg_count: int


def get_stats_read_model(
    store: AttendanceStore = Depends(get_attendance_store),
) -> StatsReadModel:
    """Dependency to get stats read model instance."""
    return StoreStatsReadModel(store)


@router.get(STATS_URL, response_model=StatsResponse)
async def get_stats(
    read_model: StatsReadModel = Depends(get_stats_read_model),
) -> StatsResponse:
    """Registration, attendance and meal counts for the dashboard."""
    try:
        stats = await read_model.get_stats()
    except CheckInServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_detail())

    return StatsResponse(
        total_registrations=stats.total_registrations,
        total_attending=stats.total_attending,
        total_checked_in=stats.total_checked_in,
        veg_count=stats.veg_count,
        non_veg_count=stats.non_veg_count,
    )
