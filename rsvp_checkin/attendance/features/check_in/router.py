from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.features.check_in.write_model import (
    CheckInWriteModel,
    StoreCheckInWriteModel,
)
from rsvp_checkin.attendance.repository.store import AttendanceStore, get_attendance_store
from rsvp_checkin.attendance.schemas import AttendanceRecordResponse
from rsvp_checkin.attendance.urls import CHECK_IN_URL
from rsvp_checkin.live_updates.bus import LiveUpdateBus, get_live_update_bus

router = APIRouter()


class CheckInResponse(BaseModel):
    message: str
    attended_at: datetime
    record: AttendanceRecordResponse


def get_check_in_write_model(
    store: AttendanceStore = Depends(get_attendance_store),
    bus: LiveUpdateBus = Depends(get_live_update_bus),
) -> CheckInWriteModel:
    """Dependency to get check-in write model instance."""
    return StoreCheckInWriteModel(store=store, bus=bus)


@router.patch(CHECK_IN_URL, response_model=CheckInResponse)
async def check_in(
    record_id: UUID,
    write_model: CheckInWriteModel = Depends(get_check_in_write_model),
) -> CheckInResponse:
    """
    Mark a confirmed guest as attended.
    A guest can be admitted once; repeated scans are rejected with already_checked_in.
    """
    try:
        result = await write_model.check_in(record_id)
    except CheckInServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_detail())

    return CheckInResponse(
        message="Successfully marked as attended",
        attended_at=result.attended_at,
        record=AttendanceRecordResponse.from_dto(result.record),
    )
