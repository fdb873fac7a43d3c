from fastapi import APIRouter, Depends, HTTPException

from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.repository.store import AttendanceStore, get_attendance_store
from rsvp_checkin.attendance.schemas import AttendanceRecordResponse
from rsvp_checkin.attendance.urls import RECORDS_URL

router = APIRouter()


@router.get(RECORDS_URL, response_model=list[AttendanceRecordResponse])
async def list_records(
    store: AttendanceStore = Depends(get_attendance_store),
) -> list[AttendanceRecordResponse]:
    """
    Every registration, oldest first.
    Dashboards load this on connect, then follow the live update stream.
    """
    try:
        records = await store.find_all()
    except CheckInServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_detail())
    return [AttendanceRecordResponse.from_dto(record) for record in records]
