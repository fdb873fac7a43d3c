"""Response schemas shared by the attendance routers."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from rsvp_checkin.attendance.dtos import AttendanceRecordDTO, AttendanceState, MealPreference


class AttendanceRecordResponse(BaseModel):
    """Attendance record as shown to staff and dashboards (no credential blob)."""

    id: UUID
    full_name: str
    attending: bool
    state: AttendanceState
    phone_number: str | None = None
    meal_preferences: list[MealPreference] = []
    family_count: int = 1
    family_members: list[str] = []
    confirmation_code: str | None = None
    attended: bool = False
    attended_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dto(cls, record: AttendanceRecordDTO) -> "AttendanceRecordResponse":
        return cls(
            id=record.id,
            full_name=record.full_name,
            attending=record.attending,
            state=record.state,
            phone_number=record.phone_number,
            meal_preferences=record.meal_preferences,
            family_count=record.family_count,
            family_members=record.family_members,
            confirmation_code=record.confirmation_code,
            attended=record.attended,
            attended_at=record.attended_at,
            created_at=record.created_at,
        )
