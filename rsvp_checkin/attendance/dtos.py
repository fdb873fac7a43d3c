from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from rsvp_checkin.attendance.repository.orm_models import AttendanceRecord


class MealPreference(str, Enum):
    VEG = "Veg"
    NON_VEG = "NonVeg"

    @classmethod
    def _missing_(cls, value):
        # RSVP forms of the first release posted "Non-Veg"
        if isinstance(value, str) and value.replace("-", "").replace("_", "").lower() == "nonveg":
            return cls.NON_VEG
        if isinstance(value, str) and value.lower() == "veg":
            return cls.VEG
        return None


class AttendanceState(str, Enum):
    REGISTERED = "registered"  # not attending, terminal
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"  # terminal


@dataclass(frozen=True)
class AttendanceRecordDTO:
    """DTO for one guest's RSVP and check-in status."""

    id: UUID
    full_name: str
    attending: bool
    phone_number: str | None = None
    meal_preferences: list[MealPreference] = field(default_factory=list)
    family_count: int = 1
    family_members: list[str] = field(default_factory=list)
    confirmation_code: str | None = None
    credential: str | None = None
    attended: bool = False
    attended_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def state(self) -> AttendanceState:
        if not self.attending:
            return AttendanceState.REGISTERED
        if self.attended:
            return AttendanceState.CHECKED_IN
        return AttendanceState.CONFIRMED

    @classmethod
    def from_orm(cls, record: "AttendanceRecord") -> "AttendanceRecordDTO":
        """Create AttendanceRecordDTO from AttendanceRecord ORM model."""
        return cls(
            id=record.uuid,
            full_name=record.full_name,
            attending=record.attending,
            phone_number=record.phone_number,
            meal_preferences=[MealPreference(m) for m in record.meal_preferences or []],
            family_count=record.family_count,
            family_members=list(record.family_members or []),
            confirmation_code=record.confirmation_code,
            credential=record.credential,
            attended=record.attended,
            attended_at=record.attended_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def to_message(self) -> dict[str, Any]:
        """JSON-ready form used for live update events."""
        return {
            "id": str(self.id),
            "fullName": self.full_name,
            "attending": self.attending,
            "phoneNumber": self.phone_number,
            "mealPreferences": [m.value for m in self.meal_preferences],
            "familyCount": self.family_count,
            "familyMembers": list(self.family_members),
            "confirmationCode": self.confirmation_code,
            "attended": self.attended,
            "attendedAt": self.attended_at.isoformat() if self.attended_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class RegistrationInputDTO:
    """Raw registration input, validated by the register write model."""

    full_name: str | None
    attending: bool | None
    phone_number: str | None = None
    meal_preferences: list[MealPreference] = field(default_factory=list)
    family_count: int = 1
    family_members: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RegistrationResultDTO:
    """DTO for a registration outcome.

    Non-attending registrations carry no code, token or credential.
    """

    record_id: UUID
    attending: bool
    message: str
    confirmation_code: str | None = None
    token: str | None = None
    credential: str | None = None


@dataclass(frozen=True)
class CheckInResultDTO:
    record: AttendanceRecordDTO
    attended_at: datetime


@dataclass(frozen=True)
class AttendanceStatsDTO:
    total_registrations: int
    total_attending: int
    total_checked_in: int
    veg_count: int
    non_veg_count: int
