from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rsvp_checkin.config.table_names import TableNames
from rsvp_checkin.models.base import Base, TimeStamp


class AttendanceRecord(Base, TimeStamp):
    __tablename__ = TableNames.ATTENDANCE_RECORDS.value
    __table_args__ = (
        # Uniqueness only holds among attending guests; declined RSVPs carry no
        # code and may reuse a phone number.
        sa.Index(
            "uq_attendance_records_attending_phone_number",
            "phone_number",
            unique=True,
            postgresql_where=sa.text("attending"),
            sqlite_where=sa.text("attending"),
        ),
        sa.Index(
            "uq_attendance_records_attending_confirmation_code",
            "confirmation_code",
            unique=True,
            postgresql_where=sa.text("attending"),
            sqlite_where=sa.text("attending"),
        ),
        sa.CheckConstraint("NOT attended OR attending", name="attended_requires_attending"),
        sa.CheckConstraint(
            "(attended AND attended_at IS NOT NULL) OR (NOT attended AND attended_at IS NULL)",
            name="attended_at_matches_attended",
        ),
        sa.CheckConstraint("family_count >= 1", name="family_count_positive"),
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    attending: Mapped[bool] = mapped_column(Boolean, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    meal_preferences: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    family_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    family_members: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    confirmation_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    credential: Mapped[str | None] = mapped_column(Text, nullable=True)

    attended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    attended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.full_name} attending={self.attending} attended={self.attended}>"
