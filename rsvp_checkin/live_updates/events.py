"""
Domain events for the check-in system.

Events are published on the live update bus at the end of each mutating
operation and streamed to dashboards as JSON messages.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, ClassVar
from uuid import UUID

from rsvp_checkin.attendance.dtos import AttendanceRecordDTO


@dataclass(kw_only=True)
class DomainEvent:
    """Base domain event."""

    event_type: ClassVar[str] = ""

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def payload(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_message(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "data": self.payload(),
        }


@dataclass(kw_only=True)
class RegistrationCreatedEvent(DomainEvent):
    """Event fired when a guest submits an RSVP, attending or not."""

    event_type: ClassVar[str] = "registration-created"

    record: AttendanceRecordDTO

    def payload(self) -> dict[str, Any]:
        return self.record.to_message()


@dataclass(kw_only=True)
class GuestCheckedInEvent(DomainEvent):
    """Event fired when staff admit a guest."""

    event_type: ClassVar[str] = "guest-checked-in"

    record_id: UUID
    attended_at: datetime

    def payload(self) -> dict[str, Any]:
        return {"recordId": str(self.record_id), "attendedAt": self.attended_at.isoformat()}
