"""Write model for the check-in state machine.

    REGISTERED (not attending)  -- terminal
    CONFIRMED  -- check_in -->  CHECKED_IN  -- terminal

The transition is a single conditional update against the store, so two
staff devices scanning the same guest produce one success and one
AlreadyCheckedInError.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from uuid import UUID

from rsvp_checkin.attendance.dtos import AttendanceRecordDTO, CheckInResultDTO
from rsvp_checkin.attendance.errors import (
    AlreadyCheckedInError,
    NotAttendingError,
    RecordNotFoundError,
)
from rsvp_checkin.attendance.repository.store import AttendanceStore
from rsvp_checkin.live_updates.bus import LiveUpdateBus
from rsvp_checkin.live_updates.events import GuestCheckedInEvent

logger = logging.getLogger(__name__)


class CheckInWriteModel(ABC):
    @abstractmethod
    async def check_in(self, record_id: UUID) -> CheckInResultDTO:
        """
        Admit the guest behind ``record_id``.

        Raises RecordNotFoundError, AlreadyCheckedInError or NotAttendingError.
        """
        raise NotImplementedError


def _reject(record: AttendanceRecordDTO | None, record_id: UUID) -> None:
    if record is None:
        raise RecordNotFoundError(record_id)
    if record.attended:
        raise AlreadyCheckedInError(record_id)
    if not record.attending:
        raise NotAttendingError(record_id)


class StoreCheckInWriteModel(CheckInWriteModel):
    def __init__(self, store: AttendanceStore, bus: LiveUpdateBus | None = None) -> None:
        self.store = store
        self.bus = bus

    async def check_in(self, record_id: UUID) -> CheckInResultDTO:
        _reject(await self.store.find_one(id=record_id), record_id)

        now = datetime.now(UTC)
        updated = await self.store.update_one_if(
            record_id,
            condition={"attended": False, "attending": True},
            patch={"attended": True, "attended_at": now, "updated_at": now},
        )
        if updated is None:
            # Lost the race; report whatever state the record is in now
            _reject(await self.store.find_one(id=record_id), record_id)
            raise AlreadyCheckedInError(record_id)

        logger.info(f"Checked in guest {record_id}")
        if self.bus:
            self.bus.publish(GuestCheckedInEvent(record_id=record_id, attended_at=now))
        return CheckInResultDTO(record=updated, attended_at=now)
