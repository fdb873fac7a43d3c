"""Verification dispatcher - resolves the guest staff are trying to admit.

Three independent lookup strategies share one interface and one failure mode:
a miss is always GuestNotFoundError, whichever input was wrong.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any

from rsvp_checkin.attendance.credentials import codec
from rsvp_checkin.attendance.dtos import AttendanceRecordDTO
from rsvp_checkin.attendance.errors import GuestNotFoundError
from rsvp_checkin.attendance.repository.store import AttendanceStore

logger = logging.getLogger(__name__)


class LookupMethod(str, Enum):
    CODE = "code"
    PHONE = "phone"
    CREDENTIAL = "credential"


class VerificationDispatcher:
    def __init__(self, store: AttendanceStore) -> None:
        self.store = store
        self._strategies: dict[LookupMethod, Callable[[Any], Awaitable[AttendanceRecordDTO | None]]] = {
            LookupMethod.CODE: self._by_code,
            LookupMethod.PHONE: self._by_phone,
            LookupMethod.CREDENTIAL: self._by_credential,
        }

    async def resolve(
        self,
        method: LookupMethod,
        value: str | bytes | Mapping[str, Any],
    ) -> AttendanceRecordDTO:
        """Find the attendance record identified by ``value``.

        Raises:
            GuestNotFoundError: nothing matches.
            CredentialError: ``method`` is CREDENTIAL and the payload is not a valid credential.
        """
        record = await self._strategies[LookupMethod(method)](value)
        if record is None:
            logger.info(f"Lookup by {LookupMethod(method).value} found no registration")
            raise GuestNotFoundError()
        return record

    async def _by_code(self, code: Any) -> AttendanceRecordDTO | None:
        if not isinstance(code, str) or not code.strip():
            return None
        return await self.store.find_one(attending=True, confirmation_code=code.strip())

    async def _by_phone(self, phone_number: Any) -> AttendanceRecordDTO | None:
        if not isinstance(phone_number, str) or not phone_number.strip():
            return None
        return await self.store.find_one(attending=True, phone_number=phone_number.strip())

    async def _by_credential(self, blob: Any) -> AttendanceRecordDTO | None:
        payload = codec.decode(blob)
        return await self._by_code(payload.confirmation_code)
