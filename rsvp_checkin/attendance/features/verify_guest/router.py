from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AliasChoices, BaseModel, Field

from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.features.verify_guest.read_model import (
    LookupMethod,
    VerificationDispatcher,
)
from rsvp_checkin.attendance.repository.store import AttendanceStore, get_attendance_store
from rsvp_checkin.attendance.schemas import AttendanceRecordResponse
from rsvp_checkin.attendance.urls import (
    LOOKUP_BY_CODE_URL,
    LOOKUP_BY_CREDENTIAL_URL,
    LOOKUP_BY_PHONE_URL,
)

router = APIRouter()


class CredentialLookupRequest(BaseModel):
    """Scanner output: the raw QR text or the already-parsed object."""

    credential: str | dict[str, Any] = Field(validation_alias=AliasChoices("credential", "qrData"))


def get_verification_dispatcher(
    store: AttendanceStore = Depends(get_attendance_store),
) -> VerificationDispatcher:
    """Dependency to get verification dispatcher instance."""
    return VerificationDispatcher(store)


async def _resolve(dispatcher: VerificationDispatcher, method: LookupMethod, value) -> AttendanceRecordResponse:
    try:
        record = await dispatcher.resolve(method, value)
    except CheckInServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_detail())
    return AttendanceRecordResponse.from_dto(record)


@router.get(LOOKUP_BY_CODE_URL, response_model=AttendanceRecordResponse)
async def lookup_by_code(
    code: str,
    dispatcher: VerificationDispatcher = Depends(get_verification_dispatcher),
) -> AttendanceRecordResponse:
    """Find a registration by its 4-digit confirmation code."""
    return await _resolve(dispatcher, LookupMethod.CODE, code)


@router.get(LOOKUP_BY_PHONE_URL, response_model=AttendanceRecordResponse)
async def lookup_by_phone(
    phone: str = Query(..., min_length=1),
    dispatcher: VerificationDispatcher = Depends(get_verification_dispatcher),
) -> AttendanceRecordResponse:
    """Find a registration by the phone number the guest registered with."""
    return await _resolve(dispatcher, LookupMethod.PHONE, phone)


@router.post(LOOKUP_BY_CREDENTIAL_URL, response_model=AttendanceRecordResponse)
async def lookup_by_credential(
    request: CredentialLookupRequest,
    dispatcher: VerificationDispatcher = Depends(get_verification_dispatcher),
) -> AttendanceRecordResponse:
    """Find a registration from a scanned credential."""
    return await _resolve(dispatcher, LookupMethod.CREDENTIAL, request.credential)
