from fastapi import APIRouter, Depends, HTTPException, Response, status

from rsvp_checkin.attendance.credentials.qr import render_data_url
from rsvp_checkin.attendance.credentials.tokens import TokenService, get_token_service
from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.features.register.dtos import RegisterRequest, RegisterResponse
from rsvp_checkin.attendance.features.register.write_model import (
    RegisterWriteModel,
    StoreRegisterWriteModel,
)
from rsvp_checkin.attendance.repository.store import AttendanceStore, get_attendance_store
from rsvp_checkin.attendance.urls import REGISTER_URL
from rsvp_checkin.live_updates.bus import LiveUpdateBus, get_live_update_bus

router = APIRouter()


def get_register_write_model(
    store: AttendanceStore = Depends(get_attendance_store),
    token_service: TokenService = Depends(get_token_service),
    bus: LiveUpdateBus = Depends(get_live_update_bus),
) -> RegisterWriteModel:
    """Dependency to get register write model instance."""
    return StoreRegisterWriteModel(store=store, token_service=token_service, bus=bus)


@router.post(REGISTER_URL, response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    write_model: RegisterWriteModel = Depends(get_register_write_model),
) -> RegisterResponse:
    """
    Submit an RSVP.

    Attending guests get a confirmation code, a bearer token and a scannable
    credential (also rendered as a QR code). Declined RSVPs are only recorded.
    """
    try:
        result = await write_model.register(request.to_dto())
    except CheckInServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_detail())

    if not result.attending:
        response.status_code = status.HTTP_200_OK

    return RegisterResponse(
        record_id=result.record_id,
        attending=result.attending,
        message=result.message,
        confirmation_code=result.confirmation_code,
        token=result.token,
        credential=result.credential,
        qr_code_data_url=render_data_url(result.credential) if result.credential else None,
    )
