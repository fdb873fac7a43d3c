from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from rsvp_checkin.attendance.credentials.tokens import TokenService, get_token_service
from rsvp_checkin.attendance.errors import CheckInServiceError
from rsvp_checkin.attendance.urls import VERIFY_TOKEN_URL

router = APIRouter()


class VerifyTokenRequest(BaseModel):
    token: str


class VerifyTokenResponse(BaseModel):
    valid: bool
    record_id: UUID
    confirmation_code: str


@router.post(VERIFY_TOKEN_URL, response_model=VerifyTokenResponse)
async def verify_token(
    request: VerifyTokenRequest,
    token_service: TokenService = Depends(get_token_service),
) -> VerifyTokenResponse:
    """Prove a confirmation token was issued by this service and has not expired."""
    try:
        claims = token_service.verify(request.token)
    except CheckInServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_detail())

    return VerifyTokenResponse(
        valid=True,
        record_id=claims.record_id,
        confirmation_code=claims.confirmation_code,
    )
