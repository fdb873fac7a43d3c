"""Exception handlers for the API."""

import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rsvp_checkin.attendance.errors import ValidationError

logger = logging.getLogger(__name__)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters in the same shape as domain errors.

    The pydantic error list is kept under ``errors`` for clients that want field details.
    """
    errors = exc.errors()
    logger.info(f"Rejected {request.method} {request.url.path}: {len(errors)} invalid field(s)")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": {
                "kind": ValidationError.kind,
                "message": "; ".join(_describe(error) for error in errors),
                "errors": jsonable_encoder(errors),
            }
        },
    )


EXCEPTION_HANDLERS = {
    RequestValidationError: handle_request_validation_error,
}
