"""Write model for guest registration.

Validates the RSVP, allocates a confirmation code, issues the credential and
bearer token, persists the attendance record and announces it to dashboards.
Returns DTOs instead of ORM models.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from rsvp_checkin.attendance.credentials import codec
from rsvp_checkin.attendance.credentials.codec import CredentialPayload
from rsvp_checkin.attendance.credentials.tokens import TokenClaims, TokenService
from rsvp_checkin.attendance.dtos import (
    AttendanceRecordDTO,
    RegistrationInputDTO,
    RegistrationResultDTO,
)
from rsvp_checkin.attendance.errors import (
    CodeSpaceExhaustedError,
    DuplicatePhoneError,
    InvalidFamilyError,
    MissingFieldsError,
)
from rsvp_checkin.attendance.repository.store import AttendanceStore, UniqueFieldConflict
from rsvp_checkin.config.settings import settings
from rsvp_checkin.live_updates.bus import LiveUpdateBus
from rsvp_checkin.live_updates.events import RegistrationCreatedEvent

logger = logging.getLogger(__name__)

CODE_MIN = 1000
CODE_MAX = 9999
CODE_SPACE_SIZE = CODE_MAX - CODE_MIN + 1

ATTENDING_MESSAGE = "Thank you for confirming your attendance!"
DECLINED_MESSAGE = "Thank you for your response"


def draw_confirmation_code() -> str:
    """Uniformly random 4-digit code in [1000, 9999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_SPACE_SIZE))


class RegisterWriteModel(ABC):
    """Abstract base class for registration write operations."""

    @abstractmethod
    async def register(self, registration: RegistrationInputDTO) -> RegistrationResultDTO:
        """Register one RSVP.

        Raises:
            MissingFieldsError, InvalidFamilyError: input is incomplete.
            DuplicatePhoneError: an attending guest already uses the phone number.
            CodeSpaceExhaustedError: no free confirmation code could be drawn.
        """
        raise NotImplementedError


class StoreRegisterWriteModel(RegisterWriteModel):
    """Registration backed by an AttendanceStore."""

    def __init__(
        self,
        store: AttendanceStore,
        token_service: TokenService,
        bus: LiveUpdateBus | None = None,
        max_code_attempts: int | None = None,
        code_generator: Callable[[], str] = draw_confirmation_code,
    ) -> None:
        self.store = store
        self.token_service = token_service
        self.bus = bus
        self.max_code_attempts = max_code_attempts or settings.confirmation_code_max_attempts
        self.code_generator = code_generator

    async def register(self, registration: RegistrationInputDTO) -> RegistrationResultDTO:
        missing = []
        if not registration.full_name or not registration.full_name.strip():
            missing.append("full_name")
        if registration.attending is None:
            missing.append("attending")
        if missing:
            raise MissingFieldsError(missing)

        if not registration.attending:
            return await self._register_declined(registration)
        return await self._register_attending(registration)

    async def _register_declined(self, registration: RegistrationInputDTO) -> RegistrationResultDTO:
        record = AttendanceRecordDTO(
            id=uuid4(),
            full_name=registration.full_name.strip(),
            attending=False,
        )
        stored = await self.store.insert_if_absent(record)
        logger.info(f"Recorded declined RSVP {stored.id}")
        self._publish(stored)
        return RegistrationResultDTO(
            record_id=stored.id,
            attending=False,
            message=DECLINED_MESSAGE,
        )

    async def _register_attending(self, registration: RegistrationInputDTO) -> RegistrationResultDTO:
        phone_number = (registration.phone_number or "").strip()
        missing = []
        if not phone_number:
            missing.append("phone_number")
        if not registration.meal_preferences:
            missing.append("meal_preferences")
        if missing:
            raise MissingFieldsError(missing)

        family_count = registration.family_count
        family_members = [name.strip() for name in registration.family_members]
        if family_count < 1 or len(family_members) != family_count - 1:
            raise InvalidFamilyError(family_count, len(family_members))

        # Early rejection; the conditional insert below is the authoritative check
        if await self.store.find_one(attending=True, phone_number=phone_number):
            raise DuplicatePhoneError(phone_number)
        if await self.store.count_where(attending=True) >= CODE_SPACE_SIZE:
            raise CodeSpaceExhaustedError()

        record_id = uuid4()
        meal_preferences = list(dict.fromkeys(registration.meal_preferences))
        for attempt in range(1, self.max_code_attempts + 1):
            code = self.code_generator()
            if await self.store.find_one(attending=True, confirmation_code=code):
                logger.debug(f"Confirmation code collision on attempt {attempt}, redrawing")
                continue

            issued_at = datetime.now(UTC)
            credential = codec.encode(
                CredentialPayload(
                    full_name=registration.full_name.strip(),
                    phone_number=phone_number,
                    attending=True,
                    meal_preferences=tuple(meal_preferences),
                    family_count=family_count,
                    family_members=tuple(family_members),
                    confirmation_code=code,
                    issued_at=issued_at,
                )
            )
            token = self.token_service.issue(
                TokenClaims(record_id=record_id, confirmation_code=code)
            )
            record = AttendanceRecordDTO(
                id=record_id,
                full_name=registration.full_name.strip(),
                attending=True,
                phone_number=phone_number,
                meal_preferences=meal_preferences,
                family_count=family_count,
                family_members=family_members,
                confirmation_code=code,
                credential=credential,
                created_at=issued_at,
                updated_at=issued_at,
            )
            try:
                stored = await self.store.insert_if_absent(
                    record, unique_on=("phone_number", "confirmation_code")
                )
            except UniqueFieldConflict as e:
                if e.field_name == "phone_number":
                    raise DuplicatePhoneError(phone_number) from e
                logger.debug(f"Confirmation code taken concurrently on attempt {attempt}, redrawing")
                continue

            logger.info(f"Registered attending guest {stored.id} (party of {family_count})")
            self._publish(stored)
            return RegistrationResultDTO(
                record_id=stored.id,
                attending=True,
                message=ATTENDING_MESSAGE,
                confirmation_code=code,
                token=token,
                credential=credential,
            )

        logger.error(f"Confirmation code space exhausted after {self.max_code_attempts} attempts")
        raise CodeSpaceExhaustedError(self.max_code_attempts)

    def _publish(self, record: AttendanceRecordDTO) -> None:
        if self.bus:
            self.bus.publish(RegistrationCreatedEvent(record=record))
