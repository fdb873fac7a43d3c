"""Error taxonomy for registration, verification and check-in.

Every error carries a stable ``kind`` that clients can switch on and the HTTP
status the routers answer with. Routers turn these into ``HTTPException``s;
nothing in the core swallows them.
"""


class CheckInServiceError(Exception):
    """Base class for all domain errors raised by the service."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def as_detail(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


# =============================================================================
# Families
# =============================================================================


class ValidationError(CheckInServiceError):
    """Missing or malformed input the caller can correct."""

    kind = "validation_error"
    status_code = 422


class ConflictError(CheckInServiceError):
    kind = "conflict"
    status_code = 409


class NotFoundError(CheckInServiceError):
    kind = "not_found"
    status_code = 404


class StateError(CheckInServiceError):
    """The record exists but is not in a state that allows the transition."""

    kind = "invalid_state"
    status_code = 409


class CredentialError(CheckInServiceError):
    kind = "credential_error"
    status_code = 400


class DependencyError(CheckInServiceError):
    kind = "dependency_error"
    status_code = 503


# =============================================================================
# Registration
# =============================================================================


class MissingFieldsError(ValidationError):
    kind = "missing_fields"

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Missing required fields: {', '.join(fields)}")


class InvalidFamilyError(ValidationError):
    kind = "invalid_family"

    def __init__(self, family_count: int, member_count: int) -> None:
        self.family_count = family_count
        self.member_count = member_count
        super().__init__(
            f"A family of {family_count} needs {family_count - 1} member name(s), "
            f"got {member_count}"
        )


class DuplicatePhoneError(ConflictError):
    kind = "duplicate_phone"

    def __init__(self, phone_number: str) -> None:
        self.phone_number = phone_number
        super().__init__("Phone number already registered. Please use a different one.")


class CodeSpaceExhaustedError(ConflictError):
    kind = "code_space_exhausted"

    def __init__(self, attempts: int | None = None) -> None:
        self.attempts = attempts
        if attempts is None:
            message = "All confirmation codes are in use"
        else:
            message = f"Could not allocate a free confirmation code after {attempts} attempts"
        super().__init__(message)


# =============================================================================
# Lookup and check-in
# =============================================================================


class GuestNotFoundError(NotFoundError):
    """Raised by every lookup strategy so callers cannot tell which input was wrong."""

    def __init__(self) -> None:
        super().__init__("No matching registration")


class RecordNotFoundError(NotFoundError):
    kind = "record_not_found"

    def __init__(self, record_id) -> None:
        self.record_id = record_id
        super().__init__(f"Attendance record {record_id} not found")


class AlreadyCheckedInError(StateError):
    kind = "already_checked_in"

    def __init__(self, record_id) -> None:
        self.record_id = record_id
        super().__init__("Already marked as attended")


class NotAttendingError(StateError):
    kind = "not_attending"

    def __init__(self, record_id) -> None:
        self.record_id = record_id
        super().__init__("Cannot mark as attended - guest is not attending the event")


# =============================================================================
# Credentials and tokens
# =============================================================================


class MalformedCredentialError(CredentialError):
    kind = "credential_malformed"

    def __init__(self, reason: str = "Invalid credential format") -> None:
        super().__init__(reason)


class MissingCredentialFieldError(CredentialError):
    kind = "credential_missing_field"

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Credential does not contain {field_name}")


class MalformedTokenError(CredentialError):
    kind = "token_malformed"

    def __init__(self, reason: str = "Token could not be parsed") -> None:
        super().__init__(reason)


class BadSignatureError(CredentialError):
    kind = "token_bad_signature"
    status_code = 401

    def __init__(self) -> None:
        super().__init__("Invalid token signature")


class TokenExpiredError(CredentialError):
    kind = "token_expired"
    status_code = 401

    def __init__(self) -> None:
        super().__init__("Token expired")


# =============================================================================
# Dependencies
# =============================================================================


class StoreUnavailableError(DependencyError):
    kind = "store_unavailable"

    def __init__(self, reason: str = "Attendance store is unavailable") -> None:
        super().__init__(reason)
