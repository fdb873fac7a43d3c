"""Credential codec.

The credential is the guest-identifying payload printed as a QR code on the
confirmation page. It is plain JSON with camelCase keys so the scanner output
can be posted back unchanged, either as the raw text or as the parsed object.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from rsvp_checkin.attendance.dtos import MealPreference
from rsvp_checkin.attendance.errors import (
    MalformedCredentialError,
    MissingCredentialFieldError,
)

CONFIRMATION_CODE_FIELD = "confirmationCode"

# Credentials issued by the first release used different key names
_LEGACY_KEYS = {
    "confirmationNumber": CONFIRMATION_CODE_FIELD,
    "timestamp": "issuedAt",
}

_CODE_PATTERN = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class CredentialPayload:
    full_name: str
    phone_number: str | None
    attending: bool
    meal_preferences: tuple[MealPreference, ...]
    family_count: int
    family_members: tuple[str, ...]
    confirmation_code: str
    issued_at: datetime


def encode(payload: CredentialPayload) -> str:
    """Serialize a payload to its self-describing JSON text."""
    document = {
        "fullName": payload.full_name,
        "phoneNumber": payload.phone_number,
        "attending": payload.attending,
        "mealPreferences": [m.value for m in payload.meal_preferences],
        "familyCount": payload.family_count,
        "familyMembers": list(payload.family_members),
        CONFIRMATION_CODE_FIELD: payload.confirmation_code,
        "issuedAt": payload.issued_at.isoformat(),
    }
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def decode(blob: str | bytes | Mapping[str, Any]) -> CredentialPayload:
    """Parse a credential from scanner output.

    Raises:
        MissingCredentialFieldError: the payload has no confirmation code.
        MalformedCredentialError: anything else that is not a valid payload.
    """
    document = _load(blob)
    for legacy, current in _LEGACY_KEYS.items():
        if legacy in document and current not in document:
            document[current] = document.pop(legacy)

    code = document.get(CONFIRMATION_CODE_FIELD)
    if code is None or code == "":
        raise MissingCredentialFieldError(CONFIRMATION_CODE_FIELD)
    if not isinstance(code, str) or not _CODE_PATTERN.match(code):
        raise MalformedCredentialError("Confirmation code must be a 4-digit string")

    return CredentialPayload(
        full_name=_required_str(document, "fullName"),
        phone_number=_optional_str(document, "phoneNumber"),
        attending=_attending(document.get("attending")),
        meal_preferences=_meal_preferences(document.get("mealPreferences", [])),
        family_count=_family_count(document.get("familyCount", 1)),
        family_members=_family_members(document.get("familyMembers", [])),
        confirmation_code=code,
        issued_at=_issued_at(document.get("issuedAt")),
    )


def _load(blob: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(blob, Mapping):
        return dict(blob)
    if not isinstance(blob, (str, bytes)):
        raise MalformedCredentialError()
    try:
        document = json.loads(blob)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise MalformedCredentialError("Invalid QR code format")
    if not isinstance(document, dict):
        raise MalformedCredentialError()
    return document


def _required_str(document: dict[str, Any], key: str) -> str:
    value = document.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedCredentialError(f"Credential field {key} must be a non-empty string")
    return value


def _optional_str(document: dict[str, Any], key: str) -> str | None:
    value = document.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedCredentialError(f"Credential field {key} must be a string")
    return value


def _attending(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in ("Yes", "No"):
        return value == "Yes"
    raise MalformedCredentialError("Credential field attending must be a boolean")


def _meal_preferences(value: Any) -> tuple[MealPreference, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise MalformedCredentialError("Credential field mealPreferences must be a list")
    try:
        return tuple(MealPreference(item) for item in value)
    except ValueError:
        raise MalformedCredentialError("Unknown meal preference in credential")


def _family_count(value: Any) -> int:
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise MalformedCredentialError("Credential field familyCount must be a positive integer")
    return value


def _family_members(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(name, str) for name in value):
        raise MalformedCredentialError("Credential field familyMembers must be a list of names")
    return tuple(value)


def _issued_at(value: Any) -> datetime:
    if not isinstance(value, str):
        raise MalformedCredentialError("Credential field issuedAt must be an ISO timestamp")
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise MalformedCredentialError("Credential field issuedAt must be an ISO timestamp")
