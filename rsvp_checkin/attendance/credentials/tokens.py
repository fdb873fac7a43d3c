"""Signed, time-bounded bearer tokens proving a registration was accepted.

Tokens are HS256 JWTs (``header.payload.signature``). The payload carries the
attendance record id and confirmation code plus ``iat``/``exp``. PyJWT
compares signatures with ``hmac.compare_digest``.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from uuid import UUID

import jwt

from rsvp_checkin.attendance.errors import (
    BadSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from rsvp_checkin.config.settings import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(hours=1)

_ID_CLAIM = "id"
_CODE_CLAIM = "confirmationCode"


@dataclass(frozen=True)
class TokenClaims:
    record_id: UUID
    confirmation_code: str


class TokenService:
    def __init__(self, secret: str, default_ttl: timedelta = DEFAULT_TTL) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._default_ttl = default_ttl

    def __repr__(self) -> str:
        return f"<TokenService ttl={self._default_ttl}>"

    def issue(self, claims: TokenClaims, ttl: timedelta | None = None) -> str:
        """Sign ``claims`` with an absolute expiry of now + ttl."""
        now = datetime.now(UTC)
        payload = {
            _ID_CLAIM: str(claims.record_id),
            _CODE_CLAIM: claims.confirmation_code,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self._default_ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Check signature and expiry and return the embedded claims.

        Raises:
            BadSignatureError: the integrity tag does not match.
            TokenExpiredError: the embedded expiry has passed.
            MalformedTokenError: the token cannot be parsed or lacks claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", _ID_CLAIM, _CODE_CLAIM]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
            raise BadSignatureError()
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Token could not be parsed: {e}")

        try:
            record_id = UUID(str(payload[_ID_CLAIM]))
        except ValueError:
            raise MalformedTokenError("Token carries an invalid record id")
        code = payload[_CODE_CLAIM]
        if not isinstance(code, str):
            raise MalformedTokenError("Token carries an invalid confirmation code")
        return TokenClaims(record_id=record_id, confirmation_code=code)


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service.

    The secret comes from ``SECRET_KEY`` or is generated once for the lifetime
    of the process; in the latter case tokens do not survive a restart.
    """
    if settings.secret_key is not None:
        secret = settings.secret_key.get_secret_value()
    else:
        logger.warning("SECRET_KEY not configured, generated an ephemeral token secret")
        secret = secrets.token_urlsafe(32)
    return TokenService(secret, default_ttl=timedelta(seconds=settings.token_ttl_seconds))
