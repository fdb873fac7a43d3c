from datetime import timedelta
from uuid import uuid4

import pytest

from rsvp_checkin.attendance.credentials.tokens import TokenClaims, TokenService, get_token_service
from rsvp_checkin.attendance.urls import VERIFY_TOKEN_URL


@pytest.mark.asyncio
async def test_verify_valid_token(client_factory, token_service):
    record_id = uuid4()
    token = token_service.issue(TokenClaims(record_id=record_id, confirmation_code="4821"))

    async with client_factory({get_token_service: lambda: token_service}) as client:
        response = await client.post(VERIFY_TOKEN_URL, json={"token": token})

    assert response.status_code == 200
    assert response.json() == {
        "valid": True,
        "record_id": str(record_id),
        "confirmation_code": "4821",
    }


@pytest.mark.asyncio
async def test_verify_expired_token(client_factory, token_service):
    token = token_service.issue(
        TokenClaims(record_id=uuid4(), confirmation_code="4821"), ttl=timedelta(seconds=-1)
    )

    async with client_factory({get_token_service: lambda: token_service}) as client:
        response = await client.post(VERIFY_TOKEN_URL, json={"token": token})

    assert response.status_code == 401
    assert response.json()["detail"]["kind"] == "token_expired"


@pytest.mark.asyncio
async def test_verify_foreign_token(client_factory, token_service):
    token = TokenService("some-other-secret-that-is-32-bytes-long").issue(
        TokenClaims(record_id=uuid4(), confirmation_code="4821")
    )

    async with client_factory({get_token_service: lambda: token_service}) as client:
        response = await client.post(VERIFY_TOKEN_URL, json={"token": token})

    assert response.status_code == 401
    assert response.json()["detail"]["kind"] == "token_bad_signature"


@pytest.mark.asyncio
async def test_verify_garbage_token(client_factory, token_service):
    async with client_factory({get_token_service: lambda: token_service}) as client:
        response = await client.post(VERIFY_TOKEN_URL, json={"token": "garbage"})

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "token_malformed"
