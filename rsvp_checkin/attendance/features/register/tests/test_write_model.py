import asyncio
import itertools

import pytest

from rsvp_checkin.attendance.credentials import codec
from rsvp_checkin.attendance.dtos import MealPreference, RegistrationInputDTO
from rsvp_checkin.attendance.errors import (
    CodeSpaceExhaustedError,
    DuplicatePhoneError,
    InvalidFamilyError,
    MissingFieldsError,
)
from rsvp_checkin.attendance.features.register.write_model import (
    ATTENDING_MESSAGE,
    CODE_SPACE_SIZE,
    DECLINED_MESSAGE,
    StoreRegisterWriteModel,
    draw_confirmation_code,
)
from rsvp_checkin.attendance.repository.store import SqlAttendanceStore
from rsvp_checkin.attendance.repository.tests.inmemory_store import InMemoryAttendanceStore


def asha(**overrides) -> RegistrationInputDTO:
    values = {
        "full_name": "Asha Rao",
        "attending": True,
        "phone_number": "9998887777",
        "meal_preferences": [MealPreference.VEG],
        "family_count": 3,
        "family_members": ["Ravi Rao", "Meera Rao"],
    }
    values.update(overrides)
    return RegistrationInputDTO(**values)


def codes(*values):
    iterator = iter(values)
    return lambda: next(iterator)


@pytest.fixture
def write_model(memory_store, token_service, bus):
    return StoreRegisterWriteModel(memory_store, token_service, bus=bus)


@pytest.mark.asyncio
async def test_register_attending_guest(write_model, memory_store, token_service):
    result = await write_model.register(asha())

    assert result.attending is True
    assert result.message == ATTENDING_MESSAGE
    assert result.confirmation_code.isdigit() and 1000 <= int(result.confirmation_code) <= 9999

    claims = token_service.verify(result.token)
    assert claims.record_id == result.record_id
    assert claims.confirmation_code == result.confirmation_code

    payload = codec.decode(result.credential)
    assert payload.full_name == "Asha Rao"
    assert payload.phone_number == "9998887777"
    assert payload.family_count == 3
    assert payload.family_members == ("Ravi Rao", "Meera Rao")
    assert payload.meal_preferences == (MealPreference.VEG,)
    assert payload.confirmation_code == result.confirmation_code

    [record] = memory_store.records
    assert record.id == result.record_id
    assert record.attended is False
    assert record.credential == result.credential


@pytest.mark.asyncio
async def test_register_declined_guest(write_model, memory_store):
    result = await write_model.register(
        RegistrationInputDTO(full_name="Vikram Shah", attending=False)
    )

    assert result.attending is False
    assert result.message == DECLINED_MESSAGE
    assert result.confirmation_code is None
    assert result.token is None
    assert result.credential is None

    [record] = memory_store.records
    assert record.attending is False
    assert record.confirmation_code is None


@pytest.mark.asyncio
async def test_declined_guest_needs_no_phone_or_meal(write_model):
    result = await write_model.register(
        RegistrationInputDTO(full_name="Vikram Shah", attending=False, family_count=4)
    )

    assert result.attending is False


@pytest.mark.asyncio
async def test_duplicate_phone_number_is_rejected(write_model, memory_store):
    await write_model.register(asha())

    with pytest.raises(DuplicatePhoneError):
        await write_model.register(asha(full_name="Someone Else", family_count=1, family_members=[]))

    assert len(memory_store.records) == 1


@pytest.mark.asyncio
async def test_declined_guest_does_not_reserve_phone_number(write_model):
    await write_model.register(
        RegistrationInputDTO(full_name="Asha Rao", attending=False, phone_number="9998887777")
    )

    result = await write_model.register(asha())

    assert result.attending is True


@pytest.mark.parametrize(
    "registration, missing",
    [
        (asha(full_name=None), ["full_name"]),
        (asha(full_name="   "), ["full_name"]),
        (asha(attending=None), ["attending"]),
        (asha(full_name=None, attending=None), ["full_name", "attending"]),
        (asha(phone_number=None), ["phone_number"]),
        (asha(meal_preferences=[]), ["meal_preferences"]),
        (asha(phone_number="", meal_preferences=[]), ["phone_number", "meal_preferences"]),
    ],
)
@pytest.mark.asyncio
async def test_missing_fields(write_model, memory_store, registration, missing):
    with pytest.raises(MissingFieldsError) as exc_info:
        await write_model.register(registration)

    assert exc_info.value.fields == missing
    assert memory_store.records == []


@pytest.mark.parametrize(
    "family_count, family_members",
    [(3, ["Ravi Rao"]), (1, ["Ravi Rao"]), (0, []), (2, [])],
)
@pytest.mark.asyncio
async def test_family_members_must_match_family_count(write_model, family_count, family_members):
    with pytest.raises(InvalidFamilyError):
        await write_model.register(asha(family_count=family_count, family_members=family_members))


@pytest.mark.asyncio
async def test_colliding_code_is_redrawn(memory_store, token_service):
    write_model = StoreRegisterWriteModel(
        memory_store, token_service, code_generator=codes("1234", "1234", "1234", "5678")
    )

    first = await write_model.register(asha(phone_number="1"))
    second = await write_model.register(asha(phone_number="2"))

    assert first.confirmation_code == "1234"
    assert second.confirmation_code == "5678"


@pytest.mark.asyncio
async def test_declined_codes_do_not_block_allocation(memory_store, token_service):
    write_model = StoreRegisterWriteModel(memory_store, token_service, code_generator=codes("1234"))

    await write_model.register(RegistrationInputDTO(full_name="Vikram Shah", attending=False))
    result = await write_model.register(asha())

    assert result.confirmation_code == "1234"


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(memory_store, token_service):
    write_model = StoreRegisterWriteModel(
        memory_store,
        token_service,
        max_code_attempts=3,
        code_generator=itertools.repeat("1234").__next__,
    )
    await write_model.register(asha(phone_number="1"))

    with pytest.raises(CodeSpaceExhaustedError) as exc_info:
        await write_model.register(asha(phone_number="2"))

    assert exc_info.value.attempts == 3
    assert "after 3 attempts" in exc_info.value.message
    assert len(memory_store.records) == 1


@pytest.mark.asyncio
async def test_full_code_space_fails_without_drawing(token_service, monkeypatch):
    store = InMemoryAttendanceStore()

    async def count_where(**filters):
        return CODE_SPACE_SIZE

    monkeypatch.setattr(store, "count_where", count_where)

    def never_called():
        raise AssertionError("no code should be drawn")

    write_model = StoreRegisterWriteModel(store, token_service, code_generator=never_called)

    with pytest.raises(CodeSpaceExhaustedError) as exc_info:
        await write_model.register(asha())

    assert exc_info.value.attempts is None
    assert exc_info.value.message == "All confirmation codes are in use"


@pytest.mark.asyncio
async def test_registration_is_published(write_model, bus):
    subscription = bus.subscribe()

    result = await write_model.register(asha())
    await write_model.register(RegistrationInputDTO(full_name="Vikram Shah", attending=False))

    first = await subscription.get()
    second = await subscription.get()
    assert first["type"] == "registration-created"
    assert first["data"]["id"] == str(result.record_id)
    assert first["data"]["state"] == "confirmed"
    assert "credential" not in first["data"]
    assert second["data"]["state"] == "registered"


@pytest.mark.asyncio
async def test_failed_registration_is_not_published(write_model, bus):
    subscription = bus.subscribe()

    with pytest.raises(MissingFieldsError):
        await write_model.register(asha(phone_number=None))

    assert subscription.pending() == 0


def test_draw_confirmation_code_range():
    drawn = {draw_confirmation_code() for _ in range(500)}

    assert all(len(code) == 4 and 1000 <= int(code) <= 9999 for code in drawn)
    assert len(drawn) > 1


@pytest.fixture(params=["memory", "sql"])
def store(request, sqlite_session_maker):
    if request.param == "sql":
        return SqlAttendanceStore(session_maker=sqlite_session_maker)
    return InMemoryAttendanceStore()


@pytest.mark.asyncio
async def test_concurrent_registrations_with_same_phone_admit_one(store, token_service):
    write_model = StoreRegisterWriteModel(store, token_service)

    results = await asyncio.gather(
        *(
            write_model.register(asha(full_name=f"Guest {i}", family_count=1, family_members=[]))
            for i in range(4)
        ),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 3
    assert all(isinstance(f, DuplicatePhoneError) for f in failures)
    assert await store.count_where(attending=True) == 1


@pytest.mark.asyncio
async def test_concurrent_registrations_never_share_a_code(store, token_service):
    write_model = StoreRegisterWriteModel(
        store,
        token_service,
        max_code_attempts=3,
        code_generator=itertools.repeat("1234").__next__,
    )

    results = await asyncio.gather(
        *(
            write_model.register(asha(phone_number=str(i), family_count=1, family_members=[]))
            for i in range(4)
        ),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert [r.confirmation_code for r in successes] == ["1234"]
    assert all(isinstance(f, CodeSpaceExhaustedError) for f in failures)
    assert await store.count_where(attending=True, confirmation_code="1234") == 1
    assert await store.count_where(attending=True) == 1
