import pytest

from rsvp_checkin.attendance.dtos import MealPreference, RegistrationInputDTO
from rsvp_checkin.attendance.features.check_in.write_model import StoreCheckInWriteModel
from rsvp_checkin.attendance.features.register.write_model import StoreRegisterWriteModel
from rsvp_checkin.attendance.features.stats.read_model import StoreStatsReadModel
from rsvp_checkin.attendance.repository.store import SqlAttendanceStore
from rsvp_checkin.attendance.repository.tests.inmemory_store import InMemoryAttendanceStore


@pytest.fixture(params=["memory", "sql"])
def store(request, sqlite_session_maker):
    if request.param == "sql":
        return SqlAttendanceStore(session_maker=sqlite_session_maker)
    return InMemoryAttendanceStore()


@pytest.mark.asyncio
async def test_empty_store(store):
    stats = await StoreStatsReadModel(store).get_stats()

    assert stats.total_registrations == 0
    assert stats.total_attending == 0
    assert stats.total_checked_in == 0
    assert stats.veg_count == 0
    assert stats.non_veg_count == 0


@pytest.mark.asyncio
async def test_stats_after_registrations_and_check_in(store, token_service):
    register = StoreRegisterWriteModel(store, token_service)
    veg = await register.register(
        RegistrationInputDTO(
            full_name="Asha Rao",
            attending=True,
            phone_number="1",
            meal_preferences=[MealPreference.VEG],
        )
    )
    await register.register(
        RegistrationInputDTO(
            full_name="Kiran Iyer",
            attending=True,
            phone_number="2",
            meal_preferences=[MealPreference.VEG, MealPreference.NON_VEG],
        )
    )
    await register.register(RegistrationInputDTO(full_name="Vikram Shah", attending=False))
    await StoreCheckInWriteModel(store).check_in(veg.record_id)

    stats = await StoreStatsReadModel(store).get_stats()

    assert stats.total_registrations == 3
    assert stats.total_attending == 2
    assert stats.total_checked_in == 1
    assert stats.veg_count == 2
    assert stats.non_veg_count == 1
