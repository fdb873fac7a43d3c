import pytest

from rsvp_checkin.attendance.dtos import AttendanceStatsDTO
from rsvp_checkin.attendance.features.stats.read_model import StatsReadModel
from rsvp_checkin.attendance.features.stats.router import get_stats_read_model
from rsvp_checkin.attendance.repository.store import get_attendance_store
from rsvp_checkin.attendance.urls import STATS_URL


class FixedStatsReadModel(StatsReadModel):
    async def get_stats(self) -> AttendanceStatsDTO:
        return AttendanceStatsDTO(
            total_registrations=12,
            total_attending=9,
            total_checked_in=4,
            veg_count=6,
            non_veg_count=5,
        )


@pytest.mark.asyncio
async def test_get_stats(client_factory):
    overrides = {get_stats_read_model: lambda: FixedStatsReadModel()}

    async with client_factory(overrides) as client:
        response = await client.get(STATS_URL)

    assert response.status_code == 200
    assert response.json() == {
        "total_registrations": 12,
        "total_attending": 9,
        "total_checked_in": 4,
        "veg_count": 6,
        "non_veg_count": 5,
    }


@pytest.mark.asyncio
async def test_get_stats_store_unavailable(client_factory, memory_store):
    memory_store.unavailable = True

    async with client_factory({get_attendance_store: lambda: memory_store}) as client:
        response = await client.get(STATS_URL)

    assert response.status_code == 503
