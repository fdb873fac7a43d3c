from abc import ABC, abstractmethod

from rsvp_checkin.attendance.dtos import AttendanceStatsDTO, MealPreference
from rsvp_checkin.attendance.repository.store import AttendanceStore


class StatsReadModel(ABC):
    @abstractmethod
    async def get_stats(self) -> AttendanceStatsDTO:
        """Aggregate counts for the operations dashboard."""
        raise NotImplementedError


class StoreStatsReadModel(StatsReadModel):
    def __init__(self, store: AttendanceStore) -> None:
        self.store = store

    async def get_stats(self) -> AttendanceStatsDTO:
        return AttendanceStatsDTO(
            total_registrations=await self.store.count_where(),
            total_attending=await self.store.count_where(attending=True),
            total_checked_in=await self.store.count_where(attended=True),
            # meal counts only consider guests who are coming
            veg_count=await self.store.count_where(
                attending=True, meal_preferences=MealPreference.VEG
            ),
            non_veg_count=await self.store.count_where(
                attending=True, meal_preferences=MealPreference.NON_VEG
            ),
        )
