"""Request and response bodies for the register feature."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from rsvp_checkin.attendance.dtos import MealPreference, RegistrationInputDTO


class RegisterRequest(BaseModel):
    """RSVP form submission.

    Required fields are optional here so the write model can report every
    missing field in one structured error. Accepts the camelCase names posted
    by the invitation page as well as snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_name: str | None = None
    attending: bool | None = None
    phone_number: str | None = None
    meal_preferences: list[MealPreference] = []
    family_count: int = 1
    family_members: list[str] = []

    @field_validator("attending", mode="before")
    @classmethod
    def parse_attending(cls, value):
        if isinstance(value, str) and value in ("Yes", "No"):
            return value == "Yes"
        return value

    @field_validator("meal_preferences", mode="before")
    @classmethod
    def parse_meal_preferences(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [MealPreference(item) for item in value]

    @field_validator("family_members", mode="before")
    @classmethod
    def parse_family_members(cls, value):
        return [] if value is None else value

    def to_dto(self) -> RegistrationInputDTO:
        return RegistrationInputDTO(
            full_name=self.full_name,
            attending=self.attending,
            phone_number=self.phone_number,
            meal_preferences=list(self.meal_preferences),
            family_count=self.family_count,
            family_members=list(self.family_members),
        )


class RegisterResponse(BaseModel):
    record_id: UUID
    attending: bool
    message: str
    confirmation_code: str | None = None
    token: str | None = None
    credential: str | None = None
    qr_code_data_url: str | None = None
