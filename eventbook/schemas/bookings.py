from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from eventbook.models.bookings import NOTES_MAX_LENGTH
from eventbook.schemas.events import EventOut
from eventbook.schemas.users import UserSummary


class BookRequest(BaseModel):
    guest_name: str = Field(min_length=1, max_length=200)
    contact: str = Field(min_length=1, max_length=200)
    notes: str = Field(default="", max_length=NOTES_MAX_LENGTH)

    @field_validator("guest_name", "contact")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Guest name and contact are required")
        return value


class NoteUpdate(BaseModel):
    notes: str = Field(max_length=NOTES_MAX_LENGTH)


class BookingOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    guest_name: str
    contact: str
    notes: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class BookingWithUserOut(BookingOut):
    user: UserSummary | None = None


class BookingResultOut(BaseModel):
    message: str
    booking: BookingOut
    event: EventOut


class MessageOut(BaseModel):
    message: str


class EventDetailOut(EventOut):
    bookings: list[BookingWithUserOut] = []
