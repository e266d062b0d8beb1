from datetime import datetime

from pydantic import BaseModel, Field, field_validator


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    date: datetime
    address: str = Field(min_length=1, max_length=300)
    description: str = Field(min_length=1, max_length=1000)
    seats_total: int = Field(ge=1)

    @field_validator("title", "address")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    date: datetime | None = None
    address: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    seats_total: int | None = Field(default=None, ge=1)

    @field_validator("title", "address")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class EventOut(BaseModel):
    id: int
    title: str
    date: datetime
    address: str
    description: str
    seats_total: int
    seats_filled: int
    host_id: int

    class Config:
        from_attributes = True


class EventStatsOut(BaseModel):
    event_id: int
    seats_total: int
    seats_filled: int
    active_bookings: int
    seats_available: int
    drift: int


class RecomputeOut(BaseModel):
    event_id: int
    seats_filled: int
