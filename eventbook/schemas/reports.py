from pydantic import BaseModel


class ReportOut(BaseModel):
    total_capacity: int
    total_seats_filled: int
    total_bookings: int
    drifted_events: int

    class Config:
        from_attributes = True
