from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventbook.database.db import Base


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("seats_total >= 1", name="seats_total_positive"),
        CheckConstraint("seats_filled >= 0", name="seats_filled_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    seats_total: Mapped[int] = mapped_column(Integer, nullable=False)
    # Cache of the number of bookings; repaired by recompute_seats_filled
    seats_filled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    host_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    host: Mapped["User"] = relationship(back_populates="hosted_events")
    bookings: Mapped[list["Booking"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Booking.id",
    )
