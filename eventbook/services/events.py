import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from eventbook.core.errors import CapacityExceededError, ForbiddenError, NotFoundError
from eventbook.core.permissions import hosts_event
from eventbook.models.bookings import Booking
from eventbook.models.events import Event
from eventbook.schemas.events import EventCreate, EventUpdate
from eventbook.services.bookings import atomic, count_bookings, event_lock, recompute_locked

logger = logging.getLogger(__name__)


def create_event(db: Session, *, host_id: int, data: EventCreate) -> Event:
    event = Event(**data.model_dump(), host_id=host_id, seats_filled=0)
    with atomic(db):
        db.add(event)
    db.refresh(event)
    logger.info("Event %s created by host %s", event.id, host_id)
    return event


def list_events(db: Session) -> list[Event]:
    stmt = select(Event).options(selectinload(Event.bookings).selectinload(Booking.user)).order_by(Event.date)
    return list(db.scalars(stmt))


def list_host_events(db: Session, host_id: int) -> list[Event]:
    stmt = (
        select(Event)
        .where(Event.host_id == host_id)
        .options(selectinload(Event.bookings).selectinload(Booking.user))
        .order_by(Event.date)
    )
    return list(db.scalars(stmt))


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


def get_hosted_event(db: Session, event_id: int, host_id: int, action: str) -> Event:
    event = get_event(db, event_id)
    if not hosts_event(host_id, event):
        raise ForbiddenError(f"Not authorized to {action} this event")
    return event


def update_event(db: Session, *, event_id: int, host_id: int, data: EventUpdate) -> Event:
    """
    Update event details. seats_total may change, but never below the number
    of bookings the event currently holds.
    """
    get_hosted_event(db, event_id, host_id, "update")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    with event_lock(event_id):
        with atomic(db):
            event = db.get(Event, event_id, populate_existing=True)
            if not event:
                raise NotFoundError("Event not found")
            new_total = changes.get("seats_total")
            if new_total is not None:
                active = count_bookings(db, event_id)
                if new_total < active:
                    raise CapacityExceededError(
                        f"Cannot reduce seats below the {active} seats already booked"
                    )
            for field, value in changes.items():
                setattr(event, field, value)
        recompute_locked(db, event_id)

    db.refresh(event)
    return event


def delete_event(db: Session, *, event_id: int, host_id: int) -> None:
    """Delete an event together with all of its bookings."""
    get_hosted_event(db, event_id, host_id, "delete")

    with event_lock(event_id):
        with atomic(db):
            event = db.get(Event, event_id, populate_existing=True)
            if not event:
                raise NotFoundError("Event not found")
            removed = len(event.bookings)
            db.delete(event)

    logger.info("Event %s deleted by host %s with %s bookings", event_id, host_id, removed)
