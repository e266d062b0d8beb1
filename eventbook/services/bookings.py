"""Booking ledger.

Keeps ``Event.seats_filled`` in step with the bookings stored for the event.
Every mutation runs under the event's Redis lock, applies its writes in one
transaction (the seat increment is a conditional UPDATE so the capacity check
and the write are a single statement) and then recounts the event's bookings
before the lock is released.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

import redis
from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventbook.core.config import settings
from eventbook.core.errors import (
    CapacityExceededError,
    ConsistencyError,
    DuplicateBookingError,
    ForbiddenError,
    NotFoundError,
    StoreUnavailableError,
)
from eventbook.core.permissions import hosts_event, owns_booking
from eventbook.core.redis_config import get_redis_client
from eventbook.models.bookings import Booking
from eventbook.models.events import Event
from eventbook.models.users import User

logger = logging.getLogger(__name__)


@contextmanager
def event_lock(event_id: int) -> Iterator[None]:
    """
    Serialize seat counter mutations for one event across processes.
    Not reentrant: helpers called while it is held must not take it again.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=settings.LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.LOCK_BLOCKING_TIMEOUT_SECONDS,
    )
    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.RedisError as e:
        logger.error("Redis unavailable while locking event %s: %s", event_id, e)
        raise StoreUnavailableError("Booking store is unavailable, please try again.") from e
    if not acquired:
        logger.error("Timed out waiting for the lock on event %s", event_id)
        raise StoreUnavailableError("Could not acquire lock, please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # Lock expired while held; the next holder already owns the key.
            logger.warning("Lock for event %s expired before release", event_id)
        except redis.exceptions.RedisError as e:
            # The work above is committed; the key expires after LOCK_TIMEOUT_SECONDS
            logger.warning("Could not release lock for event %s: %s", event_id, e)


@contextmanager
def atomic(db: Session) -> Iterator[None]:
    """Commit on success, roll back on any error."""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def _get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id, populate_existing=True)
    if not event:
        raise NotFoundError("Event not found")
    return event


def count_bookings(db: Session, event_id: int) -> int:
    count = db.scalar(select(func.count(Booking.id)).where(Booking.event_id == event_id))
    return int(count or 0)


# ---------- create ----------
def create_booking(
    db: Session,
    *,
    event_id: int,
    user_id: int,
    guest_name: str,
    contact: str,
    notes: str = "",
) -> Booking:
    """
    Reserve one seat on ``event_id`` for ``user_id``.
    Raises NotFoundError, DuplicateBookingError or CapacityExceededError;
    on any failure the ledger is left untouched.
    """
    with event_lock(event_id):
        with atomic(db):
            booking = _create_booking_in_transaction(
                db, event_id, user_id, guest_name=guest_name, contact=contact, notes=notes
            )
        recompute_locked(db, event_id)

    logger.info("Booking %s created for event %s by user %s", booking.id, event_id, user_id)
    db.refresh(booking)
    return booking


def _create_booking_in_transaction(
    db: Session, event_id: int, user_id: int, *, guest_name: str, contact: str, notes: str
) -> Booking:
    _get_event(db, event_id)
    if not db.get(User, user_id, populate_existing=True):
        raise NotFoundError("User not found")

    existing = db.scalar(
        select(Booking.id).where(Booking.event_id == event_id, Booking.user_id == user_id)
    )
    if existing is not None:
        raise DuplicateBookingError("You have already booked this event")

    # Check capacity and increment seats_filled in one statement
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.seats_filled < Event.seats_total)
        .values(seats_filled=Event.seats_filled + 1)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        logger.info("Event %s is full, rejecting user %s", event_id, user_id)
        raise CapacityExceededError("Event is full")

    booking = Booking(
        event_id=event_id,
        user_id=user_id,
        guest_name=guest_name,
        contact=contact,
        notes=notes or "",
    )
    db.add(booking)
    try:
        db.flush()  # gets booking.id
    except IntegrityError as e:
        if not _is_duplicate_booking(e):
            raise
        # Unique (event_id, user_id) caught a booking the pre-check missed
        raise DuplicateBookingError("You have already booked this event") from e
    return booking


def _is_duplicate_booking(error: IntegrityError) -> bool:
    message = str(error.orig)
    # PostgreSQL names the constraint, SQLite names the columns
    return "uq_bookings_event_user" in message or "bookings.event_id, bookings.user_id" in message


# ---------- cancel / remove ----------
def cancel_booking(db: Session, *, booking_id: int, requester_id: int) -> None:
    """Guest cancels their own booking."""
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if not owns_booking(requester_id, booking):
        raise ForbiddenError("Not authorized to cancel this booking")

    event_id = booking.event_id
    with event_lock(event_id):
        with atomic(db):
            booking = db.get(Booking, booking_id, populate_existing=True)
            if not booking:
                # Removed by the host while we waited for the lock
                raise NotFoundError("Booking not found")
            _release_seat(db, booking)
        recompute_locked(db, event_id)

    logger.info("Booking %s on event %s cancelled by user %s", booking_id, event_id, requester_id)


def remove_booking(db: Session, *, event_id: int, booking_id: int, host_id: int) -> None:
    """Host removes any booking from an event they host."""
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    if not hosts_event(host_id, event):
        raise ForbiddenError("Not authorized")

    with event_lock(event_id):
        with atomic(db):
            booking = db.get(Booking, booking_id, populate_existing=True)
            if not booking or booking.event_id != event_id:
                raise NotFoundError("Booking not found")
            _release_seat(db, booking)
        recompute_locked(db, event_id)

    logger.info("Booking %s removed from event %s by host %s", booking_id, event_id, host_id)


def _release_seat(db: Session, booking: Booking) -> None:
    event_id = booking.event_id
    db.delete(booking)
    db.flush()
    # Decrement floored at zero
    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(
            seats_filled=case(
                (Event.seats_filled > 0, Event.seats_filled - 1),
                else_=0,
            )
        )
    )


# ---------- notes ----------
def update_booking_note(
    db: Session, *, event_id: int, booking_id: int, host_id: int, notes: str
) -> Booking:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    if not hosts_event(host_id, event):
        raise ForbiddenError("Not authorized")

    booking = db.get(Booking, booking_id)
    if not booking or booking.event_id != event_id:
        raise NotFoundError("Booking not found")

    with atomic(db):
        booking.notes = notes
    db.refresh(booking)
    return booking


# ---------- reconciliation ----------
def recompute_seats_filled(db: Session, event_id: int) -> int:
    """
    Overwrite the event's seats_filled with the number of bookings it has.
    Safe to call at any time; only the counter is ever changed.
    """
    with event_lock(event_id):
        return recompute_locked(db, event_id)


def reconcile_seats_filled(db: Session, event_id: int) -> bool:
    """Recompute under the lock; True when the counter had drifted."""
    with event_lock(event_id):
        cached, actual = _recount(db, event_id)
    return cached != actual


def recompute_locked(db: Session, event_id: int) -> int:
    _, actual = _recount(db, event_id)
    return actual


def _recount(db: Session, event_id: int) -> tuple[int, int]:
    with atomic(db):
        event = _get_event(db, event_id)
        cached = event.seats_filled
        actual = count_bookings(db, event_id)
        if cached != actual:
            drift = ConsistencyError(event_id, cached, actual)
            logger.warning("%s; repairing", drift)
            if actual > event.seats_total:
                logger.error(
                    "Event %s holds %s bookings for %s seats", event_id, actual, event.seats_total
                )
            event.seats_filled = actual
    return cached, actual


def check_consistency(db: Session, event_id: int) -> int:
    """Read-only invariant check. Raises ConsistencyError on drift."""
    event = _get_event(db, event_id)
    actual = count_bookings(db, event_id)
    if event.seats_filled != actual:
        raise ConsistencyError(event_id, event.seats_filled, actual)
    return actual


# ---------- queries ----------
def list_event_bookings(db: Session, event_id: int) -> list[Booking]:
    _get_event(db, event_id)
    return list(
        db.scalars(select(Booking).where(Booking.event_id == event_id).order_by(Booking.id))
    )


def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        return {}

    active = count_bookings(db, event_id)

    return {
        "event_id": event.id,
        "seats_total": event.seats_total,
        "seats_filled": event.seats_filled,
        "active_bookings": active,
        "seats_available": max(event.seats_total - active, 0),
        "drift": event.seats_filled - active,
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_capacity = db.scalar(select(func.sum(Event.seats_total)))
    total_filled = db.scalar(select(func.sum(Event.seats_filled)))
    total_bookings = db.scalar(select(func.count(Booking.id)))

    counts = (
        select(Booking.event_id, func.count(Booking.id).label("n"))
        .group_by(Booking.event_id)
        .subquery()
    )
    drifted_events = db.scalar(
        select(func.count(Event.id))
        .select_from(Event)
        .outerjoin(counts, counts.c.event_id == Event.id)
        .where(Event.seats_filled != func.coalesce(counts.c.n, 0))
    )

    return {
        "total_capacity": int(total_capacity or 0),
        "total_seats_filled": int(total_filled or 0),
        "total_bookings": int(total_bookings or 0),
        "drifted_events": int(drifted_events or 0),
    }
