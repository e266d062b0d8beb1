"""
Test event management: capacity edits and cascading deletes.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eventbook.core.errors import CapacityExceededError, ForbiddenError, NotFoundError
from eventbook.core.permissions import Role
from eventbook.models.bookings import Booking
from eventbook.models.events import Event
from eventbook.schemas.events import EventCreate, EventUpdate
from eventbook.services.bookings import check_consistency, create_booking
from eventbook.services.events import (
    create_event,
    delete_event,
    get_event,
    list_events,
    list_host_events,
    update_event,
)


def event_payload(**overrides) -> EventCreate:
    data = {
        "title": "Board Games",
        "date": datetime(2030, 5, 1, 19, 0, tzinfo=timezone.utc),
        "address": "12 Dice Road",
        "description": "Bring your favourite game",
        "seats_total": 4,
    }
    data.update(overrides)
    return EventCreate(**data)


def fill(db: Session, event_id: int, users) -> None:
    for user in users:
        create_booking(db, event_id=event_id, user_id=user.id, guest_name="g", contact="c")


class TestCreateAndList:
    def test_create_event_starts_empty(self, db_session: Session, host):
        event = create_event(db_session, host_id=host.id, data=event_payload())

        assert event.id is not None
        assert event.host_id == host.id
        assert event.seats_filled == 0
        assert event.seats_total == 4

    def test_list_events_sorted_by_date(self, db_session: Session, host):
        later = create_event(db_session, host_id=host.id, data=event_payload(date=datetime(2031, 1, 1, tzinfo=timezone.utc)))
        sooner = create_event(db_session, host_id=host.id, data=event_payload(date=datetime(2030, 1, 1, tzinfo=timezone.utc)))

        assert [e.id for e in list_events(db_session)] == [sooner.id, later.id]

    def test_list_host_events(self, db_session: Session, host, make_user):
        other = make_user(Role.HOST)
        mine = create_event(db_session, host_id=host.id, data=event_payload())
        create_event(db_session, host_id=other.id, data=event_payload())

        assert [e.id for e in list_host_events(db_session, host.id)] == [mine.id]

    def test_get_missing_event(self, db_session: Session):
        with pytest.raises(NotFoundError):
            get_event(db_session, 99999)


class TestUpdateEvent:
    def test_update_details(self, db_session: Session, host):
        event = create_event(db_session, host_id=host.id, data=event_payload())

        updated = update_event(
            db_session, event_id=event.id, host_id=host.id, data=EventUpdate(title="Chess Night")
        )

        assert updated.title == "Chess Night"
        assert updated.address == "12 Dice Road"

    def test_increase_capacity(self, db_session: Session, host, make_user):
        event = create_event(db_session, host_id=host.id, data=event_payload(seats_total=2))
        fill(db_session, event.id, [make_user(), make_user()])

        updated = update_event(db_session, event_id=event.id, host_id=host.id, data=EventUpdate(seats_total=5))

        assert updated.seats_total == 5
        assert updated.seats_filled == 2

    def test_reduce_capacity_to_booked_count(self, db_session: Session, host, make_user):
        event = create_event(db_session, host_id=host.id, data=event_payload(seats_total=4))
        fill(db_session, event.id, [make_user(), make_user()])

        updated = update_event(db_session, event_id=event.id, host_id=host.id, data=EventUpdate(seats_total=2))
        assert updated.seats_total == 2

    def test_reduce_capacity_below_booked_count_rejected(self, db_session: Session, host, make_user):
        event = create_event(db_session, host_id=host.id, data=event_payload(seats_total=4))
        fill(db_session, event.id, [make_user(), make_user(), make_user()])

        with pytest.raises(CapacityExceededError):
            update_event(db_session, event_id=event.id, host_id=host.id, data=EventUpdate(seats_total=2))

        db_session.refresh(event)
        assert event.seats_total == 4
        assert check_consistency(db_session, event.id) == 3

    def test_other_host_cannot_update(self, db_session: Session, host, make_user):
        event = create_event(db_session, host_id=host.id, data=event_payload())
        other = make_user(Role.HOST)

        with pytest.raises(ForbiddenError):
            update_event(db_session, event_id=event.id, host_id=other.id, data=EventUpdate(title="Mine now"))


class TestDeleteEvent:
    def test_delete_cascades_to_bookings(self, db_session: Session, host, make_user):
        event = create_event(db_session, host_id=host.id, data=event_payload())
        fill(db_session, event.id, [make_user(), make_user()])
        event_id = event.id

        delete_event(db_session, event_id=event_id, host_id=host.id)

        assert db_session.get(Event, event_id) is None
        remaining = db_session.scalar(select(func.count(Booking.id)).where(Booking.event_id == event_id))
        assert remaining == 0

    def test_other_host_cannot_delete(self, db_session: Session, host, make_user):
        event = create_event(db_session, host_id=host.id, data=event_payload())
        other = make_user(Role.HOST)

        with pytest.raises(ForbiddenError):
            delete_event(db_session, event_id=event.id, host_id=other.id)

        assert db_session.get(Event, event.id) is not None

    def test_delete_missing_event(self, db_session: Session, host):
        with pytest.raises(NotFoundError):
            delete_event(db_session, event_id=99999, host_id=host.id)
