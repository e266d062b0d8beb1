from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventbook.core.permissions import Identity, Role
from eventbook.database.db import get_db
from eventbook.routes.deps import get_current_identity, require_role
from eventbook.schemas.bookings import BookingResultOut, BookRequest, EventDetailOut, MessageOut
from eventbook.schemas.events import EventCreate, EventOut, EventStatsOut, EventUpdate, RecomputeOut
from eventbook.services import events as event_service
from eventbook.services.bookings import create_booking, get_event_stats, recompute_seats_filled

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventDetailOut])
def list_events(db: Session = Depends(get_db)):
    return event_service.list_events(db)


@router.get("/host/{host_id}", response_model=list[EventDetailOut])
def list_host_events(host_id: int, db: Session = Depends(get_db)):
    return event_service.list_host_events(db, host_id)


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    stats = get_event_stats(db, event_id)
    if not stats:
        raise HTTPException(status_code=404, detail="Event not found")
    return stats


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(Role.HOST)),
):
    return event_service.create_event(db, host_id=identity.id, data=payload)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(Role.HOST)),
):
    return event_service.update_event(db, event_id=event_id, host_id=identity.id, data=payload)


@router.delete("/{event_id}", response_model=MessageOut)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(Role.HOST)),
):
    event_service.delete_event(db, event_id=event_id, host_id=identity.id)
    return {"message": "Event deleted"}


@router.post("/{event_id}/book", response_model=BookingResultOut, status_code=status.HTTP_201_CREATED)
def book_event(
    event_id: int,
    payload: BookRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    booking = create_booking(
        db,
        event_id=event_id,
        user_id=identity.id,
        guest_name=payload.guest_name,
        contact=payload.contact,
        notes=payload.notes,
    )
    event = event_service.get_event(db, event_id)
    return {"message": "Booking successful", "booking": booking, "event": event}


@router.post("/{event_id}/recompute", response_model=RecomputeOut)
def recompute_event_seats(
    event_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(Role.HOST)),
):
    # Hosts may only repair their own events
    event_service.get_hosted_event(db, event_id, identity.id, "recompute")
    seats_filled = recompute_seats_filled(db, event_id)
    return {"event_id": event_id, "seats_filled": seats_filled}
