from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventbook.core.permissions import Identity, Role
from eventbook.database.db import get_db
from eventbook.routes.deps import get_current_identity, require_role
from eventbook.schemas.bookings import BookingOut, BookingWithUserOut, MessageOut, NoteUpdate
from eventbook.services.bookings import (
    cancel_booking,
    list_event_bookings,
    remove_booking,
    update_booking_note,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/{event_id}/bookings", response_model=list[BookingWithUserOut])
def get_event_bookings(event_id: int, db: Session = Depends(get_db)):
    return list_event_bookings(db, event_id)


@router.put("/{event_id}/bookings/{booking_id}/note", response_model=BookingOut)
def edit_booking_note(
    event_id: int,
    booking_id: int,
    payload: NoteUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(Role.HOST)),
):
    return update_booking_note(
        db, event_id=event_id, booking_id=booking_id, host_id=identity.id, notes=payload.notes
    )


@router.delete("/{booking_id}", response_model=MessageOut)
def cancel_own_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    cancel_booking(db, booking_id=booking_id, requester_id=identity.id)
    return {"message": "Booking cancelled"}


@router.delete("/{event_id}/bookings/{booking_id}", response_model=MessageOut)
def remove_guest_booking(
    event_id: int,
    booking_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(Role.HOST)),
):
    remove_booking(db, event_id=event_id, booking_id=booking_id, host_id=identity.id)
    return {"message": "Booking removed"}
