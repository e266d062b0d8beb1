import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventbook.core.errors import (
    DuplicateAccountError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
)
from eventbook.core.security import get_password_hash, verify_password
from eventbook.models.bookings import Booking
from eventbook.models.events import Event
from eventbook.models.users import User
from eventbook.schemas.users import UserCreate, UserUpdate
from eventbook.services.bookings import atomic, cancel_booking
from eventbook.services.events import delete_event

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def register_user(db: Session, data: UserCreate) -> User:
    if get_user_by_email(db, data.email):
        raise DuplicateAccountError("Email already in use")

    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=normalize_email(data.email),
        role=int(data.role),
        bio=data.bio,
        hashed_password=get_password_hash(data.password),
    )
    with atomic(db):
        db.add(user)
    db.refresh(user)
    logger.info("User %s registered with role %s", user.id, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError("Incorrect password")
    return user


def update_user(db: Session, *, user_id: int, requester_id: int, data: UserUpdate) -> User:
    if requester_id != user_id:
        raise ForbiddenError("Not authorized to update this user")
    user = get_user(db, user_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        email = normalize_email(changes.pop("email"))
        other = get_user_by_email(db, email)
        if other and other.id != user_id:
            raise DuplicateAccountError("Email already in use")
        user.email = email
    if "password" in changes:
        user.hashed_password = get_password_hash(changes.pop("password"))
    for field, value in changes.items():
        setattr(user, field, value)

    with atomic(db):
        db.add(user)
    db.refresh(user)
    return user


def delete_user(db: Session, *, user_id: int, requester_id: int) -> None:
    """
    Delete an account. Bookings go through the ledger so every affected
    event's counter is decremented; hosted events are deleted with their
    bookings.
    """
    if requester_id != user_id:
        raise ForbiddenError("Not authorized to delete this user")
    get_user(db, user_id)

    booking_ids = list(db.scalars(select(Booking.id).where(Booking.user_id == user_id)))
    for booking_id in booking_ids:
        try:
            cancel_booking(db, booking_id=booking_id, requester_id=user_id)
        except NotFoundError:
            # Already gone, e.g. its event was deleted meanwhile
            continue

    event_ids = list(db.scalars(select(Event.id).where(Event.host_id == user_id)))
    for event_id in event_ids:
        delete_event(db, event_id=event_id, host_id=user_id)

    with atomic(db):
        user = db.get(User, user_id, populate_existing=True)
        if user:
            db.delete(user)
    logger.info(
        "User %s deleted with %s bookings and %s hosted events",
        user_id, len(booking_ids), len(event_ids),
    )
