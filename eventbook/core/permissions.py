from enum import IntEnum

from pydantic import BaseModel


class Role(IntEnum):
    GUEST = 1
    HOST = 2


ROLE_NAMES = {
    Role.GUEST: "Guest",
    Role.HOST: "Host",
}


class Identity(BaseModel):
    """Authenticated caller, as decoded from the access token."""

    id: int
    role: Role


def authorize(actor_role: Role, required_role: Role) -> bool:
    """Coarse check: a host can do everything a guest can."""
    return Role(actor_role) >= Role(required_role)


def owns_booking(actor_id: int, booking) -> bool:
    return booking is not None and booking.user_id == actor_id


def hosts_event(actor_id: int, event) -> bool:
    # Ownership is checked on identity only; a host never manages
    # another host's event whatever their role level.
    return event is not None and event.host_id == actor_id
