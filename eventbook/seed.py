"""Seed a demo host and a few demo events.

Usage: python -m eventbook.seed [--host-email EMAIL] [--password PASSWORD]
"""
import argparse
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from eventbook.core.logging import setup_logging
from eventbook.core.permissions import Role
from eventbook.database.db import Base, SessionLocal, engine
from eventbook.models import Event, User
from eventbook.schemas.events import EventCreate
from eventbook.schemas.users import UserCreate
from eventbook.services.events import create_event
from eventbook.services.users import get_user_by_email, register_user

logger = logging.getLogger(__name__)

DEMO_EVENTS = [
    ("Mezze Monday", "Enjoy a Mediterranean platter and a good chat.", 1, "123 Olive Lane, Byron Bay", 10),
    ("Social Saturday", "A casual catch-up for friendly locals.", 3, "56 Beach Parade, Noosa", 8),
    ("Coffee & Chit Chat", "Great coffee, better conversation!", 7, "88 Bean Street, Eumundi", 12),
]


def get_or_create_host(db: Session, email: str, password: str) -> User:
    host = get_user_by_email(db, email)
    if host:
        return host
    return register_user(
        db,
        UserCreate(first_name="Demo", last_name="Host", email=email, password=password, role=Role.HOST),
    )


def seed_demo_events(db: Session, host: User) -> list[Event]:
    now = datetime.now(timezone.utc)
    created = []
    for title, description, days_ahead, address, seats in DEMO_EVENTS:
        event = create_event(
            db,
            host_id=host.id,
            data=EventCreate(
                title=title,
                description=description,
                date=now + timedelta(days=days_ahead),
                address=address,
                seats_total=seats,
            ),
        )
        created.append(event)
    return created


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed demo events")
    parser.add_argument("--host-email", default="host@example.com")
    parser.add_argument("--password", default="changeme123")
    args = parser.parse_args(argv)

    setup_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        host = get_or_create_host(db, args.host_email, args.password)
        events = seed_demo_events(db, host)
        logger.info("Seeded %s events for host %s", len(events), host.email)
    finally:
        db.close()


if __name__ == "__main__":
    main()
