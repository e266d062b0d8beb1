import logging

from sqlalchemy import select

from eventbook.core.celery_config import celery_app
from eventbook.core.errors import NotFoundError
from eventbook.database.db import SessionLocal
from eventbook.models import Event
from eventbook.services.bookings import reconcile_seats_filled, recompute_seats_filled

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def reconcile_event_task(self, event_id: int):
    """Repair one event's seats_filled counter. Returns the true count."""
    db = SessionLocal()
    try:
        return recompute_seats_filled(db, event_id)
    except NotFoundError:
        logger.info("Skipping reconcile of deleted event %s", event_id)
        return None
    finally:
        db.close()


@celery_app.task(bind=True)
def reconcile_all_events_task(self):
    """Sweep every event; returns how many counters had drifted."""
    db = SessionLocal()
    repaired = 0
    try:
        event_ids = list(db.scalars(select(Event.id)))
        db.rollback()
        for event_id in event_ids:
            try:
                if reconcile_seats_filled(db, event_id):
                    repaired += 1
            except NotFoundError:
                continue
    finally:
        db.close()

    logger.info("Reconciled %s events, %s had drifted", len(event_ids), repaired)
    return repaired
