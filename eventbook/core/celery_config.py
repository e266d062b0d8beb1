from celery import Celery

from eventbook.core.config import settings
from eventbook.core.redis_config import get_redis_url


def make_celery(app_name: str = "eventbook") -> Celery:
    redis_url = get_redis_url()
    celery = Celery(app_name, broker=redis_url, backend=redis_url, include=["eventbook.tasks"])
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    celery.conf.beat_schedule = {
        "reconcile-seats-filled": {
            "task": "eventbook.tasks.reconcile_all_events_task",
            "schedule": float(settings.RECONCILE_INTERVAL_SECONDS),
        },
    }
    return celery


celery_app = make_celery()
