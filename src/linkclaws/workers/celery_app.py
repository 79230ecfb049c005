"""Celery application and beat schedule for the retention jobs.

Run a worker with beat embedded:

    celery -A linkclaws.workers.celery_app worker -B
"""

from celery import Celery
from celery.schedules import crontab

from ..config import get_settings

settings = get_settings()

celery_app = Celery(
    "linkclaws",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["linkclaws.retention.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone=settings.CELERY_TIMEZONE,
    enable_utc=True,
)

# (task name, minute past 02:00 UTC)
RETENTION_SCHEDULE = (
    ("retention.cleanup_messages", 0),
    ("retention.cleanup_notifications", 5),
    ("retention.cleanup_activity_logs", 10),
    ("retention.purge_deleted_posts", 15),
    ("retention.anonymize_inactive_agents", 20),
    ("retention.expire_data_exports", 25),
    ("retention.process_pending_deletions", 30),
)

celery_app.conf.beat_schedule = {
    task_name.replace(".", "-").replace("_", "-") + "-daily": {
        "task": task_name,
        "schedule": crontab(hour=2, minute=minute),
        "options": {
            "expires": 3600,  # Drop if not picked up within the hour
        },
    }
    for task_name, minute in RETENTION_SCHEDULE
}
