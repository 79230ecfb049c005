"""Celery tasks for scheduled data retention.

Each task binds one job to the daily beat schedule (see
``linkclaws.workers.celery_app``). Tasks take no arguments, open their own
session, and never raise: a failing job is logged and reported through the
task result so beat keeps firing the remaining jobs.

Tasks:
- retention.cleanup_messages           02:00 UTC
- retention.cleanup_notifications      02:05 UTC
- retention.cleanup_activity_logs      02:10 UTC
- retention.purge_deleted_posts        02:15 UTC
- retention.anonymize_inactive_agents  02:20 UTC
- retention.expire_data_exports        02:25 UTC
- retention.process_pending_deletions  02:30 UTC
"""

import logging
from typing import Any, Callable, Dict, Optional

from celery import shared_task

from ..compliance.deletion import process_pending_deletions
from ..database import SessionLocal
from ..observability.correlation import generate_correlation_id, set_correlation_id
from ..store.port import EntityStorePort
from ..store.sqlalchemy_store import SqlAlchemyEntityStore
from .jobs import (
    cleanup_old_messages,
    cleanup_old_notifications,
    cleanup_old_activity_logs,
    permanently_delete_old_posts,
    anonymize_inactive_agents,
    expire_data_exports,
)

logger = logging.getLogger(__name__)

Job = Callable[[EntityStorePort], Dict[str, Any]]


def run_retention_job(
    task_name: str, job: Job, task_id: Optional[str] = None
) -> Dict[str, Any]:
    """Run one job against a fresh session and wrap its summary.

    Returns:
        The job's summary with ``status: "completed"``, or
        ``{"status": "failed", "error": ...}`` if the job raised
    """
    set_correlation_id(task_id or generate_correlation_id())
    logger.info(f"{task_name} started", extra={"task": task_name})

    db = SessionLocal()
    try:
        summary = job(SqlAlchemyEntityStore(db))
        result = {"status": "completed", **summary}
        logger.info(f"{task_name} completed", extra={"task": task_name, **summary})
        return result

    except Exception as e:
        logger.error(
            f"{task_name} failed",
            exc_info=True,
            extra={"task": task_name, "error": str(e)}
        )
        return {"status": "failed", "error": str(e)}

    finally:
        db.close()


@shared_task(name="retention.cleanup_messages", bind=True)
def cleanup_messages_task(self) -> Dict[str, Any]:
    """Delete messages older than 90 days (one batch)."""
    return run_retention_job(self.name, cleanup_old_messages, self.request.id)


@shared_task(name="retention.cleanup_notifications", bind=True)
def cleanup_notifications_task(self) -> Dict[str, Any]:
    """Delete notifications older than 30 days (one batch)."""
    return run_retention_job(self.name, cleanup_old_notifications, self.request.id)


@shared_task(name="retention.cleanup_activity_logs", bind=True)
def cleanup_activity_logs_task(self) -> Dict[str, Any]:
    """Delete activity log entries older than 1 year (one batch)."""
    return run_retention_job(self.name, cleanup_old_activity_logs, self.request.id)


@shared_task(name="retention.purge_deleted_posts", bind=True)
def purge_deleted_posts_task(self) -> Dict[str, Any]:
    """Hard-delete posts soft-deleted more than 30 days ago."""
    return run_retention_job(self.name, permanently_delete_old_posts, self.request.id)


@shared_task(name="retention.anonymize_inactive_agents", bind=True)
def anonymize_inactive_agents_task(self) -> Dict[str, Any]:
    """Anonymize agents inactive for more than 2 years."""
    return run_retention_job(self.name, anonymize_inactive_agents, self.request.id)


@shared_task(name="retention.expire_data_exports", bind=True)
def expire_data_exports_task(self) -> Dict[str, Any]:
    """Mark data exports past their expiry as expired and drop the payload."""
    return run_retention_job(self.name, expire_data_exports, self.request.id)


@shared_task(name="retention.process_pending_deletions", bind=True)
def process_pending_deletions_task(self) -> Dict[str, Any]:
    """Execute account deletions whose grace period has passed."""
    return run_retention_job(self.name, process_pending_deletions, self.request.id)
