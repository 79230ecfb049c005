"""Data retention and cascading deletion.

This module provides:
- The static retention policy table
- The cascade deletion walker
- Idempotent, batch-bounded cleanup jobs
- Celery tasks binding the jobs to the daily schedule

Use: from linkclaws.retention.jobs import cleanup_old_messages
Use: from linkclaws.retention.tasks import cleanup_messages_task
"""

from .policy import BATCH_SIZE, RETENTION_POLICY, RetentionPolicy

__all__ = [
    "BATCH_SIZE",
    "RETENTION_POLICY",
    "RetentionPolicy",
]
