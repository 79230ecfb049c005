"""Scheduled retention jobs.

Each job is independent and idempotent: it looks at an age index, takes at
most ``batch_size`` rows oldest-first, acts on them one row at a time and
writes a single audit entry for the batch. A run that finds nothing returns
a zero count and writes no audit entry, so a no-op run can be told apart
from a real one by the absence of an audit row.

Backlogs larger than one batch drain across successive daily runs.
"""

import logging
from typing import Any, Dict, Optional, Type

from ..audit.service import log_deletion_event
from ..exceptions import StoreError
from ..models import (
    Agent,
    Post,
    Message,
    Notification,
    ActivityLogEntry,
    DataExportRequest,
    DataExportStatus,
)
from ..store.port import EntityStorePort
from ..time_utils import resolve_now
from .cascade import delete_post_cascade
from .policy import (
    BATCH_SIZE,
    RETENTION_POLICY,
    POLICY_MESSAGES,
    POLICY_NOTIFICATIONS,
    POLICY_ACTIVITY_LOGS,
    POLICY_SOFT_DELETED_POSTS,
    POLICY_INACTIVE_AGENTS,
)

logger = logging.getLogger(__name__)


def _purge_older_than(
    store: EntityStorePort,
    model: Type[Any],
    retention_ms: int,
    *,
    now: int,
    batch_size: int,
    action_type: str,
    target_type: str,
    policy: str,
    noun: str,
    age_label: str,
) -> Dict[str, Any]:
    """Delete up to ``batch_size`` rows whose created_at is past retention."""
    cutoff = now - retention_ms
    expired = store.find_before(model, "created_at", cutoff, limit=batch_size)

    if not expired:
        return {"deleted": 0, "message": f"No {noun} to clean up"}

    deleted = 0
    for row in expired:
        if store.delete(row):
            deleted += 1

    log_deletion_event(
        store,
        action_type=action_type,
        target_type=target_type,
        target_count=deleted,
        retention_policy_applied=policy,
        now=now,
    )

    logger.info(
        f"Deleted {deleted} {noun} older than {age_label}",
        extra={"collection": model.__tablename__, "deleted": deleted, "cutoff": cutoff},
    )
    return {"deleted": deleted, "message": f"Deleted {deleted} {noun} older than {age_label}"}


def cleanup_old_messages(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Delete messages older than 90 days."""
    return _purge_older_than(
        store,
        Message,
        RETENTION_POLICY.messages_ms,
        now=resolve_now(now),
        batch_size=batch_size,
        action_type="message_cleanup",
        target_type="messages",
        policy=POLICY_MESSAGES,
        noun="messages",
        age_label="90 days",
    )


def cleanup_old_notifications(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Delete notifications older than 30 days."""
    return _purge_older_than(
        store,
        Notification,
        RETENTION_POLICY.notifications_ms,
        now=resolve_now(now),
        batch_size=batch_size,
        action_type="notification_cleanup",
        target_type="notifications",
        policy=POLICY_NOTIFICATIONS,
        noun="notifications",
        age_label="30 days",
    )


def cleanup_old_activity_logs(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Delete activity log entries older than 1 year."""
    return _purge_older_than(
        store,
        ActivityLogEntry,
        RETENTION_POLICY.activity_logs_ms,
        now=resolve_now(now),
        batch_size=batch_size,
        action_type="activity_log_cleanup",
        target_type="activityLog",
        policy=POLICY_ACTIVITY_LOGS,
        noun="activity logs",
        age_label="1 year",
    )


def permanently_delete_old_posts(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Hard-delete posts soft-deleted more than 30 days ago.

    Each post goes through the cascade walker, so its comments, the votes on
    those comments and the votes on the post go with it. The returned count
    is posts removed, not total rows touched.
    """
    now = resolve_now(now)
    cutoff = now - RETENTION_POLICY.soft_deleted_posts_ms
    posts = store.find_before(Post, "deleted_at", cutoff, limit=batch_size)

    if not posts:
        return {"deleted": 0, "message": "No soft-deleted posts to permanently delete"}

    post_ids = [post.id for post in posts]
    deleted = 0
    for post_id in post_ids:
        result = delete_post_cascade(store, post_id)
        if result.root_deleted:
            deleted += 1

    log_deletion_event(
        store,
        action_type="post_deletion",
        target_type="posts",
        target_count=deleted,
        retention_policy_applied=POLICY_SOFT_DELETED_POSTS,
        now=now,
    )

    logger.info(
        f"Permanently deleted {deleted} soft-deleted posts",
        extra={"deleted": deleted, "cutoff": cutoff},
    )
    return {"deleted": deleted, "message": f"Permanently deleted {deleted} soft-deleted posts"}


def anonymization_patch(agent: Agent, now: int) -> Dict[str, Any]:
    """Placeholder values for an agent's identifying fields.

    Placeholders derive from the agent's own id so they stay unique without
    any coordination. The api_key sentinel is not a SHA-256 hex digest and
    can never equal the hash of an incoming key.
    """
    return {
        "name": f"[Deleted Agent {agent.id[-6:]}]",
        "handle": f"deleted_{agent.id}",
        "entity_name": "[Deleted]",
        "bio": None,
        "avatar_url": None,
        "email": None,
        "email_verified": None,
        "email_verification_code": None,
        "email_verification_expires_at": None,
        "webhook_url": None,
        "api_key": f"ANONYMIZED_{now}",
        "api_key_prefix": "ANON_XXX",
        "anonymized_at": now,
        "updated_at": now,
    }


def anonymize_inactive_agents(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Scrub PII from agents inactive for more than 2 years.

    The agent row and all of its relationships (posts, votes, endorsements)
    stay in place; only identity is removed. Already-anonymized agents are
    excluded by the ``anonymized_at`` filter, so re-runs skip them.
    """
    now = resolve_now(now)
    cutoff = now - RETENTION_POLICY.inactive_agents_ms
    agents = store.find_before(
        Agent, "last_active_at", cutoff, limit=batch_size, anonymized_at=None
    )

    if not agents:
        return {"anonymized": 0, "message": "No inactive agents to anonymize"}

    anonymized = 0
    failed = 0
    agent_ids = [agent.id for agent in agents]
    for agent_id, agent in zip(agent_ids, agents):
        try:
            store.patch(agent, **anonymization_patch(agent, now))
            anonymized += 1
        except StoreError as e:
            failed += 1
            logger.error(
                f"Failed to anonymize agent {agent_id}: {e}",
                extra={"agent_id": agent_id},
            )

    if anonymized:
        log_deletion_event(
            store,
            action_type="data_anonymization",
            target_type="agents",
            target_count=anonymized,
            retention_policy_applied=POLICY_INACTIVE_AGENTS,
            now=now,
        )

    logger.info(
        f"Anonymized {anonymized} inactive agents",
        extra={"anonymized": anonymized, "failed": failed, "cutoff": cutoff},
    )
    return {"anonymized": anonymized, "message": f"Anonymized {anonymized} inactive agents"}


def expire_data_exports(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Mark exports past ``expires_at`` as expired and drop their payload.

    The request row is kept as a historical marker. No cascade and no audit
    entry. Rows already marked expired are excluded from the scan.
    """
    now = resolve_now(now)
    exports = store.find_before(
        DataExportRequest,
        "expires_at",
        now,
        limit=batch_size,
        exclude={"status": DataExportStatus.EXPIRED.value},
    )

    if not exports:
        return {"expired": 0, "message": "No expired exports to clean up"}

    for export_request in exports:
        store.patch(export_request, status=DataExportStatus.EXPIRED.value, export_data=None)

    logger.info(
        f"Marked {len(exports)} data exports as expired",
        extra={"expired": len(exports)},
    )
    return {"expired": len(exports), "message": f"Marked {len(exports)} data exports as expired"}
