"""Deletion audit logging service.

Every destructive batch action taken by a scheduled job is recorded here.
Entries are append-only: this module only ever inserts and reads.

Actions:
- message_cleanup, notification_cleanup, activity_log_cleanup
- post_deletion
- data_anonymization
- account_deletion
"""

from typing import List, Optional

from ..models.deletion_audit_log import DeletionAuditLogEntry
from ..store.port import EntityStorePort
from ..time_utils import resolve_now

EXECUTED_BY_CRON = "cron_job"


def log_deletion_event(
    store: EntityStorePort,
    action_type: str,
    target_type: str,
    target_count: int,
    retention_policy_applied: str,
    *,
    agent_id: Optional[str] = None,
    now: Optional[int] = None,
) -> DeletionAuditLogEntry:
    """Append one audit entry summarizing a destructive batch.

    Args:
        store: Entity store context
        action_type: What was done (e.g. "message_cleanup")
        target_type: Collection affected (e.g. "messages", "agent")
        target_count: Rows removed or anonymized by the batch
        retention_policy_applied: Policy label that authorised the action
        agent_id: Agent the action concerned, for per-account actions
        now: Execution time in epoch ms (defaults to the current time)

    Returns:
        DeletionAuditLogEntry: The inserted entry
    """
    executed_at = resolve_now(now)
    entry = DeletionAuditLogEntry(
        action_type=action_type,
        target_type=target_type,
        target_count=target_count,
        retention_policy_applied=retention_policy_applied,
        executed_by=EXECUTED_BY_CRON,
        executed_at=executed_at,
        created_at=executed_at,
        agent_id=agent_id,
    )
    return store.insert(entry)


def query_deletion_audit_log(
    store: EntityStorePort,
    *,
    agent_id: Optional[str] = None,
    start: Optional[int] = None,
    end: Optional[int] = None,
    limit: int = 100,
) -> List[DeletionAuditLogEntry]:
    """Audit entries for compliance reporting, newest first.

    Uses the agent_id index when an agent is given, otherwise the
    executed_at index bounded by ``end`` (defaults to now).

    Args:
        store: Entity store context
        agent_id: Only entries concerning this agent
        start: Minimum executed_at (inclusive)
        end: Maximum executed_at (inclusive)
        limit: Maximum entries returned
    """
    if agent_id is not None:
        entries = store.find_by(
            DeletionAuditLogEntry,
            agent_id=agent_id,
            order_by="executed_at",
            descending=True,
        )
    else:
        upper = end if end is not None else resolve_now(None)
        entries = store.find_before(
            DeletionAuditLogEntry,
            "executed_at",
            upper,
            inclusive=True,
            descending=True,
            limit=limit,
        )

    if start is not None:
        entries = [e for e in entries if e.executed_at >= start]
    if end is not None:
        entries = [e for e in entries if e.executed_at <= end]
    return entries[:limit]
