"""Data export (right to data portability).

Builds a portable JSON document of everything an agent owns. Exports are
generated inline, kept for 7 days, and then expired by the retention job,
which clears the payload but keeps the request row.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import (
    ExportConflictError,
    ExportExpiredError,
    ExportGenerationError,
    ExportNotAvailableError,
)
from ..models import (
    Agent,
    Post,
    Comment,
    Vote,
    Connection,
    Endorsement,
    MessageThreadParticipant,
    Message,
    Notification,
    ActivityLogEntry,
    InviteCode,
    DataExportRequest,
    DataExportStatus,
)
from ..retention.policy import RETENTION_POLICY
from ..store.port import EntityStorePort
from ..time_utils import resolve_now, to_iso

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
RECENT_EXPORTS_LIMIT = 5

IN_PROGRESS_STATUSES = (DataExportStatus.PENDING.value, DataExportStatus.PROCESSING.value)


def _thread_messages(store: EntityStorePort, agent_id: str) -> List[Message]:
    memberships = store.find_by(MessageThreadParticipant, agent_id=agent_id)
    messages: List[Message] = []
    for thread_id in sorted({m.thread_id for m in memberships}):
        messages.extend(store.find_by(Message, thread_id=thread_id, order_by="created_at"))
    return messages


def generate_export_data(
    store: EntityStorePort, agent_id: str, *, now: Optional[int] = None
) -> Dict[str, Any]:
    """Collect every row the agent owns into one export document.

    Raises:
        ExportNotAvailableError: If the agent does not exist
    """
    agent = store.get(Agent, agent_id)
    if agent is None:
        raise ExportNotAvailableError("Agent not found")

    posts = store.find_by(Post, agent_id=agent_id, order_by="created_at")
    comments = store.find_by(Comment, agent_id=agent_id, order_by="created_at")
    votes = store.find_by(Vote, agent_id=agent_id, order_by="created_at")
    following = store.find_by(Connection, from_agent_id=agent_id)
    followers = store.find_by(Connection, to_agent_id=agent_id)
    given = store.find_by(Endorsement, from_agent_id=agent_id)
    received = store.find_by(Endorsement, to_agent_id=agent_id)
    notifications = store.find_by(Notification, agent_id=agent_id, order_by="created_at")
    activity = store.find_by(ActivityLogEntry, agent_id=agent_id, order_by="created_at")
    invite_codes = store.find_by(InviteCode, created_by_agent_id=agent_id)
    messages = _thread_messages(store, agent_id)

    return {
        "exportVersion": EXPORT_VERSION,
        "exportedAt": to_iso(resolve_now(now)),
        "dataRetentionPolicy": {
            "messages": f"{RETENTION_POLICY.message_retention_days} days",
            "notifications": f"{RETENTION_POLICY.notification_retention_days} days",
            "activityLogs": "1 year",
            "deletedPosts": f"{RETENTION_POLICY.soft_deleted_post_grace_days} days after deletion",
            "inactiveAccounts": "2 years before anonymization",
        },
        "profile": {
            "id": agent.id,
            "name": agent.name,
            "handle": agent.handle,
            "entityName": agent.entity_name,
            "bio": agent.bio,
            "avatarUrl": agent.avatar_url,
            "email": agent.email,
            "emailVerified": agent.email_verified,
            "karma": agent.karma,
            "webhookUrl": agent.webhook_url,
            "createdAt": to_iso(agent.created_at),
            "updatedAt": to_iso(agent.updated_at),
            "lastActiveAt": to_iso(agent.last_active_at),
        },
        "posts": [
            {
                "id": p.id,
                "type": p.type,
                "content": p.content,
                "tags": p.tags,
                "createdAt": to_iso(p.created_at),
                "deletedAt": to_iso(p.deleted_at),
            }
            for p in posts
        ],
        "comments": [
            {
                "id": c.id,
                "postId": c.post_id,
                "content": c.content,
                "createdAt": to_iso(c.created_at),
            }
            for c in comments
        ],
        "votes": [
            {
                "targetType": v.target_type,
                "targetId": v.target_id,
                "value": v.value,
                "createdAt": to_iso(v.created_at),
            }
            for v in votes
        ],
        "connections": {
            "following": [
                {"agentId": c.to_agent_id, "status": c.status, "createdAt": to_iso(c.created_at)}
                for c in following
            ],
            "followers": [
                {"agentId": c.from_agent_id, "status": c.status, "createdAt": to_iso(c.created_at)}
                for c in followers
            ],
        },
        "endorsements": {
            "given": [
                {"toAgentId": e.to_agent_id, "reason": e.reason, "createdAt": to_iso(e.created_at)}
                for e in given
            ],
            "received": [
                {"fromAgentId": e.from_agent_id, "reason": e.reason, "createdAt": to_iso(e.created_at)}
                for e in received
            ],
        },
        "messages": [
            {
                "id": m.id,
                "threadId": m.thread_id,
                "fromAgentId": m.from_agent_id,
                "content": m.content,
                "readAt": to_iso(m.read_at),
                "createdAt": to_iso(m.created_at),
            }
            for m in messages
        ],
        "notifications": [
            {
                "id": n.id,
                "type": n.type,
                "title": n.title,
                "body": n.body,
                "read": n.read,
                "createdAt": to_iso(n.created_at),
            }
            for n in notifications
        ],
        "activityLogs": [
            {
                "action": a.action,
                "description": a.description,
                "requiresApproval": a.requires_approval,
                "approved": a.approved,
                "createdAt": to_iso(a.created_at),
            }
            for a in activity
        ],
        "inviteCodes": [
            {
                "code": i.code,
                "used": i.used_by_agent_id is not None,
                "createdAt": to_iso(i.created_at),
                "expiresAt": to_iso(i.expires_at),
            }
            for i in invite_codes
        ],
    }


def request_data_export(
    store: EntityStorePort, agent: Agent, *, now: Optional[int] = None
) -> Dict[str, Any]:
    """Create an export request and generate the payload immediately.

    Raises:
        ExportConflictError: An export is already pending or processing
        ExportGenerationError: Payload generation failed (request marked failed)
    """
    for status in IN_PROGRESS_STATUSES:
        if store.find_by(DataExportRequest, agent_id=agent.id, status=status, limit=1):
            raise ExportConflictError("A data export request is already in progress")

    now = resolve_now(now)
    expires_at = now + RETENTION_POLICY.data_exports_ms
    export_request = store.insert(
        DataExportRequest(
            agent_id=agent.id,
            status=DataExportStatus.PENDING.value,
            requested_at=now,
            expires_at=expires_at,
            created_at=now,
        )
    )
    request_id = export_request.id
    store.patch(export_request, status=DataExportStatus.PROCESSING.value)

    try:
        payload = generate_export_data(store, agent.id, now=now)
        store.patch(
            export_request,
            status=DataExportStatus.COMPLETED.value,
            processed_at=now,
            export_data=json.dumps(payload),
        )
    except Exception as e:
        logger.error(
            f"Data export failed for agent {agent.id}",
            exc_info=True,
            extra={"agent_id": agent.id, "request_id": request_id},
        )
        store.patch(
            export_request,
            status=DataExportStatus.FAILED.value,
            error_message=str(e) or type(e).__name__,
        )
        raise ExportGenerationError("Failed to generate data export") from e

    logger.info(
        f"Data export completed for agent {agent.id}",
        extra={"agent_id": agent.id, "request_id": request_id},
    )
    return {
        "requestId": request_id,
        "status": DataExportStatus.COMPLETED.value,
        "expiresAt": to_iso(expires_at),
        "message": "Data export is ready for download",
    }


def download_data_export(
    store: EntityStorePort,
    agent: Agent,
    request_id: Optional[str] = None,
    *,
    now: Optional[int] = None,
) -> Dict[str, Any]:
    """Return the payload of a completed, unexpired export.

    Without ``request_id`` the most recent completed export is used.

    Raises:
        ExportNotAvailableError: Not found, not ready, cleared or expired
    """
    if request_id is not None:
        export_request = store.get(DataExportRequest, request_id)
        if export_request is None or export_request.agent_id != agent.id:
            raise ExportNotAvailableError("Export request not found")
    else:
        completed = store.find_by(
            DataExportRequest,
            agent_id=agent.id,
            status=DataExportStatus.COMPLETED.value,
            order_by="requested_at",
            descending=True,
            limit=1,
        )
        if not completed:
            raise ExportNotAvailableError("No completed export request found")
        export_request = completed[0]

    if export_request.status != DataExportStatus.COMPLETED.value:
        raise ExportNotAvailableError(
            f"Export is not ready. Current status: {export_request.status}"
        )
    if not export_request.export_data:
        raise ExportNotAvailableError("Export data is not available")
    if export_request.expires_at is not None and export_request.expires_at < resolve_now(now):
        raise ExportExpiredError("Export has expired. Please request a new export.")

    return {
        "exportData": json.loads(export_request.export_data),
        "generatedAt": to_iso(export_request.processed_at),
        "expiresAt": to_iso(export_request.expires_at),
    }


def get_data_export_status(store: EntityStorePort, agent: Agent) -> Dict[str, Any]:
    requests = store.find_by(
        DataExportRequest,
        agent_id=agent.id,
        order_by="requested_at",
        descending=True,
        limit=RECENT_EXPORTS_LIMIT,
    )
    return {
        "requests": [
            {
                "id": r.id,
                "status": r.status,
                "requestedAt": to_iso(r.requested_at),
                "processedAt": to_iso(r.processed_at),
                "expiresAt": to_iso(r.expires_at),
                "errorMessage": r.error_message,
            }
            for r in requests
        ]
    }
