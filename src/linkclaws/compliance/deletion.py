"""Account deletion workflow (right to erasure).

An agent asks for deletion, a 30-day grace period starts, and the agent may
cancel at any time before it ends. The daily processor then runs the cascade
walker for every request whose grace period has passed.

Safety on retry comes from the status predicate, not from transactions:
- a cascade that raises puts the request back to ``pending`` so the next run
  tries again, and the walker converges when re-run;
- an agent that is already gone (a previous partial run got that far) makes
  the request ``completed`` without further work;
- a request left in ``processing`` by a run that died outright is reclaimed
  once it has been stuck longer than ``STALE_PROCESSING_AFTER_MS``.
"""

import logging
from typing import Any, Dict, List, Optional

from ..audit.service import log_deletion_event
from ..exceptions import (
    DeletionConflictError,
    DeletionRequestNotFoundError,
    StateTransitionError,
    StoreError,
)
from ..models import Agent, AccountDeletionRequest, AccountDeletionStatus
from ..retention.cascade import delete_agent_cascade
from ..retention.policy import (
    BATCH_SIZE,
    RETENTION_POLICY,
    STALE_PROCESSING_AFTER_MS,
    POLICY_ACCOUNT_DELETION,
)
from ..store.port import EntityStorePort
from ..time_utils import resolve_now, to_iso
from .status import validate_transition

logger = logging.getLogger(__name__)

RECENT_REQUESTS_LIMIT = 5


def _find_pending_request(
    store: EntityStorePort, agent_id: str
) -> Optional[AccountDeletionRequest]:
    rows = store.find_by(
        AccountDeletionRequest,
        agent_id=agent_id,
        status=AccountDeletionStatus.PENDING.value,
        limit=1,
    )
    return rows[0] if rows else None


def _transition(
    store: EntityStorePort,
    request: AccountDeletionRequest,
    new_status: AccountDeletionStatus,
    **fields: Any,
) -> AccountDeletionRequest:
    validate_transition(AccountDeletionStatus(request.status), new_status)
    return store.patch(request, status=new_status.value, **fields)


def serialize_request(request: AccountDeletionRequest) -> Dict[str, Any]:
    return {
        "id": request.id,
        "status": request.status,
        "reason": request.reason,
        "requestedAt": to_iso(request.requested_at),
        "scheduledFor": to_iso(request.scheduled_for),
        "processedAt": to_iso(request.processed_at),
        "cancelledAt": to_iso(request.cancelled_at),
        "cancellationReason": request.cancellation_reason,
    }


def request_account_deletion(
    store: EntityStorePort,
    agent: Agent,
    reason: Optional[str] = None,
    *,
    now: Optional[int] = None,
) -> Dict[str, Any]:
    """Schedule the agent's account for deletion after the grace period.

    Args:
        store: Entity store context
        agent: Authenticated agent
        reason: Optional free-text reason
        now: Request time in epoch ms (defaults to the current time)

    Returns:
        Dict with requestId, scheduledDeletionDate (ISO-8601) and message

    Raises:
        DeletionConflictError: A pending request already exists for the agent
    """
    if _find_pending_request(store, agent.id) is not None:
        raise DeletionConflictError("A deletion request is already pending for this account")

    now = resolve_now(now)
    scheduled_for = now + RETENTION_POLICY.account_deletion_grace_ms

    try:
        request = store.insert(
            AccountDeletionRequest(
                agent_id=agent.id,
                status=AccountDeletionStatus.PENDING.value,
                reason=reason,
                requested_at=now,
                scheduled_for=scheduled_for,
                created_at=now,
            )
        )
    except StoreError as e:
        # A concurrent request won the pending slot between check and insert
        if _find_pending_request(store, agent.id) is not None:
            raise DeletionConflictError(
                "A deletion request is already pending for this account"
            ) from e
        raise

    logger.info(
        f"Account deletion requested for agent {agent.id}",
        extra={"agent_id": agent.id, "request_id": request.id, "scheduled_for": scheduled_for},
    )

    return {
        "requestId": request.id,
        "scheduledDeletionDate": to_iso(scheduled_for),
        "message": "Account deletion scheduled. You have 30 days to cancel this request.",
    }


def cancel_account_deletion(
    store: EntityStorePort,
    agent: Agent,
    cancellation_reason: Optional[str] = None,
    *,
    now: Optional[int] = None,
) -> Dict[str, Any]:
    """Cancel the agent's pending deletion request.

    Touches nothing but the request row.

    Raises:
        DeletionRequestNotFoundError: No pending request exists for the agent
    """
    request = _find_pending_request(store, agent.id)
    if request is None:
        raise DeletionRequestNotFoundError("No pending deletion request found")

    _transition(
        store,
        request,
        AccountDeletionStatus.CANCELLED,
        cancelled_at=resolve_now(now),
        cancellation_reason=cancellation_reason,
    )

    logger.info(
        f"Account deletion cancelled for agent {agent.id}",
        extra={"agent_id": agent.id, "request_id": request.id},
    )
    return {"message": "Account deletion request has been cancelled"}


def get_account_deletion_status(store: EntityStorePort, agent: Agent) -> Dict[str, Any]:
    """Pending request (if any) plus the most recent requests, newest first."""
    requests = store.find_by(
        AccountDeletionRequest,
        agent_id=agent.id,
        order_by="requested_at",
        descending=True,
        limit=RECENT_REQUESTS_LIMIT,
    )
    pending = next(
        (r for r in requests if r.status == AccountDeletionStatus.PENDING.value), None
    )
    if pending is None:
        pending = _find_pending_request(store, agent.id)

    return {
        "pendingDeletion": serialize_request(pending) if pending else None,
        "recentRequests": [serialize_request(r) for r in requests],
    }


def _due_requests(
    store: EntityStorePort, now: int, batch_size: int
) -> List[AccountDeletionRequest]:
    due = store.find_before(
        AccountDeletionRequest,
        "scheduled_for",
        now,
        inclusive=True,
        limit=batch_size,
        status=AccountDeletionStatus.PENDING.value,
    )
    remaining = batch_size - len(due)
    if remaining > 0:
        due.extend(
            store.find_before(
                AccountDeletionRequest,
                "processing_started_at",
                now - STALE_PROCESSING_AFTER_MS,
                limit=remaining,
                status=AccountDeletionStatus.PROCESSING.value,
            )
        )
    return due


def process_pending_deletions(
    store: EntityStorePort,
    *,
    now: Optional[int] = None,
    batch_size: int = BATCH_SIZE,
) -> Dict[str, Any]:
    """Execute deletion requests whose grace period has passed.

    Each request is marked ``processing``, the agent is cascade-deleted, the
    request is marked ``completed`` and one audit entry is written. Any
    failure during the walk reverts the request to ``pending`` and the loop
    moves on to the next request.

    Returns:
        Dict with the number of accounts deleted in this run
    """
    now = resolve_now(now)
    due = _due_requests(store, now, batch_size)

    if not due:
        return {"processed": 0, "message": "No pending deletions to process"}

    processed = 0
    for request in due:
        request_id, agent_id = request.id, request.agent_id

        try:
            if request.status == AccountDeletionStatus.PROCESSING.value:
                logger.warning(
                    f"Reclaiming stale deletion request {request_id}",
                    extra={"request_id": request_id, "agent_id": agent_id},
                )
                store.patch(request, processing_started_at=now)
            else:
                _transition(
                    store, request, AccountDeletionStatus.PROCESSING, processing_started_at=now
                )
        except StateTransitionError:
            # Cancelled between the scan and this write
            logger.info(
                f"Skipping deletion request {request_id}: no longer pending",
                extra={"request_id": request_id, "agent_id": agent_id},
            )
            continue

        try:
            if store.get(Agent, agent_id) is None:
                _transition(store, request, AccountDeletionStatus.COMPLETED, processed_at=now)
                logger.info(
                    f"Agent {agent_id} already deleted, completing request {request_id}",
                    extra={"request_id": request_id, "agent_id": agent_id},
                )
                continue

            delete_agent_cascade(store, agent_id)

            _transition(store, request, AccountDeletionStatus.COMPLETED, processed_at=now)

            log_deletion_event(
                store,
                action_type="account_deletion",
                target_type="agent",
                target_count=1,
                retention_policy_applied=POLICY_ACCOUNT_DELETION,
                agent_id=agent_id,
                now=now,
            )
            processed += 1

        except Exception:
            logger.error(
                f"Failed to process deletion for agent {agent_id}",
                exc_info=True,
                extra={"request_id": request_id, "agent_id": agent_id},
            )
            _revert_to_pending(store, request)

    logger.info(
        f"Processed {processed} account deletion requests",
        extra={"processed": processed, "scanned": len(due)},
    )
    return {
        "processed": processed,
        "message": f"Processed {processed} account deletion requests",
    }


def _revert_to_pending(store: EntityStorePort, request: AccountDeletionRequest) -> None:
    try:
        _transition(
            store, request, AccountDeletionStatus.PENDING, processing_started_at=None
        )
    except (StoreError, StateTransitionError):
        # Left in processing; reclaimed by a later run once stale
        logger.error(
            f"Could not revert deletion request {request.id} to pending",
            exc_info=True,
            extra={"request_id": request.id},
        )
