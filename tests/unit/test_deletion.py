"""Unit tests for the account deletion workflow."""

from unittest.mock import patch

import pytest

from linkclaws.compliance.deletion import (
    cancel_account_deletion,
    get_account_deletion_status,
    process_pending_deletions,
    request_account_deletion,
)
from linkclaws.exceptions import (
    DeletionConflictError,
    DeletionRequestNotFoundError,
    StoreError,
)
from linkclaws.models import (
    Agent,
    Post,
    AccountDeletionRequest,
    AccountDeletionStatus,
    DeletionAuditLogEntry,
)
from linkclaws.retention.policy import STALE_PROCESSING_AFTER_MS
from linkclaws.time_utils import DAY_MS, HOUR_MS, to_iso

GRACE_MS = 2_592_000_000


def _requests(store, agent_id):
    return store.find_by(AccountDeletionRequest, agent_id=agent_id, order_by="requested_at")


class TestRequestDeletion:

    def test_schedules_after_exact_grace_period(self, store, make_agent, now):
        agent = make_agent()

        result = request_account_deletion(store, agent, "leaving", now=now)

        [request] = _requests(store, agent.id)
        assert request.status == "pending"
        assert request.reason == "leaving"
        assert request.requested_at == now
        assert request.scheduled_for == now + GRACE_MS
        assert result["requestId"] == request.id
        assert result["scheduledDeletionDate"] == to_iso(now + GRACE_MS)
        assert result["message"] == (
            "Account deletion scheduled. You have 30 days to cancel this request."
        )

    def test_second_pending_request_conflicts(self, store, make_agent, now):
        agent = make_agent()
        request_account_deletion(store, agent, now=now)

        with pytest.raises(DeletionConflictError):
            request_account_deletion(store, agent, now=now + 1)

        assert len(_requests(store, agent.id)) == 1

    def test_store_rejects_second_pending_row(self, store, make_agent, make, now):
        agent = make_agent()
        agent_id = agent.id
        make(AccountDeletionRequest, agent_id=agent_id, requested_at=now, scheduled_for=now)

        with pytest.raises(StoreError):
            store.insert(
                AccountDeletionRequest(
                    agent_id=agent_id,
                    status="pending",
                    requested_at=now + 1,
                    scheduled_for=now + 1,
                    created_at=now + 1,
                )
            )

        assert len(store.find_by(AccountDeletionRequest, agent_id=agent_id, status="pending")) == 1

    def test_race_past_the_pending_check_is_a_conflict(self, store, make_agent, now):
        agent = make_agent()
        agent_id = agent.id
        request_account_deletion(store, agent, now=now)
        [existing] = _requests(store, agent_id)

        # The first lookup misses the row, as it would for a concurrent caller
        with patch(
            "linkclaws.compliance.deletion._find_pending_request",
            side_effect=[None, existing],
        ):
            with pytest.raises(DeletionConflictError):
                request_account_deletion(store, agent, now=now + 1)

        assert len(_requests(store, agent_id)) == 1

    def test_completed_and_cancelled_rows_do_not_hold_the_slot(self, store, make_agent, make, now):
        agent = make_agent()
        make(AccountDeletionRequest, agent_id=agent.id, status="completed",
             requested_at=now - 2, scheduled_for=now - 2)
        make(AccountDeletionRequest, agent_id=agent.id, status="cancelled",
             requested_at=now - 1, scheduled_for=now - 1)

        request_account_deletion(store, agent, now=now)

        assert [r.status for r in _requests(store, agent.id)] == ["completed", "cancelled", "pending"]

    def test_new_request_allowed_after_cancel(self, store, make_agent, now):
        agent = make_agent()
        request_account_deletion(store, agent, now=now)
        cancel_account_deletion(store, agent, now=now + 1)

        request_account_deletion(store, agent, now=now + 2)

        statuses = [r.status for r in _requests(store, agent.id)]
        assert statuses == ["cancelled", "pending"]


class TestCancelDeletion:

    def test_cancels_pending_request(self, store, make_agent, now):
        agent = make_agent()
        request_account_deletion(store, agent, now=now)

        result = cancel_account_deletion(store, agent, "changed my mind", now=now + HOUR_MS)

        assert result == {"message": "Account deletion request has been cancelled"}
        [request] = _requests(store, agent.id)
        assert request.status == "cancelled"
        assert request.cancelled_at == now + HOUR_MS
        assert request.cancellation_reason == "changed my mind"

    def test_without_pending_request(self, store, make_agent):
        agent = make_agent()

        with pytest.raises(DeletionRequestNotFoundError, match="No pending deletion request found"):
            cancel_account_deletion(store, agent)

    def test_cancelled_request_is_never_processed(self, store, make_agent, now):
        agent = make_agent()
        agent_id = agent.id
        request_account_deletion(store, agent, now=now)
        cancel_account_deletion(store, agent, now=now + 1)

        result = process_pending_deletions(store, now=now + GRACE_MS + DAY_MS)

        assert result["processed"] == 0
        assert store.get(Agent, agent_id) is not None


class TestDeletionStatus:

    def test_reports_pending_and_history(self, store, make_agent, now):
        agent = make_agent()
        request_account_deletion(store, agent, now=now)
        cancel_account_deletion(store, agent, now=now + 1)
        request_account_deletion(store, agent, "final", now=now + 2)

        status = get_account_deletion_status(store, agent)

        assert status["pendingDeletion"]["status"] == "pending"
        assert status["pendingDeletion"]["reason"] == "final"
        assert status["pendingDeletion"]["scheduledFor"] == to_iso(now + 2 + GRACE_MS)
        assert [r["status"] for r in status["recentRequests"]] == ["pending", "cancelled"]

    def test_no_requests(self, store, make_agent):
        agent = make_agent()

        assert get_account_deletion_status(store, agent) == {
            "pendingDeletion": None,
            "recentRequests": [],
        }


class TestProcessPendingDeletions:

    def test_not_due_yet(self, store, make_agent, now):
        agent = make_agent()
        agent_id = agent.id
        request_account_deletion(store, agent, now=now)

        result = process_pending_deletions(store, now=now + GRACE_MS - 1)

        assert result == {"processed": 0, "message": "No pending deletions to process"}
        assert store.get(Agent, agent_id) is not None

    def test_due_request_deletes_agent(self, store, make_agent, make, now):
        agent = make_agent()
        agent_id = agent.id
        make(Post, agent_id=agent_id, content="bye")
        request_account_deletion(store, agent, now=now)
        run_at = now + GRACE_MS

        result = process_pending_deletions(store, now=run_at)

        assert result == {"processed": 1, "message": "Processed 1 account deletion requests"}
        assert store.get(Agent, agent_id) is None
        assert store.find_by(Post, agent_id=agent_id) == []
        [request] = _requests(store, agent_id)
        assert request.status == "completed"
        assert request.processed_at == run_at
        assert request.processing_started_at == run_at

    def test_writes_audit_entry_for_agent(self, store, make_agent, now):
        agent = make_agent()
        agent_id = agent.id
        request_account_deletion(store, agent, now=now)

        process_pending_deletions(store, now=now + GRACE_MS)

        [entry] = store.find_by(DeletionAuditLogEntry, agent_id=agent_id)
        assert entry.action_type == "account_deletion"
        assert entry.target_type == "agent"
        assert entry.target_count == 1
        assert entry.retention_policy_applied == "account_deletion_request"

    def test_agent_already_gone_completes_without_audit(self, store, make, now):
        make(
            AccountDeletionRequest,
            agent_id="vanished-agent",
            requested_at=now - GRACE_MS,
            scheduled_for=now,
        )

        result = process_pending_deletions(store, now=now)

        assert result["processed"] == 0
        [request] = _requests(store, "vanished-agent")
        assert request.status == "completed"
        assert store.find_by(DeletionAuditLogEntry) == []

    def test_failure_reverts_to_pending_and_retry_converges(self, store, make_agent, make, now):
        agent = make_agent()
        agent_id = agent.id
        make(Post, agent_id=agent_id, content="x")
        request_account_deletion(store, agent, now=now)
        run_at = now + GRACE_MS

        with patch(
            "linkclaws.compliance.deletion.delete_agent_cascade",
            side_effect=StoreError("store unavailable"),
        ):
            failed = process_pending_deletions(store, now=run_at)

        assert failed["processed"] == 0
        [request] = _requests(store, agent_id)
        assert request.status == "pending"
        assert request.processing_started_at is None
        assert store.get(Agent, agent_id) is not None
        assert store.find_by(DeletionAuditLogEntry) == []

        retried = process_pending_deletions(store, now=run_at + DAY_MS)

        assert retried["processed"] == 1
        assert store.get(Agent, agent_id) is None
        assert _requests(store, agent_id)[0].status == "completed"

    def test_one_failure_does_not_stop_the_batch(self, store, make_agent, now):
        first = make_agent()
        second = make_agent()
        first_id, second_id = first.id, second.id
        request_account_deletion(store, first, now=now)
        request_account_deletion(store, second, now=now + 1)

        from linkclaws.compliance import deletion

        real_cascade = deletion.delete_agent_cascade

        def flaky_cascade(store_arg, agent_id):
            if agent_id == first_id:
                raise RuntimeError("boom")
            return real_cascade(store_arg, agent_id)

        with patch.object(deletion, "delete_agent_cascade", side_effect=flaky_cascade):
            result = process_pending_deletions(store, now=now + GRACE_MS + 1)

        assert result["processed"] == 1
        assert store.get(Agent, first_id) is not None
        assert store.get(Agent, second_id) is None

    def test_stale_processing_request_is_reclaimed(self, store, make_agent, make, now):
        agent = make_agent()
        agent_id = agent.id
        make(
            AccountDeletionRequest,
            agent_id=agent_id,
            status=AccountDeletionStatus.PROCESSING.value,
            requested_at=now - GRACE_MS - DAY_MS,
            scheduled_for=now - DAY_MS,
            processing_started_at=now - STALE_PROCESSING_AFTER_MS - 1,
        )

        result = process_pending_deletions(store, now=now)

        assert result["processed"] == 1
        assert store.get(Agent, agent_id) is None
        assert _requests(store, agent_id)[0].status == "completed"

    def test_recent_processing_request_is_left_alone(self, store, make_agent, make, now):
        agent = make_agent()
        agent_id = agent.id
        make(
            AccountDeletionRequest,
            agent_id=agent_id,
            status=AccountDeletionStatus.PROCESSING.value,
            requested_at=now - GRACE_MS,
            scheduled_for=now - HOUR_MS,
            processing_started_at=now - 10 * 60 * 1000,
        )

        result = process_pending_deletions(store, now=now)

        assert result["processed"] == 0
        assert store.get(Agent, agent_id) is not None

    def test_request_cancelled_after_scan_is_skipped(self, store, make_agent, now):
        agent = make_agent()
        agent_id = agent.id
        request_account_deletion(store, agent, now=now)
        [request] = _requests(store, agent_id)
        cancel_account_deletion(store, agent, now=now + 1)

        with patch("linkclaws.compliance.deletion._due_requests", return_value=[request]):
            result = process_pending_deletions(store, now=now + GRACE_MS)

        assert result["processed"] == 0
        assert store.get(Agent, agent_id) is not None
        assert _requests(store, agent_id)[0].status == "cancelled"

    def test_batch_size_bounds_requests(self, store, make, now):
        for i in range(5):
            make(
                AccountDeletionRequest,
                agent_id=f"gone-{i}",
                requested_at=now - GRACE_MS,
                scheduled_for=now - i,
            )

        process_pending_deletions(store, now=now, batch_size=2)

        completed = store.find_by(AccountDeletionRequest, status="completed")
        assert len(completed) == 2
