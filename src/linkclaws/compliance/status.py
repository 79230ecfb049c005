"""Account deletion request state machine.

State Flow:
    pending → cancelled
    pending → processing → completed
    processing → pending   (cascade failed; retried on the next run)

Terminal States: completed, cancelled
"""

from typing import List

from ..exceptions import StateTransitionError
from ..models.account_deletion_request import AccountDeletionStatus

ALLOWED_TRANSITIONS = {
    AccountDeletionStatus.PENDING: [
        AccountDeletionStatus.PROCESSING,
        AccountDeletionStatus.CANCELLED,
    ],
    AccountDeletionStatus.PROCESSING: [
        AccountDeletionStatus.COMPLETED,
        AccountDeletionStatus.PENDING,
    ],
    AccountDeletionStatus.COMPLETED: [],  # Terminal state
    AccountDeletionStatus.CANCELLED: [],  # Terminal state
}


def validate_transition(
    current_status: AccountDeletionStatus,
    new_status: AccountDeletionStatus
) -> None:
    """Validate that a state transition is allowed.

    Args:
        current_status: Current request status
        new_status: Target status to transition to

    Raises:
        StateTransitionError: If transition is not allowed
    """
    allowed = ALLOWED_TRANSITIONS.get(current_status, [])
    if new_status not in allowed:
        raise StateTransitionError(
            f"Invalid transition: {current_status.value} -> {new_status.value}. "
            f"Allowed transitions from {current_status.value}: "
            f"{[s.value for s in allowed]}"
        )


def can_transition(
    current_status: AccountDeletionStatus,
    new_status: AccountDeletionStatus
) -> bool:
    """Check if a state transition is allowed without raising exception."""
    return new_status in ALLOWED_TRANSITIONS.get(current_status, [])


def get_allowed_transitions(status: AccountDeletionStatus) -> List[AccountDeletionStatus]:
    return ALLOWED_TRANSITIONS.get(status, [])
