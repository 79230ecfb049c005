"""AccountDeletionRequest SQLAlchemy model"""

from enum import Enum

from sqlalchemy import Column, String, Text, BigInteger, Index, text

from .base import Base, new_id


class AccountDeletionStatus(str, Enum):
    """Account deletion request status.

    See ``linkclaws.compliance.status`` for the allowed transitions.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AccountDeletionRequest(Base):
    """Right-to-erasure request with a grace period.

    At most one row per agent may be ``pending`` at any time, enforced by a
    partial unique index. The row
    outlives the agent it refers to so the outcome stays on record.
    """
    __tablename__ = "account_deletion_requests"
    __table_args__ = (
        Index("ix_account_deletion_requests_agent_id", "agent_id"),
        Index("ix_account_deletion_requests_status", "status"),
        Index(
            "uq_account_deletion_requests_pending",
            "agent_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    agent_id = Column(String(36), nullable=False)
    status = Column(String(16), nullable=False, default=AccountDeletionStatus.PENDING.value)
    reason = Column(Text, nullable=True)
    requested_at = Column(BigInteger, nullable=False)
    scheduled_for = Column(BigInteger, nullable=False)
    processing_started_at = Column(BigInteger, nullable=True)
    processed_at = Column(BigInteger, nullable=True)
    cancelled_at = Column(BigInteger, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)
