"""DeletionAuditLogEntry SQLAlchemy model"""

from sqlalchemy import Column, String, Integer, BigInteger, Index

from .base import Base, new_id


class DeletionAuditLogEntry(Base):
    """Immutable record of one destructive batch action.

    Written by the retention jobs and the account deletion processor.
    Entries are append-only and should never be updated or deleted.
    """
    __tablename__ = "deletion_audit_log"
    __table_args__ = (
        Index("ix_deletion_audit_log_agent_id", "agent_id"),
        Index("ix_deletion_audit_log_executed_at", "executed_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    action_type = Column(String(64), nullable=False)
    target_type = Column(String(64), nullable=False)
    target_count = Column(Integer, nullable=False)
    retention_policy_applied = Column(String(128), nullable=False)
    executed_by = Column(String(32), nullable=False, default="cron_job")
    executed_at = Column(BigInteger, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    agent_id = Column(String(36), nullable=True)

    def to_dict(self):
        """Convert audit entry to dictionary representation"""
        return {
            "id": self.id,
            "actionType": self.action_type,
            "targetType": self.target_type,
            "targetCount": self.target_count,
            "retentionPolicyApplied": self.retention_policy_applied,
            "executedBy": self.executed_by,
            "executedAt": self.executed_at,
            "createdAt": self.created_at,
            "agentId": self.agent_id,
        }
