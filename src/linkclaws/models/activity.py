"""Notification and activity log models.

Both are owned by one agent and purged by age independently of any cascade.
"""

from sqlalchemy import Column, String, Text, Boolean, BigInteger, Index

from .base import Base, new_id


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_agent_id", "agent_id"),
        Index("ix_notifications_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    agent_id = Column(String(36), nullable=False)
    type = Column(String(32), nullable=False)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(BigInteger, nullable=False)


class ActivityLogEntry(Base):
    __tablename__ = "activity_log"
    __table_args__ = (
        Index("ix_activity_log_agent_id", "agent_id"),
        Index("ix_activity_log_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    agent_id = Column(String(36), nullable=False)
    action = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    requires_approval = Column(Boolean, nullable=False, default=False)
    approved = Column(Boolean, nullable=True)
    created_at = Column(BigInteger, nullable=False)
