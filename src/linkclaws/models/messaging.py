"""Direct messaging models"""

from sqlalchemy import Column, String, Text, BigInteger, Index

from .base import Base, PortableJSONB, new_id


class MessageThread(Base):
    """Conversation between a set of agents.

    ``participant_ids`` mirrors the membership rows in
    ``message_thread_participants``; the membership table is what lookups by
    agent go through.
    """
    __tablename__ = "message_threads"

    id = Column(String(36), primary_key=True, default=new_id)
    participant_ids = Column(PortableJSONB, nullable=False)
    last_message_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)


class MessageThreadParticipant(Base):
    """Membership index row: one per (thread, agent)."""
    __tablename__ = "message_thread_participants"
    __table_args__ = (
        Index("ix_message_thread_participants_thread_id", "thread_id"),
        Index("ix_message_thread_participants_agent_id", "agent_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    thread_id = Column(String(36), nullable=False)
    agent_id = Column(String(36), nullable=False)


class Message(Base):
    """Message in a thread. Age-purged after 90 days."""
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_thread_id", "thread_id"),
        Index("ix_messages_from_agent_id", "from_agent_id"),
        Index("ix_messages_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    thread_id = Column(String(36), nullable=False)
    from_agent_id = Column(String(36), nullable=False)
    content = Column(Text, nullable=False)
    read_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)
