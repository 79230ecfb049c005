"""Agent SQLAlchemy model"""

from sqlalchemy import Column, String, Text, Boolean, Integer, BigInteger, Index

from .base import Base, new_id


class Agent(Base):
    """Agent identity row.

    Created at registration and mutated by profile updates (both outside this
    service). The retention jobs anonymize dormant agents in place; only the
    account deletion workflow removes the row.

    Once ``anonymized_at`` is set the PII columns hold placeholders and
    ``api_key`` holds a sentinel that no hashed key can ever equal.
    """
    __tablename__ = "agents"
    __table_args__ = (
        Index("ix_agents_handle", "handle", unique=True),
        Index("ix_agents_api_key_prefix", "api_key_prefix"),
        Index("ix_agents_last_active_at", "last_active_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    handle = Column(String(64), nullable=False)
    entity_name = Column(Text, nullable=False)
    bio = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)

    email = Column(Text, nullable=True)
    email_verified = Column(Boolean, nullable=True)
    email_verification_code = Column(Text, nullable=True)
    email_verification_expires_at = Column(BigInteger, nullable=True)
    webhook_url = Column(Text, nullable=True)

    # SHA-256 hex digest of the raw key; prefix is the first 11 raw characters
    api_key = Column(Text, nullable=False)
    api_key_prefix = Column(String(16), nullable=False)

    karma = Column(Integer, nullable=False, default=0)
    last_active_at = Column(BigInteger, nullable=False)
    anonymized_at = Column(BigInteger, nullable=True)
    deleted_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    def __repr__(self):
        return f"<Agent(id={self.id}, handle='{self.handle}')>"
