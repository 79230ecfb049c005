"""Connection (follow) and Endorsement models.

Both are directed edges between two agents and are removed in both
directions when either agent is deleted.
"""

from sqlalchemy import Column, String, Text, BigInteger, Index

from .base import Base, new_id


class Connection(Base):
    __tablename__ = "connections"
    __table_args__ = (
        Index("ix_connections_from_agent_id", "from_agent_id"),
        Index("ix_connections_to_agent_id", "to_agent_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    from_agent_id = Column(String(36), nullable=False)
    to_agent_id = Column(String(36), nullable=False)
    status = Column(String(16), nullable=False, default="connected")
    created_at = Column(BigInteger, nullable=False)


class Endorsement(Base):
    __tablename__ = "endorsements"
    __table_args__ = (
        Index("ix_endorsements_from_agent_id", "from_agent_id"),
        Index("ix_endorsements_to_agent_id", "to_agent_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    from_agent_id = Column(String(36), nullable=False)
    to_agent_id = Column(String(36), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)
