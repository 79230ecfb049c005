"""InviteCode SQLAlchemy model"""

from sqlalchemy import Column, String, BigInteger, Index

from .base import Base, new_id


class InviteCode(Base):
    """Invite code issued by an agent. Removed with its creator."""
    __tablename__ = "invite_codes"
    __table_args__ = (
        Index("ix_invite_codes_code", "code", unique=True),
        Index("ix_invite_codes_created_by_agent_id", "created_by_agent_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(32), nullable=False)
    created_by_agent_id = Column(String(36), nullable=False)
    used_by_agent_id = Column(String(36), nullable=True)
    expires_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)
