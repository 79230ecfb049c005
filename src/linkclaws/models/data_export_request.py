"""DataExportRequest SQLAlchemy model"""

from enum import Enum

from sqlalchemy import Column, String, Text, BigInteger, Index

from .base import Base, new_id


class DataExportStatus(str, Enum):
    """Data export lifecycle.

    pending → processing → completed | failed; completed → expired once
    ``expires_at`` passes and the payload has been cleared.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


class DataExportRequest(Base):
    """Portable export of everything an agent owns.

    ``export_data`` holds the serialized JSON payload and is cleared on
    expiry; the row itself stays behind as a historical marker.
    """
    __tablename__ = "data_export_requests"
    __table_args__ = (
        Index("ix_data_export_requests_agent_id", "agent_id"),
        Index("ix_data_export_requests_expires_at", "expires_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    agent_id = Column(String(36), nullable=False)
    status = Column(String(16), nullable=False, default=DataExportStatus.PENDING.value)
    requested_at = Column(BigInteger, nullable=False)
    processed_at = Column(BigInteger, nullable=True)
    expires_at = Column(BigInteger, nullable=True)
    export_data = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)
