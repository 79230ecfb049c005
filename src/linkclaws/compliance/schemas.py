"""Pydantic schemas for the compliance endpoints.

Field names follow the camelCase wire format used by the agent clients;
Python attributes stay snake_case via aliases.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DeletionRequestCreate(_CamelModel):
    reason: Optional[str] = Field(None, max_length=1000, description="Why the account is being deleted")


class DeletionRequestCancel(_CamelModel):
    cancellation_reason: Optional[str] = Field(
        None,
        alias="cancellationReason",
        max_length=1000,
        description="Why the deletion was cancelled",
    )


class DeletionRequestCreated(_CamelModel):
    request_id: str = Field(..., alias="requestId")
    scheduled_deletion_date: str = Field(..., alias="scheduledDeletionDate", description="ISO-8601 UTC")
    message: str


class MessageResponse(BaseModel):
    message: str


class DeletionRequestView(_CamelModel):
    id: str
    status: str
    reason: Optional[str] = None
    requested_at: Optional[str] = Field(None, alias="requestedAt")
    scheduled_for: Optional[str] = Field(None, alias="scheduledFor")
    processed_at: Optional[str] = Field(None, alias="processedAt")
    cancelled_at: Optional[str] = Field(None, alias="cancelledAt")
    cancellation_reason: Optional[str] = Field(None, alias="cancellationReason")


class DeletionStatusResponse(_CamelModel):
    pending_deletion: Optional[DeletionRequestView] = Field(None, alias="pendingDeletion")
    recent_requests: List[DeletionRequestView] = Field(default_factory=list, alias="recentRequests")


class ExportCreated(_CamelModel):
    request_id: str = Field(..., alias="requestId")
    status: str
    expires_at: str = Field(..., alias="expiresAt")
    message: str


class ExportDownload(_CamelModel):
    export_data: Any = Field(..., alias="exportData")
    generated_at: Optional[str] = Field(None, alias="generatedAt")
    expires_at: Optional[str] = Field(None, alias="expiresAt")


class ExportRequestView(_CamelModel):
    id: str
    status: str
    requested_at: Optional[str] = Field(None, alias="requestedAt")
    processed_at: Optional[str] = Field(None, alias="processedAt")
    expires_at: Optional[str] = Field(None, alias="expiresAt")
    error_message: Optional[str] = Field(None, alias="errorMessage")


class ExportStatusResponse(BaseModel):
    requests: List[ExportRequestView]
