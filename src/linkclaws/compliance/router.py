"""FastAPI router for agent-facing compliance endpoints.

Provides:
- Account deletion request / cancel / status (right to erasure)
- Data export request / status / download (right to data portability)

All endpoints act on the agent resolved from the X-API-Key header.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_current_agent, get_store
from ..models.agent import Agent
from ..store.port import EntityStorePort
from . import deletion, export
from .schemas import (
    DeletionRequestCreate,
    DeletionRequestCancel,
    DeletionRequestCreated,
    DeletionStatusResponse,
    MessageResponse,
    ExportCreated,
    ExportDownload,
    ExportStatusResponse,
)


router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.post(
    "/deletion",
    response_model=DeletionRequestCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Request account deletion",
)
def request_account_deletion(
    body: Optional[DeletionRequestCreate] = None,
    agent: Agent = Depends(get_current_agent),
    store: EntityStorePort = Depends(get_store),
):
    """Start the 30-day grace period before permanent deletion.

    Raises:
        HTTPException 409: A deletion request is already pending
    """
    reason = body.reason if body else None
    return deletion.request_account_deletion(store, agent, reason)


@router.post(
    "/deletion/cancel",
    response_model=MessageResponse,
    summary="Cancel a pending account deletion",
)
def cancel_account_deletion(
    body: Optional[DeletionRequestCancel] = None,
    agent: Agent = Depends(get_current_agent),
    store: EntityStorePort = Depends(get_store),
):
    """Cancel the pending deletion request.

    Raises:
        HTTPException 404: No pending deletion request
    """
    reason = body.cancellation_reason if body else None
    return deletion.cancel_account_deletion(store, agent, reason)


@router.get(
    "/deletion",
    response_model=DeletionStatusResponse,
    summary="Account deletion status",
)
def get_account_deletion_status(
    agent: Agent = Depends(get_current_agent),
    store: EntityStorePort = Depends(get_store),
):
    return deletion.get_account_deletion_status(store, agent)


@router.post(
    "/export",
    response_model=ExportCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Request a data export",
)
def request_data_export(
    agent: Agent = Depends(get_current_agent),
    store: EntityStorePort = Depends(get_store),
):
    """Generate a portable export of all the agent's data.

    Raises:
        HTTPException 409: An export is already in progress
        HTTPException 500: Export generation failed
    """
    return export.request_data_export(store, agent)


@router.get(
    "/export",
    response_model=ExportStatusResponse,
    summary="Data export status",
)
def get_data_export_status(
    agent: Agent = Depends(get_current_agent),
    store: EntityStorePort = Depends(get_store),
):
    return export.get_data_export_status(store, agent)


@router.get(
    "/export/download",
    response_model=ExportDownload,
    summary="Download a completed data export",
)
def download_data_export(
    request_id: Optional[str] = Query(None, alias="requestId"),
    agent: Agent = Depends(get_current_agent),
    store: EntityStorePort = Depends(get_store),
):
    """Return the export payload.

    Raises:
        HTTPException 404: Export missing, not ready, cleared or expired
    """
    return export.download_data_export(store, agent, request_id)
