"""FastAPI dependencies for store access and agent resolution.

Agents authenticate with their raw API key in the ``X-API-Key`` header.
Everything below the router works against the ``EntityStorePort`` returned
by ``get_store``; no endpoint touches the session directly.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .compliance.auth import authenticate_agent
from .database import get_db
from .models.agent import Agent
from .store.port import EntityStorePort
from .store.sqlalchemy_store import SqlAlchemyEntityStore


def get_store(db: Session = Depends(get_db)) -> EntityStorePort:
    """Entity store bound to the request's session."""
    return SqlAlchemyEntityStore(db)


def get_current_agent(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    store: EntityStorePort = Depends(get_store),
) -> Agent:
    """Resolve the calling agent from its API key.

    Raises:
        HTTPException 401: Missing or invalid key, or anonymized/deleted agent
    """
    agent = authenticate_agent(store, x_api_key)
    if agent is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return agent
