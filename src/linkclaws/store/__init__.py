"""Entity store port and its SQLAlchemy adapter."""

from .port import EntityStorePort
from .sqlalchemy_store import SqlAlchemyEntityStore

__all__ = ["EntityStorePort", "SqlAlchemyEntityStore"]
