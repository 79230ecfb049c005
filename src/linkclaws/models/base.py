"""Declarative base, JSON column type and id generation for the entity store.

Every collection uses application-generated UUID4 string ids and has no
foreign key constraints; the cascade walker owns referential cleanup.
"""

import uuid

from sqlalchemy.orm import declarative_base
from sqlalchemy import TypeDecorator, JSON
from sqlalchemy.dialects.postgresql import JSONB


class PortableJSONB(TypeDecorator):
    """JSON list/object column: JSONB on PostgreSQL, JSON on SQLite.

    Holds post ``tags`` and thread ``participant_ids``. Neither is queried
    by content; lookups go through the indexed membership and owner columns.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


def new_id() -> str:
    return str(uuid.uuid4())


Base = declarative_base()
