"""SQLAlchemy adapter for the entity store port.

Every write call is its own unit of work: flushed and committed on success,
rolled back and re-raised as ``StoreError`` on failure. Reads never commit.
"""

import logging
from typing import Any, Callable, List, Optional, Type, TypeVar

from sqlalchemy import select, inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import ObjectDeletedError, StaleDataError

from ..exceptions import StoreError
from .port import EntityStorePort

logger = logging.getLogger(__name__)

M = TypeVar("M")


class SqlAlchemyEntityStore(EntityStorePort):
    """Entity store backed by a SQLAlchemy session.

    Args:
        session: Database session owned by the caller
        commit_each_write: Commit after every write call (default). Set to
            False to only flush, leaving the transaction to the caller.
    """

    def __init__(self, session: Session, commit_each_write: bool = True):
        self.session = session
        self.commit_each_write = commit_each_write

    def _write(self, operation: str, row: Any, apply: Callable[[], None]) -> bool:
        model_name = type(row).__name__
        try:
            apply()
            self.session.flush()
            if self.commit_each_write:
                self.session.commit()
            return True
        except (StaleDataError, ObjectDeletedError):
            # Row vanished under us (concurrent delete); for deletes that is success.
            self.session.rollback()
            if operation != "delete":
                raise StoreError(f"{operation} on {model_name}: row no longer exists")
            logger.debug(
                f"{model_name} already deleted",
                extra={"operation": operation, "collection": model_name},
            )
            return False
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                f"Store {operation} on {model_name} failed",
                exc_info=True,
                extra={"operation": operation, "collection": model_name},
            )
            raise StoreError(f"{operation} on {model_name} failed: {e}") from e

    def _column(self, model: Type[M], name: str):
        column = getattr(model, name, None)
        if column is None:
            raise ValueError(f"{model.__name__} has no column '{name}'")
        return column

    def _where(self, model: Type[M], equals: dict) -> list:
        return [self._column(model, name) == value for name, value in equals.items()]

    def get(self, model: Type[M], row_id: str) -> Optional[M]:
        return self.session.get(model, row_id)

    def insert(self, row: M) -> M:
        self._write("insert", row, lambda: self.session.add(row))
        return row

    def patch(self, row: M, **fields: Any) -> M:
        for name in fields:
            self._column(type(row), name)

        def apply():
            for name, value in fields.items():
                setattr(row, name, value)

        self._write("patch", row, apply)
        return row

    def delete(self, row: Any) -> bool:
        # Detached/deleted instances were removed by an earlier call
        if not sa_inspect(row).persistent:
            return False
        return self._write("delete", row, lambda: self.session.delete(row))

    def find_by(
        self,
        model: Type[M],
        *,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        **equals: Any,
    ) -> List[M]:
        column = self._column(model, order_by or "id")
        stmt = select(model).where(*self._where(model, equals))
        stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.scalars(stmt))

    def find_before(
        self,
        model: Type[M],
        field: str,
        cutoff: int,
        *,
        limit: int,
        inclusive: bool = False,
        descending: bool = False,
        exclude: Optional[dict] = None,
        **equals: Any,
    ) -> List[M]:
        column = self._column(model, field)
        bound = column <= cutoff if inclusive else column < cutoff
        conditions = [column.is_not(None), bound, *self._where(model, equals)]
        for name, value in (exclude or {}).items():
            conditions.append(self._column(model, name) != value)
        id_column = self._column(model, "id")
        if descending:
            orderings = (column.desc(), id_column.desc())
        else:
            orderings = (column.asc(), id_column.asc())
        stmt = (
            select(model)
            .where(*conditions)
            .order_by(*orderings)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))
