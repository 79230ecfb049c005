"""Entity Store Port - the transactional context every engine function receives.

The lifecycle engine never touches a session or engine directly. Each job,
walker step and state-machine operation takes an ``EntityStorePort`` as its
first argument and only uses the operations declared here.

Atomicity is per call: a single ``insert``/``patch``/``delete`` either fully
applies or not at all. Nothing spans calls, which is why every destructive
step in the engine is guarded by an idempotent predicate instead of relying
on rollback.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Type, TypeVar

M = TypeVar("M")


class EntityStorePort(ABC):
    """Port interface for the document-style entity store.

    Lookups are restricted to indexed columns (equality via ``find_by`` and
    a single-column range via ``find_before``) so that no lifecycle step ever
    degrades into a full collection scan.
    """

    @abstractmethod
    def get(self, model: Type[M], row_id: str) -> Optional[M]:
        """Fetch a row by primary id, ``None`` when absent."""

    @abstractmethod
    def insert(self, row: M) -> M:
        """Persist a new row and return it with its id populated."""

    @abstractmethod
    def patch(self, row: M, **fields: Any) -> M:
        """Apply ``fields`` to an existing row.

        ``None`` values clear the column.
        """

    @abstractmethod
    def delete(self, row: Any) -> bool:
        """Delete a row.

        Returns:
            True if a row was removed, False if it was already gone
        """

    @abstractmethod
    def find_by(
        self,
        model: Type[M],
        *,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        **equals: Any,
    ) -> List[M]:
        """Equality lookup on indexed columns.

        Args:
            model: Collection to query
            limit: Maximum rows to return (None for all)
            order_by: Column to order by (default: primary id)
            descending: Reverse the ordering
            **equals: column=value filters, ANDed together

        Returns:
            Matching rows
        """

    @abstractmethod
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
        """Range lookup on an indexed column, oldest first by default.

        Rows whose ``field`` is NULL never match.

        Args:
            model: Collection to query
            field: Indexed column holding an epoch-ms value
            cutoff: Rows strictly before this value match (or equal, if ``inclusive``)
            limit: Maximum rows to return (the batch cursor)
            inclusive: Use ``<=`` instead of ``<``
            descending: Newest first instead of oldest first
            exclude: column=value pairs a matching row must NOT have
            **equals: Additional column=value filters

        Returns:
            Up to ``limit`` rows ordered by ``field``
        """
