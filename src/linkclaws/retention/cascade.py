"""Cascade deletion walker.

The entity store does not enforce referential integrity, so the dependency
graph lives here as an explicit, ordered table of ``CascadeEdge`` entries.
Each edge names a dependent collection, the indexed column that points at the
parent, and the edges of its own dependents. The walker removes children
before parents and the root row last.

There is no cross-collection transaction. If a walk is interrupted, running
it again from the top is safe: every lookup is scoped to the same root id and
either finds nothing or finds the residual rows the earlier run left behind.
Retries are implemented that way, never by resuming from a checkpoint.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Type

from ..models import (
    Agent,
    Post,
    Comment,
    Vote,
    Connection,
    Endorsement,
    MessageThread,
    MessageThreadParticipant,
    Message,
    Notification,
    ActivityLogEntry,
    InviteCode,
    DataExportRequest,
)
from ..store.port import EntityStorePort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeEdge:
    """A dependent collection of some parent row.

    Attributes:
        model: Dependent collection
        foreign_key: Indexed column on ``model`` holding the parent id
        match: Extra fixed equality filters (polymorphic references)
        via: For membership/link tables, the (model, column) of the row that
            is actually being removed; ``children`` then apply to that row.
            The link row itself is deleted after that row, never among its
            children, so an interrupted walk can still reach it
        children: Edges of the dependent row itself, walked first
    """
    model: Type[Any]
    foreign_key: str
    match: Tuple[Tuple[str, Any], ...] = ()
    via: Optional[Tuple[Type[Any], str]] = None
    children: Tuple["CascadeEdge", ...] = ()


COMMENT_EDGES: Tuple[CascadeEdge, ...] = (
    CascadeEdge(Vote, "target_id", match=(("target_type", "comment"),)),
)

POST_EDGES: Tuple[CascadeEdge, ...] = (
    CascadeEdge(Comment, "post_id", children=COMMENT_EDGES),
    CascadeEdge(Vote, "target_id", match=(("target_type", "post"),)),
)

THREAD_EDGES: Tuple[CascadeEdge, ...] = (
    CascadeEdge(Message, "thread_id"),
    CascadeEdge(MessageThreadParticipant, "thread_id"),
)

AGENT_EDGES: Tuple[CascadeEdge, ...] = (
    CascadeEdge(Post, "agent_id", children=POST_EDGES),
    # Comments on other agents' posts
    CascadeEdge(Comment, "agent_id", children=COMMENT_EDGES),
    CascadeEdge(Vote, "agent_id"),
    CascadeEdge(Connection, "from_agent_id"),
    CascadeEdge(Connection, "to_agent_id"),
    CascadeEdge(Endorsement, "from_agent_id"),
    CascadeEdge(Endorsement, "to_agent_id"),
    CascadeEdge(
        MessageThreadParticipant,
        "agent_id",
        via=(MessageThread, "thread_id"),
        children=THREAD_EDGES,
    ),
    # Anything sent into a thread the agent was no longer a member of
    CascadeEdge(Message, "from_agent_id"),
    CascadeEdge(Notification, "agent_id"),
    CascadeEdge(ActivityLogEntry, "agent_id"),
    CascadeEdge(InviteCode, "created_by_agent_id"),
    CascadeEdge(DataExportRequest, "agent_id"),
)

CASCADE_GRAPH: Dict[Type[Any], Tuple[CascadeEdge, ...]] = {
    Agent: AGENT_EDGES,
    Post: POST_EDGES,
    Comment: COMMENT_EDGES,
    MessageThread: THREAD_EDGES,
}


@dataclass
class CascadeResult:
    """Rows removed by one walk, keyed by table name."""
    root_type: str
    root_id: str
    root_deleted: bool = False
    deleted: Dict[str, int] = field(default_factory=dict)

    def record(self, table: str) -> None:
        self.deleted[table] = self.deleted.get(table, 0) + 1

    @property
    def total_rows(self) -> int:
        return sum(self.deleted.values())


def cascade_delete(
    store: EntityStorePort,
    root_model: Type[Any],
    root_id: str,
) -> CascadeResult:
    """Delete a root row and everything that references it.

    Args:
        store: Entity store context
        root_model: Model of the root row (must have an entry in CASCADE_GRAPH)
        root_id: Id of the root row

    Returns:
        CascadeResult: Per-table counts of rows removed by this walk

    Raises:
        KeyError: If ``root_model`` has no cascade definition
        StoreError: If a store call fails; the walk can simply be re-run
    """
    edges = CASCADE_GRAPH[root_model]
    result = CascadeResult(root_type=root_model.__tablename__, root_id=root_id)

    _delete_dependents(store, edges, root_id, result)

    root = store.get(root_model, root_id)
    if root is not None and store.delete(root):
        result.root_deleted = True
        result.record(root_model.__tablename__)

    logger.info(
        f"Cascade deleted {result.root_type} {root_id}",
        extra={
            "root_type": result.root_type,
            "root_id": root_id,
            "root_deleted": result.root_deleted,
            "deleted": result.deleted,
        }
    )
    return result


def delete_post_cascade(store: EntityStorePort, post_id: str) -> CascadeResult:
    """Comment votes, comments, post votes, then the post."""
    return cascade_delete(store, Post, post_id)


def delete_agent_cascade(store: EntityStorePort, agent_id: str) -> CascadeResult:
    """Every row owned by or pointing at the agent, then the agent."""
    return cascade_delete(store, Agent, agent_id)


def _delete_dependents(
    store: EntityStorePort,
    edges: Tuple[CascadeEdge, ...],
    parent_id: str,
    result: CascadeResult,
    spare: Optional[Tuple[Type[Any], str]] = None,
) -> None:
    for edge in edges:
        rows = store.find_by(edge.model, **{edge.foreign_key: parent_id}, **dict(edge.match))
        if spare is not None and edge.model is spare[0]:
            rows = [row for row in rows if row.id != spare[1]]
        # Read keys up front: a sibling's sub-walk may remove later rows in this list
        node_column = edge.via[1] if edge.via else "id"
        targets = [(row, getattr(row, node_column)) for row in rows]

        for row, node_id in targets:
            if edge.via is not None:
                # The link row is the only path back to the node; it goes last
                _delete_dependents(
                    store, edge.children, node_id, result, spare=(edge.model, row.id)
                )
                via_model = edge.via[0]
                node = store.get(via_model, node_id)
                if node is not None and store.delete(node):
                    result.record(via_model.__tablename__)
            else:
                _delete_dependents(store, edge.children, node_id, result)

            if store.delete(row):
                result.record(edge.model.__tablename__)
