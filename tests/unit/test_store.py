"""Unit tests for the SQLAlchemy entity store adapter."""

import pytest

from linkclaws.exceptions import StoreError
from linkclaws.models import Agent, Message, Notification, DataExportRequest
from linkclaws.store.sqlalchemy_store import SqlAlchemyEntityStore


class TestWrites:

    def test_insert_assigns_id(self, make):
        notification = make(Notification, agent_id="a1", type="mention", title="Hi")

        assert notification.id
        assert len(notification.id) == 36

    def test_patch_updates_and_clears_fields(self, store, make):
        notification = make(Notification, agent_id="a1", type="mention", title="Hi", body="x")

        store.patch(notification, read=True, body=None)

        reloaded = store.get(Notification, notification.id)
        assert reloaded.read is True
        assert reloaded.body is None

    def test_patch_rejects_unknown_column(self, store, make):
        notification = make(Notification, agent_id="a1", type="mention", title="Hi")

        with pytest.raises(ValueError, match="no column"):
            store.patch(notification, colour="blue")

    def test_delete_reports_whether_row_was_removed(self, store, make):
        notification = make(Notification, agent_id="a1", type="mention", title="Hi")
        notification_id = notification.id

        assert store.delete(notification) is True
        assert store.delete(notification) is False
        assert store.get(Notification, notification_id) is None

    def test_integrity_error_wrapped_and_session_usable(self, store, make_agent):
        make_agent(handle="taken")

        with pytest.raises(StoreError):
            make_agent(handle="taken")

        # Rolled back, so the next write goes through
        other = make_agent(handle="free")
        assert store.get(Agent, other.id) is not None

    def test_flush_only_mode_leaves_transaction_open(self, db_session):
        store = SqlAlchemyEntityStore(db_session, commit_each_write=False)
        notification = store.insert(
            Notification(agent_id="a1", type="mention", title="Hi", created_at=1)
        )
        notification_id = notification.id

        db_session.rollback()

        assert store.get(Notification, notification_id) is None


class TestFindBy:

    def test_equality_filters_are_anded(self, store, make):
        make(Notification, agent_id="a1", type="mention", title="1")
        make(Notification, agent_id="a1", type="follow", title="2")
        make(Notification, agent_id="a2", type="mention", title="3")

        rows = store.find_by(Notification, agent_id="a1", type="mention")

        assert [r.title for r in rows] == ["1"]

    def test_none_matches_null(self, store, make_agent):
        active = make_agent()
        make_agent(anonymized_at=5)

        rows = store.find_by(Agent, anonymized_at=None)

        assert [r.id for r in rows] == [active.id]

    def test_order_and_limit(self, store, make):
        for created_at in (30, 10, 20):
            make(Notification, agent_id="a1", type="t", title=str(created_at), created_at=created_at)

        ascending = store.find_by(Notification, agent_id="a1", order_by="created_at")
        newest = store.find_by(
            Notification, agent_id="a1", order_by="created_at", descending=True, limit=2
        )

        assert [r.created_at for r in ascending] == [10, 20, 30]
        assert [r.created_at for r in newest] == [30, 20]

    def test_unknown_filter_column(self, store):
        with pytest.raises(ValueError):
            store.find_by(Notification, owner="a1")


class TestFindBefore:

    def _messages(self, make, *created_ats):
        return [
            make(Message, thread_id="t1", from_agent_id="a1", content="m", created_at=c)
            for c in created_ats
        ]

    def test_strict_bound_by_default(self, store, make):
        self._messages(make, 100, 200, 300)

        rows = store.find_before(Message, "created_at", 200, limit=10)

        assert [r.created_at for r in rows] == [100]

    def test_inclusive_bound(self, store, make):
        self._messages(make, 100, 200, 300)

        rows = store.find_before(Message, "created_at", 200, limit=10, inclusive=True)

        assert [r.created_at for r in rows] == [100, 200]

    def test_oldest_first_and_limited(self, store, make):
        self._messages(make, 50, 10, 40, 20, 30)

        rows = store.find_before(Message, "created_at", 1000, limit=3)

        assert [r.created_at for r in rows] == [10, 20, 30]

    def test_null_values_never_match(self, store, make):
        make(DataExportRequest, agent_id="a1", requested_at=1, expires_at=None)
        dated = make(DataExportRequest, agent_id="a1", requested_at=1, expires_at=5)

        rows = store.find_before(DataExportRequest, "expires_at", 100, limit=10)

        assert [r.id for r in rows] == [dated.id]

    def test_exclude_filter(self, store, make):
        make(DataExportRequest, agent_id="a1", requested_at=1, expires_at=5, status="expired")
        live = make(DataExportRequest, agent_id="a1", requested_at=1, expires_at=5, status="completed")

        rows = store.find_before(
            DataExportRequest, "expires_at", 100, limit=10, exclude={"status": "expired"}
        )

        assert [r.id for r in rows] == [live.id]
