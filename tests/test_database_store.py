"""Unit tests for the Postgres event store (no database required)"""

import json
from datetime import datetime, timezone

import asyncpg
import pytest

from engagement_engine.errors import TransientStoreError
from engagement_engine.store.database import DatabaseEventStore, _row_to_event


START = datetime(2024, 6, 1, tzinfo=timezone.utc)
END = datetime(2024, 6, 8, tzinfo=timezone.utc)


class FakeConnection:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.executed = []

    async def execute(self, query, *args):
        if self.error:
            raise self.error
        self.executed.append((query, args))

    async def fetch(self, query, *args):
        if self.error:
            raise self.error
        self.executed.append((query, args))
        return self.rows


class FakeAcquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *exc):
        return False


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def acquire(self):
        return FakeAcquire(self.conn)

    async def close(self):
        self.closed = True


def make_row(**overrides):
    row = {
        "id": "evt-1",
        "business_id": "B1",
        "business_name": None,
        "event_type": "view",
        "event_data": json.dumps({"source": "search", "deviceType": "mobile"}),
        "timestamp": datetime(2024, 6, 3, 9, tzinfo=timezone.utc),
        "session_id": "s1",
        "ip_address": None,
        "user_agent": None,
    }
    row.update(overrides)
    return row


def store_with(conn):
    store = DatabaseEventStore("postgresql://test@localhost/test")
    store.pool = FakePool(conn)
    return store


class TestDatabaseEventStore:
    """Tests for DatabaseEventStore"""

    @pytest.mark.asyncio
    async def test_append_inserts_row(self, make_event):
        conn = FakeConnection()
        store = store_with(conn)

        await store.append(make_event("phone_click", search_query="plumber"))

        query, args = conn.executed[0]
        assert "INSERT INTO user_engagement_events" in query
        assert args[0] == "evt-0001"
        assert args[3] == "phone_click"
        assert json.loads(args[4]) == {"searchQuery": "plumber"}

    @pytest.mark.asyncio
    async def test_query_converts_rows(self):
        conn = FakeConnection(rows=[make_row()])
        store = store_with(conn)

        events = await store.query("B1", START, END)

        assert len(events) == 1
        assert events[0].event_data.source == "search"
        assert events[0].event_data.device_type == "mobile"
        assert events[0].business_name == ""
        assert conn.executed[0][1] == ("B1", START, END)

    @pytest.mark.asyncio
    async def test_query_range(self):
        conn = FakeConnection(rows=[make_row(), make_row(id="evt-2", business_id="B2")])
        store = store_with(conn)

        events = await store.query_range(START, END)

        assert [e.business_id for e in events] == ["B1", "B2"]
        assert conn.executed[0][1] == (START, END)

    @pytest.mark.asyncio
    async def test_malformed_rows_skipped(self):
        rows = [make_row(), make_row(id="evt-2", event_data="{not json"), make_row(id="evt-3", business_id=None)]
        store = store_with(FakeConnection(rows=rows))

        events = await store.query("B1", START, END)

        assert [e.event_id for e in events] == ["evt-1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        asyncpg.PostgresError("relation does not exist"),
        ConnectionRefusedError("connection refused"),
    ])
    async def test_errors_wrapped(self, make_event, error):
        store = store_with(FakeConnection(error=error))

        with pytest.raises(TransientStoreError) as exc_info:
            await store.append(make_event("view"))
        assert exc_info.value.store == "database"
        assert exc_info.value.operation == "append"

        with pytest.raises(TransientStoreError):
            await store.query("B1", START, END)

        with pytest.raises(TransientStoreError):
            await store.query_range(START, END)

    @pytest.mark.asyncio
    async def test_ensure_schema(self):
        conn = FakeConnection()
        store = store_with(conn)

        await store.ensure_schema()

        assert "CREATE TABLE IF NOT EXISTS user_engagement_events" in conn.executed[0][0]

    @pytest.mark.asyncio
    async def test_lazy_connect_failure_wrapped(self, monkeypatch, make_event):
        async def refuse(*args, **kwargs):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(asyncpg, "create_pool", refuse)
        store = DatabaseEventStore("postgresql://test@localhost/test")

        with pytest.raises(TransientStoreError):
            await store.append(make_event("view"))
        assert store.pool is None

    @pytest.mark.asyncio
    async def test_disconnect(self):
        store = store_with(FakeConnection())
        pool = store.pool

        await store.disconnect()

        assert pool.closed
        assert store.pool is None


class TestRowToEvent:
    """Tests for row conversion"""

    def test_jsonb_dict_payload(self):
        event = _row_to_event(make_row(event_data={"searchQuery": "pizza"}))
        assert event.event_data.search_query == "pizza"

    def test_null_payload(self):
        event = _row_to_event(make_row(event_data=None))
        assert event.event_data.source is None

    def test_legacy_event_type_kept(self):
        event = _row_to_event(make_row(event_type="share_click"))
        assert event.event_type == "share_click"
        assert event.known_type is None
