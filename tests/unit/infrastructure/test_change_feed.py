"""
Name: Change Feed Tests

Responsibilities:
  - NOTIFY payload decoding (valid / malformed)
  - Per-table dispatch with failing listeners isolated
  - Listener thread driven by an injected psycopg-like connection
"""

import json
import threading
from types import SimpleNamespace

import pytest

from resourcevault.crosscutting.exceptions import ChangeFeedError
from resourcevault.domain.services import ChangeEvent, ChangeType
from resourcevault.infrastructure.realtime import (
    CallbackRegistry,
    PgChangeFeed,
    decode_notification,
)

pytestmark = pytest.mark.unit


def _payload(table="resources", change="insert", record=None) -> str:
    return json.dumps({"table": table, "type": change, "record": record or {"id": "r1"}})


class FakeConnection:
    """R: Conexión psycopg mínima: LISTEN + una tanda de notificaciones."""

    def __init__(self, payloads):
        self.executed: list = []
        self._pending = [SimpleNamespace(payload=p) for p in payloads]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query):
        self.executed.append(query)

    def notifies(self, timeout=None):
        batch, self._pending = self._pending, []
        if not batch:
            threading.Event().wait(timeout or 0.01)
        return iter(batch)


class TestDecodeNotification:
    def test_valid_payload(self):
        event = decode_notification(_payload(change="update", record={"id": "p1"}))

        assert event == ChangeEvent("resources", ChangeType.UPDATE, {"id": "p1"})

    @pytest.mark.parametrize(
        "payload",
        ["not json", json.dumps({"type": "INSERT"}), json.dumps({"table": "t", "type": "TRUNCATE"})],
    )
    def test_malformed_payload_is_dropped(self, payload):
        assert decode_notification(payload) is None

    def test_non_object_record_is_ignored(self):
        event = decode_notification(json.dumps({"table": "t", "type": "DELETE", "record": 3}))
        assert event.record is None


class TestCallbackRegistry:
    def test_dispatch_only_to_table_subscribers(self):
        registry = CallbackRegistry()
        seen = []
        registry.add("resources", seen.append)
        registry.add("projects", lambda e: seen.append("wrong"))

        delivered = registry.dispatch(ChangeEvent("resources", ChangeType.INSERT))

        assert delivered == 1
        assert seen == [ChangeEvent("resources", ChangeType.INSERT)]

    def test_failing_listener_does_not_block_others(self):
        registry = CallbackRegistry()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        registry.add("resources", broken)
        registry.add("resources", seen.append)

        assert registry.dispatch(ChangeEvent("resources", ChangeType.DELETE)) == 2
        assert len(seen) == 1

    def test_closed_subscription_stops_delivery(self):
        registry = CallbackRegistry()
        seen = []
        subscription = registry.add("resources", seen.append)

        subscription.close()
        subscription.close()
        registry.dispatch(ChangeEvent("resources", ChangeType.INSERT))

        assert seen == []
        assert subscription.closed
        assert not registry.has_subscribers()


class TestPgChangeFeed:
    def test_requires_database_url(self):
        with pytest.raises(ChangeFeedError):
            PgChangeFeed("")

    def test_handle_payload_dispatches(self):
        feed = PgChangeFeed("postgresql://x", connect=lambda *a, **k: FakeConnection([]))
        seen = []
        feed._registry.add("categories", seen.append)

        feed.handle_payload(_payload(table="categories"))
        feed.handle_payload("garbage")

        assert [e.table for e in seen] == ["categories"]

    def test_listener_thread_delivers_notifications(self):
        connection = FakeConnection([_payload(table="projects", change="insert")])
        connect_calls = []

        def connect(url, **kwargs):
            connect_calls.append((url, kwargs))
            return connection

        feed = PgChangeFeed("postgresql://db/vault", poll_seconds=0.01, connect=connect)
        received = threading.Event()
        events = []

        def on_change(event):
            events.append(event)
            received.set()

        feed.subscribe("projects", on_change)
        try:
            assert received.wait(timeout=2)
        finally:
            feed.close()

        assert events[0].change_type == ChangeType.INSERT
        assert connect_calls == [("postgresql://db/vault", {"autocommit": True})]
        assert len(connection.executed) == 1
        assert not feed.listening
