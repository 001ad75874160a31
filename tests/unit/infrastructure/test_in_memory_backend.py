"""
Name: In-Memory Backend Tests

Responsibilities:
  - Row store semantics (insert/upsert/update/delete, unique constraints)
  - ORDER BY with NULLS LAST / NULLS FIRST
  - Change events published per write
  - Auth accounts and file storage doubles
"""

import pytest

from resourcevault.crosscutting.exceptions import AuthError, NotAuthenticatedError, RemoteStoreError
from resourcevault.domain.services import ChangeType, Ordering, RowFilter
from resourcevault.infrastructure.in_memory import (
    InMemoryAuth,
    InMemoryFileStorage,
    InMemoryTableGateway,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def gateway() -> InMemoryTableGateway:
    return InMemoryTableGateway()


class TestRowStore:
    def test_insert_assigns_id_and_returns_copies(self, gateway):
        saved = gateway.insert("resources", [{"data": {"name": "Laptop"}}])[0]
        saved["data"]["name"] = "mutated"

        stored = gateway.select("resources")
        assert stored[0]["id"] == saved["id"]
        assert stored[0]["data"] == {"name": "Laptop"}
        assert stored[0]["created_at"]

    def test_duplicate_primary_key_is_rejected(self, gateway):
        gateway.insert("resources", [{"id": "r1"}])

        with pytest.raises(RemoteStoreError) as exc:
            gateway.insert("resources", [{"id": "r1"}])

        assert exc.value.store_code == "23505"

    def test_unique_project_code(self, gateway):
        gateway.insert("projects", [{"id": "p1", "code": "PRJ-001"}])

        with pytest.raises(RemoteStoreError, match="projects_code_key"):
            gateway.insert("projects", [{"id": "p2", "code": "PRJ-001"}])
        gateway.insert("projects", [{"id": "p3", "code": "PRJ-002"}])
        with pytest.raises(RemoteStoreError):
            gateway.update("projects", {"code": "PRJ-001"}, filters=[RowFilter.eq("id", "p3")])

    def test_upsert_merges_existing_row(self, gateway):
        gateway.insert("system_config", [{"id": 1, "config": {"siteName": "A"}, "extra": True}])

        gateway.upsert("system_config", [{"id": 1, "config": {"siteName": "B"}}])

        assert gateway.select("system_config")[0]["config"] == {"siteName": "B"}
        assert gateway.select("system_config")[0]["extra"] is True
        assert gateway.count("system_config") == 1

    def test_filters_compare_as_text(self, gateway):
        gateway.insert("system_config", [{"id": 1}])

        assert gateway.select("system_config", filters=[RowFilter.eq("id", "1")])
        assert not gateway.select("system_config", filters=[RowFilter.neq("id", 1)])

    def test_ordering_places_nulls_like_postgres(self, gateway):
        gateway.insert(
            "resources",
            [
                {"id": "a", "created_at": 2},
                {"id": "b", "created_at": None},
                {"id": "c", "created_at": 1},
            ],
        )

        asc = gateway.select("resources", order=[Ordering("created_at")])
        desc = gateway.select("resources", order=[Ordering("created_at", ascending=False)], limit=2)

        assert [r["id"] for r in asc] == ["c", "a", "b"]
        assert [r["id"] for r in desc] == ["b", "a"]

    def test_update_and_delete(self, gateway):
        gateway.insert("profiles", [{"id": "u1", "username": "an", "role": "user"}])

        gateway.update("profiles", {"role": "admin"}, filters=[RowFilter.eq("id", "u1")])
        assert gateway.select("profiles")[0]["role"] == "admin"

        gateway.delete("profiles", filters=[RowFilter.eq("id", "u1")])
        assert gateway.count("profiles") == 0


class TestChangeEvents:
    def test_writes_publish_events_per_table(self, gateway):
        events = []
        gateway.subscribe("resources", events.append)

        gateway.insert("resources", [{"id": "r1"}])
        gateway.upsert("resources", [{"id": "r1", "data": {}}])
        gateway.delete("resources", filters=[RowFilter.eq("id", "r1")])
        gateway.insert("projects", [{"id": "p1", "code": "X"}])

        assert [e.change_type for e in events] == [
            ChangeType.INSERT,
            ChangeType.UPDATE,
            ChangeType.DELETE,
        ]
        assert events[-1].record["id"] == "r1"

    def test_listener_may_read_back_during_dispatch(self, gateway):
        counts = []
        gateway.subscribe("resources", lambda e: counts.append(gateway.count("resources")))

        gateway.insert("resources", [{"id": "r1"}, {"id": "r2"}])

        assert counts == [2, 2]


class TestAuthDouble:
    def test_sign_in_and_password_change(self):
        auth = InMemoryAuth()
        user_id = auth.add_account("an@example.com", "secret123")

        session = auth.sign_in_with_password("an@example.com", "secret123")
        auth.update_password("changed1")
        auth.sign_out()

        assert session.user_id == user_id
        assert auth.get_session() is None
        with pytest.raises(AuthError):
            auth.sign_in_with_password("an@example.com", "secret123")
        auth.sign_in_with_password("an@example.com", "changed1")

    def test_password_change_without_session(self):
        with pytest.raises(NotAuthenticatedError):
            InMemoryAuth().update_password("x")

    def test_sign_up_rejects_existing_email(self):
        auth = InMemoryAuth()
        auth.sign_up("an@example.com", "secret123")

        with pytest.raises(AuthError):
            auth.sign_up("an@example.com", "other123")


def test_file_storage_keeps_objects_by_bucket():
    storage = InMemoryFileStorage()

    storage.upload("avatars", "u1/1.png", b"png", "image/png")

    assert storage.get_object("avatars", "u1/1.png") == (b"png", "image/png")
    assert storage.get_object("avatars", "missing") is None
    assert storage.get_public_url("avatars", "u1/1.png") == "memory://storage/avatars/u1/1.png"
