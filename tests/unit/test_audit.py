"""
Name: Audit Emission Tests

Responsibilities:
  - Entries take the actor from the session context (or an explicit actor)
  - No repository / no actor means no entry
  - Write failures are logged, never raised
"""

import logging

import pytest

from resourcevault.audit import AuditActor, AuditTrail, emit_audit_log
from resourcevault.context import set_actor_context
from resourcevault.domain.entities import AuditAction

pytestmark = pytest.mark.unit


class RecordingAuditRepository:
    def __init__(self, fail: bool = False):
        self.entries = []
        self._fail = fail

    def append(self, entry):
        if self._fail:
            raise RuntimeError("audit table missing")
        self.entries.append(entry)

    def list_recent(self, limit):
        return self.entries[:limit]


def test_actor_comes_from_context():
    repo = RecordingAuditRepository()
    set_actor_context(user_id="u1", username="an")

    emit_audit_log(repo, action=AuditAction.DELETE, target="Resource", details="Deleted r1")

    entry = repo.entries[0]
    assert (entry.user_id, entry.username, entry.action, entry.target, entry.details) == (
        "u1",
        "an",
        AuditAction.DELETE,
        "Resource",
        "Deleted r1",
    )
    assert entry.id


def test_explicit_actor_wins_over_context():
    repo = RecordingAuditRepository()
    set_actor_context(user_id="u1", username="an")

    AuditTrail(repo).record(
        AuditAction.CREATE, "User", actor=AuditActor(user_id="u2", username="binh")
    )

    assert repo.entries[0].username == "binh"


def test_without_actor_nothing_is_written():
    repo = RecordingAuditRepository()

    emit_audit_log(repo, action=AuditAction.UPDATE, target="Settings")

    assert repo.entries == []


def test_without_repository_is_a_noop():
    set_actor_context(user_id="u1", username="an")
    emit_audit_log(None, action=AuditAction.UPDATE, target="Settings")


def test_write_failure_is_logged_not_raised(caplog):
    set_actor_context(user_id="u1", username="an")
    caplog.set_level(logging.WARNING, logger="resourcevault")

    emit_audit_log(
        RecordingAuditRepository(fail=True), action=AuditAction.LOGIN, target="System"
    )

    assert any("auditoría" in r.getMessage() for r in caplog.records)
