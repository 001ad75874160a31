"""
Name: Live List & Console Session Tests

Responsibilities:
  - Live lists reload on change events and re-fetch after overlapping changes
  - Reload failures keep the previous items and expose the error
  - Session login/logout lifecycle (actor context, live lists, notices)
  - Duplicate submissions are dropped while one is in flight
"""

import pytest

from resourcevault.application.live_list import LiveList
from resourcevault.application.usecases import SaveProjectInput, SaveSystemConfigInput
from resourcevault.container import get_save_project_use_case
from resourcevault.context import get_context_dict
from resourcevault.crosscutting.exceptions import NotAuthenticatedError, RemoteStoreError
from resourcevault.domain.entities import Role, SystemConfig, User
from resourcevault.domain.services import PROJECTS_TABLE
from resourcevault.session import ConsoleSession, NoticeLevel

pytestmark = pytest.mark.unit

PASSWORD = "secret123"


@pytest.fixture
def session(services) -> ConsoleSession:
    user_id = services.auth.add_account("admin@example.com", PASSWORD)
    services.profiles.insert_profile(
        User(id=user_id, username="admin", email="admin@example.com", role=Role.ADMIN)
    )
    console = ConsoleSession(services)
    console.start()
    return console


class TestLiveList:
    def test_reloads_when_table_changes(self, services, admin_user):
        updates = []
        live = LiveList(
            services.projects.list_projects,
            services.feed,
            [PROJECTS_TABLE],
            on_update=updates.append,
        ).start()

        get_save_project_use_case(services).execute(SaveProjectInput(admin_user, "PRJ-001", "Alpha"))

        assert [p.code for p in live.items] == ["PRJ-001"]
        assert len(updates) == 2
        live.close()
        assert not live.subscribed

    def test_change_during_reload_triggers_another_fetch(self, services, admin_user):
        saved = []

        def loader():
            projects = services.projects.list_projects()
            if not saved:
                saved.append(True)
                get_save_project_use_case(services).execute(
                    SaveProjectInput(admin_user, "PRJ-001", "Alpha")
                )
            return projects

        live = LiveList(loader, services.feed, [PROJECTS_TABLE]).start()

        stored = [p.code for p in services.projects.list_projects()]
        assert stored == ["PRJ-001"]
        assert [p.code for p in live.items] == stored
        assert not live.loading
        live.close()

    def test_reload_while_loading_returns_false(self):
        calls = []

        def loader():
            if not calls:
                calls.append(live.reload())
            return []

        live = LiveList(loader, None, [PROJECTS_TABLE])

        assert live.reload() is True
        assert calls == [False]

    def test_failed_reload_keeps_previous_items(self):
        responses = [[1, 2], RemoteStoreError("offline")]

        def loader():
            result = responses.pop(0)
            if isinstance(result, Exception):
                raise result
            return result

        live = LiveList(loader, None, ["t"])
        live.reload()
        live.reload()

        assert live.items == [1, 2]
        assert live.error.message == "offline"
        assert not live.loading

    def test_context_manager_closes_subscriptions(self, services):
        with LiveList(lambda: [], services.feed, [PROJECTS_TABLE, "resources"]) as live:
            assert live.subscribed
        assert not live.subscribed

    def test_without_feed_only_loads_once(self):
        live = LiveList(lambda: ["x"], None, ["t"]).start()

        assert live.items == ["x"]
        assert not live.subscribed


class TestConsoleSession:
    def test_start_without_session_has_no_user(self, services):
        console = ConsoleSession(services)

        assert console.start() is None
        assert console.system_config.site_name == "Resource Vault"
        with pytest.raises(NotAuthenticatedError):
            console.require_user()

    def test_login_sets_actor_context_and_notice(self, session):
        result = session.login("admin", PASSWORD)

        assert result.user.username == "admin"
        assert session.require_user().role == Role.ADMIN
        assert get_context_dict()["actor"] == "admin"
        notices = session.drain_notices()
        assert notices[-1].level == NoticeLevel.SUCCESS
        assert session.drain_notices() == []

    def test_failed_login_queues_error(self, session):
        session.login("ghost", PASSWORD)

        assert session.current_user is None
        assert session.drain_notices()[-1].message == "Username not found"

    def test_logout_closes_lists_and_clears_context(self, session, services):
        session.login("admin", PASSWORD)
        live = session.watch("projects", services.projects.list_projects, [PROJECTS_TABLE])
        assert live.subscribed

        session.logout()

        assert session.current_user is None
        assert session.live_list("projects") is None
        assert not live.subscribed
        assert get_context_dict() == {}

    def test_watch_replaces_previous_list(self, session, services):
        first = session.watch("projects", lambda: [], [PROJECTS_TABLE])
        second = session.watch("projects", lambda: [], [PROJECTS_TABLE])

        assert not first.subscribed
        assert session.live_list("projects") is second

    def test_duplicate_submission_is_dropped(self, session):
        inner = []

        def action():
            inner.append(session.submit("save-project", lambda: "nested"))
            assert session.is_submitting("save-project")
            return "done"

        assert session.submit("save-project", action) == "done"
        assert inner == [None]
        assert not session.is_submitting("save-project")

    def test_notify_result(self, session, services):
        session.login("admin", PASSWORD)
        admin = session.require_user()
        save = get_save_project_use_case(services)
        session.drain_notices()

        ok = session.notify_result(save.execute(SaveProjectInput(admin, "P-1", "A")), "Saved")
        failed = session.notify_result(save.execute(SaveProjectInput(admin, "P-1", "B")), "Saved")

        assert ok is True
        assert failed is False
        assert [n.level for n in session.drain_notices()] == [
            NoticeLevel.SUCCESS,
            NoticeLevel.ERROR,
        ]

    def test_update_current_user_ignores_other_users(self, session):
        session.login("admin", PASSWORD)
        me = session.require_user()

        session.update_current_user(User(id="someone-else", username="x", full_name="Other"))
        session.update_current_user(User(id=me.id, username="admin", full_name="Quản trị"))

        assert session.require_user().full_name == "Quản trị"

    def test_dark_mode_toggle(self, session):
        assert session.toggle_dark_mode() is True
        assert session.toggle_dark_mode() is False

    def test_saved_settings_refresh_the_cache(self, session):
        session.login("admin", PASSWORD)
        admin = session.require_user()

        result = session.save_system_config(
            SaveSystemConfigInput(admin, SystemConfig(site_name="Kho", allow_registration=False))
        )

        assert result.error is None
        assert session.system_config.site_name == "Kho"
        assert session.system_config.allow_registration is False
