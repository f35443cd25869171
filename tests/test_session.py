"""Tests for the logout sequence: backup before wipe, sign-out, redirect."""

import logging

import pytest
import pytest_asyncio

from brainlog.storage import NOTES_KEY
from brainlog.storage.base import SESSION_KEYS, THEME_KEY
from brainlog.sync import SessionLifecycle
from brainlog.types import LocalSettings, NoteItem


def event_names(events):
    return [e[0] for e in events]


@pytest_asyncio.fixture
async def seeded(local):
    await local.replace_notes([NoteItem(id=f"n{i}", updated_at=i) for i in range(3)])
    local.save_settings(LocalSettings(theme="dark", daily_goal=200, stats={"d": 1}))
    return local


class TestLogoutOrdering:
    @pytest.mark.asyncio
    async def test_backup_precedes_sign_out_and_wipe(self, session, seeded, events, redirects):
        result = await session.logout()

        names = event_names(events)
        assert names.index("upsert_notes") < names.index("sign_out") < names.index("delete_keys")
        assert events[names.index("upsert_notes")] == ("upsert_notes", ["n0", "n1", "n2"])
        assert result.steps == ["backup", "sign_out", "wipe", "redirect"]
        assert redirects == ["login.html"]
        assert result.redirect_to == "login.html"

    @pytest.mark.asyncio
    async def test_wipe_removes_session_keys_only(self, session, seeded, medium, events):
        result = await session.logout()

        assert result.wiped
        assert ("delete_keys", SESSION_KEYS) in events
        assert medium.get(NOTES_KEY) is None
        assert medium.get(THEME_KEY) == "dark"

    @pytest.mark.asyncio
    async def test_profile_pushed_before_wipe(self, session, seeded, remote):
        await session.logout()
        assert remote.profiles["user-1"]["daily_goal"] == 200

    @pytest.mark.asyncio
    async def test_backup_failure_still_wipes_after_attempt(self, session, seeded, remote, medium, events):
        remote.fail_upsert_notes = True

        result = await session.logout()

        names = event_names(events)
        assert names.index("upsert_notes") < names.index("delete_keys")
        assert len(remote.note_upserts[0]) == 3
        assert result.wiped
        assert result.backup.errors
        assert medium.get(NOTES_KEY) is None

    @pytest.mark.asyncio
    async def test_sign_out_failure_is_not_fatal(self, session, seeded, auth, medium, redirects):
        auth.fail_sign_out = True

        result = await session.logout()

        assert result.signed_out is False
        assert result.wiped is True
        assert any("Sign-out failed" in e for e in result.errors)
        assert redirects == ["login.html"]

    @pytest.mark.asyncio
    async def test_empty_snapshot_skips_upload(self, session, events, redirects):
        result = await session.logout()

        assert "upsert_notes" not in event_names(events)
        assert result.backup.attempted is False
        assert result.wiped
        assert redirects == ["login.html"]

    @pytest.mark.asyncio
    async def test_writes_logout_event(self, session, seeded, brainlog_home):
        await session.logout()
        text = next((brainlog_home / "logs").glob("sync-events-*.log")).read_text()
        assert "logout | user=user-1 | wiped=True, backup_ok=True" in text


class TestBackupGate:
    @pytest.mark.asyncio
    async def test_failed_backup_aborts_when_required(
        self, reconciler, auth, local, seeded, remote, events, redirects, medium
    ):
        lifecycle = SessionLifecycle(
            reconciler, auth, local, navigate=redirects.append, require_backup_before_wipe=True
        )
        remote.fail_upsert_notes = True

        result = await lifecycle.logout()

        assert result.steps == ["backup"]
        assert result.wiped is False
        assert result.signed_out is False
        assert "sign_out" not in event_names(events)
        assert "delete_keys" not in event_names(events)
        assert [n.id for n in await local.read_notes()] == ["n0", "n1", "n2"]
        assert redirects == []

    @pytest.mark.asyncio
    async def test_successful_backup_proceeds_when_required(
        self, reconciler, auth, local, seeded, redirects
    ):
        lifecycle = SessionLifecycle(
            reconciler,
            auth,
            local,
            navigate=redirects.append,
            login_url="/signin",
            require_backup_before_wipe=True,
        )

        result = await lifecycle.logout()

        assert result.wiped
        assert redirects == ["/signin"]


class TestDefaultNavigate:
    @pytest.mark.asyncio
    async def test_without_navigate_callback(self, reconciler, auth, local, caplog):
        lifecycle = SessionLifecycle(reconciler, auth, local)
        with caplog.at_level(logging.INFO):
            result = await lifecycle.logout()
        assert result.redirect_to == "login.html"
        assert "Redirecting to login.html" in caplog.text
