"""
Pytest fixtures and test configuration for brainlog tests.

The auth provider and remote store are replaced by in-memory fakes that
record every call into a shared ``events`` list, so tests can assert on the
order in which the sync components touch their collaborators.
"""

import copy
from typing import Any, Dict, List, Optional

import pytest

from brainlog import logging_config
from brainlog.config import BrainlogSettings, get_settings
from brainlog.errors import RecordNotFound, RemoteStoreError
from brainlog.storage import LocalStore, MemoryMedium, StaticThemeContext
from brainlog.sync import ProfileSync, Reconciler, SessionLifecycle
from brainlog.types import AuthResult, User


class FakeAuth:
    """AuthProvider double with a switchable signed-in user."""

    def __init__(self, events: List[tuple], user: Optional[User] = None):
        self.events = events
        self.user = user
        self.fail_sign_out = False
        self.accounts: Dict[str, str] = {}

    async def sign_up(self, email: str, password: str) -> AuthResult:
        self.events.append(("sign_up", email))
        if email in self.accounts:
            return AuthResult(error="User already registered")
        self.accounts[email] = password
        self.user = User(id=f"user-{email}", email=email)
        return AuthResult(user=self.user, session={"access_token": "tok"})

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self.events.append(("sign_in", email))
        if self.accounts.get(email) != password:
            return AuthResult(error="Invalid login credentials")
        self.user = User(id=f"user-{email}", email=email)
        return AuthResult(user=self.user, session={"access_token": "tok"})

    async def sign_out(self) -> None:
        self.events.append(("sign_out",))
        if self.fail_sign_out:
            raise ConnectionError("auth server unreachable")
        self.user = None

    async def get_user(self) -> Optional[User]:
        return self.user


class FakeRemote:
    """RemoteStore double backed by dicts, with per-operation failure switches."""

    def __init__(self, events: List[tuple]):
        self.events = events
        self.notes: Dict[str, Dict[str, Any]] = {}
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.fail_fetch_notes = False
        self.fail_upsert_notes = False
        self.fail_delete = False
        self.fail_fetch_profile = False
        self.fail_upsert_profile = False
        self.profile_upserts: List[Dict[str, Any]] = []
        self.note_upserts: List[List[Dict[str, Any]]] = []

    async def fetch_notes(self) -> List[Dict[str, Any]]:
        self.events.append(("fetch_notes",))
        if self.fail_fetch_notes:
            raise RemoteStoreError("Select notes failed: connection reset")
        return [copy.deepcopy(row) for row in self.notes.values()]

    async def upsert_notes(self, rows: List[Dict[str, Any]]) -> None:
        self.events.append(("upsert_notes", [row["id"] for row in rows]))
        self.note_upserts.append(copy.deepcopy(rows))
        if self.fail_upsert_notes:
            raise RemoteStoreError("Upsert notes failed: 503")
        for row in rows:
            self.notes[row["id"]] = copy.deepcopy(row)

    async def delete_note(self, note_id: str) -> None:
        self.events.append(("delete_note", note_id))
        if self.fail_delete:
            raise RemoteStoreError("Delete note failed: 503")
        self.notes.pop(note_id, None)

    async def fetch_profile(self, user_id: str) -> Dict[str, Any]:
        self.events.append(("fetch_profile", user_id))
        if self.fail_fetch_profile:
            raise RemoteStoreError("Select profile failed: 500", code="XX000")
        if user_id not in self.profiles:
            raise RecordNotFound("Select profile: no matching row", code="PGRST116")
        return copy.deepcopy(self.profiles[user_id])

    async def upsert_profile(self, row: Dict[str, Any]) -> None:
        self.events.append(("upsert_profile", row["id"]))
        self.profile_upserts.append(copy.deepcopy(row))
        if self.fail_upsert_profile:
            raise RemoteStoreError("Upsert profile failed: 503")
        self.profiles[row["id"]] = copy.deepcopy(row)


class RecordingMedium(MemoryMedium):
    """MemoryMedium that records deletions into the shared event list."""

    def __init__(self, events: List[tuple]):
        super().__init__()
        self.events = events

    def delete_many(self, keys):
        keys = list(keys)
        self.events.append(("delete_keys", tuple(keys)))
        super().delete_many(keys)


@pytest.fixture(autouse=True)
def brainlog_home(tmp_path, monkeypatch):
    """Keep logs and credentials inside the test's temp directory."""
    home = tmp_path / "brainlog-home"
    monkeypatch.setenv("BRAINLOG_DATA_DIR", str(home))
    monkeypatch.setattr(logging_config, "_data_dir", None)
    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()


@pytest.fixture
def events():
    return []


@pytest.fixture
def user():
    return User(id="user-1", email="writer@example.com")


@pytest.fixture
def auth(events, user):
    return FakeAuth(events, user=user)


@pytest.fixture
def remote(events):
    return FakeRemote(events)


@pytest.fixture
def medium(events):
    return RecordingMedium(events)


@pytest.fixture
def local(medium):
    return LocalStore(medium)


@pytest.fixture
def theme_context():
    return StaticThemeContext(dark=False)


@pytest.fixture
def profile_sync(auth, remote, local, theme_context):
    return ProfileSync(auth, remote, local, theme_context)


@pytest.fixture
def reconciler(auth, remote, local, profile_sync):
    return Reconciler(auth, remote, local, profile_sync)


@pytest.fixture
def redirects():
    return []


@pytest.fixture
def session(reconciler, auth, local, redirects):
    return SessionLifecycle(reconciler, auth, local, navigate=redirects.append)


@pytest.fixture
def settings(tmp_path):
    return BrainlogSettings(
        supabase_url="https://test.supabase.co",
        supabase_key="test-publishable-key",
        data_dir=tmp_path / "data",
        login_url="login.html",
    )
