"""Capability interfaces for brainlog's external collaborators.

Sync code only talks to these protocols:
- KeyValueMedium: the local persistence medium (SQLite or in-memory)
- RemoteStore: the remote ``notes`` and ``profiles`` tables
- AuthProvider: sign-up / sign-in / sign-out / current user
- ThemeContext: the active UI context that receives the resolved theme
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from brainlog.types import AuthResult, User

# Local persistence keys. The names predate this package and are kept as-is
# so existing device data keeps loading.
NOTES_KEY = "elegant_writer_notes"
THEME_KEY = "brainlog_theme"
VIEW_MODE_KEY = "elegant_writer_view_pref"
DAILY_GOAL_KEY = "brainlog_daily_goal"
STATS_KEY = "brainlog_stats"

SETTINGS_KEYS = (THEME_KEY, VIEW_MODE_KEY, DAILY_GOAL_KEY, STATS_KEY)

# Keys erased on logout. Theme and view preference stay with the device.
SESSION_KEYS = (NOTES_KEY, STATS_KEY, DAILY_GOAL_KEY)

# Remote tables
NOTES_TABLE = "notes"
PROFILES_TABLE = "profiles"


@runtime_checkable
class KeyValueMedium(Protocol):
    """Opaque string key/value storage."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        ...

    def set_many(self, values: Mapping[str, str]) -> None:
        """Write all values in one transaction."""
        ...

    def delete_many(self, keys: Iterable[str]) -> None:
        """Remove all keys in one transaction. Missing keys are ignored."""
        ...


@runtime_checkable
class RemoteStore(Protocol):
    """Remote relational store. Rows are plain dicts in remote schema.

    Implementations raise ``RemoteStoreError`` on failure and
    ``RecordNotFound`` when a profile row does not exist.
    """

    async def fetch_notes(self) -> List[Dict[str, Any]]:
        ...

    async def upsert_notes(self, rows: List[Dict[str, Any]]) -> None:
        ...

    async def delete_note(self, note_id: str) -> None:
        ...

    async def fetch_profile(self, user_id: str) -> Dict[str, Any]:
        ...

    async def upsert_profile(self, row: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class AuthProvider(Protocol):
    """Authentication provider. Never touches local data."""

    async def sign_up(self, email: str, password: str) -> AuthResult:
        ...

    async def sign_in(self, email: str, password: str) -> AuthResult:
        ...

    async def sign_out(self) -> None:
        ...

    async def get_user(self) -> Optional[User]:
        ...


@runtime_checkable
class ThemeContext(Protocol):
    """The active UI context."""

    def prefers_dark(self) -> bool:
        """Runtime light/dark preference signal."""
        ...

    def apply_theme(self, theme: str) -> None:
        """Apply a concrete theme (``light`` or ``dark``)."""
        ...


class StaticThemeContext:
    """Theme context for headless use: a fixed dark-mode signal, remembers the last theme."""

    def __init__(self, dark: bool = False):
        self.dark = dark
        self.active_theme: Optional[str] = None

    def prefers_dark(self) -> bool:
        return self.dark

    def apply_theme(self, theme: str) -> None:
        self.active_theme = theme
