"""brainlog storage layer.

Local persistence (SQLite or in-memory key/value media), the Supabase
adapters for the remote tables and auth, and the schema translation between
them.
"""

from .base import (
    NOTES_KEY,
    NOTES_TABLE,
    PROFILES_TABLE,
    SESSION_KEYS,
    AuthProvider,
    KeyValueMedium,
    RemoteStore,
    StaticThemeContext,
    ThemeContext,
)
from .local import LocalStore, MemoryMedium, SQLiteMedium

__all__ = [
    "NOTES_KEY",
    "NOTES_TABLE",
    "PROFILES_TABLE",
    "SESSION_KEYS",
    "AuthProvider",
    "KeyValueMedium",
    "LocalStore",
    "MemoryMedium",
    "RemoteStore",
    "SQLiteMedium",
    "StaticThemeContext",
    "ThemeContext",
]
