"""Local persistence for brainlog.

Two key/value media (SQLite on disk, a dict in memory) and the LocalStore
that owns the note snapshot and the profile settings on top of them.

The snapshot is a single shared resource, so every read-modify-write goes
through ``LocalStore.lock``. The wholesale merge write and the targeted
mutation handlers therefore cannot interleave.
"""

import asyncio
import contextlib
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from brainlog.types import LocalSettings, NoteItem

from .base import (
    DAILY_GOAL_KEY,
    NOTES_KEY,
    SESSION_KEYS,
    SETTINGS_KEYS,
    STATS_KEY,
    THEME_KEY,
    VIEW_MODE_KEY,
    KeyValueMedium,
)
from .schema import (
    note_from_local,
    note_to_local,
    settings_from_values,
    settings_to_values,
)

logger = logging.getLogger(__name__)

KV_SCHEMA = """
CREATE TABLE IF NOT EXISTS local_kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SQLiteMedium:
    """Key/value medium stored in a single SQLite table.

    Args:
        db_path: Database file. Parent directories are created as needed.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(KV_SCHEMA)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA busy_timeout=5000")
        return conn

    @contextlib.contextmanager
    def _connect(self):
        """Yield a connection; commit on success, roll back on error, always close."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM local_kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set_many(self, values: Mapping[str, str]) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO local_kv (key, value, updated_at) VALUES (?, ?, ?)",
                [(key, value, now) for key, value in values.items()],
            )

    def delete_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        placeholders = ",".join("?" * len(keys))
        with self._connect() as conn:
            conn.execute(f"DELETE FROM local_kv WHERE key IN ({placeholders})", keys)


class MemoryMedium:
    """Key/value medium kept in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        self.data.update(values)

    def delete_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.data.pop(key, None)


class LocalStore:
    """Owner of the local note snapshot and profile settings.

    Methods prefixed with an underscore assume the caller holds ``lock``;
    the public coroutines take it themselves.
    """

    def __init__(self, medium: KeyValueMedium):
        self.medium = medium
        self.lock = asyncio.Lock()

    # === Snapshot ===

    def _read_notes(self) -> List[NoteItem]:
        """Read the snapshot. Malformed data degrades to an empty list."""
        raw = self.medium.get(NOTES_KEY)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Local note snapshot is not valid JSON, treating as empty")
            return []
        if not isinstance(entries, list):
            logger.warning("Local note snapshot is not a list, treating as empty")
            return []

        notes = []
        for entry in entries:
            note = note_from_local(entry)
            if note is None:
                logger.warning(f"Dropping malformed snapshot entry: {str(entry)[:80]}")
                continue
            notes.append(note)
        return notes

    def _write_notes(self, notes: List[NoteItem]) -> None:
        """Replace the snapshot wholesale."""
        payload = json.dumps([note_to_local(n) for n in notes])
        self.medium.set_many({NOTES_KEY: payload})

    async def read_notes(self) -> List[NoteItem]:
        async with self.lock:
            return self._read_notes()

    async def replace_notes(self, notes: List[NoteItem]) -> None:
        async with self.lock:
            self._write_notes(notes)

    async def upsert_note(self, note: NoteItem) -> None:
        """Insert or replace one note by id, keeping the position of an existing entry."""
        async with self.lock:
            notes = self._read_notes()
            for i, existing in enumerate(notes):
                if existing.id == note.id:
                    notes[i] = note
                    break
            else:
                notes.append(note)
            self._write_notes(notes)

    async def remove_note(self, note_id: str) -> bool:
        """Remove one note by id. Returns True if it was present."""
        async with self.lock:
            notes = self._read_notes()
            remaining = [n for n in notes if n.id != note_id]
            if len(remaining) == len(notes):
                return False
            self._write_notes(remaining)
            return True

    async def get_note(self, note_id: str) -> Optional[NoteItem]:
        for note in await self.read_notes():
            if note.id == note_id:
                return note
        return None

    # === Settings ===

    def load_settings(self) -> LocalSettings:
        """Load all settings at once, applying defaults for absent values."""
        return settings_from_values(
            theme=self.medium.get(THEME_KEY),
            view_mode=self.medium.get(VIEW_MODE_KEY),
            daily_goal=self.medium.get(DAILY_GOAL_KEY),
            stats=self.medium.get(STATS_KEY),
        )

    def save_settings(self, settings: LocalSettings, fields: Optional[Iterable[str]] = None) -> None:
        """Save settings in one transaction.

        Args:
            settings: Values to persist.
            fields: Subset of LocalSettings field names to write (default: all).
        """
        values = settings_to_values(settings)
        key_map = dict(zip(("theme", "view_mode", "daily_goal", "stats"), SETTINGS_KEYS))
        selected = list(fields) if fields is not None else list(key_map)
        self.medium.set_many({key_map[f]: values[f] for f in selected})

    # === Session ===

    async def clear_session_data(self) -> None:
        """Erase the note snapshot, stats cache and daily goal in one transaction."""
        async with self.lock:
            self.medium.delete_many(SESSION_KEYS)
