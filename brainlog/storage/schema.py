"""Schema translation between local JSON, NoteItem/Profile and remote rows.

Timestamp conventions differ per table and are converted only here:

- notes: ``updated_at`` is raw milliseconds since the epoch on both sides.
  Pulled values are kept verbatim and pushed values are sent as stored; they
  are never wrapped into a calendar timestamp.
- profiles: ``updated_at`` is a calendar timestamp, sent as ISO-8601 and
  parsed back into an aware ``datetime``.
"""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from brainlog.types import (
    DEFAULT_DAILY_GOAL,
    DEFAULT_THEME,
    DEFAULT_VIEW_MODE,
    LocalSettings,
    NoteItem,
    Profile,
    parse_datetime,
)

logger = logging.getLogger(__name__)

# Local snapshot keys -> NoteItem attributes
_LOCAL_FIELDS = {
    "id": "id",
    "type": "type",
    "parentId": "parent_id",
    "name": "name",
    "content": "content",
    "isTrashed": "is_trashed",
    "updatedAt": "updated_at",
}


def to_millis(value: Any) -> Optional[float]:
    """Convert a timestamp to milliseconds since the epoch.

    Accepts numbers (already millis), numeric strings, ISO-8601 strings and
    datetimes. Returns None for anything that does not parse; callers treat
    None as "cannot win a comparison".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) or math.isinf(value) else float(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            parsed = parse_datetime(text)
            if parsed is None:
                return None
            return to_millis(parsed)
        return None if math.isnan(number) or math.isinf(number) else number
    return None


# === Notes ===


def note_from_local(data: Any) -> Optional[NoteItem]:
    """Build a NoteItem from one entry of the persisted snapshot.

    Returns None for entries that are not objects or have no id.
    """
    if not isinstance(data, dict) or not data.get("id"):
        return None
    kwargs = {attr: data[key] for key, attr in _LOCAL_FIELDS.items() if key in data}
    extra = {k: v for k, v in data.items() if k not in _LOCAL_FIELDS}
    return NoteItem(extra=extra, **kwargs)


def note_to_local(note: NoteItem) -> Dict[str, Any]:
    """Serialize a NoteItem into the persisted snapshot form."""
    data = dict(note.extra)
    data.update(
        {
            "id": note.id,
            "type": note.type,
            "parentId": note.parent_id,
            "name": note.name,
            "content": note.content,
            "isTrashed": note.is_trashed,
            "updatedAt": note.updated_at,
        }
    )
    return data


def note_from_row(row: Dict[str, Any]) -> NoteItem:
    """Translate a remote ``notes`` row into a NoteItem. ``updated_at`` is kept verbatim."""
    return NoteItem(
        id=row["id"],
        type=row.get("type"),
        parent_id=row.get("parent_id"),
        name=row.get("name"),
        content=row.get("content"),
        is_trashed=row.get("is_trashed"),
        updated_at=row.get("updated_at"),
    )


def note_to_row(note: NoteItem, user_id: str) -> Dict[str, Any]:
    """Translate a NoteItem into a remote ``notes`` row scoped to *user_id*."""
    return {
        "id": note.id,
        "user_id": user_id,
        "parent_id": note.parent_id,
        "type": note.type,
        "name": note.name,
        "content": note.content,
        "is_trashed": note.is_trashed,
        # Raw millis; the column is a sortable number, not a timestamp
        "updated_at": note.updated_at,
    }


def notes_to_rows(notes: List[NoteItem], user_id: str) -> List[Dict[str, Any]]:
    return [note_to_row(n, user_id) for n in notes]


# === Profiles ===


def profile_from_row(row: Dict[str, Any]) -> Profile:
    """Translate a remote ``profiles`` row into a Profile."""
    updated_at = row.get("updated_at")
    if isinstance(updated_at, str):
        updated_at = parse_datetime(updated_at)
    return Profile(
        id=row["id"],
        theme=row.get("theme"),
        view_mode=row.get("view_mode"),
        daily_goal=row.get("daily_goal"),
        stats=row.get("stats"),
        updated_at=updated_at,
    )


def profile_to_row(user_id: str, settings: LocalSettings, updated_at: datetime) -> Dict[str, Any]:
    """Package local settings as a remote ``profiles`` row."""
    return {
        "id": user_id,
        "theme": settings.theme,
        "view_mode": settings.view_mode,
        "daily_goal": settings.daily_goal,
        "stats": settings.stats,
        "updated_at": updated_at.isoformat(),
    }


# === Local settings ===


def parse_daily_goal(value: Any) -> Optional[int]:
    """Parse a daily goal from a number or numeric string, truncating fractions.

    Returns None when the value is not a finite number.
    """
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def settings_from_values(
    theme: Optional[str],
    view_mode: Optional[str],
    daily_goal: Optional[str],
    stats: Optional[str],
) -> LocalSettings:
    """Build LocalSettings from raw persisted strings, applying defaults.

    Unparsable daily goal or stats values fall back to their defaults.
    """
    goal = DEFAULT_DAILY_GOAL
    if daily_goal:
        parsed = parse_daily_goal(daily_goal)
        if parsed is None:
            logger.warning(f"Ignoring unparsable daily goal {daily_goal!r}")
        else:
            goal = parsed

    stats_value: Dict[str, Any] = {}
    if stats:
        try:
            loaded = json.loads(stats)
            if isinstance(loaded, dict):
                stats_value = loaded
            else:
                logger.warning("Ignoring stats that are not a JSON object")
        except json.JSONDecodeError:
            logger.warning("Ignoring unparsable stats JSON")

    return LocalSettings(
        theme=theme or DEFAULT_THEME,
        view_mode=view_mode or DEFAULT_VIEW_MODE,
        daily_goal=goal,
        stats=stats_value,
    )


def settings_to_values(settings: LocalSettings) -> Dict[str, str]:
    """Serialize LocalSettings into the raw persisted strings, keyed by field."""
    return {
        "theme": settings.theme,
        "view_mode": settings.view_mode,
        "daily_goal": str(int(settings.daily_goal)),
        "stats": json.dumps(settings.stats),
    }
