"""
Shared types for brainlog.

Note and profile dataclasses plus the result objects returned by the sync
operations. These are the vocabulary shared by the storage adapters, the
sync components and the CLI.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

# === Shared Utility Functions ===


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_millis() -> int:
    """Get the current time as integer milliseconds since the epoch."""
    return int(utc_now().timestamp() * 1000)


def parse_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse ISO datetime string, returning None when it is empty or invalid."""
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None


# === Enums ===


class ItemType(str, Enum):
    """Polymorphic tag of a note record."""

    FOLDER = "folder"
    DOCUMENT = "document"


class Theme(str, Enum):
    """Theme preference. SYSTEM defers to the runtime light/dark signal."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class ProfileStatus(str, Enum):
    """Outcome of a profile sync."""

    APPLIED = "applied"  # Remote row found and applied locally
    BOOTSTRAPPED = "bootstrapped"  # No remote row, local defaults pushed
    FAILED = "failed"  # Fetch failed, local state untouched
    SKIPPED = "skipped"  # Not attempted


# === Defaults ===

DEFAULT_THEME = Theme.SYSTEM.value
DEFAULT_VIEW_MODE = "grid"
DEFAULT_DAILY_GOAL = 0


# === Records ===


@dataclass
class NoteItem:
    """A note or folder in the local tree.

    ``updated_at`` is integer milliseconds since the epoch. ``extra`` keeps
    any unknown keys found in the persisted snapshot so they survive a
    rewrite of the local list.
    """

    id: str
    type: str = ItemType.DOCUMENT.value
    parent_id: Optional[str] = None
    name: str = ""
    content: str = ""
    is_trashed: bool = False
    updated_at: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return self.type == ItemType.FOLDER.value


@dataclass
class LocalSettings:
    """Profile settings persisted on this device."""

    theme: str = DEFAULT_THEME
    view_mode: str = DEFAULT_VIEW_MODE
    daily_goal: int = DEFAULT_DAILY_GOAL
    stats: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Profile:
    """Remote profile record, one per user id."""

    id: str
    theme: Optional[str] = None
    view_mode: Optional[str] = None
    daily_goal: Optional[int] = None
    stats: Optional[Dict[str, Any]] = None
    updated_at: Optional[datetime] = None


@dataclass
class User:
    """The authenticated account as far as sync is concerned."""

    id: str
    email: Optional[str] = None


@dataclass
class AuthResult:
    """Result of a sign-up or sign-in call."""

    user: Optional[User] = None
    session: Optional[Any] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.user is not None


# === Results ===


@dataclass
class ProfileSyncResult:
    """Result of pulling (or bootstrapping) the profile record."""

    status: ProfileStatus = ProfileStatus.SKIPPED
    applied_fields: List[str] = field(default_factory=list)
    resolved_theme: Optional[str] = None
    errors: List[str] = field(default_factory=list)


@dataclass
class SyncResult:
    """Result of a full sync pass."""

    synced: bool = False  # False when no user session was available
    total: int = 0  # Records in the merged snapshot
    pulled: int = 0  # Remote records that replaced or added a local entry
    kept_local: int = 0  # Remote records that lost to the local copy
    errors: List[str] = field(default_factory=list)
    profile: ProfileSyncResult = field(default_factory=ProfileSyncResult)

    @property
    def success(self) -> bool:
        return self.synced and len(self.errors) == 0 and not self.profile.errors


@dataclass
class BackupResult:
    """Result of a full backup (upload_all)."""

    attempted: bool = False
    uploaded: int = 0
    user_id: Optional[str] = None
    profile_pushed: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.attempted and len(self.errors) == 0


@dataclass
class LogoutResult:
    """Result of the logout sequence. ``steps`` lists the steps in order run."""

    steps: List[str] = field(default_factory=list)
    backup: BackupResult = field(default_factory=BackupResult)
    signed_out: bool = False
    wiped: bool = False
    redirect_to: Optional[str] = None
    errors: List[str] = field(default_factory=list)
