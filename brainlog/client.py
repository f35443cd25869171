"""BrainlogClient: wires settings, storage adapters and the sync components.

Typical session::

    client = await BrainlogClient.create()
    await client.sign_in(email, password)
    await client.sync()
    note = await client.create_note("Ideas", content="...")
    await client.logout()
"""

import logging
import uuid
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from .config import BrainlogSettings, get_settings
from .errors import ConfigurationError
from .storage.base import AuthProvider, RemoteStore, StaticThemeContext, ThemeContext
from .storage.local import LocalStore, SQLiteMedium
from .sync import ProfileSync, Reconciler, SessionLifecycle
from .types import (
    AuthResult,
    BackupResult,
    ItemType,
    LogoutResult,
    NoteItem,
    SyncResult,
    User,
    now_millis,
)

if TYPE_CHECKING:
    from supabase import AsyncClient

logger = logging.getLogger(__name__)


class BrainlogClient:
    """Offline-first note client for one device.

    Args:
        auth: Auth provider.
        remote: Remote store.
        local: Local store owning the snapshot and settings.
        theme_context: UI context for theme application.
        settings: Client settings (default: ``get_settings()``).
        navigate: Called with the login URL at the end of logout.
    """

    def __init__(
        self,
        auth: AuthProvider,
        remote: RemoteStore,
        local: LocalStore,
        theme_context: Optional[ThemeContext] = None,
        settings: Optional[BrainlogSettings] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings or get_settings()
        # Set by create(); closed by aclose()
        self._supabase: Optional["AsyncClient"] = None
        self.auth = auth
        self.remote = remote
        self.local = local
        self.theme_context = theme_context or StaticThemeContext(dark=self.settings.prefers_dark)

        self.profile_sync = ProfileSync(auth, remote, local, self.theme_context)
        self.reconciler = Reconciler(auth, remote, local, self.profile_sync)
        self.session = SessionLifecycle(
            self.reconciler,
            auth,
            local,
            navigate=navigate,
            login_url=self.settings.login_url,
            require_backup_before_wipe=self.settings.require_backup_before_wipe,
        )

    @classmethod
    async def create(
        cls,
        settings: Optional[BrainlogSettings] = None,
        theme_context: Optional[ThemeContext] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ) -> "BrainlogClient":
        """Build a client backed by Supabase and a SQLite file in the data directory.

        Raises:
            ConfigurationError: If the Supabase URL or key is not set.
        """
        from supabase import acreate_client

        from .storage.auth import SupabaseAuth
        from .storage.remote import SupabaseRemoteStore

        settings = settings or get_settings()
        if not settings.supabase_url or not settings.supabase_key:
            raise ConfigurationError("BRAINLOG_SUPABASE_URL and BRAINLOG_SUPABASE_KEY must be set")

        supabase = await acreate_client(settings.supabase_url, settings.supabase_key)
        local = LocalStore(SQLiteMedium(settings.db_path))
        client = cls(
            auth=SupabaseAuth(supabase),
            remote=SupabaseRemoteStore(supabase),
            local=local,
            theme_context=theme_context,
            settings=settings,
            navigate=navigate,
        )
        client._supabase = supabase
        return client

    async def aclose(self) -> None:
        """Close the Supabase HTTP sessions opened by ``create()``."""
        supabase, self._supabase = self._supabase, None
        if supabase is None:
            return
        await supabase.auth.close()
        await supabase.postgrest.aclose()

    async def __aenter__(self) -> "BrainlogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # === Auth ===

    async def sign_up(self, email: str, password: str) -> AuthResult:
        return await self.auth.sign_up(email, password)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self.auth.sign_in(email, password)

    async def current_user(self) -> Optional[User]:
        return await self.auth.get_user()

    # === Sync ===

    async def sync(self) -> SyncResult:
        return await self.reconciler.sync()

    async def push_item(self, item: NoteItem) -> bool:
        return await self.reconciler.push_item(item)

    async def delete_item(self, item_id: str) -> bool:
        return await self.reconciler.delete_item(item_id)

    async def upload_all(self) -> BackupResult:
        return await self.reconciler.upload_all()

    async def logout(self) -> LogoutResult:
        return await self.session.logout()

    # === Note mutations ===

    async def list_notes(self, include_trashed: bool = False) -> List[NoteItem]:
        notes = await self.local.read_notes()
        if include_trashed:
            return notes
        return [n for n in notes if not n.is_trashed]

    async def save_note(self, note: NoteItem) -> NoteItem:
        """Stamp, store locally and push one note. The push result does not affect the local save."""
        note.updated_at = now_millis()
        await self.local.upsert_note(note)
        if not await self.reconciler.push_item(note):
            logger.debug(f"Note {note.id} saved locally only")
        return note

    async def create_note(
        self,
        name: str,
        content: str = "",
        item_type: str = ItemType.DOCUMENT.value,
        parent_id: Optional[str] = None,
    ) -> NoteItem:
        note = NoteItem(
            id=str(uuid.uuid4()),
            type=item_type,
            parent_id=parent_id,
            name=name,
            content=content if item_type == ItemType.DOCUMENT.value else "",
        )
        return await self.save_note(note)

    async def trash_note(self, note_id: str, trashed: bool = True) -> Optional[NoteItem]:
        """Toggle the soft-delete flag. Returns None if the note does not exist."""
        note = await self.local.get_note(note_id)
        if note is None:
            return None
        note.is_trashed = trashed
        return await self.save_note(note)

    async def delete_note(self, note_id: str) -> bool:
        """Remove a note locally and remotely. Returns True if it existed locally."""
        removed = await self.local.remove_note(note_id)
        await self.reconciler.delete_item(note_id)
        return removed

    # === Status ===

    async def get_status(self) -> Dict[str, Any]:
        user = await self.auth.get_user()
        notes = await self.local.read_notes()
        local_settings = self.local.load_settings()
        return {
            "signed_in": user is not None,
            "user_id": user.id if user else None,
            "email": user.email if user else None,
            "notes": len(notes),
            "trashed": sum(1 for n in notes if n.is_trashed),
            "theme": local_settings.theme,
            "resolved_theme": self.profile_sync.resolve_theme(local_settings.theme),
            "view_mode": local_settings.view_mode,
            "daily_goal": local_settings.daily_goal,
        }
