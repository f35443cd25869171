"""Note reconciliation between the local snapshot and the remote ``notes`` table.

Last-writer-wins on ``updatedAt``: a remote record replaces the local one
only when it is strictly newer, or when no local copy exists. Equal
timestamps keep the local record, which makes a repeated sync a no-op.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from brainlog.errors import RemoteStoreError
from brainlog.logging_config import log_backup, log_sync
from brainlog.storage.base import AuthProvider, RemoteStore
from brainlog.storage.local import LocalStore
from brainlog.storage.schema import note_from_row, note_to_row, notes_to_rows, to_millis
from brainlog.types import BackupResult, NoteItem, SyncResult, User

from .profile import ProfileSync

logger = logging.getLogger(__name__)

# Stand-in for the timestamp of a record that does not exist locally
EPOCH_ZERO = 0.0


def _timestamp(value: Any) -> Optional[float]:
    """Millis for comparison. A missing (null) timestamp counts as the epoch."""
    if value is None:
        return EPOCH_ZERO
    return to_millis(value)


def _remote_wins(cloud_value: Any, local_note: Optional[NoteItem]) -> bool:
    """Decide whether a remote record replaces the local candidate."""
    if local_note is None:
        return True
    cloud_time = _timestamp(cloud_value)
    local_time = _timestamp(local_note.updated_at)
    if cloud_time is None or local_time is None:
        # An unparseable timestamp never wins a comparison
        return False
    return cloud_time > local_time


def merge_notes(
    local_notes: List[NoteItem], remote_rows: List[Dict[str, Any]]
) -> Tuple[List[NoteItem], int, int]:
    """Merge local notes with remote rows.

    Args:
        local_notes: The current local snapshot.
        remote_rows: Rows from the remote ``notes`` table, in remote schema.

    Returns:
        Tuple of (merged notes, number of remote records taken, number of
        remote records that lost to the local copy). Order of the merged
        list is not significant.
    """
    merged: Dict[str, NoteItem] = {}
    for note in local_notes:
        merged[note.id] = note

    pulled = 0
    kept_local = 0
    for row in remote_rows:
        if not isinstance(row, dict) or not row.get("id"):
            logger.warning(f"Skipping remote note without id: {str(row)[:80]}")
            continue
        local_note = merged.get(row["id"])
        if _remote_wins(row.get("updated_at"), local_note):
            merged[row["id"]] = note_from_row(row)
            pulled += 1
        else:
            kept_local += 1

    return list(merged.values()), pulled, kept_local


class Reconciler:
    """Note sync operations: full merge, targeted push/delete, full backup.

    Args:
        auth: Auth provider used to resolve the current user.
        remote: Remote store for the ``notes`` table.
        local: Owner of the local snapshot.
        profile_sync: Runs after every sync and every backup.
    """

    def __init__(
        self,
        auth: AuthProvider,
        remote: RemoteStore,
        local: LocalStore,
        profile_sync: ProfileSync,
    ):
        self._auth = auth
        self._remote = remote
        self._local = local
        self._profile_sync = profile_sync

    async def _current_user(self) -> Optional[User]:
        try:
            return await self._auth.get_user()
        except Exception as e:
            logger.warning(f"Could not resolve current user, treating as signed out: {e}")
            return None

    async def sync(self) -> SyncResult:
        """Download remote notes, merge them into the local snapshot, then sync the profile.

        Returns a result with ``synced=False`` when nobody is signed in.
        """
        user = await self._current_user()
        if user is None:
            logger.debug("No user session, skipping sync")
            return SyncResult()

        result = SyncResult(synced=True)

        try:
            remote_rows = await self._remote.fetch_notes()
        except RemoteStoreError as e:
            logger.error(f"Notes sync error: {e}")
            result.errors.append(str(e))
            remote_rows = []

        # Fetch first, then read-merge-write under the lock so the merge
        # sees any mutation that landed while the fetch was in flight.
        async with self._local.lock:
            local_notes = self._local._read_notes()
            merged, result.pulled, result.kept_local = merge_notes(local_notes, remote_rows)
            self._local._write_notes(merged)
        result.total = len(merged)

        logger.info(
            f"Notes merged: total={result.total}, pulled={result.pulled}, "
            f"kept_local={result.kept_local}"
        )
        log_sync(user.id, result.total, result.pulled, result.kept_local, len(result.errors))

        result.profile = await self._profile_sync.sync_profile(user.id)
        return result

    async def push_item(self, item: NoteItem) -> bool:
        """Upsert one note remotely. Returns False when signed out or on failure."""
        user = await self._current_user()
        if user is None:
            return False

        try:
            await self._remote.upsert_notes([note_to_row(item, user.id)])
        except RemoteStoreError as e:
            logger.error(f"Failed to push note {item.id}: {e}")
            return False
        return True

    async def delete_item(self, item_id: str) -> bool:
        """Delete one note remotely.

        The local snapshot is not touched; removing the note locally is the
        caller's job (see ``BrainlogClient.delete_note``).
        """
        try:
            await self._remote.delete_note(item_id)
        except RemoteStoreError as e:
            logger.error(f"Failed to delete note {item_id}: {e}")
            return False
        return True

    async def upload_all(self) -> BackupResult:
        """Upload every local note in one batch upsert, then push the profile.

        Runs unconditionally on logout and re-sends everything each time.
        Silently does nothing when signed out or when there are no notes.
        """
        user = await self._current_user()
        if user is None:
            return BackupResult()

        notes = await self._local.read_notes()
        if not notes:
            return BackupResult(user_id=user.id)

        logger.info(f"Backing up {len(notes)} items to cloud...")
        result = BackupResult(attempted=True, uploaded=len(notes), user_id=user.id)
        try:
            await self._remote.upsert_notes(notes_to_rows(notes, user.id))
            logger.info("Full backup successful")
        except RemoteStoreError as e:
            logger.error(f"Backup error: {e}")
            result.errors.append(str(e))
        log_backup(user.id, len(notes), ok=not result.errors)

        result.profile_pushed = await self._profile_sync.update_profile()
        if not result.profile_pushed:
            result.errors.append("Profile push failed")
        return result
