"""Profile sync: theme, view mode, daily goal and stats.

Pull-then-fallback-push. A remote row, when present, is applied field by
field; a missing row means this account has never synced a profile, so the
local values are pushed to create it.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from brainlog.errors import RecordNotFound, RemoteStoreError
from brainlog.storage.base import AuthProvider, RemoteStore, ThemeContext
from brainlog.storage.local import LocalStore
from brainlog.storage.schema import parse_daily_goal, profile_from_row, profile_to_row
from brainlog.types import ProfileStatus, ProfileSyncResult, Theme, utc_now

logger = logging.getLogger(__name__)


class ProfileSync:
    """Pull and push the profile record for the signed-in user.

    Args:
        auth: Auth provider used by ``update_profile`` to resolve the user.
        remote: Remote store for the ``profiles`` table.
        local: Local settings owner.
        theme_context: UI context that receives the resolved theme.
        clock: Source of the profile modification time.
    """

    def __init__(
        self,
        auth: AuthProvider,
        remote: RemoteStore,
        local: LocalStore,
        theme_context: ThemeContext,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._auth = auth
        self._remote = remote
        self._local = local
        self._theme_context = theme_context
        self._clock = clock

    def resolve_theme(self, theme: str) -> str:
        """Resolve the ``system`` sentinel against the runtime dark-mode signal."""
        if theme == Theme.SYSTEM.value:
            return Theme.DARK.value if self._theme_context.prefers_dark() else Theme.LIGHT.value
        return theme

    async def sync_profile(self, user_id: str) -> ProfileSyncResult:
        """Fetch the profile row and apply it locally, or bootstrap it if missing."""
        try:
            row = await self._remote.fetch_profile(user_id)
        except RecordNotFound:
            logger.info(f"No profile for {user_id}, pushing local settings")
            result = ProfileSyncResult(status=ProfileStatus.BOOTSTRAPPED)
            if not await self.update_profile():
                result.errors.append("Profile bootstrap push failed")
            return result
        except RemoteStoreError as e:
            logger.error(f"Profile fetch error: {e}")
            return ProfileSyncResult(status=ProfileStatus.FAILED, errors=[str(e)])

        profile = profile_from_row(row)
        settings = self._local.load_settings()
        applied: List[str] = []

        # Only truthy values overwrite local ones
        if profile.theme:
            settings.theme = profile.theme
            applied.append("theme")
        if profile.view_mode:
            settings.view_mode = profile.view_mode
            applied.append("view_mode")
        if profile.daily_goal:
            goal = parse_daily_goal(profile.daily_goal)
            if goal is None:
                logger.warning(f"Ignoring unparsable remote daily goal {profile.daily_goal!r}")
            else:
                settings.daily_goal = goal
                applied.append("daily_goal")
        if profile.stats:
            settings.stats = profile.stats
            applied.append("stats")

        if applied:
            self._local.save_settings(settings, fields=applied)

        # The sentinel persists; the UI gets the concrete theme
        resolved = self.resolve_theme(settings.theme)
        self._theme_context.apply_theme(resolved)
        logger.debug(f"Applied profile fields {applied}, theme={resolved}")

        return ProfileSyncResult(
            status=ProfileStatus.APPLIED, applied_fields=applied, resolved_theme=resolved
        )

    async def update_profile(self) -> bool:
        """Push the local settings as the profile row. Returns False when signed out or on failure."""
        try:
            user = await self._auth.get_user()
        except Exception as e:
            logger.warning(f"Could not resolve current user, skipping profile push: {e}")
            return False
        if user is None:
            return False

        row = profile_to_row(user.id, self._local.load_settings(), self._clock())
        try:
            await self._remote.upsert_profile(row)
        except RemoteStoreError as e:
            logger.error(f"Profile push error: {e}")
            return False
        return True

    def current_theme(self) -> Optional[str]:
        """The concrete theme the local settings resolve to right now."""
        return self.resolve_theme(self._local.load_settings().theme)
