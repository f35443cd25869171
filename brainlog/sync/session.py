"""Safe logout: backup, sign out, wipe, redirect.

The backup is always issued before anything local is erased. By default the
wipe does not wait for the backup to succeed; set
``require_backup_before_wipe`` to abort the logout instead when it fails.
"""

import logging
from typing import Callable, Optional

from brainlog.logging_config import log_logout
from brainlog.storage.base import AuthProvider
from brainlog.storage.local import LocalStore
from brainlog.types import LogoutResult

from .reconciler import Reconciler

logger = logging.getLogger(__name__)

STEP_BACKUP = "backup"
STEP_SIGN_OUT = "sign_out"
STEP_WIPE = "wipe"
STEP_REDIRECT = "redirect"


def _log_redirect(url: str) -> None:
    logger.info(f"Redirecting to {url}")


class SessionLifecycle:
    """Runs the logout sequence.

    Args:
        reconciler: Provides the full backup.
        auth: Auth provider to sign out from.
        local: Local store whose session keys are erased.
        navigate: Called with ``login_url`` as the last step.
        login_url: Unauthenticated entry surface.
        require_backup_before_wipe: Abort before sign-out when the backup fails.
    """

    def __init__(
        self,
        reconciler: Reconciler,
        auth: AuthProvider,
        local: LocalStore,
        navigate: Optional[Callable[[str], None]] = None,
        login_url: str = "login.html",
        require_backup_before_wipe: bool = False,
    ):
        self._reconciler = reconciler
        self._auth = auth
        self._local = local
        self._navigate = navigate or _log_redirect
        self.login_url = login_url
        self.require_backup_before_wipe = require_backup_before_wipe

    async def logout(self) -> LogoutResult:
        result = LogoutResult()

        # 1. Back up everything first
        result.backup = await self._reconciler.upload_all()
        result.steps.append(STEP_BACKUP)
        if self.require_backup_before_wipe and result.backup.errors:
            logger.warning("Backup failed, keeping session and local data")
            result.errors.extend(result.backup.errors)
            log_logout(result.backup.user_id, wiped=False, backup_ok=False)
            return result

        # 2. Revoke the session
        try:
            await self._auth.sign_out()
            result.signed_out = True
        except Exception as e:
            logger.error(f"Sign-out failed, wiping local data anyway: {e}")
            result.errors.append(f"Sign-out failed: {e}")
        result.steps.append(STEP_SIGN_OUT)

        # 3. Now it is safe to wipe local data
        await self._local.clear_session_data()
        result.wiped = True
        result.steps.append(STEP_WIPE)
        log_logout(result.backup.user_id, wiped=True, backup_ok=not result.backup.errors)

        # 4. Leave
        self._navigate(self.login_url)
        result.redirect_to = self.login_url
        result.steps.append(STEP_REDIRECT)
        return result
