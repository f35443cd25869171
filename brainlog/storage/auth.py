"""Supabase auth wrapper.

Sign-out here only revokes the session. Clearing local data is the job of
``SessionLifecycle.logout`` so that the backup always runs first.
"""

import logging
from typing import Any, Dict, Optional

from supabase import AsyncClient, AuthApiError

from brainlog.types import AuthResult, User

logger = logging.getLogger(__name__)


def _to_user(raw: Any) -> Optional[User]:
    if raw is None:
        return None
    return User(id=str(raw.id), email=getattr(raw, "email", None))


class SupabaseAuth:
    """AuthProvider implementation over an async Supabase client."""

    def __init__(self, client: AsyncClient):
        self._client = client

    async def sign_up(self, email: str, password: str) -> AuthResult:
        try:
            response = await self._client.auth.sign_up({"email": email, "password": password})
        except AuthApiError as e:
            logger.info(f"Sign-up rejected for {email}: {e.message}")
            return AuthResult(error=e.message)
        return AuthResult(user=_to_user(response.user), session=response.session)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            response = await self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as e:
            logger.info(f"Sign-in rejected for {email}: {e.message}")
            return AuthResult(error=e.message)
        return AuthResult(user=_to_user(response.user), session=response.session)

    async def sign_out(self) -> None:
        await self._client.auth.sign_out()

    async def restore_session(self, access_token: str, refresh_token: str) -> bool:
        """Resume a session persisted by a previous process. Returns False if it was rejected."""
        try:
            await self._client.auth.set_session(access_token, refresh_token)
        except AuthApiError as e:
            logger.info(f"Stored session rejected: {e.message}")
            return False
        return True

    async def session_tokens(self) -> Optional[Dict[str, str]]:
        """Current access/refresh tokens, or None when there is no session."""
        session = await self._client.auth.get_session()
        if session is None:
            return None
        return {"access_token": session.access_token, "refresh_token": session.refresh_token}

    async def get_user(self) -> Optional[User]:
        """Return the signed-in user, or None when there is no usable session."""
        try:
            response = await self._client.auth.get_user()
        except AuthApiError as e:
            logger.debug(f"No usable session: {e.message}")
            return None
        if response is None:
            return None
        return _to_user(response.user)
