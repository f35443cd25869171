"""Supabase-backed remote store.

Row-level security scopes every ``notes`` select to the signed-in user, so
``fetch_notes`` does not filter by user id itself.
"""

import logging
from typing import Any, Dict, List

from supabase import AsyncClient, PostgrestAPIError

from brainlog.errors import RecordNotFound, RemoteStoreError

from .base import NOTES_TABLE, PROFILES_TABLE

logger = logging.getLogger(__name__)

# PostgREST code for a .single() select that matched zero rows
NOT_FOUND_CODE = "PGRST116"


class SupabaseRemoteStore:
    """RemoteStore implementation over an async Supabase client."""

    def __init__(self, client: AsyncClient):
        self._client = client

    async def _execute(self, query, action: str):
        try:
            return await query.execute()
        except PostgrestAPIError as e:
            if e.code == NOT_FOUND_CODE:
                raise RecordNotFound(f"{action}: no matching row", code=e.code) from e
            raise RemoteStoreError(f"{action} failed: {e.message}", code=e.code) from e
        except Exception as e:
            raise RemoteStoreError(f"{action} failed: {e}") from e

    async def fetch_notes(self) -> List[Dict[str, Any]]:
        response = await self._execute(
            self._client.table(NOTES_TABLE).select("*"), "Select notes"
        )
        return response.data or []

    async def upsert_notes(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        await self._execute(self._client.table(NOTES_TABLE).upsert(rows), "Upsert notes")

    async def delete_note(self, note_id: str) -> None:
        await self._execute(
            self._client.table(NOTES_TABLE).delete().eq("id", note_id), "Delete note"
        )

    async def fetch_profile(self, user_id: str) -> Dict[str, Any]:
        response = await self._execute(
            self._client.table(PROFILES_TABLE).select("*").eq("id", user_id).single(),
            "Select profile",
        )
        if not response.data:
            raise RecordNotFound("Select profile: no matching row", code=NOT_FOUND_CODE)
        return response.data

    async def upsert_profile(self, row: Dict[str, Any]) -> None:
        await self._execute(self._client.table(PROFILES_TABLE).upsert(row), "Upsert profile")
