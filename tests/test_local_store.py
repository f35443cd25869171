"""Tests for brainlog.storage.local: key/value media and LocalStore."""

import asyncio
import json

import pytest

from brainlog.storage import NOTES_KEY, LocalStore, MemoryMedium, SQLiteMedium
from brainlog.storage.base import DAILY_GOAL_KEY, STATS_KEY, THEME_KEY, VIEW_MODE_KEY
from brainlog.types import LocalSettings, NoteItem


@pytest.fixture(params=["sqlite", "memory"])
def any_medium(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteMedium(tmp_path / "nested" / "local.db")
    return MemoryMedium()


class TestMedia:
    def test_get_missing_key(self, any_medium):
        assert any_medium.get("nope") is None

    def test_set_and_get(self, any_medium):
        any_medium.set_many({"a": "1", "b": "2"})
        assert any_medium.get("a") == "1"
        assert any_medium.get("b") == "2"

    def test_overwrite(self, any_medium):
        any_medium.set_many({"a": "1"})
        any_medium.set_many({"a": "2"})
        assert any_medium.get("a") == "2"

    def test_delete_many_ignores_missing(self, any_medium):
        any_medium.set_many({"a": "1", "b": "2"})
        any_medium.delete_many(["a", "missing"])
        assert any_medium.get("a") is None
        assert any_medium.get("b") == "2"

    def test_sqlite_persists_across_instances(self, tmp_path):
        path = tmp_path / "local.db"
        SQLiteMedium(path).set_many({"k": "v"})
        assert SQLiteMedium(path).get("k") == "v"


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_empty_snapshot(self, local):
        assert await local.read_notes() == []

    @pytest.mark.asyncio
    async def test_replace_and_read(self, local):
        notes = [NoteItem(id="a", name="A", updated_at=1), NoteItem(id="b", name="B", updated_at=2)]
        await local.replace_notes(notes)
        assert await local.read_notes() == notes

    @pytest.mark.asyncio
    async def test_persisted_in_camel_case(self, local, medium):
        await local.replace_notes([NoteItem(id="a", parent_id="p", is_trashed=True, updated_at=9)])
        stored = json.loads(medium.get(NOTES_KEY))
        assert stored == [
            {
                "id": "a",
                "type": "document",
                "parentId": "p",
                "name": "",
                "content": "",
                "isTrashed": True,
                "updatedAt": 9,
            }
        ]

    @pytest.mark.asyncio
    async def test_invalid_json_reads_as_empty(self, medium):
        medium.set_many({NOTES_KEY: "[{not json"})
        assert await LocalStore(medium).read_notes() == []

    @pytest.mark.asyncio
    async def test_non_list_reads_as_empty(self, medium):
        medium.set_many({NOTES_KEY: '{"id": "a"}'})
        assert await LocalStore(medium).read_notes() == []

    @pytest.mark.asyncio
    async def test_malformed_entries_dropped(self, medium):
        medium.set_many({NOTES_KEY: json.dumps([{"id": "a"}, "junk", {"name": "no id"}])})
        notes = await LocalStore(medium).read_notes()
        assert [n.id for n in notes] == ["a"]

    @pytest.mark.asyncio
    async def test_upsert_appends_new(self, local):
        await local.upsert_note(NoteItem(id="a"))
        await local.upsert_note(NoteItem(id="b"))
        assert [n.id for n in await local.read_notes()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_upsert_replaces_in_place(self, local):
        await local.replace_notes([NoteItem(id="a", name="old"), NoteItem(id="b")])
        await local.upsert_note(NoteItem(id="a", name="new"))
        notes = await local.read_notes()
        assert [n.id for n in notes] == ["a", "b"]
        assert notes[0].name == "new"

    @pytest.mark.asyncio
    async def test_remove_note(self, local):
        await local.replace_notes([NoteItem(id="a"), NoteItem(id="b")])
        assert await local.remove_note("a") is True
        assert await local.remove_note("a") is False
        assert [n.id for n in await local.read_notes()] == ["b"]

    @pytest.mark.asyncio
    async def test_get_note(self, local):
        await local.replace_notes([NoteItem(id="a", name="A")])
        assert (await local.get_note("a")).name == "A"
        assert await local.get_note("zzz") is None

    @pytest.mark.asyncio
    async def test_concurrent_upserts_are_not_lost(self, local):
        await asyncio.gather(*(local.upsert_note(NoteItem(id=str(i))) for i in range(20)))
        assert len(await local.read_notes()) == 20


class TestSettings:
    def test_defaults(self, local):
        assert local.load_settings() == LocalSettings(
            theme="system", view_mode="grid", daily_goal=0, stats={}
        )

    def test_save_and_load(self, local):
        settings = LocalSettings(theme="dark", view_mode="list", daily_goal=5, stats={"w": 1})
        local.save_settings(settings)
        assert local.load_settings() == settings

    def test_save_subset_of_fields(self, local, medium):
        local.save_settings(LocalSettings(theme="dark", daily_goal=4), fields=["theme"])
        assert medium.get(THEME_KEY) == "dark"
        assert medium.get(DAILY_GOAL_KEY) is None
        assert medium.get(VIEW_MODE_KEY) is None


class TestClearSessionData:
    @pytest.mark.asyncio
    async def test_clears_notes_stats_and_goal_only(self, local, medium):
        await local.replace_notes([NoteItem(id="a")])
        local.save_settings(LocalSettings(theme="dark", view_mode="list", daily_goal=3, stats={"x": 1}))

        await local.clear_session_data()

        assert medium.get(NOTES_KEY) is None
        assert medium.get(STATS_KEY) is None
        assert medium.get(DAILY_GOAL_KEY) is None
        # Device preferences survive
        assert medium.get(THEME_KEY) == "dark"
        assert medium.get(VIEW_MODE_KEY) == "list"
