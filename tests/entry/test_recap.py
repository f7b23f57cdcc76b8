import asyncio

from team_stat_entry.domain.errors import TransientNetworkError
from team_stat_entry.domain.prompt import StatTab, UnsavedChangesReason
from team_stat_entry.domain.result import Err, Ok
from team_stat_entry.entry.recap import RECAP_LABEL, RecapEditor
from tests.fakes.clients import FakeStatsEntryClient
from tests.helpers import TEAM, ErrorLog, make_game, settle


def _editor(recap: str = "Won on a walk-off.") -> tuple[RecapEditor, FakeStatsEntryClient, ErrorLog, list[bool]]:
    client = FakeStatsEntryClient([make_game()], recaps={"g1": recap})
    errors = ErrorLog()
    dirty: list[bool] = []
    editor = RecapEditor(client, TEAM, on_process_error=errors, on_dirty_state_change=dirty.append)
    asyncio.run(editor.load(make_game()))
    return editor, client, errors, dirty


class TestRecapEditor:
    def test_load(self) -> None:
        editor, _, _, dirty = _editor()
        assert editor.text == "Won on a walk-off."
        assert not editor.has_dirty_row()
        assert dirty == []

    def test_edit_tracks_dirty_state(self) -> None:
        editor, _, _, dirty = _editor()
        editor.edit("Won 5-3.")
        assert editor.has_dirty_row()
        info = editor.get_dirty_row_info()
        assert info is not None
        assert (info.row_id, info.player_name) == ("g1", RECAP_LABEL)
        editor.edit("Won on a walk-off.")
        assert not editor.has_dirty_row()
        assert dirty == [True, False]

    def test_prompt(self) -> None:
        editor, _, _, _ = _editor()
        prompt = editor.unsaved_prompt(UnsavedChangesReason.TAB_CHANGE)
        assert prompt.subject_label == RECAP_LABEL
        assert prompt.tab_context == StatTab.RECAP

    def test_save(self) -> None:
        editor, client, _, _ = _editor()
        editor.edit("Won 5-3.")
        result = asyncio.run(editor.save_dirty_row())
        assert isinstance(result, Ok)
        assert editor.saved_text == "Won 5-3."
        assert not editor.has_dirty_row()
        assert client.recaps["g1"] == "Won 5-3."

    def test_clean_save_is_noop(self) -> None:
        editor, client, _, _ = _editor()
        assert asyncio.run(editor.save_dirty_row()) == Ok(None)
        assert client.calls_to("save_game_recap") == []

    def test_failed_save_keeps_text(self) -> None:
        editor, client, errors, _ = _editor()
        editor.edit("Won 5-3.")
        client.fail_next("save_game_recap", TransientNetworkError("offline"))
        assert isinstance(asyncio.run(editor.save_dirty_row()), Err)
        assert editor.text == "Won 5-3."
        assert editor.has_dirty_row()
        assert errors.messages == ["offline"]

    def test_discard(self) -> None:
        editor, _, _, _ = _editor()
        editor.edit("Lost.")
        editor.discard_dirty_row()
        assert editor.text == "Won on a walk-off."
        assert not editor.has_dirty_row()

    def test_reload_same_game_keeps_edits(self) -> None:
        editor, _, _, _ = _editor()
        editor.edit("Draft recap")
        asyncio.run(editor.load(make_game()))
        assert editor.text == "Draft recap"

    def test_new_game_replaces_text(self) -> None:
        editor, client, _, _ = _editor()
        client.recaps["g2"] = "Rain shortened."
        asyncio.run(editor.load(make_game("g2")))
        assert editor.text == "Rain shortened."
        assert not editor.has_dirty_row()

    def test_concurrent_saves_share_one_request(self) -> None:
        editor, client, _, _ = _editor()
        editor.edit("Won 5-3.")

        async def run() -> tuple[object, object]:
            client.write_gate = asyncio.Event()
            first = asyncio.ensure_future(editor.save_dirty_row())
            second = asyncio.ensure_future(editor.save_dirty_row())
            await settle()
            client.write_gate.set()
            return await first, await second

        first, second = asyncio.run(run())
        assert isinstance(first, Ok)
        assert first == second
        assert len(client.calls_to("save_game_recap")) == 1
        assert not editor.has_dirty_row()

    def test_reply_for_previous_game_ignored(self) -> None:
        editor, client, _, _ = _editor()
        client.recaps["g2"] = "Rain shortened."
        editor.edit("Won 5-3.")

        async def run() -> None:
            client.write_gate = asyncio.Event()
            pending = asyncio.ensure_future(editor.save_dirty_row())
            await settle()
            await editor.load(make_game("g2"))
            client.write_gate.set()
            await pending

        asyncio.run(run())
        assert editor.text == "Rain shortened."
        assert editor.saved_text == "Rain shortened."
        assert client.recaps["g1"] == "Won 5-3."

    def test_refused_when_writes_are_locked(self) -> None:
        client = FakeStatsEntryClient([make_game()])
        errors = ErrorLog()
        editor = RecapEditor(client, TEAM, on_process_error=errors, can_write=lambda: False)
        asyncio.run(editor.load(make_game()))
        editor.edit("Won 5-3.")
        assert isinstance(asyncio.run(editor.save_dirty_row()), Err)
        assert errors.messages == ["Enter edit mode before changing the recap."]
        assert client.calls_to("save_game_recap") == []
