import asyncio
import logging
from collections.abc import Callable

from team_stat_entry.client.protocols import StatsEntryClient
from team_stat_entry.domain.errors import StatEntryError, ValidationError
from team_stat_entry.domain.game import CompletedGame, GameRecap, TeamSeasonRef
from team_stat_entry.domain.prompt import DirtyRowInfo, StatTab, UnsavedChangesPrompt, UnsavedChangesReason
from team_stat_entry.domain.result import Err, Ok, Result

logger = logging.getLogger(__name__)

RECAP_LABEL = "Game recap"


class RecapEditor:
    """Game recap text, arbitrated like a grid with a single row."""

    tab = StatTab.RECAP

    def __init__(
        self,
        client: StatsEntryClient,
        team: TeamSeasonRef,
        *,
        on_process_error: Callable[[StatEntryError], None] | None = None,
        on_dirty_state_change: Callable[[bool], None] | None = None,
        can_write: Callable[[], bool] | None = None,
    ) -> None:
        self._client = client
        self._team = team
        self._on_process_error = on_process_error
        self._on_dirty_state_change = on_dirty_state_change
        self._can_write = can_write
        self.game: CompletedGame | None = None
        self._saving: asyncio.Task[Result[GameRecap, StatEntryError]] | None = None
        self._saved = ""
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    @property
    def saved_text(self) -> str:
        return self._saved

    async def load(self, game: CompletedGame) -> Result[GameRecap, StatEntryError]:
        same_game = self.game is not None and self.game.game_id == game.game_id
        if not same_game:
            self._set(saved="", text="")
        self.game = game
        try:
            recap = await self._client.get_game_recap(self._team, game.game_id)
        except StatEntryError as e:
            return self._fail(e)
        keep_edits = same_game and self.has_dirty_row()
        self._set(saved=recap.text, text=self._text if keep_edits else recap.text)
        return Ok(recap)

    def edit(self, text: str) -> None:
        self._set(saved=self._saved, text=text)

    def has_dirty_row(self) -> bool:
        return self._text != self._saved

    def get_dirty_row_info(self) -> DirtyRowInfo | None:
        if not self.has_dirty_row() or self.game is None:
            return None
        return DirtyRowInfo(row_id=self.game.game_id, player_name=RECAP_LABEL)

    def unsaved_prompt(self, reason: UnsavedChangesReason) -> UnsavedChangesPrompt:
        return UnsavedChangesPrompt(reason=reason, subject_label=RECAP_LABEL, tab_context=self.tab)

    async def save_dirty_row(self) -> Result[GameRecap | None, StatEntryError]:
        """Save the edited text; a save already in flight is shared, not repeated."""
        if self._saving is not None:
            return await self._saving
        if not self.has_dirty_row():
            return Ok(None)
        if self._can_write is not None and not self._can_write():
            return self._fail(ValidationError("Enter edit mode before changing the recap."))
        if self.game is None:
            return self._fail(ValidationError("Select a game before writing a recap."))
        task = asyncio.ensure_future(self._send(self.game.game_id, self._text))
        self._saving = task
        try:
            return await task
        finally:
            if self._saving is task:
                self._saving = None

    async def _send(self, game_id: str, sent: str) -> Result[GameRecap, StatEntryError]:
        try:
            recap = await self._client.save_game_recap(self._team, game_id, sent)
        except StatEntryError as e:
            return self._fail(e)
        logger.info("Saved recap for game %s", game_id)
        if self.game is None or self.game.game_id != game_id:
            return Ok(recap)
        self._set(saved=recap.text, text=recap.text if self._text == sent else self._text)
        return Ok(recap)

    def discard_dirty_row(self) -> None:
        self._set(saved=self._saved, text=self._saved)

    def _set(self, *, saved: str, text: str) -> None:
        was_dirty = self.has_dirty_row()
        self._saved = saved
        self._text = text
        if was_dirty != self.has_dirty_row() and self._on_dirty_state_change is not None:
            self._on_dirty_state_change(self.has_dirty_row())

    def _fail(self, error: StatEntryError) -> Err[StatEntryError]:
        logger.warning("recap error: %s", error.message)
        if self._on_process_error is not None:
            self._on_process_error(error)
        return Err(error)
