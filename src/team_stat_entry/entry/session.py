"""Coordinator for one team season's stat entry screen.

Owns the batting and pitching grids, the recap editor and the single
arbitrator they share, and gates every navigation (game, tab, edit mode)
behind it.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import StrEnum

from team_stat_entry.client.protocols import RoleClient, StatsEntryClient
from team_stat_entry.domain.errors import StatEntryError, ValidationError
from team_stat_entry.domain.game import CompletedGame, GameAttendance, SeasonStats, TeamSeasonRef
from team_stat_entry.domain.prompt import StatTab, UnsavedChangesReason
from team_stat_entry.domain.result import Err, Ok, Result
from team_stat_entry.entry.arbitrator import UnsavedChangesArbitrator
from team_stat_entry.entry.grid import BattingStatEntryGrid, PitchingStatEntryGrid
from team_stat_entry.entry.protocols import EditableGridHandle
from team_stat_entry.entry.recap import RecapEditor
from team_stat_entry.services.derived_metrics import sum_batting_lines, sum_pitching_lines

logger = logging.getLogger(__name__)


class GameSortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


def sort_games(games: Sequence[CompletedGame], order: GameSortOrder = GameSortOrder.DESC) -> list[CompletedGame]:
    return sorted(games, key=lambda g: (g.game_date, g.game_id), reverse=order == GameSortOrder.DESC)


class StatEntrySession:
    def __init__(
        self,
        client: StatsEntryClient,
        roles: RoleClient,
        team: TeamSeasonRef,
        *,
        arbitrator: UnsavedChangesArbitrator | None = None,
        on_process_error: Callable[[StatEntryError], None] | None = None,
        sort_order: GameSortOrder = GameSortOrder.DESC,
    ) -> None:
        self._client = client
        self._roles = roles
        self._team = team
        self._on_process_error = on_process_error
        self.arbitrator = arbitrator or UnsavedChangesArbitrator()
        self.batting = BattingStatEntryGrid(
            client, team, arbitrator=self.arbitrator, on_process_error=self._report, can_write=self._editing
        )
        self.pitching = PitchingStatEntryGrid(
            client, team, arbitrator=self.arbitrator, on_process_error=self._report, can_write=self._editing
        )
        self.recap = RecapEditor(client, team, on_process_error=self._report, can_write=self._editing)
        self.sort_order = sort_order
        self.can_manage = False
        self.games: list[CompletedGame] = []
        self.selected_game: CompletedGame | None = None
        self.tab = StatTab.BATTING
        self.edit_mode = False
        self.attendance: set[str] = set()
        self.pending_attendance_id: str | None = None
        self.season: SeasonStats | None = None

    @property
    def team(self) -> TeamSeasonRef:
        return self._team

    @property
    def handles(self) -> tuple[EditableGridHandle, ...]:
        return (self.batting, self.pitching, self.recap)

    def has_unsaved_changes(self) -> bool:
        return any(handle.has_dirty_row() for handle in self.handles)

    @property
    def locked_attendance_ids(self) -> frozenset[str]:
        """Players with a stat line in the selected game; they cannot be marked absent."""
        lines = [*self.batting.rows, *self.pitching.rows]
        return frozenset(line.roster_season_id for line in lines)

    # -- Games -------------------------------------------------------------

    async def open(self) -> Result[list[CompletedGame], StatEntryError]:
        try:
            self.can_manage = await self._roles.can_manage_stats(self._team.account_id, self._team.team_season_id)
            games = await self._client.list_completed_games(self._team)
        except StatEntryError as e:
            return self._fail(e)
        self.games = sort_games(games, self.sort_order)
        logger.info("Loaded %d completed games (manage=%s)", len(self.games), self.can_manage)
        return Ok(self.games)

    def sort_games(self, order: GameSortOrder) -> list[CompletedGame]:
        self.sort_order = order
        self.games = sort_games(self.games, order)
        return self.games

    async def select_game(self, game_id: str) -> bool:
        game = next((g for g in self.games if g.game_id == game_id), None)
        if game is None:
            self._fail(ValidationError(f"Game {game_id} is not a completed game for this team."))
            return False

        if self.selected_game is not None and self.selected_game.game_id != game_id:
            if not await self._resolve(UnsavedChangesReason.GAME_CHANGE, self.handles):
                return False

        self.selected_game = game
        results = await asyncio.gather(self.batting.load(game), self.pitching.load(game), self.recap.load(game))
        if self.can_manage:
            await self._load_attendance(game)
        elif self.tab == StatTab.ATTENDANCE:
            self.tab = StatTab.BATTING
        return all(isinstance(result, Ok) for result in results)

    # -- Navigation --------------------------------------------------------

    async def change_tab(self, tab: StatTab) -> bool:
        tab = StatTab(tab)
        if tab == StatTab.ATTENDANCE and (not self.can_manage or self.selected_game is None):
            tab = StatTab.BATTING
        if tab == self.tab:
            return True
        leaving = self._handle_for(self.tab)
        if leaving is not None and not await self._resolve(UnsavedChangesReason.TAB_CHANGE, (leaving,)):
            return False
        self.tab = tab
        return True

    def enter_edit_mode(self) -> bool:
        if not self.can_manage:
            self._fail(ValidationError("You do not have permission to edit stats for this team."))
            return False
        self.edit_mode = True
        return True

    async def exit_edit_mode(self) -> bool:
        if not self.edit_mode:
            return True
        if not await self._resolve(UnsavedChangesReason.EXIT_EDIT, self.handles):
            return False
        self.edit_mode = False
        self.batting.clear_focus()
        self.pitching.clear_focus()
        return True

    # -- Attendance --------------------------------------------------------

    async def toggle_attendance(self, roster_season_id: str, present: bool) -> Result[GameAttendance, StatEntryError]:
        if not self.can_manage:
            return self._fail(ValidationError("You do not have permission to track attendance for this team."))
        if self.selected_game is None:
            return self._fail(ValidationError("Select a game before tracking attendance."))
        if self.pending_attendance_id is not None:
            return self._fail(ValidationError("Another attendance update is still saving."))
        if not present and roster_season_id in self.locked_attendance_ids:
            return self._fail(ValidationError("Players with stats for this game must stay marked present."))

        self.pending_attendance_id = roster_season_id
        try:
            updated = await self._client.update_game_attendance(
                self._team, self.selected_game.game_id, roster_season_id, present
            )
        except StatEntryError as e:
            return self._fail(e)
        finally:
            self.pending_attendance_id = None
        self.attendance = set(updated.player_ids) | self.locked_attendance_ids
        return Ok(updated)

    async def _load_attendance(self, game: CompletedGame) -> None:
        locked = self.locked_attendance_ids
        try:
            attendance = await self._client.get_game_attendance(self._team, game.game_id)
        except StatEntryError as e:
            self._report(e)
            self.attendance = set(locked)
            return
        self.attendance = set(attendance.player_ids) | locked

    # -- Season view -------------------------------------------------------

    async def load_season_totals(self) -> Result[SeasonStats, StatEntryError]:
        try:
            batting, pitching = await asyncio.gather(
                self._client.get_season_batting_stats(self._team),
                self._client.get_season_pitching_stats(self._team),
            )
        except StatEntryError as e:
            return self._fail(e)
        self.season = SeasonStats(
            batting=tuple(batting),
            batting_totals=sum_batting_lines(batting),
            pitching=tuple(pitching),
            pitching_totals=sum_pitching_lines(pitching),
        )
        return Ok(self.season)

    # -- Internals ---------------------------------------------------------

    def _editing(self) -> bool:
        return self.edit_mode

    def _handle_for(self, tab: StatTab) -> EditableGridHandle | None:
        return next((handle for handle in self.handles if handle.tab == tab), None)

    async def _resolve(self, reason: UnsavedChangesReason, handles: Sequence[EditableGridHandle]) -> bool:
        for handle in handles:
            if handle.has_dirty_row() and not await self.arbitrator.arbitrate(handle, handle.unsaved_prompt(reason)):
                logger.debug("%s blocked by unsaved %s changes", reason, handle.tab)
                return False
        return True

    def _fail(self, error: StatEntryError) -> Err[StatEntryError]:
        self._report(error)
        return Err(error)

    def _report(self, error: StatEntryError) -> None:
        if self._on_process_error is not None:
            self._on_process_error(error)
