"""Editable batting and pitching grids for one completed game."""

import asyncio
import logging
from collections.abc import Callable, Coroutine, Iterable, Mapping
from dataclasses import replace

from team_stat_entry.client.protocols import StatsEntryClient
from team_stat_entry.domain.errors import ConflictOrNotFoundError, StatEntryError, ValidationError
from team_stat_entry.domain.game import CompletedGame, GameBattingStats, GamePitchingStats, PlayerSummary, TeamSeasonRef
from team_stat_entry.domain.prompt import DirtyRowInfo, StatTab, UnsavedChangesPrompt, UnsavedChangesReason
from team_stat_entry.domain.result import Err, Ok, Result
from team_stat_entry.domain.stat_line import (
    BATTING_FIELDS,
    BATTING_LABELS,
    NEW_ROW_ID,
    PITCHING_FIELDS,
    PITCHING_LABELS,
    UNKNOWN_PLAYER,
    BattingLine,
    PitchingLine,
)
from team_stat_entry.entry.arbitrator import UnsavedChangesArbitrator
from team_stat_entry.entry.tracker import RowDirtyTracker
from team_stat_entry.services.derived_metrics import (
    BattingMetrics,
    PitchingMetrics,
    batting_metrics,
    pitching_metrics,
    sum_batting_lines,
    sum_pitching_lines,
)
from team_stat_entry.services.pitching_outcomes import validate_pitching_outcomes

logger = logging.getLogger(__name__)

type ErrorCallback = Callable[[StatEntryError], None]
type DirtyCallback = Callable[[bool], None]
type WriteGate = Callable[[], bool]

NEW_LINE_LABEL = "New line"


class StatEntryGrid[L: (BattingLine, PitchingLine)]:
    """Shared controller for one game's editable stat lines.

    Subclasses bind the line type and the collaborator calls. Every
    operation reports failures once through ``on_process_error`` and returns
    them as ``Err``.
    """

    tab: StatTab
    fields: tuple[str, ...]
    labels: Mapping[str, str]
    checked_fields: frozenset[str] = frozenset()

    def __init__(
        self,
        client: StatsEntryClient,
        team: TeamSeasonRef,
        *,
        arbitrator: UnsavedChangesArbitrator | None = None,
        on_process_error: ErrorCallback | None = None,
        on_dirty_state_change: DirtyCallback | None = None,
        can_write: WriteGate | None = None,
    ) -> None:
        self._client = client
        self._team = team
        self._arbitrator = arbitrator
        self._on_process_error = on_process_error
        self._on_dirty_state_change = on_dirty_state_change
        self._can_write = can_write
        self.tracker: RowDirtyTracker[L] = RowDirtyTracker(
            self.fields, labels=self.labels, on_change=self._dirty_changed
        )
        self.game: CompletedGame | None = None
        self.available_players: list[PlayerSummary] = []
        self.editing_row_id: str | None = None
        self.editing_field: str | None = None
        self._roster: dict[str, PlayerSummary] = {}
        self._in_flight: dict[str, asyncio.Task[Result[L, StatEntryError]]] = {}
        self.tracker.reset_draft(self._blank())

    # -- Collaborator bindings ---------------------------------------------

    async def _fetch(self, game_id: str) -> GameBattingStats | GamePitchingStats:
        raise NotImplementedError

    async def _create(self, game_id: str, line: L) -> L:
        raise NotImplementedError

    async def _update(self, game_id: str, stat_id: str, diff: dict[str, int | float]) -> L:
        raise NotImplementedError

    async def _delete(self, game_id: str, stat_id: str) -> None:
        raise NotImplementedError

    def _blank(self, roster_season_id: str = "", player_name: str = UNKNOWN_PLAYER) -> L:
        raise NotImplementedError

    def _summarize(self, lines: Iterable[L]) -> L:
        raise NotImplementedError

    def _check(self, candidate: L) -> ValidationError | None:
        return None

    # -- Display -----------------------------------------------------------

    @property
    def rows(self) -> list[L]:
        return self.tracker.rows()

    @property
    def totals(self) -> L:
        return self._summarize(self.rows)

    @property
    def draft(self) -> L:
        draft = self.tracker.draft()
        assert draft is not None
        return draft

    # -- Loading -----------------------------------------------------------

    async def load(self, game: CompletedGame) -> Result[None, StatEntryError]:
        """Fetch this game's lines, keeping unsaved edits when the game is unchanged."""
        if self.game is None or self.game.game_id != game.game_id:
            self.reset()
        self.game = game
        try:
            read_model = await self._fetch(game.game_id)
        except StatEntryError as e:
            return self._fail(e)
        self.apply_stats(read_model)
        return Ok(None)

    def apply_stats(self, read_model: GameBattingStats | GamePitchingStats) -> None:
        overlaid = self.tracker.load(read_model.stats)  # type: ignore[arg-type]
        if overlaid:
            logger.info("Kept unsaved %s edits across refresh of game %s", self.tab, read_model.game_id)
        for player in read_model.available_players:
            self._roster[player.roster_season_id] = player
        self.available_players = list(read_model.available_players)
        if self.tracker.draft() is None:
            self.tracker.reset_draft(self._blank())
        if self.editing_row_id is not None and self.editing_row_id not in self.tracker:
            self.clear_focus()

    def reset(self) -> None:
        self.tracker.clear()
        self.tracker.reset_draft(self._blank())
        self.game = None
        self.available_players = []
        self.clear_focus()
        self._roster.clear()

    def clear_focus(self) -> None:
        self.editing_row_id = None
        self.editing_field = None

    # -- Editing -----------------------------------------------------------

    async def begin_cell_edit(self, row_id: str, field: str | None = None) -> bool:
        """Move edit focus to *row_id* and *field*, arbitrating when another row is dirty."""
        dirty_id = self.tracker.dirty_row_id
        if dirty_id is not None and dirty_id != row_id:
            if self._arbitrator is None:
                logger.debug("No arbitrator; discarding edits to row %s", dirty_id)
                self.discard_dirty_row()
            elif not await self._arbitrator.arbitrate(self, self.unsaved_prompt(UnsavedChangesReason.SWITCH_ROW)):
                return False
            if self.tracker.has_dirty_row() and self.tracker.dirty_row_id != row_id:
                return False
        self.editing_row_id = row_id
        self.editing_field = field if field in self.fields else None
        return True

    def edit_cell(self, row_id: str, field: str, raw: object) -> Result[L, StatEntryError]:
        check = self._check if field in self.checked_fields else None
        result = self.tracker.apply_field_edit(row_id, field, raw, check=check)
        if isinstance(result, Err):
            self._report(result.error)
        return result

    def select_new_line_player(self, roster_season_id: str) -> Result[L, StatEntryError]:
        player = next((p for p in self.available_players if p.roster_season_id == roster_season_id), None)
        if player is None:
            return self._fail(ValidationError("Select a player from the roster.", "roster_season_id"))
        return Ok(
            self.tracker.set_identity(NEW_ROW_ID, player.roster_season_id, player.player_name, player.player_number)
        )

    def edit_new_line(self, field: str, raw: object) -> Result[L, StatEntryError]:
        return self.edit_cell(NEW_ROW_ID, field, raw)

    # -- Persistence -------------------------------------------------------

    async def create_stat(self, draft: L | None = None) -> Result[L, StatEntryError]:
        """POST a new line; concurrent saves of the same player share one request."""
        from_form = draft is None
        line = self.draft if draft is None else draft
        key = f"{NEW_ROW_ID}:{line.roster_season_id}"
        pending = self._in_flight.get(key)
        if pending is not None:
            return await pending
        denied = self._write_denied()
        if denied is not None:
            return self._fail(denied)
        if self.game is None:
            return self._fail(ValidationError("Select a game before adding stats."))
        if not line.roster_season_id:
            return self._fail(ValidationError("Select a player before adding stats.", "roster_season_id"))
        if any(row.roster_season_id == line.roster_season_id for row in self.rows):
            return self._fail(
                ValidationError(f"{line.player_name} already has a {self.tab} line for this game.", "roster_season_id")
            )
        problem = self._check(line)
        if problem is not None:
            return self._fail(problem)
        return await self._share(key, self._send_create(self.game.game_id, line, from_form))

    async def _send_create(self, game_id: str, line: L, from_form: bool) -> Result[L, StatEntryError]:
        try:
            created = await self._create(game_id, line)
        except StatEntryError as e:
            return self._fail(e)

        if created.player_name == UNKNOWN_PLAYER and line.player_name != UNKNOWN_PLAYER:
            created = _with_identity(created, line)
        logger.info("Created %s line %s for %s", self.tab, created.stat_id, created.player_name)
        if not self._showing(game_id):
            logger.info("Game changed while creating %s line %s; not shown", self.tab, created.stat_id)
            return Ok(created)
        self.tracker.insert(created)
        self.available_players = [p for p in self.available_players if p.roster_season_id != created.roster_season_id]
        if from_form:
            self.tracker.reset_draft(self._blank())
        return Ok(created)

    async def update_stat(self, stat_id: str) -> Result[L, StatEntryError]:
        """Send the changed fields of *stat_id*; concurrent callers share one request."""
        pending = self._in_flight.get(stat_id)
        if pending is not None:
            return await pending
        denied = self._write_denied()
        if denied is not None:
            return self._fail(denied)
        current = self.tracker.get(stat_id)
        if current is None:
            return self._fail(ConflictOrNotFoundError(f"Stat line {stat_id} is no longer available."))
        diff = self.tracker.diff(stat_id)
        if not diff:
            return Ok(current)
        assert self.game is not None
        return await self._share(stat_id, self._send_update(self.game.game_id, stat_id, current, diff))

    async def _send_update(
        self, game_id: str, stat_id: str, sent: L, diff: dict[str, int | float]
    ) -> Result[L, StatEntryError]:
        try:
            saved = await self._update(game_id, stat_id, diff)
        except StatEntryError as e:
            return self._fail(e)
        if saved.player_name == UNKNOWN_PLAYER:
            saved = _with_identity(saved, sent)
        logger.debug("Saved %s line %s: %s", self.tab, stat_id, sorted(diff))
        if not self._showing(game_id) or stat_id not in self.tracker:
            logger.info("Dropping late reply for %s line %s", self.tab, stat_id)
            return Ok(saved)
        return Ok(self.tracker.commit(stat_id, saved, sent))

    async def _share(
        self, key: str, send: Coroutine[None, None, Result[L, StatEntryError]]
    ) -> Result[L, StatEntryError]:
        task = asyncio.ensure_future(send)
        self._in_flight[key] = task
        try:
            return await task
        finally:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

    async def delete_stat(self, line: L | str) -> Result[None, StatEntryError]:
        """Delete immediately, outside dirty tracking."""
        stat_id = line if isinstance(line, str) else line.stat_id
        denied = self._write_denied()
        if denied is not None:
            return self._fail(denied)
        if self.game is None:
            return self._fail(ValidationError("Select a game before deleting stats."))
        try:
            await self._delete(self.game.game_id, stat_id)
        except ConflictOrNotFoundError as e:
            self._remove_row(stat_id)
            return self._fail(e)
        except StatEntryError as e:
            if self.tracker.dirty_row_id == stat_id:
                self.tracker.discard(stat_id)
            return self._fail(e)
        self._remove_row(stat_id)
        logger.info("Deleted %s line %s", self.tab, stat_id)
        return Ok(None)

    def _remove_row(self, stat_id: str) -> None:
        removed = self.tracker.remove(stat_id)
        if self.editing_row_id == stat_id:
            self.clear_focus()
        if removed is None:
            return
        player = self._roster.get(removed.roster_season_id) or PlayerSummary(
            roster_season_id=removed.roster_season_id,
            player_id="",
            player_name=removed.player_name,
            player_number=removed.player_number,
        )
        if all(p.roster_season_id != player.roster_season_id for p in self.available_players):
            self.available_players = sorted([*self.available_players, player], key=lambda p: p.player_name)

    # -- Handle ------------------------------------------------------------

    def has_dirty_row(self) -> bool:
        return self.tracker.has_dirty_row()

    def get_dirty_row_info(self) -> DirtyRowInfo | None:
        row_id = self.tracker.dirty_row_id
        if row_id is None:
            return None
        row = self.tracker.get(row_id)
        name = row.player_name if row is not None else UNKNOWN_PLAYER
        if row_id == NEW_ROW_ID and (row is None or not row.roster_season_id):
            name = NEW_LINE_LABEL
        return DirtyRowInfo(row_id=row_id, player_name=name)

    def unsaved_prompt(self, reason: UnsavedChangesReason) -> UnsavedChangesPrompt:
        info = self.get_dirty_row_info()
        return UnsavedChangesPrompt(
            reason=reason,
            subject_label=info.player_name if info is not None else "",
            tab_context=self.tab,
        )

    async def save_dirty_row(self) -> Result[L | None, StatEntryError]:
        row_id = self.tracker.dirty_row_id
        if row_id is None:
            return Ok(None)
        if row_id == NEW_ROW_ID:
            return await self.create_stat()
        return await self.update_stat(row_id)

    def discard_dirty_row(self) -> None:
        row_id = self.tracker.dirty_row_id
        if row_id == NEW_ROW_ID:
            self.tracker.reset_draft(self._blank())
        elif row_id is not None:
            self.tracker.discard(row_id)

    # -- Internals ---------------------------------------------------------

    def _showing(self, game_id: str) -> bool:
        return self.game is not None and self.game.game_id == game_id

    def _write_denied(self) -> ValidationError | None:
        if self._can_write is not None and not self._can_write():
            return ValidationError("Enter edit mode before changing stats.")
        return None

    def _fail(self, error: StatEntryError) -> Err[StatEntryError]:
        self._report(error)
        return Err(error)

    def _report(self, error: StatEntryError) -> None:
        logger.warning("%s entry error: %s", self.tab, error.message)
        if self._on_process_error is not None:
            self._on_process_error(error)

    def _dirty_changed(self, dirty: bool) -> None:
        if self._on_dirty_state_change is not None:
            self._on_dirty_state_change(dirty)


def _with_identity[L: (BattingLine, PitchingLine)](line: L, source: L) -> L:
    return replace(line, player_name=source.player_name, player_number=source.player_number)


class BattingStatEntryGrid(StatEntryGrid[BattingLine]):
    tab = StatTab.BATTING
    fields = BATTING_FIELDS
    labels = BATTING_LABELS

    async def _fetch(self, game_id: str) -> GameBattingStats:
        return await self._client.get_batting_stats(self._team, game_id)

    async def _create(self, game_id: str, line: BattingLine) -> BattingLine:
        return await self._client.create_batting_stat(self._team, game_id, line)

    async def _update(self, game_id: str, stat_id: str, diff: dict[str, int | float]) -> BattingLine:
        return await self._client.update_batting_stat(self._team, game_id, stat_id, diff)

    async def _delete(self, game_id: str, stat_id: str) -> None:
        await self._client.delete_batting_stat(self._team, game_id, stat_id)

    def _blank(self, roster_season_id: str = "", player_name: str = UNKNOWN_PLAYER) -> BattingLine:
        return BattingLine(stat_id=NEW_ROW_ID, roster_season_id=roster_season_id, player_name=player_name)

    def _summarize(self, lines: Iterable[BattingLine]) -> BattingLine:
        return sum_batting_lines(lines)

    def metrics(self, line: BattingLine) -> BattingMetrics:
        return batting_metrics(line)


class PitchingStatEntryGrid(StatEntryGrid[PitchingLine]):
    """Pitching lines; W/L/S decisions are checked against the final score on every edit."""

    tab = StatTab.PITCHING
    fields = PITCHING_FIELDS
    labels = PITCHING_LABELS
    checked_fields = frozenset({"w", "l", "s"})

    async def _fetch(self, game_id: str) -> GamePitchingStats:
        return await self._client.get_pitching_stats(self._team, game_id)

    async def _create(self, game_id: str, line: PitchingLine) -> PitchingLine:
        return await self._client.create_pitching_stat(self._team, game_id, line)

    async def _update(self, game_id: str, stat_id: str, diff: dict[str, int | float]) -> PitchingLine:
        return await self._client.update_pitching_stat(self._team, game_id, stat_id, diff)

    async def _delete(self, game_id: str, stat_id: str) -> None:
        await self._client.delete_pitching_stat(self._team, game_id, stat_id)

    def _blank(self, roster_season_id: str = "", player_name: str = UNKNOWN_PLAYER) -> PitchingLine:
        return PitchingLine(stat_id=NEW_ROW_ID, roster_season_id=roster_season_id, player_name=player_name)

    def _summarize(self, lines: Iterable[PitchingLine]) -> PitchingLine:
        return sum_pitching_lines(lines)

    def _check(self, candidate: PitchingLine) -> ValidationError | None:
        staff = [candidate if row.stat_id == candidate.stat_id else row for row in self.rows]
        if candidate.stat_id not in {row.stat_id for row in staff}:
            staff.append(candidate)
        try:
            validate_pitching_outcomes(staff, self.game.outcome if self.game is not None else None)
        except ValidationError as e:
            return e
        return None

    def metrics(self, line: PitchingLine) -> PitchingMetrics:
        return pitching_metrics(line)
