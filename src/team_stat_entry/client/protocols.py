from typing import Protocol, runtime_checkable

from team_stat_entry.domain.game import (
    CompletedGame,
    GameAttendance,
    GameBattingStats,
    GamePitchingStats,
    GameRecap,
    TeamSeasonRef,
)
from team_stat_entry.domain.stat_line import BattingLine, PitchingLine


@runtime_checkable
class StatsEntryClient(Protocol):
    """Data access for one team season's per-game stats.

    Implementations raise ``ConflictOrNotFoundError``, ``ValidationError`` or
    ``TransientNetworkError`` (all ``StatEntryError``) on failure.
    """

    async def list_completed_games(self, team: TeamSeasonRef) -> list[CompletedGame]: ...

    async def get_batting_stats(self, team: TeamSeasonRef, game_id: str) -> GameBattingStats: ...

    async def get_pitching_stats(self, team: TeamSeasonRef, game_id: str) -> GamePitchingStats: ...

    async def create_batting_stat(self, team: TeamSeasonRef, game_id: str, payload: BattingLine) -> BattingLine: ...

    async def create_pitching_stat(
        self, team: TeamSeasonRef, game_id: str, payload: PitchingLine
    ) -> PitchingLine: ...

    async def update_batting_stat(
        self, team: TeamSeasonRef, game_id: str, stat_id: str, diff: dict[str, int | float]
    ) -> BattingLine: ...

    async def update_pitching_stat(
        self, team: TeamSeasonRef, game_id: str, stat_id: str, diff: dict[str, int | float]
    ) -> PitchingLine: ...

    async def delete_batting_stat(self, team: TeamSeasonRef, game_id: str, stat_id: str) -> None: ...

    async def delete_pitching_stat(self, team: TeamSeasonRef, game_id: str, stat_id: str) -> None: ...

    async def get_season_batting_stats(self, team: TeamSeasonRef) -> list[BattingLine]: ...

    async def get_season_pitching_stats(self, team: TeamSeasonRef) -> list[PitchingLine]: ...

    async def get_game_attendance(self, team: TeamSeasonRef, game_id: str) -> GameAttendance: ...

    async def update_game_attendance(
        self, team: TeamSeasonRef, game_id: str, roster_season_id: str, present: bool
    ) -> GameAttendance: ...

    async def get_game_recap(self, team: TeamSeasonRef, game_id: str) -> GameRecap: ...

    async def save_game_recap(self, team: TeamSeasonRef, game_id: str, text: str) -> GameRecap: ...


@runtime_checkable
class RoleClient(Protocol):
    async def can_manage_stats(self, account_id: str, team_season_id: str) -> bool: ...
