from dataclasses import dataclass
from enum import StrEnum

from team_stat_entry.domain.stat_line import BattingLine, PitchingLine


class GameOutcome(StrEnum):
    WIN = "win"
    LOSS = "loss"
    TIE = "tie"


@dataclass(frozen=True)
class TeamSeasonRef:
    account_id: str
    season_id: str
    team_season_id: str


@dataclass(frozen=True)
class CompletedGame:
    game_id: str
    game_date: str
    opponent_team_name: str
    is_home_team: bool
    home_score: int = 0
    visitor_score: int = 0
    game_status: int = 0

    @property
    def team_score(self) -> int:
        return self.home_score if self.is_home_team else self.visitor_score

    @property
    def opponent_score(self) -> int:
        return self.visitor_score if self.is_home_team else self.home_score

    @property
    def outcome(self) -> GameOutcome:
        if self.team_score > self.opponent_score:
            return GameOutcome.WIN
        if self.team_score < self.opponent_score:
            return GameOutcome.LOSS
        return GameOutcome.TIE


@dataclass(frozen=True)
class PlayerSummary:
    roster_season_id: str
    player_id: str
    player_name: str
    player_number: int | None = None


@dataclass(frozen=True)
class GameBattingStats:
    game_id: str
    stats: tuple[BattingLine, ...]
    totals: BattingLine
    available_players: tuple[PlayerSummary, ...] = ()


@dataclass(frozen=True)
class GamePitchingStats:
    game_id: str
    stats: tuple[PitchingLine, ...]
    totals: PitchingLine
    available_players: tuple[PlayerSummary, ...] = ()


@dataclass(frozen=True)
class GameAttendance:
    player_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class GameRecap:
    game_id: str
    text: str = ""


@dataclass(frozen=True)
class SeasonStats:
    batting: tuple[BattingLine, ...]
    batting_totals: BattingLine
    pitching: tuple[PitchingLine, ...]
    pitching_totals: PitchingLine
