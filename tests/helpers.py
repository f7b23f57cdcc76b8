import asyncio

from team_stat_entry.domain.errors import StatEntryError
from team_stat_entry.domain.game import CompletedGame, PlayerSummary, TeamSeasonRef
from team_stat_entry.domain.prompt import UnsavedChangesDecision, UnsavedChangesPrompt
from team_stat_entry.entry.arbitrator import ArbitratorState, UnsavedChangesArbitrator

TEAM = TeamSeasonRef(account_id="1", season_id="2024", team_season_id="77")

ROSTER = [
    PlayerSummary(roster_season_id="r1", player_id="p1", player_name="Ava Diaz", player_number=7),
    PlayerSummary(roster_season_id="r2", player_id="p2", player_name="Ben Cole", player_number=12),
    PlayerSummary(roster_season_id="r3", player_id="p3", player_name="Cy Young", player_number=21),
    PlayerSummary(roster_season_id="r4", player_id="p4", player_name="Dee Fox", player_number=None),
]


def make_game(
    game_id: str = "g1",
    *,
    team_score: int = 5,
    opponent_score: int = 3,
    game_date: str = "2024-05-01T18:00:00.000Z",
    is_home_team: bool = True,
    opponent: str = "Rivals",
) -> CompletedGame:
    home, visitor = (team_score, opponent_score) if is_home_team else (opponent_score, team_score)
    return CompletedGame(
        game_id=game_id,
        game_date=game_date,
        opponent_team_name=opponent,
        is_home_team=is_home_team,
        home_score=home,
        visitor_score=visitor,
        game_status=1,
    )


class ScriptedResolver:
    """Answers unsaved-changes prompts from a fixed list of decisions.

    Prompts arriving after the script runs out stay open.
    """

    def __init__(self, arbitrator: UnsavedChangesArbitrator, *decisions: UnsavedChangesDecision) -> None:
        self.decisions = list(decisions)
        self.prompts: list[UnsavedChangesPrompt] = []
        self.errors: list[StatEntryError | None] = []
        arbitrator.on_change(self)

    def __call__(self, arbitrator: UnsavedChangesArbitrator) -> None:
        if arbitrator.state != ArbitratorState.PROMPT_OPEN:
            return
        assert arbitrator.prompt is not None
        self.prompts.append(arbitrator.prompt)
        self.errors.append(arbitrator.error)
        if self.decisions:
            arbitrator.resolve(self.decisions.pop(0))


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class ErrorLog:
    def __init__(self) -> None:
        self.errors: list[StatEntryError] = []

    def __call__(self, error: StatEntryError) -> None:
        self.errors.append(error)

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]
