from team_stat_entry.domain.game import GameOutcome
from tests.helpers import make_game


class TestCompletedGame:
    def test_home_team_scores(self) -> None:
        game = make_game(team_score=6, opponent_score=2, is_home_team=True)
        assert game.home_score == 6
        assert game.team_score == 6
        assert game.opponent_score == 2

    def test_visiting_team_scores(self) -> None:
        game = make_game(team_score=1, opponent_score=4, is_home_team=False)
        assert game.visitor_score == 1
        assert game.team_score == 1
        assert game.opponent_score == 4

    def test_outcomes(self) -> None:
        assert make_game(team_score=3, opponent_score=2).outcome is GameOutcome.WIN
        assert make_game(team_score=2, opponent_score=3).outcome is GameOutcome.LOSS
        assert make_game(team_score=2, opponent_score=2).outcome is GameOutcome.TIE
