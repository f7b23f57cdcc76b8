from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from team_stat_entry.domain.game import CompletedGame, SeasonStats
from team_stat_entry.domain.stat_line import (
    BATTING_FIELDS,
    BATTING_LABELS,
    INNINGS_FIELD,
    PITCHING_FIELDS,
    PITCHING_LABELS,
    BattingLine,
    PitchingLine,
)
from team_stat_entry.services.derived_metrics import batting_metrics, pitching_metrics
from team_stat_entry.services.formatting import format_count, format_innings, format_rate

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_success(message: str) -> None:
    console.print(f"[bold green]{message}[/bold green]")


def print_games(games: Sequence[CompletedGame]) -> None:
    if not games:
        console.print("No completed games.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Game")
    table.add_column("Date")
    table.add_column("Opponent")
    table.add_column("Score", justify="right")
    table.add_column("Result")
    for game in games:
        venue = "vs" if game.is_home_team else "@"
        table.add_row(
            game.game_id,
            game.game_date[:10],
            f"{venue} {game.opponent_team_name}",
            f"{game.team_score}-{game.opponent_score}",
            game.outcome.value.upper()[0],
        )
    console.print(table)


def _player_label(line: BattingLine | PitchingLine) -> str:
    if line.player_number is None:
        return line.player_name
    return f"#{line.player_number} {line.player_name}"


def batting_table(title: str, lines: Sequence[BattingLine], totals: BattingLine) -> Table:
    table = Table(title=title, show_edge=False, pad_edge=False)
    table.add_column("ID")
    table.add_column("Player")
    for field in BATTING_FIELDS:
        table.add_column(BATTING_LABELS[field], justify="right")
    for label in ("AVG", "OBP", "SLG", "OPS"):
        table.add_column(label, justify="right")

    for line in [*lines, totals]:
        m = batting_metrics(line)
        table.add_row(
            "" if line is totals else line.stat_id,
            _player_label(line),
            *(format_count(getattr(line, field)) for field in BATTING_FIELDS),
            format_rate(m.avg),
            format_rate(m.obp),
            format_rate(m.slg),
            format_rate(m.ops),
            style="bold" if line is totals else None,
        )
    return table


def pitching_table(title: str, lines: Sequence[PitchingLine], totals: PitchingLine) -> Table:
    table = Table(title=title, show_edge=False, pad_edge=False)
    table.add_column("ID")
    table.add_column("Player")
    for field in PITCHING_FIELDS:
        table.add_column(PITCHING_LABELS[field], justify="right")
    for label in ("ERA", "WHIP", "K/9", "BB/9"):
        table.add_column(label, justify="right")

    for line in [*lines, totals]:
        m = pitching_metrics(line)
        cells = [
            format_innings(line.ip_decimal) if field == INNINGS_FIELD else format_count(getattr(line, field))
            for field in PITCHING_FIELDS
        ]
        table.add_row(
            "" if line is totals else line.stat_id,
            _player_label(line),
            *cells,
            format_rate(m.era, 2),
            format_rate(m.whip, 2),
            format_rate(m.k9, 2),
            format_rate(m.bb9, 2),
            style="bold" if line is totals else None,
        )
    return table


def print_box_score(
    game: CompletedGame,
    batting: Sequence[BattingLine],
    batting_totals: BattingLine,
    pitching: Sequence[PitchingLine],
    pitching_totals: PitchingLine,
) -> None:
    console.print(
        f"[bold]{game.game_date[:10]}[/bold] vs {game.opponent_team_name}: "
        f"{game.team_score}-{game.opponent_score} ({game.outcome.value})"
    )
    console.print(batting_table("Batting", batting, batting_totals))
    console.print(pitching_table("Pitching", pitching, pitching_totals))


def print_season(season: SeasonStats) -> None:
    console.print(batting_table("Season batting", season.batting, season.batting_totals))
    console.print(pitching_table("Season pitching", season.pitching, season.pitching_totals))
