import asyncio
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Annotated

import typer
from config import ConfigurationSet

from team_stat_entry.cli._logging import configure_logging
from team_stat_entry.cli._output import print_box_score, print_error, print_games, print_season, print_success
from team_stat_entry.cli.factory import StatEntryContext, build_session_context
from team_stat_entry.config import ConfigurationError, create_config
from team_stat_entry.domain.errors import StatEntryError
from team_stat_entry.domain.result import Err, Ok
from team_stat_entry.domain.stat_line import BATTING_LABELS, NEW_ROW_ID, PITCHING_LABELS
from team_stat_entry.entry.grid import StatEntryGrid
from team_stat_entry.entry.session import GameSortOrder, StatEntrySession

app = typer.Typer(name="stat-entry", help="Enter per-game team statistics.")


class StatKind(StrEnum):
    BATTING = "batting"
    PITCHING = "pitching"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    config_path: Annotated[str, typer.Option("--config", help="Path to the YAML config file")] = "stat_entry.yaml",
    account: Annotated[str | None, typer.Option("--account", help="Account ID")] = None,
    season: Annotated[str | None, typer.Option("--season", help="Season ID")] = None,
    team: Annotated[str | None, typer.Option("--team", help="Team season ID")] = None,
) -> None:
    """Enter per-game team statistics."""
    configure_logging(verbose=verbose)
    ctx.obj = create_config(config_path, account_id=account, season_id=season, team_season_id=team)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


_GameArg = Annotated[str, typer.Argument(help="Game ID")]
_KindArg = Annotated[StatKind, typer.Argument(help="Which stat lines to change")]
_ValuesArg = Annotated[list[str] | None, typer.Argument(help="Stat values as FIELD=VALUE, e.g. ab=4 h=2 ip=5.1")]


def _field_lookup(kind: StatKind) -> dict[str, str]:
    labels = BATTING_LABELS if kind == StatKind.BATTING else PITCHING_LABELS
    lookup = {field: field for field in labels}
    lookup.update({label.lower(): field for field, label in labels.items()})
    return lookup


def _parse_values(kind: StatKind, values: list[str] | None) -> dict[str, str]:
    lookup = _field_lookup(kind)
    parsed: dict[str, str] = {}
    for item in values or []:
        name, sep, raw = item.partition("=")
        field = lookup.get(name.strip().lower())
        if not sep or field is None:
            raise typer.BadParameter(f"Expected FIELD=VALUE with a {kind} field, got {item!r}")
        parsed[field] = raw
    return parsed


def _run(config: ConfigurationSet, action: Callable[[StatEntryContext], Awaitable[bool]], **options: object) -> None:
    async def _main() -> bool:
        async with build_session_context(config, on_process_error=_report, **options) as ctx:  # type: ignore[arg-type]
            match await ctx.session.open():
                case Err(_):
                    return False
                case Ok(_):
                    pass
            return await action(ctx)

    try:
        ok = asyncio.run(_main())
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    if not ok:
        raise typer.Exit(code=1)


def _report(error: StatEntryError) -> None:
    print_error(error.message)


def _grid(session: StatEntrySession, kind: StatKind) -> StatEntryGrid:
    return session.batting if kind == StatKind.BATTING else session.pitching


async def _open_game_for_editing(session: StatEntrySession, game_id: str) -> bool:
    if not session.enter_edit_mode():
        return False
    return await session.select_game(game_id)


@app.command()
def games(
    ctx: typer.Context,
    sort: Annotated[GameSortOrder, typer.Option("--sort", help="Sort by game date")] = GameSortOrder.DESC,
) -> None:
    """List the team's completed games."""

    async def action(c: StatEntryContext) -> bool:
        print_games(c.session.games)
        return True

    _run(ctx.obj, action, sort_order=sort)


@app.command()
def box(ctx: typer.Context, game_id: _GameArg) -> None:
    """Show the batting and pitching lines recorded for a game."""

    async def action(c: StatEntryContext) -> bool:
        session = c.session
        if not await session.select_game(game_id):
            return False
        assert session.selected_game is not None
        print_box_score(
            session.selected_game,
            session.batting.rows,
            session.batting.totals,
            session.pitching.rows,
            session.pitching.totals,
        )
        return True

    _run(ctx.obj, action)


@app.command()
def season(ctx: typer.Context) -> None:
    """Show season totals for the team."""

    async def action(c: StatEntryContext) -> bool:
        match await c.session.load_season_totals():
            case Ok(stats):
                print_season(stats)
                return True
            case Err(_):
                return False
        return False

    _run(ctx.obj, action)


@app.command()
def add(
    ctx: typer.Context,
    kind: _KindArg,
    game_id: _GameArg,
    roster_season_id: Annotated[str, typer.Argument(help="Roster season ID of the player")],
    values: _ValuesArg = None,
) -> None:
    """Add a stat line for a player who has none in this game."""
    fields = _parse_values(kind, values)

    async def action(c: StatEntryContext) -> bool:
        if not await _open_game_for_editing(c.session, game_id):
            return False
        grid = _grid(c.session, kind)
        await grid.begin_cell_edit(NEW_ROW_ID)
        if isinstance(grid.select_new_line_player(roster_season_id), Err):
            return False
        for field, raw in fields.items():
            if isinstance(grid.edit_new_line(field, raw), Err):
                return False
        match await grid.create_stat():
            case Ok(line):
                print_success(f"Added {kind} line {line.stat_id} for {line.player_name}")
                return True
            case Err(_):
                return False
        return False

    _run(ctx.obj, action)


@app.command()
def edit(
    ctx: typer.Context,
    kind: _KindArg,
    game_id: _GameArg,
    stat_id: Annotated[str, typer.Argument(help="Stat line ID")],
    values: _ValuesArg = None,
) -> None:
    """Change fields of an existing stat line; only changed fields are sent."""
    fields = _parse_values(kind, values)

    async def action(c: StatEntryContext) -> bool:
        if not await _open_game_for_editing(c.session, game_id):
            return False
        grid = _grid(c.session, kind)
        if grid.tracker.get(stat_id) is None:
            print_error(f"No {kind} line {stat_id} in game {game_id}")
            return False
        await grid.begin_cell_edit(stat_id, next(iter(fields), None))
        for field, raw in fields.items():
            if isinstance(grid.edit_cell(stat_id, field, raw), Err):
                return False
        if not grid.has_dirty_row():
            print_success("Nothing to update")
            return True
        match await grid.update_stat(stat_id):
            case Ok(line):
                print_success(f"Updated {kind} line {line.stat_id} for {line.player_name}")
                return True
            case Err(_):
                return False
        return False

    _run(ctx.obj, action)


@app.command()
def delete(
    ctx: typer.Context,
    kind: _KindArg,
    game_id: _GameArg,
    stat_id: Annotated[str, typer.Argument(help="Stat line ID")],
) -> None:
    """Delete a stat line."""

    async def action(c: StatEntryContext) -> bool:
        if not await _open_game_for_editing(c.session, game_id):
            return False
        match await _grid(c.session, kind).delete_stat(stat_id):
            case Ok(_):
                print_success(f"Deleted {kind} line {stat_id}")
                return True
            case Err(_):
                return False
        return False

    _run(ctx.obj, action)
