"""camelCase JSON payloads to domain dataclasses and back."""

from collections.abc import Mapping
from typing import Any

from team_stat_entry.domain.game import (
    CompletedGame,
    GameAttendance,
    GameBattingStats,
    GamePitchingStats,
    GameRecap,
    PlayerSummary,
)
from team_stat_entry.domain.stat_line import (
    BATTING_FIELDS,
    INNINGS_FIELD,
    PITCHING_FIELDS,
    TOTALS_ROW_ID,
    UNKNOWN_PLAYER,
    BattingLine,
    PitchingLine,
)
from team_stat_entry.services.derived_metrics import outs_to_innings_decimal, split_innings

_WIRE_INNINGS = "ipDecimal"


def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(float(value))


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _identity(data: Mapping[str, Any], default_id: str) -> dict[str, Any]:
    return {
        "stat_id": _str(data.get("statId"), default_id),
        "roster_season_id": _str(data.get("rosterSeasonId")),
        "player_name": _str(data.get("playerName"), UNKNOWN_PLAYER) or UNKNOWN_PLAYER,
        "player_number": _optional_int(data.get("playerNumber")),
    }


def _innings(data: Mapping[str, Any]) -> float:
    # whole innings plus extra outs take precedence over the notation value
    if "ip" in data and "ip2" in data:
        return outs_to_innings_decimal(_int(data["ip"]) * 3 + _int(data["ip2"]))
    value = data.get(_WIRE_INNINGS)
    return 0.0 if value is None else float(value)


def batting_line_from_json(data: Mapping[str, Any], *, default_id: str = TOTALS_ROW_ID) -> BattingLine:
    return BattingLine(
        **_identity(data, default_id),
        **{field: _int(data.get(field)) for field in BATTING_FIELDS},
    )


def pitching_line_from_json(data: Mapping[str, Any], *, default_id: str = TOTALS_ROW_ID) -> PitchingLine:
    counts = {field: _int(data.get(field)) for field in PITCHING_FIELDS if field != INNINGS_FIELD}
    return PitchingLine(**_identity(data, default_id), ip_decimal=_innings(data), **counts)


def player_summary_from_json(data: Mapping[str, Any]) -> PlayerSummary:
    return PlayerSummary(
        roster_season_id=_str(data.get("rosterSeasonId")),
        player_id=_str(data.get("playerId")),
        player_name=_str(data.get("playerName"), UNKNOWN_PLAYER),
        player_number=_optional_int(data.get("playerNumber")),
    )


def completed_game_from_json(data: Mapping[str, Any]) -> CompletedGame:
    return CompletedGame(
        game_id=_str(data["gameId"]),
        game_date=_str(data.get("gameDate")),
        opponent_team_name=_str(data.get("opponentTeamName"), "Unknown Team"),
        is_home_team=bool(data.get("isHomeTeam", False)),
        home_score=_int(data.get("homeScore")),
        visitor_score=_int(data.get("visitorScore")),
        game_status=_int(data.get("gameStatus")),
    )


def game_batting_stats_from_json(data: Mapping[str, Any]) -> GameBattingStats:
    return GameBattingStats(
        game_id=_str(data.get("gameId")),
        stats=tuple(batting_line_from_json(row) for row in data.get("stats", [])),
        totals=batting_line_from_json(data.get("totals") or {}),
        available_players=tuple(player_summary_from_json(p) for p in data.get("availablePlayers", [])),
    )


def game_pitching_stats_from_json(data: Mapping[str, Any]) -> GamePitchingStats:
    return GamePitchingStats(
        game_id=_str(data.get("gameId")),
        stats=tuple(pitching_line_from_json(row) for row in data.get("stats", [])),
        totals=pitching_line_from_json(data.get("totals") or {}),
        available_players=tuple(player_summary_from_json(p) for p in data.get("availablePlayers", [])),
    )


def attendance_from_json(data: Mapping[str, Any]) -> GameAttendance:
    return GameAttendance(player_ids=tuple(_str(pid) for pid in data.get("playerIds", [])))


def recap_from_json(game_id: str, data: Mapping[str, Any] | None) -> GameRecap:
    if not data:
        return GameRecap(game_id=game_id)
    return GameRecap(game_id=game_id, text=_str(data.get("recap", data.get("text"))))


def _wire_value(field: str, value: int | float) -> tuple[str, int | float]:
    if field == INNINGS_FIELD:
        parts = split_innings(value)
        return _WIRE_INNINGS, 0.0 if parts is None else outs_to_innings_decimal(parts[0] * 3 + parts[1])
    return field, value


def stat_diff_to_json(diff: Mapping[str, int | float]) -> dict[str, int | float]:
    return dict(_wire_value(field, value) for field, value in diff.items())


def batting_create_to_json(line: BattingLine) -> dict[str, Any]:
    body: dict[str, Any] = {"rosterSeasonId": line.roster_season_id}
    body.update(stat_diff_to_json({field: getattr(line, field) for field in BATTING_FIELDS}))
    return body


def pitching_create_to_json(line: PitchingLine) -> dict[str, Any]:
    body: dict[str, Any] = {"rosterSeasonId": line.roster_season_id}
    body.update(stat_diff_to_json({field: getattr(line, field) for field in PITCHING_FIELDS}))
    return body
