import logging
from typing import Any

import httpx

from team_stat_entry.client._retry import read_retry
from team_stat_entry.client.mappers import (
    attendance_from_json,
    batting_create_to_json,
    batting_line_from_json,
    completed_game_from_json,
    game_batting_stats_from_json,
    game_pitching_stats_from_json,
    pitching_create_to_json,
    pitching_line_from_json,
    recap_from_json,
    stat_diff_to_json,
)
from team_stat_entry.domain.errors import ConflictOrNotFoundError, StatEntryError, TransientNetworkError, ValidationError
from team_stat_entry.domain.game import (
    CompletedGame,
    GameAttendance,
    GameBattingStats,
    GamePitchingStats,
    GameRecap,
    TeamSeasonRef,
)
from team_stat_entry.domain.stat_line import BattingLine, PitchingLine

logger = logging.getLogger(__name__)

_CONFLICT_STATUSES = frozenset({404, 409})
_VALIDATION_STATUSES = frozenset({400, 422})
_MANAGE_ROLES = {"Administrator", "AccountAdmin", "TeamAdmin"}


def build_http_client(base_url: str, token: str | None = None, timeout: float = 10.0) -> httpx.AsyncClient:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=base_url, headers=headers, timeout=httpx.Timeout(timeout, connect=5.0))


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return f"Request failed with status {response.status_code}"


def map_http_error(response: httpx.Response) -> StatEntryError:
    message = _error_message(response)
    status = response.status_code
    if status in _CONFLICT_STATUSES:
        return ConflictOrNotFoundError(message, status)
    if status in _VALIDATION_STATUSES:
        return ValidationError(message)
    return TransientNetworkError(message, status)


class _ApiBase:
    def __init__(self, client: httpx.AsyncClient, *, retry_attempts: int = 3, retry_wait: float = 1.0) -> None:
        self._client = client
        self._retry_attempts = retry_attempts
        self._retry_wait = retry_wait

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.TransportError as e:
            raise TransientNetworkError(f"{method} {path} failed: {e}") from e
        if response.is_error:
            raise map_http_error(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _read(self, path: str, label: str) -> Any:
        fetch = read_retry(label, attempts=self._retry_attempts, initial_wait=self._retry_wait)(self._send)
        return await fetch("GET", path)


class HttpStatsEntryClient(_ApiBase):
    """REST data access for one team season's stat entry endpoints."""

    def _team_path(self, team: TeamSeasonRef) -> str:
        return (
            f"/api/accounts/{team.account_id}/seasons/{team.season_id}"
            f"/teams/{team.team_season_id}/stat-entry"
        )

    def _game_path(self, team: TeamSeasonRef, game_id: str, kind: str) -> str:
        return f"{self._team_path(team)}/games/{game_id}/{kind}"

    def _recap_path(self, team: TeamSeasonRef, game_id: str) -> str:
        return f"/api/accounts/{team.account_id}/seasons/{team.season_id}/games/{game_id}/recap/{team.team_season_id}"

    async def list_completed_games(self, team: TeamSeasonRef) -> list[CompletedGame]:
        data = await self._read(f"{self._team_path(team)}/games", "completed games")
        games = [completed_game_from_json(row) for row in data or []]
        logger.info("Fetched %d completed games for team %s", len(games), team.team_season_id)
        return games

    async def get_batting_stats(self, team: TeamSeasonRef, game_id: str) -> GameBattingStats:
        data = await self._read(self._game_path(team, game_id, "batting"), f"batting stats for game {game_id}")
        return game_batting_stats_from_json(data or {"gameId": game_id})

    async def get_pitching_stats(self, team: TeamSeasonRef, game_id: str) -> GamePitchingStats:
        data = await self._read(self._game_path(team, game_id, "pitching"), f"pitching stats for game {game_id}")
        return game_pitching_stats_from_json(data or {"gameId": game_id})

    async def create_batting_stat(self, team: TeamSeasonRef, game_id: str, payload: BattingLine) -> BattingLine:
        data = await self._send("POST", self._game_path(team, game_id, "batting"), batting_create_to_json(payload))
        return batting_line_from_json(data)

    async def create_pitching_stat(self, team: TeamSeasonRef, game_id: str, payload: PitchingLine) -> PitchingLine:
        data = await self._send("POST", self._game_path(team, game_id, "pitching"), pitching_create_to_json(payload))
        return pitching_line_from_json(data)

    async def update_batting_stat(
        self, team: TeamSeasonRef, game_id: str, stat_id: str, diff: dict[str, int | float]
    ) -> BattingLine:
        path = f"{self._game_path(team, game_id, 'batting')}/{stat_id}"
        data = await self._send("PUT", path, stat_diff_to_json(diff))
        return batting_line_from_json(data, default_id=stat_id)

    async def update_pitching_stat(
        self, team: TeamSeasonRef, game_id: str, stat_id: str, diff: dict[str, int | float]
    ) -> PitchingLine:
        path = f"{self._game_path(team, game_id, 'pitching')}/{stat_id}"
        data = await self._send("PUT", path, stat_diff_to_json(diff))
        return pitching_line_from_json(data, default_id=stat_id)

    async def delete_batting_stat(self, team: TeamSeasonRef, game_id: str, stat_id: str) -> None:
        await self._send("DELETE", f"{self._game_path(team, game_id, 'batting')}/{stat_id}")

    async def delete_pitching_stat(self, team: TeamSeasonRef, game_id: str, stat_id: str) -> None:
        await self._send("DELETE", f"{self._game_path(team, game_id, 'pitching')}/{stat_id}")

    async def get_season_batting_stats(self, team: TeamSeasonRef) -> list[BattingLine]:
        data = await self._read(f"{self._team_path(team)}/season/batting", "season batting stats")
        return [batting_line_from_json(row) for row in data or []]

    async def get_season_pitching_stats(self, team: TeamSeasonRef) -> list[PitchingLine]:
        data = await self._read(f"{self._team_path(team)}/season/pitching", "season pitching stats")
        return [pitching_line_from_json(row) for row in data or []]

    async def get_game_attendance(self, team: TeamSeasonRef, game_id: str) -> GameAttendance:
        data = await self._read(self._game_path(team, game_id, "attendance"), f"attendance for game {game_id}")
        return attendance_from_json(data or {})

    async def update_game_attendance(
        self, team: TeamSeasonRef, game_id: str, roster_season_id: str, present: bool
    ) -> GameAttendance:
        body = {"rosterSeasonId": roster_season_id, "present": present}
        data = await self._send("PUT", self._game_path(team, game_id, "attendance"), body)
        return attendance_from_json(data or {})

    async def get_game_recap(self, team: TeamSeasonRef, game_id: str) -> GameRecap:
        try:
            data = await self._read(self._recap_path(team, game_id), f"recap for game {game_id}")
        except ConflictOrNotFoundError:
            return GameRecap(game_id=game_id)
        return recap_from_json(game_id, data)

    async def save_game_recap(self, team: TeamSeasonRef, game_id: str, text: str) -> GameRecap:
        data = await self._send("PUT", self._recap_path(team, game_id), {"recap": text})
        return recap_from_json(game_id, data or {"recap": text})


class HttpRoleClient(_ApiBase):
    """Resolves stat-management rights from the current user's roles.

    Administrators, admins of the account and admins of the team may manage
    stats.
    """

    async def can_manage_stats(self, account_id: str, team_season_id: str) -> bool:
        data = await self._read(f"/api/accounts/{account_id}/user-roles", "user roles")
        for role in (data or {}).get("roles", []):
            name = role.get("roleName")
            if name not in _MANAGE_ROLES:
                continue
            if name == "Administrator":
                return True
            if name == "AccountAdmin" and str(role.get("accountId")) == account_id:
                return True
            if name == "TeamAdmin" and str(role.get("teamSeasonId")) == team_season_id:
                return True
        return False
