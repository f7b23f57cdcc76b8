from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from config import ConfigurationSet

from team_stat_entry.client.http import HttpRoleClient, HttpStatsEntryClient, build_http_client
from team_stat_entry.config import load_api_settings, load_team_ref
from team_stat_entry.domain.errors import StatEntryError
from team_stat_entry.domain.game import TeamSeasonRef
from team_stat_entry.entry.session import GameSortOrder, StatEntrySession


@dataclass(frozen=True)
class StatEntryContext:
    session: StatEntrySession
    team: TeamSeasonRef


@asynccontextmanager
async def build_session_context(
    config: ConfigurationSet,
    *,
    on_process_error: Callable[[StatEntryError], None] | None = None,
    sort_order: GameSortOrder = GameSortOrder.DESC,
) -> AsyncIterator[StatEntryContext]:
    """Composition root: opens the HTTP client, wires the session, closes the client on exit."""
    settings = load_api_settings(config)
    team = load_team_ref(config)
    http = build_http_client(settings.base_url, settings.token, settings.timeout)
    try:
        client = HttpStatsEntryClient(http, retry_attempts=settings.retry_attempts, retry_wait=settings.retry_wait)
        roles = HttpRoleClient(http, retry_attempts=settings.retry_attempts, retry_wait=settings.retry_wait)
        session = StatEntrySession(client, roles, team, on_process_error=on_process_error, sort_order=sort_order)
        yield StatEntryContext(session=session, team=team)
    finally:
        await http.aclose()
