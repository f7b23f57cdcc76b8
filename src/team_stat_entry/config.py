from dataclasses import dataclass

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from team_stat_entry.domain.game import TeamSeasonRef
from team_stat_entry.exceptions import StatEntryException


class ConfigurationError(StatEntryException):
    """A required configuration value is missing or malformed."""


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    token: str | None = None
    timeout: float = 10.0
    retry_attempts: int = 3
    retry_wait: float = 1.0


_DEFAULTS: dict[str, object] = {
    "api": {
        "base_url": "http://localhost:3001",
        "token": "",
        "timeout": 10.0,
        "retry_attempts": 3,
        "retry_wait": 1.0,
    },
    "team": {
        "account_id": "",
        "season_id": "",
        "team_season_id": "",
    },
}


def create_config(
    yaml_path: str = "stat_entry.yaml",
    env_prefix: str = "STAT_ENTRY",
    defaults: dict[str, object] | None = None,
    *,
    account_id: str | None = None,
    season_id: str | None = None,
    team_season_id: str | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]

    overrides = _build_overrides(account_id, season_id, team_season_id)
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def _build_overrides(account_id: str | None, season_id: str | None, team_season_id: str | None) -> dict[str, object]:
    team: dict[str, object] = {}
    if account_id is not None:
        team["account_id"] = account_id
    if season_id is not None:
        team["season_id"] = season_id
    if team_season_id is not None:
        team["team_season_id"] = team_season_id
    return {"team": team} if team else {}


def _required(config: ConfigurationSet, key: str) -> str:
    value = str(config.get(key, "") or "").strip()
    if not value:
        env_key = "STAT_ENTRY__" + key.upper().replace(".", "__")
        raise ConfigurationError(f"Missing required setting {key!r} (set it in stat_entry.yaml or {env_key})")
    return value


def load_api_settings(config: ConfigurationSet) -> ApiSettings:
    try:
        timeout = float(config.get("api.timeout", 10.0))
        retry_attempts = int(config.get("api.retry_attempts", 3))
        retry_wait = float(config.get("api.retry_wait", 1.0))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid API setting: {e}") from e
    if retry_attempts < 1:
        raise ConfigurationError("api.retry_attempts must be at least 1")
    token = str(config.get("api.token", "") or "").strip()
    return ApiSettings(
        base_url=_required(config, "api.base_url").rstrip("/"),
        token=token or None,
        timeout=timeout,
        retry_attempts=retry_attempts,
        retry_wait=retry_wait,
    )


def load_team_ref(config: ConfigurationSet) -> TeamSeasonRef:
    return TeamSeasonRef(
        account_id=_required(config, "team.account_id"),
        season_id=_required(config, "team.season_id"),
        team_season_id=_required(config, "team.team_season_id"),
    )
