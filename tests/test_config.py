from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from config import ConfigurationSet

from team_stat_entry.config import ConfigurationError, create_config, load_api_settings, load_team_ref
from team_stat_entry.domain.game import TeamSeasonRef

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all STAT_ENTRY__ env vars so tests are isolated from the shell."""
    for key in list(os.environ):
        if key.startswith("STAT_ENTRY__"):
            monkeypatch.delenv(key)


def test_create_config_returns_defaults() -> None:
    cfg = create_config(yaml_path="/nonexistent/stat_entry.yaml")
    assert isinstance(cfg, ConfigurationSet)
    assert cfg["api.base_url"] == "http://localhost:3001"
    assert cfg["api.retry_attempts"] == 3
    assert cfg["team.account_id"] == ""


def test_yaml_overrides_defaults(tmp_path: Path) -> None:
    yaml_file = tmp_path / "stat_entry.yaml"
    yaml_file.write_text("api:\n" "  base_url: https://stats.example.org\n" "team:\n" "  account_id: '12'\n")
    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["api.base_url"] == "https://stats.example.org"
    assert cfg["team.account_id"] == "12"
    # Defaults still apply for unset keys
    assert cfg["api.timeout"] == 10.0


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_file = tmp_path / "stat_entry.yaml"
    yaml_file.write_text("api:\n  base_url: https://yaml.example.org\n")
    monkeypatch.setenv("STAT_ENTRY__API__BASE_URL", "https://env.example.org")
    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["api.base_url"] == "https://env.example.org"


def test_explicit_team_overrides_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAT_ENTRY__TEAM__SEASON_ID", "2023")
    cfg = create_config(yaml_path="/nonexistent/stat_entry.yaml", season_id="2024", account_id="1")
    assert cfg["team.season_id"] == "2024"
    assert cfg["team.account_id"] == "1"


class TestLoadApiSettings:
    def test_defaults(self) -> None:
        settings = load_api_settings(create_config(yaml_path="/nonexistent/stat_entry.yaml"))
        assert settings.base_url == "http://localhost:3001"
        assert settings.token is None
        assert settings.retry_attempts == 3

    def test_env_values_are_coerced(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STAT_ENTRY__API__TOKEN", "secret")
        monkeypatch.setenv("STAT_ENTRY__API__RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("STAT_ENTRY__API__BASE_URL", "https://stats.example.org/")
        settings = load_api_settings(create_config(yaml_path="/nonexistent/stat_entry.yaml"))
        assert settings.token == "secret"
        assert settings.retry_attempts == 5
        assert settings.base_url == "https://stats.example.org"

    def test_invalid_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STAT_ENTRY__API__TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="Invalid API setting"):
            load_api_settings(create_config(yaml_path="/nonexistent/stat_entry.yaml"))

    def test_retry_attempts_must_be_positive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STAT_ENTRY__API__RETRY_ATTEMPTS", "0")
        with pytest.raises(ConfigurationError):
            load_api_settings(create_config(yaml_path="/nonexistent/stat_entry.yaml"))


class TestLoadTeamRef:
    def test_complete(self) -> None:
        cfg = create_config(
            yaml_path="/nonexistent/stat_entry.yaml", account_id="1", season_id="2024", team_season_id="77"
        )
        assert load_team_ref(cfg) == TeamSeasonRef("1", "2024", "77")

    def test_missing_value_names_env_key(self) -> None:
        cfg = create_config(yaml_path="/nonexistent/stat_entry.yaml", account_id="1", season_id="2024")
        with pytest.raises(ConfigurationError, match="STAT_ENTRY__TEAM__TEAM_SEASON_ID"):
            load_team_ref(cfg)
