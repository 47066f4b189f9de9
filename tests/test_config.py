"""Tests for game settings."""

from pathlib import Path

import pytest
from broadside.config import COMPUTER_STEP_DELAY, FLEET, GRID_SIZE, GameConfig, load_game_config
from pydantic import ValidationError


def test_defaults_match_fixed_rules(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BROADSIDE_STEP_DELAY", raising=False)
    monkeypatch.delenv("BROADSIDE_SAVE_PATH", raising=False)
    config = GameConfig.from_env()
    assert config.grid_size == GRID_SIZE == 10
    assert config.fleet == FLEET == (5, 3, 2)
    assert config.computer_step_delay == COMPUTER_STEP_DELAY
    assert config.save_path is None


def test_env_overrides_delay_and_save_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BROADSIDE_STEP_DELAY", "0")
    monkeypatch.setenv("BROADSIDE_SAVE_PATH", "/tmp/broadside/save.json")
    config = GameConfig.from_env()
    assert config.computer_step_delay == 0
    assert config.save_path == Path("/tmp/broadside/save.json")


def test_explicit_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BROADSIDE_STEP_DELAY", "2")
    assert GameConfig.from_env(computer_step_delay=0.1).computer_step_delay == 0.1


@pytest.mark.parametrize(
    "kwargs",
    [{"fleet": (3, 0)}, {"computer_step_delay": -1}, {"grid_size": 0}],
)
def test_invalid_settings_rejected(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        GameConfig(**kwargs)


def test_load_game_config_cached() -> None:
    load_game_config.cache_clear()
    assert load_game_config() is load_game_config()
    load_game_config.cache_clear()
