"""Game constants and runtime settings."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

GRID_SIZE = 10
FLEET: tuple[int, ...] = (5, 3, 2)
# Pause between consecutive computer shots; purely cosmetic.
COMPUTER_STEP_DELAY = 0.55
MAX_PLACEMENT_ATTEMPTS = 1000
SNAPSHOT_VERSION = 2
DEFAULT_SAVE_PATH = Path.home() / ".broadside" / "session.json"


class GameConfig(BaseModel):
    """Settings for a single game controller."""

    grid_size: int = Field(default=GRID_SIZE, ge=1)
    fleet: tuple[int, ...] = FLEET
    computer_step_delay: float = Field(default=COMPUTER_STEP_DELAY, ge=0.0)
    max_placement_attempts: int = Field(default=MAX_PLACEMENT_ATTEMPTS, ge=1)
    save_path: Path | None = None

    @field_validator("fleet")
    @classmethod
    def _positive_lengths(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(length < 1 for length in value):
            raise ValueError("Ship lengths must be positive.")
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from `BROADSIDE_*` env vars.

        Only the cosmetic delay and the save location are read from the
        environment; grid size and fleet stay fixed unless passed explicitly.
        """

        data: Dict[str, Any] = {}

        delay = os.getenv("BROADSIDE_STEP_DELAY")
        if delay is not None:
            data["computer_step_delay"] = float(delay)

        save_path = os.getenv("BROADSIDE_SAVE_PATH")
        if save_path:
            data["save_path"] = Path(save_path).expanduser()

        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache game config from the environment."""

    return GameConfig.from_env()
