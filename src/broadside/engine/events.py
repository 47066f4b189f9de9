"""Events published by the game controller to presentation layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .coords import Coordinate, Side


@dataclass(frozen=True)
class ShotResolved:
    board_owner: Side
    coord: Coordinate
    is_hit: bool


@dataclass(frozen=True)
class TurnChanged:
    new_turn: Side


@dataclass(frozen=True)
class GameEnded:
    winner: Side


GameEvent = Union[ShotResolved, TurnChanged, GameEnded]
EventListener = Callable[[GameEvent], None]
