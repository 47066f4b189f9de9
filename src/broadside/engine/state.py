"""The game-state aggregate shared by the controller and the session store."""

from __future__ import annotations

from dataclasses import dataclass, field

from broadside.config import GRID_SIZE

from .board import Board
from .coords import Side
from .targeting import TargetingState

OPENING_SUBTITLE = "You start first. Fire on the computer's board."
OPENING_STATUS = "You start first. Pick a target."


@dataclass
class ShotTally:
    """Per-side hit/miss counts, kept for display only."""

    hits: int = 0
    misses: int = 0

    def record(self, is_hit: bool) -> None:
        if is_hit:
            self.hits += 1
        else:
            self.misses += 1


@dataclass
class GameState:
    """Everything needed to redraw or resume a game."""

    human_board: Board = field(default_factory=lambda: Board(owner=Side.HUMAN))
    computer_board: Board = field(default_factory=lambda: Board(owner=Side.COMPUTER))
    current_turn: Side = Side.HUMAN
    game_over: bool = False
    winner: Side | None = None
    human_shots: ShotTally = field(default_factory=ShotTally)
    computer_shots: ShotTally = field(default_factory=ShotTally)
    targeting: TargetingState = field(default_factory=TargetingState)
    subtitle: str = OPENING_SUBTITLE
    status: str = OPENING_STATUS

    @classmethod
    def empty(cls, size: int = GRID_SIZE) -> GameState:
        """A fresh state with two unoccupied boards of the given size."""
        return cls(
            human_board=Board(size=size, owner=Side.HUMAN),
            computer_board=Board(size=size, owner=Side.COMPUTER),
        )

    def board(self, owner: Side) -> Board:
        return self.human_board if owner is Side.HUMAN else self.computer_board

    def tally(self, shooter: Side) -> ShotTally:
        return self.human_shots if shooter is Side.HUMAN else self.computer_shots
