"""Single-side board state for the Broadside engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from broadside.config import GRID_SIZE
from broadside.telemetry import get_meter, get_tracer, set_coordinate

from .coords import Coordinate, Side

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.board")
meter = get_meter("broadside.engine.board")

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Shots received by a board",
)


@dataclass(frozen=True)
class ShotResult:
    """Outcome of a fire command; ``valid`` is False when nothing changed."""

    valid: bool
    is_hit: bool = False
    coord: Coordinate | None = None


@dataclass
class Board:
    """One side's grid: where its ships are and where it has been shot.

    Ships are not tracked individually. ``hit_cells`` is always a subset of
    ``ship_cells`` and ``miss_cells`` never touches either of them.
    """

    size: int = GRID_SIZE
    owner: Side = Side.HUMAN
    ship_cells: set[Coordinate] = field(default_factory=set)
    hit_cells: set[Coordinate] = field(default_factory=set)
    miss_cells: set[Coordinate] = field(default_factory=set)

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def already_shot(self, coord: Coordinate) -> bool:
        return coord in self.hit_cells or coord in self.miss_cells

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        """Whether every cell is on the grid and free of other ships."""
        return all(
            self.is_valid_coordinate(cell) and cell not in self.ship_cells for cell in cells
        )

    def add_ship(self, cells: Iterable[Coordinate]) -> None:
        """Occupy ``cells`` with a ship, rejecting overlaps and off-grid cells."""
        cells = list(cells)
        if not self.can_place(cells):
            raise ValueError("Ship overlaps another ship or leaves the board.")
        self.ship_cells.update(cells)

    def apply_shot(self, coord: Coordinate) -> ShotResult:
        """Register a shot at this board and return its outcome."""
        with tracer.start_as_current_span("board.apply_shot") as span:
            set_coordinate(span, "shot", coord)
            span.set_attribute("board.owner", self.owner.value)
            if not self.is_valid_coordinate(coord):
                logger.error(
                    "shot_out_of_bounds",
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner.value},
                )
                raise ValueError("Shot out of bounds.")
            if self.already_shot(coord):
                span.set_attribute("shot.outcome", "repeat")
                logger.debug(
                    "shot_repeat",
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner.value},
                )
                return ShotResult(valid=False, coord=coord)

            is_hit = coord in self.ship_cells
            if is_hit:
                self.hit_cells.add(coord)
            else:
                self.miss_cells.add(coord)
            outcome = "hit" if is_hit else "miss"
            span.set_attribute("shot.outcome", outcome)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome, "owner": self.owner.value})
            logger.info(
                f"shot_{outcome}",
                extra={"row": coord.row, "col": coord.col, "owner": self.owner.value},
            )
            return ShotResult(valid=True, is_hit=is_hit, coord=coord)

    def has_won(self) -> bool:
        """True once every ship cell has been hit (an empty board counts)."""
        return self.ship_cells <= self.hit_cells

    def unshot_coordinates(self) -> list[Coordinate]:
        """All cells not yet fired upon, in row-major order."""
        return [
            Coordinate(row, col)
            for row in range(self.size)
            for col in range(self.size)
            if not self.already_shot(Coordinate(row, col))
        ]

    def remaining_ship_cells(self) -> int:
        return len(self.ship_cells - self.hit_cells)
