"""Random fleet layout."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from broadside.config import FLEET, GRID_SIZE, MAX_PLACEMENT_ATTEMPTS
from broadside.telemetry import get_meter, get_tracer

from .board import Board
from .coords import Coordinate, Orientation, Side, ship_run
from .errors import PlacementError

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.placement")
meter = get_meter("broadside.engine.placement")

PLACEMENT_COUNTER = meter.create_counter(
    "broadside_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)


def random_ship(length: int, size: int, rng: random.Random) -> list[Coordinate]:
    """Sample one in-bounds straight ship with uniform orientation and start."""
    orientation = rng.choice(list(Orientation))
    if orientation is Orientation.HORIZONTAL:
        start = Coordinate(rng.randrange(size), rng.randrange(size - length + 1))
    else:
        start = Coordinate(rng.randrange(size - length + 1), rng.randrange(size))
    return ship_run(start, length, orientation)


def place_ship(
    board: Board,
    length: int,
    rng: random.Random,
    max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
) -> list[Coordinate]:
    """Rejection-sample a free spot for one ship and add it to ``board``."""
    if length > board.size:
        raise PlacementError(f"A ship of length {length} does not fit a {board.size}x{board.size} grid.")
    owner = board.owner.value
    for attempt in range(1, max_attempts + 1):
        cells = random_ship(length, board.size, rng)
        if board.can_place(cells):
            board.add_ship(cells)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": owner})
            logger.debug(
                "ship_placed",
                extra={
                    "owner": owner,
                    "length": length,
                    "row": cells[0].row,
                    "col": cells[0].col,
                    "attempts": attempt,
                },
            )
            return cells
        PLACEMENT_COUNTER.add(1, attributes={"result": "overlap", "owner": owner})

    logger.error(
        "ship_placement_exhausted",
        extra={"owner": owner, "length": length, "attempts": max_attempts},
    )
    raise PlacementError(f"Could not place a ship of length {length} after {max_attempts} attempts.")


def place_ships(
    fleet: Sequence[int] = FLEET,
    rng: random.Random | None = None,
    size: int = GRID_SIZE,
    owner: Side = Side.HUMAN,
    max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
) -> Board:
    """Build an empty board and lay out every ship in ``fleet`` without overlap."""
    rng = rng or random.Random()
    with tracer.start_as_current_span("placement.place_ships") as span:
        span.set_attribute("board.owner", owner.value)
        span.set_attribute("fleet.size", len(fleet))
        board = Board(size=size, owner=owner)
        for length in fleet:
            place_ship(board, length, rng, max_attempts)
        return board
