"""Computer targeting: checkerboard search, then finish off whatever was hit.

The engine never tracks ships. Which hits belong together is re-derived
after every hit from 4-directional adjacency on the opponent board, and a
ship's axis is inferred from the shape of that cluster.
"""

from __future__ import annotations

import logging
import random
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from broadside.telemetry import get_meter, get_tracer, set_coordinate

from .board import Board
from .coords import Coordinate, Orientation
from .errors import BroadsideError

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.targeting")
meter = get_meter("broadside.engine.targeting")

DECISION_COUNTER = meter.create_counter(
    "broadside_targeting_decisions",
    unit="1",
    description="Firing decisions taken by the computer, by mode",
)


class TargetMode(Enum):
    """Whether the engine is probing blind or working a known hit."""

    SEARCHING = "SEARCHING"
    FINISHING = "FINISHING"


class TargetQueue:
    """Insertion-ordered queue that silently refuses duplicates."""

    def __init__(self, items: Iterable[Coordinate] = ()) -> None:
        self._items: OrderedDict[Coordinate, None] = OrderedDict()
        for item in items:
            self.push(item)

    def push(self, coord: Coordinate) -> bool:
        """Append ``coord`` unless it is already queued."""
        if coord in self._items:
            return False
        self._items[coord] = None
        return True

    def pop_front(self) -> Coordinate:
        coord, _ = self._items.popitem(last=False)
        return coord

    def move_to_front(self, coords: list[Coordinate]) -> None:
        """Place ``coords`` at the head of the queue, keeping their order."""
        for coord in reversed(coords):
            self._items[coord] = None
            self._items.move_to_end(coord, last=False)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, coord: object) -> bool:
        return coord in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetQueue):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"TargetQueue({list(self)!r})"


@dataclass
class TargetingState:
    """Everything the engine needs to pick up where it left off."""

    mode: TargetMode = TargetMode.SEARCHING
    target_queue: TargetQueue = field(default_factory=TargetQueue)
    cluster_hits: list[Coordinate] = field(default_factory=list)


def connected_hits(hit_cells: set[Coordinate], start: Coordinate) -> list[Coordinate]:
    """Breadth-first component of ``hit_cells`` containing ``start``."""
    visited = [start]
    seen = {start}
    frontier = deque([start])
    while frontier:
        current = frontier.popleft()
        for neighbour in current.neighbours():
            if neighbour in hit_cells and neighbour not in seen:
                seen.add(neighbour)
                visited.append(neighbour)
                frontier.append(neighbour)
    return visited


def infer_orientation(cells: list[Coordinate]) -> Orientation | None:
    """Axis shared by two or more cells, or None if they do not line up."""
    if len(cells) < 2:
        return None
    if len({cell.row for cell in cells}) == 1:
        return Orientation.HORIZONTAL
    if len({cell.col for cell in cells}) == 1:
        return Orientation.VERTICAL
    return None


def line_extensions(cells: list[Coordinate], orientation: Orientation) -> list[Coordinate]:
    """The cells one step beyond the low and high ends of a straight run."""
    if orientation is Orientation.HORIZONTAL:
        row = cells[0].row
        cols = [cell.col for cell in cells]
        return [Coordinate(row, min(cols) - 1), Coordinate(row, max(cols) + 1)]
    col = cells[0].col
    rows = [cell.row for cell in cells]
    return [Coordinate(min(rows) - 1, col), Coordinate(max(rows) + 1, col)]


class TargetingEngine:
    """Chooses where the computer fires next and learns from each outcome."""

    def __init__(self, rng: random.Random | None = None, state: TargetingState | None = None) -> None:
        self._rng = rng or random.Random()
        self.state = state or TargetingState()

    @property
    def mode(self) -> TargetMode:
        return self.state.mode

    def reset(self) -> None:
        """Forget any lead, clearing the shared state object in place."""
        self.state.mode = TargetMode.SEARCHING
        self.state.target_queue.clear()
        self.state.cluster_hits = []

    def choose_next_shot(self, board: Board) -> Coordinate:
        """Return an unshot coordinate on ``board`` to fire at."""
        with tracer.start_as_current_span("targeting.choose_next_shot") as span:
            if self.state.mode is TargetMode.FINISHING:
                coord = self._next_queued(board)
                if coord is not None:
                    return self._decided(span, coord)
                logger.debug("targeting_queue_exhausted")
                self._stop_finishing()
            return self._decided(span, self._search(board))

    def record_hit(self, board: Board, coord: Coordinate) -> None:
        """Update the lead after ``coord`` was hit on ``board``."""
        state = self.state
        state.mode = TargetMode.FINISHING
        state.cluster_hits = connected_hits(board.hit_cells, coord)

        for hit in state.cluster_hits:
            for neighbour in hit.neighbours():
                if board.is_valid_coordinate(neighbour) and not board.already_shot(neighbour):
                    state.target_queue.push(neighbour)

        orientation = infer_orientation(state.cluster_hits)
        if orientation is not None:
            front = [
                cell
                for cell in line_extensions(state.cluster_hits, orientation)
                if board.is_valid_coordinate(cell) and not board.already_shot(cell)
            ]
            state.target_queue.move_to_front(front)

        logger.debug(
            "targeting_hit_recorded",
            extra={
                "row": coord.row,
                "col": coord.col,
                "cluster_size": len(state.cluster_hits),
                "orientation": orientation.name if orientation else None,
                "queue_length": len(state.target_queue),
            },
        )

    def record_miss(self) -> None:
        """Drop the lead once nothing is left to try around it."""
        if len(self.state.target_queue) == 0:
            self._stop_finishing()

    def _next_queued(self, board: Board) -> Coordinate | None:
        queue = self.state.target_queue
        while len(queue):
            coord = queue.pop_front()
            if not board.already_shot(coord):
                return coord
        return None

    def _search(self, board: Board) -> Coordinate:
        unshot = board.unshot_coordinates()
        if not unshot:
            raise BroadsideError("No unshot cells remain on the opponent board.")
        even = [coord for coord in unshot if coord.is_even()]
        pool = even or unshot
        return self._rng.choice(pool)

    def _stop_finishing(self) -> None:
        self.state.mode = TargetMode.SEARCHING
        self.state.cluster_hits = []

    def _decided(self, span, coord: Coordinate) -> Coordinate:
        mode = self.state.mode.value
        set_coordinate(span, "target", coord)
        span.set_attribute("targeting.mode", mode)
        DECISION_COUNTER.add(1, attributes={"mode": mode})
        logger.debug("targeting_decision", extra={"mode": mode, "row": coord.row, "col": coord.col})
        return coord
