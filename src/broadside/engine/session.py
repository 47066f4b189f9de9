"""Saving and restoring an in-progress game.

A snapshot is a versioned JSON document. Coordinates travel as ``"row,col"``
keys and every board set is stored, and trusted, on its own. Anything that
cannot be turned back into a game yields ``None`` so the caller can simply
start over.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from broadside.config import GRID_SIZE, SNAPSHOT_VERSION
from broadside.telemetry import get_tracer

from .board import Board
from .coords import Coordinate, Side
from .state import OPENING_STATUS, OPENING_SUBTITLE, GameState, ShotTally
from .targeting import TargetingState, TargetMode, TargetQueue

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.session")


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TallySnapshot(_SnapshotModel):
    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)


class BoardSnapshot(_SnapshotModel):
    ship_cells: list[str] = Field(default_factory=list, alias="shipCells")
    hit_cells: list[str] = Field(default_factory=list, alias="hitCells")
    miss_cells: list[str] = Field(default_factory=list, alias="missCells")


class TargetingSnapshot(_SnapshotModel):
    mode: TargetMode = TargetMode.SEARCHING
    target_queue: list[str] = Field(default_factory=list, alias="targetQueue")
    cluster_hits: list[str] = Field(default_factory=list, alias="clusterHits")


class DisplaySnapshot(_SnapshotModel):
    subtitle: str = OPENING_SUBTITLE
    status: str = OPENING_STATUS


class Snapshot(_SnapshotModel):
    """Wire format of a saved session."""

    version: int = SNAPSHOT_VERSION
    current_turn: Side = Field(default=Side.HUMAN, alias="currentTurn")
    game_over: bool = Field(default=False, alias="gameOver")
    winner: Side | None = None
    human_shots: TallySnapshot = Field(default_factory=TallySnapshot, alias="humanShots")
    computer_shots: TallySnapshot = Field(default_factory=TallySnapshot, alias="computerShots")
    human_board: BoardSnapshot = Field(default_factory=BoardSnapshot, alias="humanBoard")
    computer_board: BoardSnapshot = Field(default_factory=BoardSnapshot, alias="computerBoard")
    targeting_state: TargetingSnapshot = Field(
        default_factory=TargetingSnapshot, alias="targetingState"
    )
    display: DisplaySnapshot = Field(default_factory=DisplaySnapshot)


def _keys(cells: Iterable[Coordinate]) -> list[str]:
    return [cell.key() for cell in sorted(cells, key=lambda cell: (cell.row, cell.col))]


def _board_snapshot(board: Board) -> BoardSnapshot:
    return BoardSnapshot(
        ship_cells=_keys(board.ship_cells),
        hit_cells=_keys(board.hit_cells),
        miss_cells=_keys(board.miss_cells),
    )


def to_snapshot(state: GameState) -> Snapshot:
    """Flatten ``state`` into its wire model."""
    targeting = state.targeting
    return Snapshot(
        version=SNAPSHOT_VERSION,
        current_turn=state.current_turn,
        game_over=state.game_over,
        winner=state.winner,
        human_shots=TallySnapshot(hits=state.human_shots.hits, misses=state.human_shots.misses),
        computer_shots=TallySnapshot(
            hits=state.computer_shots.hits, misses=state.computer_shots.misses
        ),
        human_board=_board_snapshot(state.human_board),
        computer_board=_board_snapshot(state.computer_board),
        targeting_state=TargetingSnapshot(
            mode=targeting.mode,
            target_queue=[coord.key() for coord in targeting.target_queue],
            cluster_hits=[coord.key() for coord in targeting.cluster_hits],
        ),
        display=DisplaySnapshot(subtitle=state.subtitle, status=state.status),
    )


def serialize(state: GameState) -> str:
    """Render ``state`` as a JSON snapshot."""
    return to_snapshot(state).model_dump_json(by_alias=True)


def _coordinates(keys: list[str], size: int) -> list[Coordinate]:
    coords = [Coordinate.from_key(key) for key in keys]
    for coord in coords:
        if not (0 <= coord.row < size and 0 <= coord.col < size):
            raise ValueError(f"Coordinate {coord.key()} is outside a {size}x{size} grid.")
    return coords


def _board(snapshot: BoardSnapshot, owner: Side, size: int) -> Board:
    return Board(
        size=size,
        owner=owner,
        ship_cells=set(_coordinates(snapshot.ship_cells, size)),
        hit_cells=set(_coordinates(snapshot.hit_cells, size)),
        miss_cells=set(_coordinates(snapshot.miss_cells, size)),
    )


def from_snapshot(snapshot: Snapshot, size: int = GRID_SIZE) -> GameState:
    """Rebuild a game from a validated snapshot; ``ValueError`` on bad keys."""
    human_board = _board(snapshot.human_board, Side.HUMAN, size)
    computer_board = _board(snapshot.computer_board, Side.COMPUTER, size)

    winner = snapshot.winner if snapshot.game_over else None
    if snapshot.game_over and winner is None:
        if computer_board.has_won():
            winner = Side.HUMAN
        elif human_board.has_won():
            winner = Side.COMPUTER

    targeting = snapshot.targeting_state
    return GameState(
        human_board=human_board,
        computer_board=computer_board,
        current_turn=snapshot.current_turn,
        game_over=snapshot.game_over,
        winner=winner,
        human_shots=ShotTally(snapshot.human_shots.hits, snapshot.human_shots.misses),
        computer_shots=ShotTally(snapshot.computer_shots.hits, snapshot.computer_shots.misses),
        targeting=TargetingState(
            mode=targeting.mode,
            target_queue=TargetQueue(_coordinates(targeting.target_queue, size)),
            cluster_hits=_coordinates(targeting.cluster_hits, size),
        ),
        subtitle=snapshot.display.subtitle,
        status=snapshot.display.status,
    )


def deserialize(raw: str | bytes, size: int = GRID_SIZE) -> GameState | None:
    """Restore a game from JSON, or return None if it cannot be trusted."""
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.warning("session_snapshot_rejected", extra={"reason": "unparseable", "error": str(exc)})
        return None
    if not isinstance(payload, dict):
        logger.warning("session_snapshot_rejected", extra={"reason": "not_an_object"})
        return None

    try:
        snapshot = Snapshot.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "session_snapshot_rejected",
            extra={"reason": "schema", "errors": exc.error_count()},
        )
        return None

    if snapshot.version != SNAPSHOT_VERSION:
        logger.warning(
            "session_snapshot_rejected",
            extra={"reason": "version", "version": snapshot.version},
        )
        return None

    try:
        return from_snapshot(snapshot, size)
    except ValueError as exc:
        logger.warning("session_snapshot_rejected", extra={"reason": "cells", "error": str(exc)})
        return None


class SessionStore:
    """A single JSON save file on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, state: GameState) -> None:
        """Write ``state`` atomically, replacing any previous save."""
        with tracer.start_as_current_span("session.save") as span:
            span.set_attribute("session.path", str(self.path))
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(serialize(state))
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            logger.debug("session_saved", extra={"path": str(self.path)})

    def load(self, size: int = GRID_SIZE) -> GameState | None:
        """Return the saved game, or None when there is nothing usable."""
        with tracer.start_as_current_span("session.load") as span:
            span.set_attribute("session.path", str(self.path))
            if not self.exists():
                span.set_attribute("session.found", False)
                return None
            try:
                raw = self.path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning(
                    "session_load_failed", extra={"path": str(self.path), "error": str(exc)}
                )
                return None
            state = deserialize(raw, size)
            span.set_attribute("session.found", state is not None)
            if state is not None:
                logger.info("session_loaded", extra={"path": str(self.path)})
            return state

    def clear(self) -> None:
        """Delete the save file if there is one."""
        self.path.unlink(missing_ok=True)
        logger.info("session_cleared", extra={"path": str(self.path)})
