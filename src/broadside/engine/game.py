"""Human-versus-computer game controller."""

from __future__ import annotations

import logging
import random
import time

from broadside.config import GameConfig
from broadside.telemetry import get_meter, get_tracer, set_coordinate

from .board import Board, ShotResult
from .coords import Coordinate, Side
from .events import EventListener, GameEnded, GameEvent, ShotResolved, TurnChanged
from .placement import place_ships
from .session import SessionStore
from .state import OPENING_STATUS, OPENING_SUBTITLE, GameState
from .targeting import TargetingEngine

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.game")
meter = get_meter("broadside.engine.game")

MOVE_COUNTER = meter.create_counter(
    "broadside_engine_moves",
    unit="1",
    description="Number of fire commands accepted by NavalBattle",
)

_STATUS = {
    (Side.HUMAN, True): "You hit a ship! Shoot again.",
    (Side.HUMAN, False): "You missed. The computer is firing...",
    (Side.COMPUTER, True): "The computer hit your ship! It shoots again.",
    (Side.COMPUTER, False): "The computer missed. Your turn.",
}
_VICTORY = {
    Side.HUMAN: "You win! You sank every enemy ship.",
    Side.COMPUTER: "The computer wins! It sank every one of your ships.",
}


class NavalBattle:
    """Owns one game: both boards, whose turn it is and the computer's aim.

    Every accepted shot follows the same path regardless of who fired it:
    apply it to the defending board, let the targeting engine learn from
    computer shots, settle the turn, persist, then notify listeners.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        state: GameState | None = None,
        rng_seed: int | None = None,
        store: SessionStore | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self._rng = random.Random(rng_seed)
        if store is None and self.config.save_path is not None:
            store = SessionStore(self.config.save_path)
        self.store = store
        self.state = state or GameState.empty(self.config.grid_size)
        self.engine = TargetingEngine(self._rng, self.state.targeting)
        self._listeners: list[EventListener] = []

    @classmethod
    def resume_or_start(
        cls,
        store: SessionStore,
        config: GameConfig | None = None,
        rng_seed: int | None = None,
    ) -> NavalBattle:
        """Continue the game saved in ``store``, or deal a new one."""
        config = config or GameConfig()
        saved = store.load(config.grid_size)
        game = cls(config=config, state=saved, rng_seed=rng_seed, store=store)
        if saved is None:
            game.new_game()
        else:
            logger.info(
                "game_resumed",
                extra={"current_turn": saved.current_turn.value, "game_over": saved.game_over},
            )
        return game

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        self._listeners.remove(listener)

    def new_game(self) -> None:
        """Deal fresh fleets for both sides and give the human the first move."""
        with tracer.start_as_current_span("game.new_game"):
            size = self.config.grid_size
            state = GameState.empty(size)
            for owner in Side:
                board = place_ships(
                    self.config.fleet,
                    self._rng,
                    size=size,
                    owner=owner,
                    max_attempts=self.config.max_placement_attempts,
                )
                if owner is Side.HUMAN:
                    state.human_board = board
                else:
                    state.computer_board = board
            state.subtitle = OPENING_SUBTITLE
            state.status = OPENING_STATUS
            self.state = state
            self.engine = TargetingEngine(self._rng, state.targeting)
            logger.info(
                "game_started",
                extra={"grid_size": size, "fleet": list(self.config.fleet)},
            )
            self._persist()

    @property
    def current_turn(self) -> Side:
        return self.state.current_turn

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    @property
    def winner(self) -> Side | None:
        return self.state.winner

    def fire_at(self, side_to_attack: Side, coord: Coordinate) -> ShotResult:
        """Fire at ``side_to_attack``'s board on behalf of the other side.

        Out-of-turn, post-game, off-grid and repeated shots are ignored and
        reported as ``ShotResult(valid=False)``.
        """
        shooter = side_to_attack.opponent()
        events: list[GameEvent] = []
        with tracer.start_as_current_span("game.fire_at") as span:
            span.set_attribute("shooter", shooter.value)
            set_coordinate(span, "target", coord)
            board = self.state.board(side_to_attack)

            reason = self._rejection(shooter, board, coord)
            if reason is not None:
                span.set_attribute("rejected", reason)
                logger.warning(
                    "fire_rejected",
                    extra={
                        "shooter": shooter.value,
                        "row": coord.row,
                        "col": coord.col,
                        "reason": reason,
                    },
                )
                return ShotResult(valid=False, coord=coord)

            result = board.apply_shot(coord)
            self.state.tally(shooter).record(result.is_hit)
            if shooter is Side.COMPUTER:
                if result.is_hit:
                    self.engine.record_hit(board, coord)
                else:
                    self.engine.record_miss()
            events.append(ShotResolved(side_to_attack, coord, result.is_hit))

            if result.is_hit and board.has_won():
                self._finish(shooter)
                span.set_attribute("game.winner", shooter.value)
                events.append(GameEnded(shooter))
            elif result.is_hit:
                self.state.status = _STATUS[(shooter, True)]
            else:
                self.state.current_turn = side_to_attack
                self.state.status = _STATUS[(shooter, False)]
                span.set_attribute("next_turn", side_to_attack.value)
                logger.info("turn_changed", extra={"current_turn": side_to_attack.value})
                events.append(TurnChanged(side_to_attack))

            MOVE_COUNTER.add(
                1,
                attributes={"result": "hit" if result.is_hit else "miss", "shooter": shooter.value},
            )
            self._persist()

        for event in events:
            self._emit(event)
        return result

    def play_computer_turn(self) -> list[ShotResult]:
        """Let the computer fire until it misses or wins."""
        shots: list[ShotResult] = []
        with tracer.start_as_current_span("game.computer_turn") as span:
            while not self.state.game_over and self.state.current_turn is Side.COMPUTER:
                if self.config.computer_step_delay:
                    time.sleep(self.config.computer_step_delay)
                coord = self.engine.choose_next_shot(self.state.human_board)
                shots.append(self.fire_at(Side.HUMAN, coord))
            span.set_attribute("shots", len(shots))
        return shots

    def valid_targets(self, side_to_attack: Side) -> list[Coordinate]:
        """Return every coordinate still open to fire at on that board."""
        if self.state.game_over:
            return []
        return self.state.board(side_to_attack).unshot_coordinates()

    def _rejection(self, shooter: Side, board: Board, coord: Coordinate) -> str | None:
        if self.state.game_over:
            return "game_over"
        if shooter is not self.state.current_turn:
            return "wrong_turn"
        if not board.is_valid_coordinate(coord):
            return "out_of_bounds"
        if board.already_shot(coord):
            return "already_shot"
        return None

    def _finish(self, winner: Side) -> None:
        self.state.game_over = True
        self.state.winner = winner
        self.state.status = _VICTORY[winner]
        logger.info(
            "game_finished",
            extra={
                "winner": winner.value,
                "human_shots": self.state.human_shots.hits + self.state.human_shots.misses,
                "computer_shots": self.state.computer_shots.hits + self.state.computer_shots.misses,
            },
        )

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.state)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
