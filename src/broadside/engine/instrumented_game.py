"""NavalBattle with per-game spans and aggregate metrics."""

from __future__ import annotations

import time

from broadside.telemetry import get_logger, get_tracer, record_game_metric

from .board import ShotResult
from .coords import Coordinate, Side
from .game import NavalBattle


class InstrumentedNavalBattle(NavalBattle):
    """Wraps NavalBattle with a span per game, counters and summary logging."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("broadside.engine")
        self._tracer = get_tracer("broadside.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._games_started = 0

    def new_game(self) -> None:
        self._start_game_span()
        super().new_game()
        record_game_metric("broadside_games_started_total", 1, {"grid_size": self.config.grid_size})
        self._logger.info("New game dealt (fleet=%s)", list(self.config.fleet))

    def fire_at(self, side_to_attack: Side, coord: Coordinate) -> ShotResult:
        was_over = self.state.game_over
        shooter = side_to_attack.opponent()
        result = super().fire_at(side_to_attack, coord)

        if not result.valid:
            record_game_metric("broadside_rejected_shots_total", 1, {"shooter": shooter.name})
            return result

        record_game_metric(
            "broadside_shots_by_result_total",
            1,
            {"shooter": shooter.name, "result": "hit" if result.is_hit else "miss"},
        )
        if self.state.game_over and not was_over:
            self._finish_game()
        return result

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._games_started += 1
        self._game_span_cm = self._tracer.start_as_current_span("broadside.engine.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._games_started)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        winner = self.state.winner.name if self.state.winner else "unknown"
        shots = {
            side.name: self.state.tally(side).hits + self.state.tally(side).misses for side in Side
        }

        record_game_metric("broadside_games_completed_total", 1, {"winner": winner})
        record_game_metric("broadside_game_duration_seconds", duration, {"winner": winner})

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("shots.human", shots[Side.HUMAN.name])
            self._game_span.set_attribute("shots.computer", shots[Side.COMPUTER.name])
            self._game_span.set_attribute("duration_ms", duration * 1000)

        self._logger.info(
            "Game finished. Winner=%s shots=%s duration_s=%.3f", winner, shots, duration
        )
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
