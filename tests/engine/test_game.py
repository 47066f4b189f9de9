"""High-level gameplay tests."""

import random

from broadside.config import GameConfig
from broadside.engine.coords import Coordinate, Orientation, Side, ship_run
from broadside.engine.events import GameEnded, ShotResolved, TurnChanged
from broadside.engine.game import NavalBattle
from broadside.engine.session import SessionStore
from broadside.engine.state import GameState
from broadside.engine.targeting import TargetMode

QUICK = GameConfig(computer_step_delay=0)


def _small_game() -> tuple[NavalBattle, list]:
    """4x4 game: human destroyer at (0,0)-(0,1), computer destroyer at (3,2)-(3,3)."""
    config = GameConfig(grid_size=4, fleet=(2,), computer_step_delay=0)
    state = GameState.empty(4)
    state.human_board.add_ship(ship_run(Coordinate(0, 0), 2, Orientation.HORIZONTAL))
    state.computer_board.add_ship(ship_run(Coordinate(3, 2), 2, Orientation.HORIZONTAL))
    game = NavalBattle(config=config, state=state, rng_seed=0)
    events: list = []
    game.subscribe(events.append)
    return game, events


def _first(cells, predicate):
    return next(cell for cell in sorted(cells, key=lambda c: (c.row, c.col)) if predicate(cell))


def test_end_to_end_small_board() -> None:
    game, events = _small_game()

    miss = game.fire_at(Side.COMPUTER, Coordinate(1, 1))
    assert miss.valid and not miss.is_hit
    assert game.current_turn is Side.COMPUTER
    assert events == [ShotResolved(Side.COMPUTER, Coordinate(1, 1), False), TurnChanged(Side.COMPUTER)]

    events.clear()
    hit = game.fire_at(Side.HUMAN, Coordinate(0, 0))
    assert hit.valid and hit.is_hit
    assert game.current_turn is Side.COMPUTER
    assert game.engine.mode is TargetMode.FINISHING
    assert game.state.targeting.cluster_hits == [Coordinate(0, 0)]
    queue = list(game.state.targeting.target_queue)
    assert Coordinate(0, 1) in queue
    assert all(0 <= c.row < 4 and 0 <= c.col < 4 for c in queue)
    assert events == [ShotResolved(Side.HUMAN, Coordinate(0, 0), True)]

    events.clear()
    final = game.fire_at(Side.HUMAN, Coordinate(0, 1))
    assert final.is_hit
    assert game.game_over
    assert game.winner is Side.COMPUTER
    assert events == [ShotResolved(Side.HUMAN, Coordinate(0, 1), True), GameEnded(Side.COMPUTER)]

    events.clear()
    after = game.fire_at(Side.HUMAN, Coordinate(2, 2))
    assert not after.valid
    assert events == []
    assert game.valid_targets(Side.HUMAN) == []


def test_hit_keeps_turn_and_miss_passes_it() -> None:
    game = NavalBattle(config=QUICK, rng_seed=3)
    game.new_game()
    board = game.state.computer_board
    target = _first(board.ship_cells, lambda cell: True)
    water = _first(board.unshot_coordinates(), lambda cell: cell not in board.ship_cells)

    assert game.fire_at(Side.COMPUTER, target).is_hit
    assert game.current_turn is Side.HUMAN
    assert not game.game_over

    assert not game.fire_at(Side.COMPUTER, water).is_hit
    assert game.current_turn is Side.COMPUTER
    assert game.state.human_shots.hits == 1
    assert game.state.human_shots.misses == 1


def test_rejected_commands_leave_state_untouched() -> None:
    game, events = _small_game()
    before = (set(game.state.computer_board.miss_cells), game.current_turn)

    assert not game.fire_at(Side.HUMAN, Coordinate(2, 2)).valid  # computer out of turn
    assert not game.fire_at(Side.COMPUTER, Coordinate(4, 0)).valid  # off the grid
    game.fire_at(Side.COMPUTER, Coordinate(3, 2))
    assert not game.fire_at(Side.COMPUTER, Coordinate(3, 2)).valid  # repeat

    assert (set(game.state.computer_board.miss_cells), game.current_turn) == before
    assert game.state.human_shots.hits == 1
    assert game.state.computer_shots.hits == game.state.computer_shots.misses == 0
    assert [type(event) for event in events] == [ShotResolved]


def test_human_wins_on_last_ship_cell() -> None:
    game, events = _small_game()
    game.fire_at(Side.COMPUTER, Coordinate(3, 2))
    game.fire_at(Side.COMPUTER, Coordinate(3, 3))
    assert game.game_over
    assert game.winner is Side.HUMAN
    assert events[-1] == GameEnded(Side.HUMAN)
    assert game.current_turn is Side.HUMAN


def test_computer_turn_runs_until_miss_or_win() -> None:
    game = NavalBattle(config=QUICK, rng_seed=8)
    game.new_game()
    water = _first(
        game.state.computer_board.unshot_coordinates(),
        lambda cell: cell not in game.state.computer_board.ship_cells,
    )
    game.fire_at(Side.COMPUTER, water)

    shots = game.play_computer_turn()

    assert shots
    assert all(shot.valid for shot in shots)
    assert all(shot.is_hit for shot in shots[:-1])
    assert game.game_over or (not shots[-1].is_hit and game.current_turn is Side.HUMAN)


def test_play_computer_turn_is_noop_on_human_turn() -> None:
    game = NavalBattle(config=QUICK, rng_seed=1)
    game.new_game()
    assert game.play_computer_turn() == []


def test_full_game_reaches_a_winner() -> None:
    rng = random.Random(21)
    game = NavalBattle(config=QUICK, rng_seed=21)
    game.new_game()

    while not game.game_over:
        if game.current_turn is Side.COMPUTER:
            game.play_computer_turn()
            continue
        coord = rng.choice(game.valid_targets(Side.COMPUTER))
        assert game.fire_at(Side.COMPUTER, coord).valid

    state = game.state
    assert game.winner in {Side.HUMAN, Side.COMPUTER}
    assert state.board(game.winner.opponent()).has_won()
    assert state.human_shots.hits == len(state.computer_board.hit_cells)
    assert state.computer_shots.hits == len(state.human_board.hit_cells)
    assert state.computer_shots.misses == len(state.human_board.miss_cells)


def test_every_accepted_shot_is_persisted(tmp_path) -> None:
    store = SessionStore(tmp_path / "save.json")
    game = NavalBattle(config=QUICK, rng_seed=4, store=store)
    game.new_game()
    assert store.load() == game.state

    coord = game.valid_targets(Side.COMPUTER)[0]
    game.fire_at(Side.COMPUTER, coord)
    assert store.load() == game.state


def test_resume_or_start(tmp_path) -> None:
    store = SessionStore(tmp_path / "save.json")
    first = NavalBattle.resume_or_start(store, config=QUICK, rng_seed=5)
    assert store.exists()
    first.fire_at(Side.COMPUTER, first.valid_targets(Side.COMPUTER)[0])

    resumed = NavalBattle.resume_or_start(store, config=QUICK, rng_seed=6)
    assert resumed.state == first.state

    store.path.write_text("{not json", encoding="utf-8")
    fresh = NavalBattle.resume_or_start(store, config=QUICK, rng_seed=7)
    assert fresh.current_turn is Side.HUMAN
    assert not fresh.state.computer_board.miss_cells and not fresh.state.computer_board.hit_cells
    assert len(fresh.state.human_board.ship_cells) == 10


def test_config_save_path_creates_store(tmp_path) -> None:
    config = GameConfig(computer_step_delay=0, save_path=tmp_path / "auto.json")
    game = NavalBattle(config=config, rng_seed=2)
    game.new_game()
    assert (tmp_path / "auto.json").is_file()


def test_unsubscribe_stops_events() -> None:
    game, events = _small_game()
    game.unsubscribe(events.append)
    game.fire_at(Side.COMPUTER, Coordinate(0, 0))
    assert events == []
