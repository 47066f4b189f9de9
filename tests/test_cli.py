"""Tests for the text driver."""

import pytest
from broadside import cli
from broadside.config import GameConfig
from broadside.engine.board import Board
from broadside.engine.coords import Coordinate, Side
from broadside.engine.events import GameEnded, ShotResolved, TurnChanged
from broadside.engine.session import SessionStore
from broadside.engine.state import GameState, ShotTally


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("A1", Coordinate(0, 0)),
        ("j10", Coordinate(9, 9)),
        (" c5 ", Coordinate(2, 4)),
        ("3 7", Coordinate(2, 6)),
        ("1 10", Coordinate(0, 9)),
    ],
)
def test_coordinate_from_input(text: str, expected: Coordinate) -> None:
    assert cli.coordinate_from_input(text) == expected


@pytest.mark.parametrize("text", ["", "K1", "A0", "A11", "Ax", "1 2 3", "10 0", "0 1", "11 1", "a b"])
def test_coordinate_from_input_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        cli.coordinate_from_input(text)


def test_format_scoreboard_shows_turn_and_tallies() -> None:
    state = GameState.empty()
    state.current_turn = Side.COMPUTER
    state.human_shots = ShotTally(hits=2, misses=3)
    state.computer_shots = ShotTally(hits=1, misses=0)

    assert cli.format_scoreboard(state) == (
        "Current turn: Computer | Your hits: 2 misses: 3 | Computer hits: 1 misses: 0"
    )


def test_format_board_hides_enemy_ships() -> None:
    board = Board(size=3)
    board.add_ship([Coordinate(0, 0), Coordinate(0, 1)])
    board.apply_shot(Coordinate(0, 0))
    board.apply_shot(Coordinate(2, 2))

    hidden = cli.format_board(board, show_ships=False).splitlines()
    shown = cli.format_board(board, show_ships=True).splitlines()

    assert hidden[1] == "A | X  .  ."
    assert shown[1] == "A | X  S  ."
    assert hidden[3] == "C | .  .  o"


def test_describe_event() -> None:
    assert cli.describe_event(ShotResolved(Side.COMPUTER, Coordinate(0, 4), True)) == "You fired at A5: hit"
    assert cli.describe_event(ShotResolved(Side.HUMAN, Coordinate(1, 0), False)) == (
        "The computer fired at B1: miss"
    )
    assert cli.describe_event(TurnChanged(Side.HUMAN)) == "Your turn."
    assert cli.describe_event(GameEnded(Side.COMPUTER)) == "Your fleet is gone."


def test_clear_save(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "init_telemetry", lambda: None)
    path = tmp_path / "save.json"
    path.write_text("{}", encoding="utf-8")
    cli.main(["--save-path", str(path), "--clear-save"])
    assert not path.exists()


def test_play_game_quits_with_save(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "save.json"
    monkeypatch.setattr("builtins.input", lambda _prompt: "q")
    config = GameConfig(computer_step_delay=0, save_path=path)

    with pytest.raises(SystemExit):
        cli.play_game(config, seed=1)

    saved = SessionStore(path).load()
    assert saved is not None
    assert saved.current_turn is Side.HUMAN


def test_play_game_prints_scoreboard_each_round(
    tmp_path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    answers = iter(["A1"])

    def fake_input(_prompt: str) -> str:
        return next(answers, "q")

    monkeypatch.setattr("builtins.input", fake_input)
    config = GameConfig(computer_step_delay=0, save_path=tmp_path / "save.json")

    with pytest.raises(SystemExit):
        cli.play_game(config, seed=1, fresh=True)

    scoreboards = [
        line for line in capsys.readouterr().out.splitlines() if line.startswith("Current turn:")
    ]
    assert len(scoreboards) == 2
    assert scoreboards[0] == "Current turn: You | Your hits: 0 misses: 0 | Computer hits: 0 misses: 0"
    assert scoreboards[1].startswith("Current turn: You | Your hits: ")
    assert "Your hits: 0 misses: 0" not in scoreboards[1]


def test_end_of_input_quits_like_q(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    def closed_stdin(_prompt: str) -> str:
        raise EOFError

    monkeypatch.setattr("builtins.input", closed_stdin)
    config = GameConfig(computer_step_delay=0, save_path=tmp_path / "save.json")

    with pytest.raises(SystemExit, match="Game saved. Goodbye!"):
        cli.play_game(config, seed=1)

    assert SessionStore(tmp_path / "save.json").exists()
