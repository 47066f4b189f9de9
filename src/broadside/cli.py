"""Command-line driver for playing Broadside against the computer."""

from __future__ import annotations

import argparse
import string
from pathlib import Path
from typing import Sequence

from broadside.config import DEFAULT_SAVE_PATH, GameConfig, load_game_config
from broadside.engine.board import Board
from broadside.engine.coords import Coordinate, Side
from broadside.engine.events import GameEnded, GameEvent, ShotResolved, TurnChanged
from broadside.engine.instrumented_game import InstrumentedNavalBattle
from broadside.engine.session import SessionStore
from broadside.engine.state import GameState
from broadside.telemetry import configure_console, init_telemetry

ROW_LABELS = string.ascii_uppercase


def coordinate_from_input(text: str, size: int = 10) -> Coordinate:
    """Parse ``A5`` style or ``"row col"`` input; rows and columns count from 1."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        row = ROW_LABELS.find(cleaned[0])
        if row < 0 or row >= size:
            raise ValueError(f"Row must be between A and {ROW_LABELS[size - 1]}.")
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError(f"Column must be a number between 1 and {size}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = (int(part) - 1 for part in parts)
        except ValueError as exc:
            raise ValueError("Row and column must be numbers.") from exc
    if row not in range(size) or col not in range(size):
        raise ValueError(f"Coordinates must be within the {size}x{size} board.")
    return Coordinate(row, col)


def label(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.row]}{coord.col + 1}"


def format_board(board: Board, show_ships: bool) -> str:
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(board.size))
    rows = [header]
    for row in range(board.size):
        symbols = []
        for col in range(board.size):
            coord = Coordinate(row, col)
            if coord in board.hit_cells:
                symbol = "X"
            elif coord in board.miss_cells:
                symbol = "o"
            else:
                symbol = "S" if show_ships and coord in board.ship_cells else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def format_scoreboard(state: GameState) -> str:
    """Turn indicator plus both sides' hit/miss tallies."""
    turn = "You" if state.current_turn is Side.HUMAN else "Computer"
    human, computer = state.human_shots, state.computer_shots
    return (
        f"Current turn: {turn} | "
        f"Your hits: {human.hits} misses: {human.misses} | "
        f"Computer hits: {computer.hits} misses: {computer.misses}"
    )


def describe_event(event: GameEvent) -> str:
    if isinstance(event, ShotResolved):
        shooter = "You" if event.board_owner is Side.COMPUTER else "The computer"
        outcome = "hit" if event.is_hit else "miss"
        return f"{shooter} fired at {label(event.coord)}: {outcome}"
    if isinstance(event, TurnChanged):
        return "Your turn." if event.new_turn is Side.HUMAN else "The computer's turn."
    if isinstance(event, GameEnded):
        return "All enemy ships destroyed!" if event.winner is Side.HUMAN else "Your fleet is gone."
    return str(event)


def _prompt_for_coordinate(valid: Sequence[Coordinate], size: int) -> Coordinate:
    valid_set = set(valid)
    while True:
        try:
            raw = input("Enter target coordinate (e.g., A5 or '3 7') or 'q' to quit: ").strip()
        except EOFError:
            raw = "q"
        if raw.lower() == "q":
            raise SystemExit("Game saved. Goodbye!")
        try:
            coord = coordinate_from_input(raw, size)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if coord not in valid_set:
            print("That cell has already been targeted. Choose another.")
            continue
        return coord


def play_game(config: GameConfig, seed: int | None = None, fresh: bool = False) -> None:
    if fresh or config.save_path is None:
        game = InstrumentedNavalBattle(config=config, rng_seed=seed)
        game.new_game()
    else:
        store = SessionStore(config.save_path)
        game = InstrumentedNavalBattle.resume_or_start(store, config=config, rng_seed=seed)
        if game.game_over:
            game.new_game()
    game.subscribe(lambda event: print(describe_event(event)))

    print("Welcome to Broadside!\n")
    print(game.state.subtitle)
    size = config.grid_size

    while not game.game_over:
        if game.current_turn is Side.COMPUTER:
            game.play_computer_turn()
            continue

        print("\nYour Board:")
        print(format_board(game.state.human_board, show_ships=True))
        print("\nEnemy Waters:")
        print(format_board(game.state.computer_board, show_ships=False))
        print(f"\n{game.state.status}")
        print(format_scoreboard(game.state))

        coord = _prompt_for_coordinate(game.valid_targets(Side.COMPUTER), size)
        game.fire_at(Side.COMPUTER, coord)

    print(f"\n{game.state.status}")
    human, computer = game.state.human_shots, game.state.computer_shots
    print(
        f"You: {human.hits} hits / {human.misses} misses. "
        f"Computer: {computer.hits} hits / {computer.misses} misses."
    )


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Broadside via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument("--save-path", type=Path, default=None, help="Where to keep the save file.")
    parser.add_argument("--new", action="store_true", help="Ignore any saved game and start over.")
    parser.add_argument("--clear-save", action="store_true", help="Delete the save file and exit.")
    parser.add_argument(
        "--delay", type=float, default=None, help="Seconds between computer shots (cosmetic)."
    )
    args = parser.parse_args(argv)

    configure_console()
    init_telemetry()

    overrides = {}
    if args.save_path is not None:
        overrides["save_path"] = args.save_path
    if args.delay is not None:
        overrides["computer_step_delay"] = args.delay
    config = load_game_config().model_copy(update=overrides)
    if config.save_path is None:
        config = config.model_copy(update={"save_path": DEFAULT_SAVE_PATH})

    if args.clear_save:
        SessionStore(config.save_path).clear()
        print(f"Removed {config.save_path}")
        return

    play_game(config, seed=args.seed, fresh=args.new)


if __name__ == "__main__":
    main()
