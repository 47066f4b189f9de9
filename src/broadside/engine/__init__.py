"""Core game engine exports."""

from .board import Board, ShotResult
from .coords import Coordinate, Orientation, Side
from .errors import BroadsideError, PlacementError
from .events import GameEnded, ShotResolved, TurnChanged
from .game import NavalBattle
from .placement import place_ships
from .session import SessionStore, deserialize, serialize
from .state import GameState, ShotTally
from .targeting import TargetingEngine, TargetingState, TargetMode

__all__ = [
    "Board",
    "BroadsideError",
    "Coordinate",
    "GameEnded",
    "GameState",
    "NavalBattle",
    "Orientation",
    "PlacementError",
    "SessionStore",
    "ShotResolved",
    "ShotResult",
    "ShotTally",
    "Side",
    "TargetMode",
    "TargetingEngine",
    "TargetingState",
    "TurnChanged",
    "deserialize",
    "place_ships",
    "serialize",
]
