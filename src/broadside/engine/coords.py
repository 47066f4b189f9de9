"""Grid coordinates, orientations and sides."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate."""

    row: int
    col: int

    def key(self) -> str:
        """Return the canonical ``"row,col"`` key used in saved sessions."""
        return f"{self.row},{self.col}"

    @classmethod
    def from_key(cls, key: str) -> Coordinate:
        """Parse a ``"row,col"`` key, raising ``ValueError`` when malformed."""
        parts = key.split(",")
        if len(parts) != 2:
            raise ValueError(f"Malformed coordinate key: {key!r}")
        row, col = (int(part) for part in parts)
        return cls(row, col)

    def neighbours(self) -> Iterator[Coordinate]:
        """Yield the four orthogonal neighbours: up, down, left, right."""
        yield Coordinate(self.row - 1, self.col)
        yield Coordinate(self.row + 1, self.col)
        yield Coordinate(self.row, self.col - 1)
        yield Coordinate(self.row, self.col + 1)

    def is_even(self) -> bool:
        """Whether the cell lies on the preferred checkerboard colour."""
        return (self.row + self.col) % 2 == 0


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class Side(Enum):
    """The two actors in a game."""

    HUMAN = "HUMAN"
    COMPUTER = "COMPUTER"

    def opponent(self) -> Side:
        """Return the opposing side."""
        return Side.COMPUTER if self is Side.HUMAN else Side.HUMAN


def ship_run(start: Coordinate, length: int, orientation: Orientation) -> list[Coordinate]:
    """Return the ordered cells a straight ship of ``length`` occupies."""
    if orientation is Orientation.HORIZONTAL:
        return [Coordinate(start.row, start.col + offset) for offset in range(length)]
    return [Coordinate(start.row + offset, start.col) for offset in range(length)]
