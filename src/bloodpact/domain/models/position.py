import math
from dataclasses import dataclass
from typing import List, Tuple


# Cardinal offsets come first so breadth-first searches prefer straight steps.
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (-1, 1),
    (1, -1),
    (1, 1),
)


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def from_key(cls, key: str) -> "Position":
        raw_x, raw_y = str(key).split(",", 1)
        return cls(int(raw_x.strip()), int(raw_y.strip()))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


def chebyshev(a: Position, b: Position) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))


def manhattan(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def euclidean(a: Position, b: Position) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def is_adjacent(a: Position, b: Position) -> bool:
    """True when ``b`` is one of the eight tiles surrounding ``a``."""
    return chebyshev(a, b) == 1


def is_diagonal_step(a: Position, b: Position) -> bool:
    return a.x != b.x and a.y != b.y


def neighbors8(position: Position) -> List[Position]:
    return [position.offset(dx, dy) for dx, dy in NEIGHBOR_OFFSETS]
