from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """
    Immutable position on a square grid board.
    Coordinates are 1-based: (1..size, 1..size)
    """
    x: int
    y: int

    def __post_init__(self):
        if not isinstance(self.x, int) or not isinstance(self.y, int):
            raise TypeError("Position coordinates must be integers")
        if self.x < 1 or self.y < 1:
            raise ValueError("Position coordinates must be >= 1")

    def __str__(self) -> str:
        """Return human-readable form like H8."""
        col = chr(ord("A") + self.x - 1)
        return f"{col}{self.y}"

    def in_bounds(self, size: int) -> bool:
        """Check if this position is within board size."""
        return 1 <= self.x <= size and 1 <= self.y <= size
