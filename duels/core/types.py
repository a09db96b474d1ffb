from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Player(Enum):
    """Player constants (also used as cell contents)."""
    EMPTY = 0
    BLACK = 1
    WHITE = 2

    def symbol(self) -> str:
        return {0: ".", 1: "O", 2: "X"}[self.value]

    def opponent(self) -> "Player":
        if self == Player.BLACK:
            return Player.WHITE
        if self == Player.WHITE:
            return Player.BLACK
        return Player.EMPTY

    def __str__(self) -> str:
        return self.name.lower()


class GameKind(Enum):
    GO = "go"
    GOMOKU = "gomoku"
    MORRIS = "morris"


class Difficulty(Enum):
    NOVICE = "novice"
    APPRENTICE = "apprentice"
    JOURNEYMAN = "journeyman"
    MASTER = "master"

    @staticmethod
    def parse(text: str) -> "Difficulty":
        """Accept a tier name ('master') or a 1-based index ('4')."""
        raw = text.strip().lower()
        if raw.isdigit():
            tiers = list(Difficulty)
            idx = int(raw) - 1
            if not 0 <= idx < len(tiers):
                raise ValueError(f"Difficulty index must be 1..{len(tiers)}")
            return tiers[idx]
        return Difficulty(raw)


class GameResult(Enum):
    """Result from the human player's point of view."""
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"
    FORFEIT = "forfeit"


@dataclass(frozen=True)
class Outcome:
    """Handed to the reward system when a session ends."""
    game: GameKind
    difficulty: Difficulty
    result: GameResult
    reason: str = ""

    def __str__(self) -> str:
        text = f"{self.game.value}/{self.difficulty.value}: {self.result.value}"
        return f"{text} ({self.reason})" if self.reason else text
