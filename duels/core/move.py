from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InvalidMove(Enum):
    """Why a submitted move was rejected. Rejection never mutates the board."""
    GAME_OVER = "Game is already over."
    OUT_OF_BOUNDS = "Move is out of bounds."
    OCCUPIED = "Cell is already occupied."
    SUICIDE = "Suicide: the stone would have no liberties."
    KO = "Ko: immediate recapture is forbidden."
    WRONG_PHASE = "That kind of move is not allowed in this phase."
    NOT_OWN_PIECE = "You can only move your own piece."
    NOT_ADJACENT = "Pieces may only slide to an adjacent point."
    INVALID_CAPTURE = "That piece cannot be captured."
    NOT_SUPPORTED = "That input does not apply to this game."


@dataclass
class MoveResult:
    """Result of executing a move."""
    success: bool
    is_winning_move: bool = False
    reason: Optional[InvalidMove] = None

    @property
    def error_message(self) -> str:
        return self.reason.value if self.reason is not None else ""

    @staticmethod
    def ok(*, is_winning_move: bool = False) -> "MoveResult":
        return MoveResult(success=True, is_winning_move=is_winning_move)

    @staticmethod
    def fail(reason: InvalidMove) -> "MoveResult":
        return MoveResult(success=False, reason=reason)
