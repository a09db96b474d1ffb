from __future__ import annotations

from dataclasses import dataclass
from typing import List

from duels.core.gomoku_board import GomokuBoard
from duels.core.position import Position
from duels.core.types import Player
from duels.ai.config import MAX_CANDIDATES, SEARCH_DISTANCE


@dataclass(frozen=True)
class PrioritizedMove:
    """Move with priority score (higher = better)."""
    position: Position
    priority: int


PRIORITY_WIN = 50_000
PRIORITY_BLOCK = 45_000
PRIORITY_OWN_FOUR = 15_000
PRIORITY_BLOCK_FOUR = 12_000
PRIORITY_OWN_THREE = 200
PRIORITY_BLOCK_THREE = 150
PRIORITY_OWN_TWO = 20


class MoveGenerator:
    """
    Generates and orders candidate moves for the Gomoku search (1-based Position).

    Works directly on a board and the side to move, so the search can
    call it on its scratch board between place/unplace pairs.
    """

    def __init__(self, board: GomokuBoard, player: Player) -> None:
        self.board = board
        self.player = player

    def candidates(self) -> List[Position]:
        return self.board.get_adjacent_positions(distance=SEARCH_DISTANCE)

    def get_ordered_moves(self, max_moves: int = MAX_CANDIDATES) -> List[Position]:
        """Candidates sorted by priority (best first), capped at max_moves."""
        prioritized = [
            PrioritizedMove(pos, self.move_priority(pos)) for pos in self.candidates()
        ]
        # stable sort keeps board order among equal priorities
        prioritized.sort(key=lambda m: m.priority, reverse=True)
        return [m.position for m in prioritized[:max_moves]]

    def move_priority(self, position: Position) -> int:
        """
        Quick line score of an empty cell: what the mover builds by playing
        here plus what the opponent would build here.
        """
        board = self.board
        opponent = self.player.opponent()
        priority = 0
        for dx, dy in board.directions():
            own = board.line_length_through(position, self.player, dx, dy)
            theirs = board.line_length_through(position, opponent, dx, dy)
            if own >= 5:
                priority += PRIORITY_WIN
            elif own == 4:
                priority += PRIORITY_OWN_FOUR
            elif own == 3:
                priority += PRIORITY_OWN_THREE
            elif own == 2:
                priority += PRIORITY_OWN_TWO

            if theirs >= 5:
                priority += PRIORITY_BLOCK
            elif theirs == 4:
                priority += PRIORITY_BLOCK_FOUR
            elif theirs == 3:
                priority += PRIORITY_BLOCK_THREE

        mid = (board.size + 1) // 2
        priority += mid - max(abs(position.x - mid), abs(position.y - mid))
        return priority
