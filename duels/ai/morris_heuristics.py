from typing import Tuple

from duels.core.morris_board import ADJACENCY, MorrisBoard
from duels.core.types import Player
from duels.ai.config import (
    MORRIS_WIN,
    WEIGHT_JUNCTION,
    WEIGHT_MILL,
    WEIGHT_MOBILITY,
    WEIGHT_PIECE,
    WEIGHT_POTENTIAL_MILL,
)

JUNCTIONS: Tuple[int, ...] = tuple(n for n, adj in enumerate(ADJACENCY) if len(adj) == 4)


class MorrisHeuristic:
    """
    Weighted material/shape evaluation of a Morris board, from one side.

    Terms (own minus opponent): pieces on board and in hand, completed
    mills, potential mills, four-way nodes held, and mobility once both
    players have finished placing.
    """

    def __init__(self, board: MorrisBoard) -> None:
        self.board = board

    def evaluate(self, player: Player) -> int:
        board = self.board
        if board.winner is not None:
            return MORRIS_WIN if board.winner == player else -MORRIS_WIN

        opponent = player.opponent()
        score = 0
        score += WEIGHT_PIECE * (self._material(player) - self._material(opponent))
        score += WEIGHT_MILL * (board.count_mills(player) - board.count_mills(opponent))
        score += WEIGHT_POTENTIAL_MILL * (
            board.count_potential_mills(player) - board.count_potential_mills(opponent)
        )
        for node in JUNCTIONS:
            holder = board.get(node)
            if holder == player:
                score += WEIGHT_JUNCTION
            elif holder == opponent:
                score -= WEIGHT_JUNCTION

        if board.in_hand[Player.BLACK] == 0 and board.in_hand[Player.WHITE] == 0:
            score += WEIGHT_MOBILITY * (board.mobility(player) - board.mobility(opponent))
        return score

    def _material(self, player: Player) -> int:
        return self.board.on_board[player] + self.board.in_hand[player]
