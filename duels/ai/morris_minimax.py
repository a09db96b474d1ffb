"""Minimax with Alpha-Beta pruning for Nine Men's Morris, make/unmake on one board."""

import logging
import random
from typing import List, Optional

from duels.core.morris_board import CaptureSelector, MorrisBoard, MorrisMove
from duels.core.types import Player
from duels.errors import NoLegalMovesError
from duels.ai.config import MORRIS_WIN, SearchConfig
from duels.ai.morris_heuristics import MorrisHeuristic

logger = logging.getLogger(__name__)


def _ordered(moves: List[MorrisMove]) -> List[MorrisMove]:
    # capturing moves first, generation order otherwise
    return sorted(moves, key=lambda m: -len(m.captures))


class MinimaxAI:
    """Fixed-depth alpha-beta. Capture choices are part of each searched move."""

    def __init__(self, config: SearchConfig, rng: random.Random) -> None:
        if config.depth < 1:
            raise ValueError("Morris search needs depth >= 1")
        self.config = config
        self.rng = rng
        self.nodes_explored = 0

    def get_best_move(self, board: MorrisBoard) -> MorrisMove:
        """
        Pick a move (captures included) for board.current_player.

        With probability config.random_move_probability the searched move is
        replaced by a uniformly random legal move.

        Raises:
            NoLegalMovesError if the side to move has no legal move.
        """
        moves = board.legal_moves()
        if not moves:
            raise NoLegalMovesError(
                "no legal Morris move",
                context={"player": board.current_player, "phase": board.phase.value},
            )

        p = self.config.random_move_probability
        if p > 0 and self.rng.random() < p:
            move = self.rng.choice(moves)
            logger.debug("morris: random substitution %s", move)
            return move
        if len(moves) == 1:
            return moves[0]

        work = board.copy()
        me = work.current_player
        depth = self.config.depth
        self.nodes_explored = 0

        best_score: Optional[float] = None
        best_moves: List[MorrisMove] = []
        for move in _ordered(moves):
            work.push(move)
            alpha = float("-inf") if best_score is None else best_score - 1
            score = self._alpha_beta(work, depth - 1, alpha, float("inf"), False, me)
            work.pop()
            if best_score is None or score > best_score:
                best_score = score
                best_moves = [move]
            elif score == best_score:
                best_moves.append(move)

        choice = self.rng.choice(best_moves)
        logger.debug(
            "morris: depth=%d nodes=%d score=%s ties=%d move=%s",
            depth, self.nodes_explored, best_score, len(best_moves), choice,
        )
        return choice

    def _alpha_beta(
        self,
        board: MorrisBoard,
        depth: int,
        alpha: float,
        beta: float,
        is_maximizing: bool,
        maximizing_player: Player,
    ) -> float:
        self.nodes_explored += 1

        if board.is_over():
            # sooner wins and later losses score better
            score = MorrisHeuristic(board).evaluate(maximizing_player)
            return score + depth if score > 0 else score - depth
        if depth == 0:
            return MorrisHeuristic(board).evaluate(maximizing_player)

        moves = _ordered(board.legal_moves())
        if is_maximizing:
            max_eval = float("-inf")
            for move in moves:
                board.push(move)
                eval_score = self._alpha_beta(board, depth - 1, alpha, beta, False, maximizing_player)
                board.pop()
                max_eval = max(max_eval, eval_score)
                alpha = max(alpha, eval_score)
                if beta <= alpha:
                    break
            return max_eval

        min_eval = float("inf")
        for move in moves:
            board.push(move)
            eval_score = self._alpha_beta(board, depth - 1, alpha, beta, True, maximizing_player)
            board.pop()
            min_eval = min(min_eval, eval_score)
            beta = min(beta, eval_score)
            if beta <= alpha:
                break
        return min_eval


def best_capture_selector() -> CaptureSelector:
    """
    Capture selector that removes whichever eligible piece leaves the
    capturing side with the best static evaluation. The first node wins ties.
    """

    def select(board: MorrisBoard, eligible: List[int]) -> int:
        # board is the position right after the move, the mover still to act
        mover = board.current_player
        best_node = eligible[0]
        best_score = -MORRIS_WIN * 2
        for node in eligible:
            trial = board.copy()
            trial.remove(node)
            score = MorrisHeuristic(trial).evaluate(mover)
            if score > best_score:
                best_score = score
                best_node = node
        return best_node

    return select
