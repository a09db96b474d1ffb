"""Minimax with Alpha-Beta pruning for Gomoku, fixed depth."""

import logging
import random
from typing import List, Optional

from duels.core.gomoku_board import GomokuBoard, GomokuGame
from duels.core.position import Position
from duels.core.types import Player
from duels.errors import NoLegalMovesError
from duels.ai.config import MAX_CANDIDATES, SCORE_FIVE, SearchConfig
from duels.ai.gomoku_heuristics import GomokuHeuristic
from duels.ai.gomoku_movegen import MoveGenerator

logger = logging.getLogger(__name__)

# Above any sum of pattern scores a non-terminal board can reach
WEIGHT_WIN = SCORE_FIVE * 10


class MinimaxAI:
    """Minimax AI with Alpha-Beta pruning over a scratch copy of the board."""

    def __init__(self, config: SearchConfig, rng: random.Random) -> None:
        if config.depth < 1:
            raise ValueError("Gomoku search needs depth >= 1")
        self.config = config
        self.rng = rng
        self.nodes_explored = 0

    def get_best_move(self, game: GomokuGame) -> Position:
        """
        Pick a move for game.current_player.

        Order of preference: an immediate five, a block of the opponent's
        immediate five, then the best fixed-depth alpha-beta score. Equal
        best scores are broken with the session RNG.

        Raises:
            NoLegalMovesError if the game is over or no cell is free.
        """
        if game.is_game_over():
            raise NoLegalMovesError("Gomoku game is already over", context={"game": "gomoku"})

        board = game.board.copy()
        me = game.current_player
        opponent = me.opponent()

        if board.is_empty_board():
            return board.center()

        candidates = board.get_adjacent_positions()
        if not candidates:
            raise NoLegalMovesError("no empty cell left", context={"game": "gomoku"})

        for pos in candidates:
            if board.makes_five(pos, me):
                logger.debug("gomoku: immediate win at %s", pos)
                return pos
        for pos in candidates:
            if board.makes_five(pos, opponent):
                logger.debug("gomoku: blocking five at %s", pos)
                return pos

        self.nodes_explored = 0
        depth = self.config.depth
        moves = MoveGenerator(board, me).get_ordered_moves(MAX_CANDIDATES)

        best_score: Optional[float] = None
        best_moves: List[Position] = []
        for move in moves:
            board.place(move, me)
            # a window just below the best keeps every tie exact
            alpha = float("-inf") if best_score is None else best_score - 1
            score = self._alpha_beta(board, depth - 1, alpha, float("inf"), False, me)
            board.unplace(move)

            if best_score is None or score > best_score:
                best_score = score
                best_moves = [move]
            elif score == best_score:
                best_moves.append(move)

        choice = self.rng.choice(best_moves)
        logger.debug(
            "gomoku: depth=%d nodes=%d score=%s ties=%d move=%s",
            depth, self.nodes_explored, best_score, len(best_moves), choice,
        )
        return choice

    def _alpha_beta(
        self,
        board: GomokuBoard,
        depth: int,
        alpha: float,
        beta: float,
        is_maximizing: bool,
        maximizing_player: Player,
    ) -> float:
        """Alpha-beta recursion. The side to move is implied by is_maximizing."""
        self.nodes_explored += 1

        if board.is_full():
            return 0
        if depth == 0:
            return GomokuHeuristic(board).evaluate(maximizing_player)

        mover = maximizing_player if is_maximizing else maximizing_player.opponent()
        moves = MoveGenerator(board, mover).get_ordered_moves(MAX_CANDIDATES)
        if not moves:
            return GomokuHeuristic(board).evaluate(maximizing_player)

        if is_maximizing:
            max_eval = float("-inf")
            for move in moves:
                if board.makes_five(move, mover):
                    return WEIGHT_WIN + depth
                board.place(move, mover)
                eval_score = self._alpha_beta(board, depth - 1, alpha, beta, False, maximizing_player)
                board.unplace(move)
                max_eval = max(max_eval, eval_score)
                alpha = max(alpha, eval_score)
                if beta <= alpha:
                    break
            return max_eval

        min_eval = float("inf")
        for move in moves:
            if board.makes_five(move, mover):
                return -(WEIGHT_WIN + depth)
            board.place(move, mover)
            eval_score = self._alpha_beta(board, depth - 1, alpha, beta, True, maximizing_player)
            board.unplace(move)
            min_eval = min(min_eval, eval_score)
            beta = min(beta, eval_score)
            if beta <= alpha:
                break
        return min_eval
