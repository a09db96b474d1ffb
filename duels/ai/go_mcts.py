"""Monte Carlo Tree Search (UCT) for Go."""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from duels.core.go_board import GoBoard, GoMove
from duels.core.types import Player
from duels.errors import NoLegalMovesError
from duels.ai.config import MAX_PLAYOUT_MOVES, UCT_C, SearchConfig
from duels.ai.go_heuristics import candidate_moves, playout_move

logger = logging.getLogger(__name__)


@dataclass
class MctsNode:
    """
    One tree node. Parent and children are indices into the search arena.

    wins counts results for player_just_moved (the player who played `move`).
    """
    move: Optional[GoMove]
    parent: Optional[int]
    player_just_moved: Player
    untried: List[GoMove]
    children: List[int] = field(default_factory=list)
    visits: int = 0
    wins: float = 0.0

    def win_rate(self) -> float:
        return self.wins / self.visits if self.visits else 0.0

    def uct(self, log_parent_visits: float) -> float:
        if self.visits == 0:
            return math.inf
        return self.win_rate() + UCT_C * math.sqrt(log_parent_visits / self.visits)


class MctsAI:
    """UCT search with a fixed simulation budget. The tree lives for one call."""

    def __init__(self, config: SearchConfig, rng: random.Random) -> None:
        if config.simulations < 1:
            raise ValueError("Go search needs at least one simulation")
        self.config = config
        self.rng = rng
        self.nodes: List[MctsNode] = []

    def get_best_move(self, board: GoBoard) -> GoMove:
        """
        Choose a move for board.current_player.

        Returns pass right away when no placement is legal.

        Raises:
            NoLegalMovesError if the game is already over.
        """
        if board.is_over():
            raise NoLegalMovesError("Go game is already over", context={"game": "go"})
        if not board.legal_indices():
            return GoMove.pass_turn()

        self.nodes = [
            MctsNode(
                move=None,
                parent=None,
                player_just_moved=board.current_player.opponent(),
                untried=candidate_moves(board),
            )
        ]
        for _ in range(self.config.simulations):
            self._simulate_once(board)

        best = self._select_best_child()
        logger.debug(
            "go: sims=%d nodes=%d move=%s visits=%d win_rate=%.3f",
            self.config.simulations, len(self.nodes), best.move, best.visits, best.win_rate(),
        )
        move = best.move
        self.nodes = []
        return move

    def _simulate_once(self, root_board: GoBoard) -> None:
        board = root_board.copy()
        node_idx = 0

        # Selection
        node = self.nodes[node_idx]
        while not node.untried and node.children:
            node_idx = self._select_child(node)
            node = self.nodes[node_idx]
            board.play(node.move)

        # Expansion
        if node.untried and not board.is_over():
            move = node.untried.pop()
            mover = board.current_player
            board.play(move)
            child = MctsNode(
                move=move,
                parent=node_idx,
                player_just_moved=mover,
                untried=candidate_moves(board),
            )
            self.nodes.append(child)
            child_idx = len(self.nodes) - 1
            node.children.append(child_idx)
            node_idx = child_idx

        # Simulation
        winner = self._playout(board)

        # Backpropagation
        self._backpropagate(node_idx, winner)

    def _select_child(self, node: MctsNode) -> int:
        """Child with the highest UCT value; the first one wins ties."""
        log_visits = math.log(node.visits) if node.visits > 0 else 0.0
        best_idx = node.children[0]
        best_value = -math.inf
        for idx in node.children:
            value = self.nodes[idx].uct(log_visits)
            if value > best_value:
                best_value = value
                best_idx = idx
        return best_idx

    def _playout(self, board: GoBoard) -> Optional[Player]:
        """Play the board out with the biased random policy; None means a draw."""
        moves = 0
        while not board.is_over() and moves < MAX_PLAYOUT_MOVES:
            idx = playout_move(board, self.rng)
            if idx is None:
                board.pass_turn()
            else:
                board.place_index(idx)
            moves += 1
        return board.winner()

    def _backpropagate(self, node_idx: Optional[int], winner: Optional[Player]) -> None:
        while node_idx is not None:
            node = self.nodes[node_idx]
            node.visits += 1
            if winner is None:
                node.wins += 0.5
            elif node.player_just_moved == winner:
                node.wins += 1.0
            node_idx = node.parent

    def _select_best_child(self) -> MctsNode:
        """Most visited root child, win rate breaking ties."""
        children = [self.nodes[i] for i in self.nodes[0].children]
        return max(children, key=lambda n: (n.visits, n.win_rate()))
