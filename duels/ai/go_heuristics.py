"""
Move scoring and playout policy for the Go MCTS.

score_move() is a static guess at how good a placement looks; the search
uses it to pick which moves a node may expand (progressive widening).
playout_move() is the cheap randomized policy used during simulations.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Set, Tuple

from duels.core.go_board import EMPTY, GoBoard, GoMove
from duels.core.types import Player
from duels.ai.config import TOP_MOVES_LIMIT

# Move scoring weights
OPENING_STONES = 20
STAR_POINT_VALUE = 15.0
THIRD_FOURTH_LINE_VALUE = 10.0
EDGE_VALUE = 5.0
CENTER_OPENING_VALUE = 2.0
MIDGAME_VALUE = 3.0
CAPTURE_BASE = 50.0
CAPTURE_PER_STONE = 10.0
ATARI_THREAT = 15.0
SAVE_BASE = 40.0
SAVE_PER_STONE = 8.0
REINFORCE = 10.0
EYE_FILL_PENALTY = -30.0
SELF_ATARI_PENALTY = -25.0
CUT_BONUS = 12.0
CONNECT_BONUS = 6.0

# Random points tried per playout move before falling back to a full scan
PLAYOUT_SAMPLES = 10

_DIAGONALS: Dict[int, Tuple[Tuple[Tuple[int, int, int], ...], ...]] = {}


def _diagonal_table(size: int) -> Tuple[Tuple[Tuple[int, int, int], ...], ...]:
    """Per point: (diagonal, shared neighbor 1, shared neighbor 2) triples."""
    if size not in _DIAGONALS:
        table = []
        for idx in range(size * size):
            r, c = divmod(idx, size)
            diag = []
            for dr, dc in ((-1, -1), (-1, 1), (1, -1), (1, 1)):
                nr, nc = r + dr, c + dc
                if 0 <= nr < size and 0 <= nc < size:
                    diag.append((nr * size + nc, nr * size + c, r * size + nc))
            table.append(tuple(diag))
        _DIAGONALS[size] = tuple(table)
    return _DIAGONALS[size]


def _star_points(size: int) -> Tuple[int, ...]:
    if size < 7:
        return ()
    lo, mid, hi = 2, size // 2, size - 3
    return tuple(r * size + c for r in (lo, mid, hi) for c in (lo, mid, hi))


# ---------- Static move scoring ----------

def position_value(board: GoBoard, idx: int, stone_count: int) -> float:
    """Corners and sides first in the opening, flat afterwards."""
    if stone_count >= OPENING_STONES:
        return MIDGAME_VALUE
    size = board.size
    if idx in _star_points(size):
        return STAR_POINT_VALUE
    r, c = divmod(idx, size)
    edge_r = min(r, size - 1 - r)
    edge_c = min(c, size - 1 - c)
    if edge_r in (2, 3) and edge_c in (2, 3):
        return THIRD_FOURTH_LINE_VALUE
    if edge_r <= 3 or edge_c <= 3:
        return EDGE_VALUE
    return CENTER_OPENING_VALUE


def group_table(board: GoBoard) -> Dict[int, Tuple[Set[int], Set[int]]]:
    """(stones, liberties) of the group at every occupied point, one flood per group."""
    table: Dict[int, Tuple[Set[int], Set[int]]] = {}
    for idx, v in enumerate(board.cells):
        if v != EMPTY and idx not in table:
            info = board.group(idx)
            for stone in info[0]:
                table[stone] = info
    return table


def score_move(
    board: GoBoard,
    idx: int,
    player: Optional[Player] = None,
    groups: Optional[Dict[int, Tuple[Set[int], Set[int]]]] = None,
) -> float:
    """
    Heuristic value of placing at empty idx for player (default: side to move).

    `groups` is a group_table() of the current position; scoring many
    points of one position should pass it so groups are flooded once.
    """
    player = player or board.current_player
    me = player.value
    size = board.size
    score = position_value(board, idx, board.placed[Player.BLACK] + board.placed[Player.WHITE])

    last = board.last_move_index
    if last is not None:
        lr, lc = divmod(last, size)
        r, c = divmod(idx, size)
        dist = abs(r - lr) + abs(c - lc)
        if dist <= 3:
            score += (4 - dist) * 5.0

    cells = board.cells

    # capture / atari threats and saving our own weak groups
    adjacent_friendly = 0
    seen: set = set()
    for n in board.neighbors(idx):
        v = cells[n]
        if v == me:
            adjacent_friendly += 1
        if v == EMPTY or n in seen:
            continue
        stones, libs = groups[n] if groups is not None else board.group(n)
        seen |= stones
        if v == me:
            if len(libs) == 1:
                score += SAVE_BASE + len(stones) * SAVE_PER_STONE
            elif len(libs) == 2:
                score += REINFORCE
        else:
            if len(libs) == 1:
                score += CAPTURE_BASE + len(stones) * CAPTURE_PER_STONE
            elif len(libs) == 2:
                score += ATARI_THREAT

    diagonal_friendly = 0
    diagonal_enemy = 0
    for d, a, b in _diagonal_table(size)[idx]:
        v = cells[d]
        if v == me:
            diagonal_friendly += 1
            if cells[a] == EMPTY and cells[b] == EMPTY:
                score += CONNECT_BONUS
        elif v != EMPTY:
            diagonal_enemy += 1

    # extension shape
    if adjacent_friendly == 0:
        score += diagonal_friendly * 3.0
    elif adjacent_friendly == 1:
        score += 8.0
    elif adjacent_friendly == 2:
        score += 4.0
    else:
        score -= 5.0

    if diagonal_enemy >= 2:
        empty_adjacent = sum(1 for n in board.neighbors(idx) if cells[n] == EMPTY)
        if empty_adjacent >= 2:
            score += CUT_BONUS

    if is_own_eye(board, idx, player):
        score += EYE_FILL_PENALTY
    if is_self_atari(board, idx, player):
        score += SELF_ATARI_PENALTY
    return score


def candidate_moves(board: GoBoard, limit: int = TOP_MOVES_LIMIT) -> List[GoMove]:
    """
    Moves a search node may expand: the `limit` best legal placements plus
    pass, sorted worst first so list.pop() yields the best untried move.
    """
    if board.is_over():
        return []
    groups = group_table(board)
    scored = [(score_move(board, idx, groups=groups), idx) for idx in board.legal_indices()]
    # best first, board order among equal scores
    scored.sort(key=lambda t: (-t[0], t[1]))
    top = [GoMove.place(board.position(idx)) for _, idx in scored[:limit]]
    top.reverse()
    return [GoMove.pass_turn()] + top


# ---------- Playout policy ----------

def is_own_eye(board: GoBoard, idx: int, player: Player) -> bool:
    """An empty point whose orthogonal neighbors are all player's stones."""
    me = player.value
    cells = board.cells
    return all(cells[n] == me for n in board.neighbors(idx))


def is_self_atari(board: GoBoard, idx: int, player: Player) -> bool:
    """Placing here would leave a multi-stone group of ours with one liberty."""
    captured, size, libs = board.simulate(idx, player)
    return not captured and size > 1 and libs == 1


def _acceptable(board: GoBoard, idx: int, player: Player) -> bool:
    return (
        board.check_index(idx) is None
        and not is_own_eye(board, idx, player)
        and not is_self_atari(board, idx, player)
    )


def atari_response(board: GoBoard) -> Optional[int]:
    """
    Reply to the last move: capture an adjacent enemy group left in atari,
    or extend a friendly group the last move put in atari.
    """
    last = board.last_move_index
    if last is None:
        return None
    player = board.current_player
    me = player.value
    cells = board.cells
    checked: set = set()
    # the stone just played may itself be capturable
    candidates = (last,) + board.neighbors(last)
    for n in candidates:
        v = cells[n]
        if v == EMPTY or n in checked:
            continue
        stones, libs = board.group(n)
        checked |= stones
        if len(libs) != 1:
            continue
        (lib,) = libs
        if v != me:
            if board.check_index(lib) is None:
                return lib
        elif _acceptable(board, lib, player):
            return lib
    return None


def playout_move(board: GoBoard, rng: random.Random) -> Optional[int]:
    """
    Pick the next playout placement for the side to move.

    Returns:
        A point index, or None when the side to move should pass.
    """
    reply = atari_response(board)
    if reply is not None:
        return reply

    player = board.current_player
    cells = board.cells
    points = len(cells)
    for _ in range(PLAYOUT_SAMPLES):
        idx = rng.randrange(points)
        if cells[idx] == EMPTY and _acceptable(board, idx, player):
            return idx

    empties = board.empty_indices()
    rng.shuffle(empties)
    for idx in empties:
        if _acceptable(board, idx, player):
            return idx
    return None
