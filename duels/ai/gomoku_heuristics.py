"""Pattern-based static evaluation for Gomoku positions."""

from collections import Counter
from enum import Enum
from typing import Dict, List, Sequence

import numpy as np

from duels.core.gomoku_board import WIN_LENGTH, GomokuBoard
from duels.core.types import Player
from duels.ai.config import (
    SCORE_CENTER_STEP,
    SCORE_CLOSED_FOUR,
    SCORE_CLOSED_THREE,
    SCORE_FIVE,
    SCORE_OPEN_FOUR,
    SCORE_OPEN_THREE,
    SCORE_OPEN_TWO,
)


class Pattern(Enum):
    FIVE = "five"
    OPEN_FOUR = "open_four"
    CLOSED_FOUR = "closed_four"
    OPEN_THREE = "open_three"
    CLOSED_THREE = "closed_three"
    OPEN_TWO = "open_two"


PATTERN_SCORES: Dict[Pattern, int] = {
    Pattern.FIVE: SCORE_FIVE,
    Pattern.OPEN_FOUR: SCORE_OPEN_FOUR,
    Pattern.CLOSED_FOUR: SCORE_CLOSED_FOUR,
    Pattern.OPEN_THREE: SCORE_OPEN_THREE,
    Pattern.CLOSED_THREE: SCORE_CLOSED_THREE,
    Pattern.OPEN_TWO: SCORE_OPEN_TWO,
}

_EMPTY = Player.EMPTY.value


def classify_line(cells: Sequence[int], player: Player) -> List[Pattern]:
    """
    Classify the `player` shapes in one line.

    Runs of 5+ are fives. Everything else is read through 5-cell windows
    free of opposing stones: the own stones of each window form a shape,
    and only shapes not contained in a larger one are kept, so a split
    four like XX_XX counts once, as a four.

    A shape is open when the cells just past its outermost stones are both
    empty and it has room for six cells. A four is open only when it is
    also unbroken; a broken four has a single completing cell.
    """
    me = player.value
    n = len(cells)
    if sum(1 for v in cells if v == me) < 2:
        return []

    found: List[Pattern] = []
    # opposing stones and finished fives both stop a window
    blocked = [v != me and v != _EMPTY for v in cells]
    i = 0
    while i < n:
        if cells[i] != me:
            i += 1
            continue
        start = i
        while i < n and cells[i] == me:
            i += 1
        if i - start >= WIN_LENGTH:
            found.append(Pattern.FIVE)
            for k in range(start, i):
                blocked[k] = True

    shapes = set()
    for s in range(n - WIN_LENGTH + 1):
        if any(blocked[s:s + WIN_LENGTH]):
            continue
        stones = frozenset(k for k in range(s, s + WIN_LENGTH) if cells[k] == me)
        if len(stones) >= 2:
            shapes.add(stones)
    maximal = [s for s in shapes if not any(s < other for other in shapes)]

    for stones in sorted(maximal, key=lambda s: (min(s), max(s))):
        lo, hi = min(stones), max(stones)
        count = len(stones)
        open_ends = int(lo > 0 and cells[lo - 1] == _EMPTY) + int(hi < n - 1 and cells[hi + 1] == _EMPTY)
        room_lo = lo
        while room_lo > 0 and not blocked[room_lo - 1]:
            room_lo -= 1
        room_hi = hi
        while room_hi < n - 1 and not blocked[room_hi + 1]:
            room_hi += 1
        is_open = open_ends == 2 and room_hi - room_lo + 1 > WIN_LENGTH

        if count == 4:
            unbroken = hi - lo + 1 == count
            found.append(Pattern.OPEN_FOUR if unbroken and is_open else Pattern.CLOSED_FOUR)
        elif count == 3:
            found.append(Pattern.OPEN_THREE if is_open else Pattern.CLOSED_THREE)
        elif count == 2 and is_open:
            found.append(Pattern.OPEN_TWO)
    return found


class GomokuHeuristic:
    """Evaluates a board from one player's perspective (positive = good)."""

    def __init__(self, board: GomokuBoard) -> None:
        self.board = board

    def patterns(self, player: Player) -> Counter:
        counts: Counter = Counter()
        for line in self.board.lines():
            counts.update(classify_line(line.tolist(), player))
        return counts

    def pattern_score(self, player: Player) -> int:
        return sum(PATTERN_SCORES[p] * n for p, n in self.patterns(player).items())

    def center_score(self, player: Player) -> int:
        """Each stone earns SCORE_CENTER_STEP per ring closer to the center."""
        weights = _center_weights(self.board.size)
        return int(weights[self.board.grid == player.value].sum()) * SCORE_CENTER_STEP

    def evaluate(self, player: Player) -> int:
        opponent = player.opponent()
        return (
            self.pattern_score(player) - self.pattern_score(opponent)
            + self.center_score(player) - self.center_score(opponent)
        )


_CENTER_WEIGHTS: Dict[int, np.ndarray] = {}


def _center_weights(size: int) -> np.ndarray:
    if size not in _CENTER_WEIGHTS:
        mid = (size - 1) / 2
        idx = np.arange(size)
        dist = np.maximum(np.abs(idx[:, None] - mid), np.abs(idx[None, :] - mid))
        _CENTER_WEIGHTS[size] = (np.floor(mid) - np.floor(dist)).astype(np.int32)
    return _CENTER_WEIGHTS[size]
