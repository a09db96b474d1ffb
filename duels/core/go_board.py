"""Go rules on a small square board: placement, capture, ko, suicide, area scoring."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from duels.core.move import InvalidMove, MoveResult
from duels.core.position import Position
from duels.core.types import Player
from duels.errors import InvariantError

BOARD_SIZE = 9

EMPTY = Player.EMPTY.value


class GoMoveKind(Enum):
    PLACE = "place"
    PASS = "pass"
    RESIGN = "resign"


@dataclass(frozen=True)
class GoMove:
    """A Go move. `position` is set only for PLACE."""
    kind: GoMoveKind
    position: Optional[Position] = None

    @staticmethod
    def place(position: Position) -> "GoMove":
        return GoMove(GoMoveKind.PLACE, position)

    @staticmethod
    def pass_turn() -> "GoMove":
        return GoMove(GoMoveKind.PASS)

    @staticmethod
    def resign() -> "GoMove":
        return GoMove(GoMoveKind.RESIGN)

    def __str__(self) -> str:
        if self.kind == GoMoveKind.PLACE:
            return str(self.position)
        return self.kind.value


def _neighbor_table(size: int) -> Tuple[Tuple[int, ...], ...]:
    table = []
    for idx in range(size * size):
        r, c = divmod(idx, size)
        adj = []
        if r > 0:
            adj.append(idx - size)
        if r < size - 1:
            adj.append(idx + size)
        if c > 0:
            adj.append(idx - 1)
        if c < size - 1:
            adj.append(idx + 1)
        table.append(tuple(adj))
    return tuple(table)


class GoBoard:
    """
    Go game state.

    - Uses 1-based Position (x,y) externally.
    - Internally stores a flat list of Player values, index = (y-1)*size + (x-1).
      Search code works on indices directly.
    - Groups and liberties are recomputed by flood fill when needed.
    """

    def __init__(self, size: int = BOARD_SIZE, starting_player: Player = Player.BLACK) -> None:
        if not isinstance(size, int) or size < 2:
            raise ValueError("size must be an integer >= 2")
        self._size = size
        self._cells: List[int] = [EMPTY] * (size * size)
        self._neighbors = _neighbor_table(size)

        self.current_player: Player = starting_player
        self.ko_point: Optional[int] = None
        self.consecutive_passes: int = 0
        self.resigned: Optional[Player] = None
        self.last_move: Optional[GoMove] = None
        self.move_count: int = 0

        # placed[c] == on_board(c) + captured[c] at all times
        self.placed: Dict[Player, int] = {Player.BLACK: 0, Player.WHITE: 0}
        self.captured: Dict[Player, int] = {Player.BLACK: 0, Player.WHITE: 0}

    @property
    def size(self) -> int:
        return self._size

    def copy(self) -> "GoBoard":
        """Create an independent copy of the board."""
        new = GoBoard.__new__(GoBoard)
        new._size = self._size
        new._cells = self._cells[:]
        new._neighbors = self._neighbors
        new.current_player = self.current_player
        new.ko_point = self.ko_point
        new.consecutive_passes = self.consecutive_passes
        new.resigned = self.resigned
        new.last_move = self.last_move
        new.move_count = self.move_count
        new.placed = dict(self.placed)
        new.captured = dict(self.captured)
        return new

    # ---------- Indexing ----------

    def index(self, pos: Position) -> int:
        if not pos.in_bounds(self._size):
            raise ValueError(f"Out of bounds: {pos} for size={self._size}")
        return (pos.y - 1) * self._size + (pos.x - 1)

    def position(self, idx: int) -> Position:
        r, c = divmod(idx, self._size)
        return Position(c + 1, r + 1)

    def neighbors(self, idx: int) -> Tuple[int, ...]:
        return self._neighbors[idx]

    @property
    def cells(self) -> List[int]:
        """Flat cell values in index order. Callers must not mutate it."""
        return self._cells

    def cell(self, idx: int) -> Player:
        return Player(self._cells[idx])

    def get(self, pos: Position) -> Player:
        return self.cell(self.index(pos))

    @property
    def ko_position(self) -> Optional[Position]:
        return None if self.ko_point is None else self.position(self.ko_point)

    @property
    def last_move_index(self) -> Optional[int]:
        if self.last_move is None or self.last_move.kind != GoMoveKind.PLACE:
            return None
        return self.index(self.last_move.position)

    def empty_indices(self) -> List[int]:
        return [i for i, v in enumerate(self._cells) if v == EMPTY]

    def stones(self, player: Player) -> int:
        return self._cells.count(player.value)

    def set_stone(self, pos: Position, player: Player) -> None:
        """
        Put a stone directly, bypassing the rules (setup / tests).
        Counts it as placed so conservation still holds.
        """
        idx = self.index(pos)
        prev = self._cells[idx]
        if prev != EMPTY:
            self.placed[Player(prev)] -= 1
        self._cells[idx] = player.value
        if player != Player.EMPTY:
            self.placed[player] += 1

    # ---------- Groups / liberties ----------

    def group(self, idx: int) -> Tuple[Set[int], Set[int]]:
        """
        Flood-fill the group containing idx.

        Returns:
            (stones, liberties). Both empty if idx is an empty point.
        """
        color = self._cells[idx]
        if color == EMPTY:
            return set(), set()
        cells = self._cells
        stones = {idx}
        liberties: Set[int] = set()
        stack = [idx]
        while stack:
            cur = stack.pop()
            for n in self._neighbors[cur]:
                v = cells[n]
                if v == EMPTY:
                    liberties.add(n)
                elif v == color and n not in stones:
                    stones.add(n)
                    stack.append(n)
        return stones, liberties

    def _has_liberty_other_than(self, idx: int, excluded: int) -> bool:
        color = self._cells[idx]
        cells = self._cells
        seen = {idx}
        stack = [idx]
        while stack:
            cur = stack.pop()
            for n in self._neighbors[cur]:
                v = cells[n]
                if v == EMPTY:
                    if n != excluded:
                        return True
                elif v == color and n not in seen:
                    seen.add(n)
                    stack.append(n)
        return False

    def simulate(self, idx: int, player: Player) -> Tuple[List[int], int, int]:
        """
        Evaluate placing `player` at empty idx without changing the board.

        Returns:
            (captured indices, own group size, own group liberty count)
        """
        cells = self._cells
        me = player.value
        opp = player.opponent().value
        cells[idx] = me
        try:
            captured: List[int] = []
            checked: Set[int] = set()
            for n in self._neighbors[idx]:
                if cells[n] != opp or n in checked:
                    continue
                stones, libs = self.group(n)
                checked |= stones
                if not libs:
                    captured.extend(stones)
            if captured:
                for c in captured:
                    cells[c] = EMPTY
            stones, libs = self.group(idx)
            if captured:
                for c in captured:
                    cells[c] = opp
            return captured, len(stones), len(libs)
        finally:
            cells[idx] = EMPTY

    # ---------- Legality ----------

    def check_index(self, idx: int, player: Optional[Player] = None) -> Optional[InvalidMove]:
        """Return why placing at idx is illegal, or None if it is legal."""
        player = player or self.current_player
        if self.is_over():
            return InvalidMove.GAME_OVER
        if self._cells[idx] != EMPTY:
            return InvalidMove.OCCUPIED
        if idx == self.ko_point and player == self.current_player:
            return InvalidMove.KO
        cells = self._cells
        for n in self._neighbors[idx]:
            if cells[n] == EMPTY:
                return None
        me = player.value
        for n in self._neighbors[idx]:
            v = cells[n]
            # joining a friendly group that keeps another liberty
            if v == me and self._has_liberty_other_than(n, idx):
                return None
            # capturing an enemy group whose last liberty is idx
            if v != me and not self._has_liberty_other_than(n, idx):
                return None
        return InvalidMove.SUICIDE

    def check_move(self, pos: Position) -> Optional[InvalidMove]:
        if not pos.in_bounds(self._size):
            return InvalidMove.OUT_OF_BOUNDS
        return self.check_index(self.index(pos))

    def is_legal(self, pos: Position) -> bool:
        return self.check_move(pos) is None

    def legal_indices(self) -> List[int]:
        if self.is_over():
            return []
        return [i for i in self.empty_indices() if self.check_index(i) is None]

    def legal_moves(self) -> List[Position]:
        """All legal placements for the side to move (pass/resign not included)."""
        return [self.position(i) for i in self.legal_indices()]

    # ---------- Playing ----------

    def play(self, move: GoMove) -> MoveResult:
        """
        Apply a move for the current player.

        Illegal placements return MoveResult.fail and leave the board unchanged.
        """
        if self.is_over():
            return MoveResult.fail(InvalidMove.GAME_OVER)

        if move.kind == GoMoveKind.RESIGN:
            self.resigned = self.current_player
            self.last_move = move
            return MoveResult.ok()

        if move.kind == GoMoveKind.PASS:
            self.pass_turn()
            return MoveResult.ok()

        reason = self.check_move(move.position)
        if reason is not None:
            return MoveResult.fail(reason)
        self.place_index(self.index(move.position))
        return MoveResult.ok()

    def pass_turn(self) -> None:
        self.consecutive_passes += 1
        self.ko_point = None
        self.last_move = GoMove.pass_turn()
        self.move_count += 1
        self.current_player = self.current_player.opponent()

    def place_index(self, idx: int) -> List[int]:
        """
        Place a stone for the current player at an index already known legal.

        Returns:
            Indices of captured opposing stones.
        """
        player = self.current_player
        cells = self._cells
        cells[idx] = player.value
        self.placed[player] += 1

        opp = player.opponent()
        captured: List[int] = []
        for n in self._neighbors[idx]:
            if cells[n] != opp.value:
                continue
            stones, libs = self.group(n)
            if not libs:
                for s in stones:
                    cells[s] = EMPTY
                captured.extend(stones)
        self.captured[opp] += len(captured)

        self.ko_point = None
        if len(captured) == 1:
            stones, libs = self.group(idx)
            if len(stones) == 1 and libs == {captured[0]}:
                self.ko_point = captured[0]

        self.consecutive_passes = 0
        self.last_move = GoMove.place(self.position(idx))
        self.move_count += 1
        self.current_player = opp
        return captured

    # ---------- Terminal / scoring ----------

    def is_over(self) -> bool:
        return self.resigned is not None or self.consecutive_passes >= 2

    def score(self) -> Tuple[int, int]:
        """
        Chinese area score: stones on board plus empty regions bordered by
        one color only.

        Returns:
            (black, white)
        """
        cells = self._cells
        black = cells.count(Player.BLACK.value)
        white = cells.count(Player.WHITE.value)
        seen: Set[int] = set()
        for start, v in enumerate(cells):
            if v != EMPTY or start in seen:
                continue
            region = {start}
            borders: Set[int] = set()
            stack = [start]
            while stack:
                cur = stack.pop()
                for n in self._neighbors[cur]:
                    nv = cells[n]
                    if nv == EMPTY:
                        if n not in region:
                            region.add(n)
                            stack.append(n)
                    else:
                        borders.add(nv)
            seen |= region
            if borders == {Player.BLACK.value}:
                black += len(region)
            elif borders == {Player.WHITE.value}:
                white += len(region)
        return black, white

    def winner(self) -> Optional[Player]:
        """Winner of a finished (or scored-as-is) game; None means a draw."""
        if self.resigned is not None:
            return self.resigned.opponent()
        black, white = self.score()
        if black > white:
            return Player.BLACK
        if white > black:
            return Player.WHITE
        return None

    def check_invariants(self) -> None:
        """Stones on board + stones captured == stones placed, per color."""
        for color in (Player.BLACK, Player.WHITE):
            on_board = self.stones(color)
            if on_board + self.captured[color] != self.placed[color]:
                raise InvariantError(
                    "Go stone count mismatch",
                    context={
                        "color": color,
                        "on_board": on_board,
                        "captured": self.captured[color],
                        "placed": self.placed[color],
                    },
                )

    # ---------- Rendering ----------

    def rows(self) -> List[List[Player]]:
        s = self._size
        return [[Player(self._cells[r * s + c]) for c in range(s)] for r in range(s)]

    def to_cli(self) -> str:
        letters = [chr(ord("A") + i) for i in range(self._size)]
        lines = ["     " + " ".join(letters)]
        for y, row in enumerate(self.rows(), start=1):
            lines.append(f"{str(y).rjust(3)}  " + " ".join(p.symbol() for p in row))
        return "\n".join(lines)
