from typing import List, Optional, Tuple, overload

import numpy as np

from duels.core.move import InvalidMove, MoveResult
from duels.core.position import Position
from duels.core.types import Player

BOARD_SIZE = 15
WIN_LENGTH = 5


class GomokuBoard:
    """
    Represents the Gomoku board state.

    - Uses 1-based Position (x,y) externally.
    - Internally stores a size x size numpy grid of Player values.
    """

    def __init__(self, size: int = BOARD_SIZE) -> None:
        if not isinstance(size, int) or size <= 0:
            raise ValueError("size must be a positive integer")
        self._size: int = size
        self._grid: np.ndarray = np.zeros((size, size), dtype=np.int8)
        self._moves: int = 0  # number of placed stones (non-empty)

    @property
    def size(self) -> int:
        return self._size

    @property
    def moves(self) -> int:
        return self._moves

    @property
    def grid(self) -> np.ndarray:
        """Read-only view of the grid, indexed [row, col] (0-based)."""
        view = self._grid.view()
        view.flags.writeable = False
        return view

    def copy(self) -> "GomokuBoard":
        """Create a deep copy of the board."""
        new_board = GomokuBoard(self.size)
        new_board._grid = np.copy(self._grid)
        new_board._moves = self._moves
        return new_board

    # ---------- Bounds / indexing ----------

    @overload
    def in_bounds(self, pos: Position) -> bool: ...

    @overload
    def in_bounds(self, x: int, y: int) -> bool: ...

    def in_bounds(self, arg1, arg2=None) -> bool:
        if isinstance(arg1, Position):
            x, y = arg1.x, arg1.y
        else:
            if arg2 is None:
                raise TypeError("in_bounds(x, y) requires both x and y")
            x, y = arg1, arg2
        return 1 <= x <= self._size and 1 <= y <= self._size

    def _idx(self, pos: Position) -> Tuple[int, int]:
        """Convert 1-based Position to 0-based (row, col)."""
        if not self.in_bounds(pos):
            raise ValueError(f"Out of bounds: {pos} for size={self._size}")
        return (pos.y - 1, pos.x - 1)

    # ---------- Cell access ----------

    def get(self, pos: Position) -> Player:
        r, c = self._idx(pos)
        return Player(int(self._grid[r, c]))

    def is_empty(self, pos: Position) -> bool:
        r, c = self._idx(pos)
        return self._grid[r, c] == Player.EMPTY.value

    def place(self, pos: Position, player: Player) -> None:
        """
        Place a stone at pos.

        Raises:
            ValueError if out of bounds, occupied, or player is EMPTY.
        """
        if player == Player.EMPTY:
            raise ValueError("Cannot place EMPTY")
        r, c = self._idx(pos)
        if self._grid[r, c] != Player.EMPTY.value:
            raise ValueError(f"Cell occupied at {pos}")
        self._grid[r, c] = player.value
        self._moves += 1

    def unplace(self, pos: Position) -> None:
        """
        Remove a stone at pos. Only search code calls this, on its own copy;
        stones on a game board are never taken back.

        Raises:
            ValueError if the cell is already empty.
        """
        r, c = self._idx(pos)
        if self._grid[r, c] == Player.EMPTY.value:
            raise ValueError(f"Cell already empty at {pos}")
        self._grid[r, c] = Player.EMPTY.value
        self._moves -= 1

    # ---------- Helpers ----------

    def is_empty_board(self) -> bool:
        return self._moves == 0

    def is_full(self) -> bool:
        return self._moves == self._size * self._size

    def center(self) -> Position:
        mid = (self._size + 1) // 2
        return Position(mid, mid)

    def get_adjacent_positions(self, distance: int = 2) -> List[Position]:
        """
        Get all empty positions near existing stones.

        Args:
            distance: Chebyshev radius around each stone (default: 2).

        Returns:
            List of empty positions near stones (unique, sorted).
            If board is empty, returns just the center.
        """
        if distance < 1:
            raise ValueError("distance must be >= 1")

        if self.is_empty_board():
            return [self.center()]

        # dilate the occupied mask by `distance` in every direction
        occupied = self._grid != Player.EMPTY.value
        near = np.zeros_like(occupied)
        n = self._size
        for dy in range(-distance, distance + 1):
            for dx in range(-distance, distance + 1):
                src = occupied[max(0, -dy):n - max(0, dy), max(0, -dx):n - max(0, dx)]
                near[max(0, dy):n - max(0, -dy), max(0, dx):n - max(0, -dx)] |= src
        rows, cols = np.nonzero(near & ~occupied)
        return [Position(c + 1, r + 1) for r, c in zip(rows.tolist(), cols.tolist())]

    # ---------- Directional scan (win checks, patterns) ----------

    @staticmethod
    def directions() -> Tuple[Tuple[int, int], ...]:
        """4 unique directions (opposites are implied)."""
        return ((1, 0), (0, 1), (1, 1), (1, -1))

    def count_in_direction(self, start: Position, player: Player, dx: int, dy: int) -> int:
        """
        Count consecutive stones of `player` from `start` outward in direction (dx,dy),
        excluding the start cell itself.
        """
        count = 0
        x, y = start.x + dx, start.y + dy
        grid = self._grid
        n = self._size
        while 1 <= x <= n and 1 <= y <= n and grid[y - 1, x - 1] == player.value:
            count += 1
            x += dx
            y += dy
        return count

    def line_length_through(self, pos: Position, player: Player, dx: int, dy: int) -> int:
        """
        Total consecutive length of `player` stones passing through `pos`
        along direction (dx,dy), including pos.
        """
        return (
            1
            + self.count_in_direction(pos, player, dx, dy)
            + self.count_in_direction(pos, player, -dx, -dy)
        )

    def makes_five(self, pos: Position, player: Player) -> bool:
        """True if `player` has (or would have, if pos is empty) 5+ in a row through pos."""
        return any(
            self.line_length_through(pos, player, dx, dy) >= WIN_LENGTH
            for dx, dy in self.directions()
        )

    def lines(self) -> List[np.ndarray]:
        """
        Every full row, column and diagonal (both directions) with at least
        WIN_LENGTH cells, as 1D arrays.
        """
        g = self._grid
        n = self._size
        out: List[np.ndarray] = [g[r, :] for r in range(n)]
        out.extend(g[:, c] for c in range(n))
        flipped = np.fliplr(g)
        for k in range(-(n - WIN_LENGTH), n - WIN_LENGTH + 1):
            out.append(np.diagonal(g, offset=k))
            out.append(np.diagonal(flipped, offset=k))
        return out

    # ---------- Rendering ----------

    def rows(self) -> List[List[Player]]:
        return [[Player(v) for v in row] for row in self._grid.tolist()]

    def to_cli(self) -> str:
        letters = [chr(ord("A") + i) for i in range(self._size)]
        lines = ["     " + " ".join(letters)]
        for y, row in enumerate(self.rows(), start=1):
            lines.append(f"{str(y).rjust(3)}  " + " ".join(p.symbol() for p in row))
        return "\n".join(lines)


class GomokuGame:
    """
    Main Gomoku game state.

    Owns:
      - GomokuBoard
      - current_player, winner, draw flag, history, last_move

    Freestyle rules: 5 or more in a row wins for either color, a full
    board without a five is a draw. Stones are never removed.
    """

    def __init__(
        self,
        board_size: int = BOARD_SIZE,
        starting_player: Player = Player.BLACK,
    ) -> None:
        self.board = GomokuBoard(board_size)
        self.starting_player: Player = starting_player
        self.current_player: Player = starting_player
        self.winner: Optional[Player] = None
        self.is_draw: bool = False
        self.move_history: List[Tuple[Position, Player]] = []
        self.last_move: Optional[Position] = None

    def is_game_over(self) -> bool:
        return self.winner is not None or self.is_draw

    def check_move(self, position: Position) -> MoveResult:
        if self.is_game_over():
            return MoveResult.fail(InvalidMove.GAME_OVER)
        if not self.board.in_bounds(position):
            return MoveResult.fail(InvalidMove.OUT_OF_BOUNDS)
        if not self.board.is_empty(position):
            return MoveResult.fail(InvalidMove.OCCUPIED)
        return MoveResult.ok(
            is_winning_move=self.board.makes_five(position, self.current_player)
        )

    def can_move(self, position: Position) -> bool:
        return self.check_move(position).success

    def make_move(self, position: Position) -> MoveResult:
        """
        Execute a move for the current player.

        Returns:
            MoveResult (success, reason, is_winning_move)
        """
        result = self.check_move(position)
        if not result.success:
            return result

        self.board.place(position, self.current_player)
        self.move_history.append((position, self.current_player))
        self.last_move = position

        if result.is_winning_move:
            self.winner = self.current_player
            return result
        if self.board.is_full():
            self.is_draw = True
            return result

        self.current_player = self.current_player.opponent()
        return result

    def get_valid_moves(self, *, distance: int = 2) -> List[Position]:
        """Candidate moves: empty cells near stones, or the center on an empty board."""
        if self.is_game_over():
            return []
        return self.board.get_adjacent_positions(distance=distance)

