"""Nine Men's Morris rules: placing, sliding, flying, mills and captures."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from duels.core.move import InvalidMove, MoveResult
from duels.core.types import Player
from duels.errors import InvariantError

NODE_COUNT = 24
PIECES_PER_PLAYER = 9
FLYING_THRESHOLD = 3

# Node numbering, row by row:
#
#   0-----------1-----------2
#   |           |           |
#   |   3-------4-------5   |
#   |   |       |       |   |
#   |   |   6---7---8   |   |
#   |   |   |       |   |   |
#   9--10--11      12--13--14
#   |   |   |       |   |   |
#   |   |  15--16--17   |   |
#   |   |       |       |   |
#   |  18------19------20   |
#   |           |           |
#  21----------22----------23
MILLS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8), (9, 10, 11),
    (12, 13, 14), (15, 16, 17), (18, 19, 20), (21, 22, 23),
    (0, 9, 21), (3, 10, 18), (6, 11, 15), (1, 4, 7),
    (16, 19, 22), (8, 12, 17), (5, 13, 20), (2, 14, 23),
)

ADJACENCY: Tuple[Tuple[int, ...], ...] = (
    (1, 9),           # 0
    (0, 2, 4),        # 1
    (1, 14),          # 2
    (4, 10),          # 3
    (1, 3, 5, 7),     # 4
    (4, 13),          # 5
    (7, 11),          # 6
    (4, 6, 8),        # 7
    (7, 12),          # 8
    (0, 10, 21),      # 9
    (3, 9, 11, 18),   # 10
    (6, 10, 15),      # 11
    (8, 13, 17),      # 12
    (5, 12, 14, 20),  # 13
    (2, 13, 23),      # 14
    (11, 16),         # 15
    (15, 17, 19),     # 16
    (12, 16),         # 17
    (10, 19),         # 18
    (16, 18, 20, 22), # 19
    (13, 19),         # 20
    (9, 22),          # 21
    (19, 21, 23),     # 22
    (14, 22),         # 23
)


def _check_topology() -> Tuple[Tuple[Tuple[int, int, int], ...], ...]:
    """Validate the constant tables and index mills by node."""
    if len(MILLS) != 16 or len(ADJACENCY) != NODE_COUNT:
        raise InvariantError("Morris tables have the wrong size")
    for mill in MILLS:
        if any(not 0 <= n < NODE_COUNT for n in mill):
            raise InvariantError("Mill references an unknown node", context={"mill": mill})
    for node, adj in enumerate(ADJACENCY):
        if not 2 <= len(adj) <= 4:
            raise InvariantError("Node degree out of range", context={"node": node})
        for other in adj:
            if not 0 <= other < NODE_COUNT or node not in ADJACENCY[other]:
                raise InvariantError("Adjacency is not symmetric", context={"node": node})
    return tuple(tuple(m for m in MILLS if node in m) for node in range(NODE_COUNT))


MILLS_BY_NODE = _check_topology()


class MorrisPhase(Enum):
    PLACING = "placing"
    MOVING = "moving"
    FLYING = "flying"


class MorrisMoveKind(Enum):
    PLACE = "place"
    SLIDE = "slide"
    FLY = "fly"


class LossReason(Enum):
    MILL_REDUCTION = "mill_reduction"
    NO_LEGAL_MOVES = "no_legal_moves"


@dataclass(frozen=True)
class MorrisMove:
    """
    One Morris turn: a placement or a slide/fly, plus the opposing pieces
    captured because of the mills it completed (one per mill).
    """
    kind: MorrisMoveKind
    to: int
    origin: Optional[int] = None
    captures: Tuple[int, ...] = ()

    @staticmethod
    def place(to: int, captures: Sequence[int] = ()) -> "MorrisMove":
        return MorrisMove(MorrisMoveKind.PLACE, to, None, tuple(captures))

    @staticmethod
    def slide(origin: int, to: int, captures: Sequence[int] = ()) -> "MorrisMove":
        return MorrisMove(MorrisMoveKind.SLIDE, to, origin, tuple(captures))

    @staticmethod
    def fly(origin: int, to: int, captures: Sequence[int] = ()) -> "MorrisMove":
        return MorrisMove(MorrisMoveKind.FLY, to, origin, tuple(captures))

    def __str__(self) -> str:
        text = str(self.to) if self.origin is None else f"{self.origin}-{self.to}"
        for c in self.captures:
            text += f"x{c}"
        return text


# selector(board after the move, capturable nodes) -> node to remove
CaptureSelector = Callable[["MorrisBoard", List[int]], int]


@dataclass
class _Undo:
    move: MorrisMove
    player: Player
    winner: Optional[Player]
    loss_reason: Optional[LossReason]
    last_move: Optional[MorrisMove]


class MorrisBoard:
    """
    Nine Men's Morris game state.

    Two ways to play a move:
      - apply(move, selector): validated; rejected moves change nothing.
      - push(move) / pop(): trusted make/unmake for search, moves must come
        from legal_moves().
    """

    def __init__(self, starting_player: Player = Player.BLACK) -> None:
        self._cells: List[Player] = [Player.EMPTY] * NODE_COUNT
        self.in_hand: Dict[Player, int] = {Player.BLACK: PIECES_PER_PLAYER, Player.WHITE: PIECES_PER_PLAYER}
        self.on_board: Dict[Player, int] = {Player.BLACK: 0, Player.WHITE: 0}
        # pieces of that color removed by the opponent
        self.captured: Dict[Player, int] = {Player.BLACK: 0, Player.WHITE: 0}
        self.current_player: Player = starting_player
        self.winner: Optional[Player] = None
        self.loss_reason: Optional[LossReason] = None
        self.last_move: Optional[MorrisMove] = None
        self._history: List[_Undo] = []

    @classmethod
    def from_layout(
        cls,
        black: Iterable[int] = (),
        white: Iterable[int] = (),
        *,
        black_in_hand: int = 0,
        white_in_hand: int = 0,
        to_move: Player = Player.BLACK,
    ) -> "MorrisBoard":
        """Build a position directly. Pieces missing from 9 count as captured."""
        board = cls(starting_player=to_move)
        for player, nodes, hand in (
            (Player.BLACK, black, black_in_hand),
            (Player.WHITE, white, white_in_hand),
        ):
            for n in nodes:
                if board._cells[n] != Player.EMPTY:
                    raise ValueError(f"Node {n} listed twice")
                board._cells[n] = player
            board.on_board[player] = board._cells.count(player)
            board.in_hand[player] = hand
            board.captured[player] = PIECES_PER_PLAYER - hand - board.on_board[player]
            if hand < 0 or board.captured[player] < 0:
                raise ValueError(f"{player} has more than {PIECES_PER_PLAYER} pieces")
        board.check_invariants()
        return board

    def copy(self) -> "MorrisBoard":
        new = MorrisBoard.__new__(MorrisBoard)
        new._cells = self._cells[:]
        new.in_hand = dict(self.in_hand)
        new.on_board = dict(self.on_board)
        new.captured = dict(self.captured)
        new.current_player = self.current_player
        new.winner = self.winner
        new.loss_reason = self.loss_reason
        new.last_move = self.last_move
        new._history = []
        return new

    # ---------- Cell access ----------

    def get(self, node: int) -> Player:
        return self._cells[node]

    @property
    def cells(self) -> Tuple[Player, ...]:
        return tuple(self._cells)

    def pieces(self, player: Player) -> List[int]:
        return [n for n, p in enumerate(self._cells) if p == player]

    def empty_nodes(self) -> List[int]:
        return [n for n, p in enumerate(self._cells) if p == Player.EMPTY]

    # ---------- Phase ----------

    @property
    def phase(self) -> MorrisPhase:
        """Phase of the side to move."""
        return self.phase_for(self.current_player)

    def phase_for(self, player: Player) -> MorrisPhase:
        if self.in_hand[player] > 0:
            return MorrisPhase.PLACING
        if self.on_board[player] == FLYING_THRESHOLD:
            return MorrisPhase.FLYING
        return MorrisPhase.MOVING

    def can_fly(self, player: Player) -> bool:
        return self.phase_for(player) == MorrisPhase.FLYING

    # ---------- Mills ----------

    def is_in_mill(self, node: int, player: Optional[Player] = None) -> bool:
        player = player or self._cells[node]
        if player == Player.EMPTY:
            return False
        cells = self._cells
        return any(all(cells[n] == player for n in mill) for mill in MILLS_BY_NODE[node])

    def mills_through(self, node: int, player: Player) -> int:
        """Number of complete `player` mills that contain node."""
        cells = self._cells
        return sum(1 for mill in MILLS_BY_NODE[node] if all(cells[n] == player for n in mill))

    def count_mills(self, player: Player) -> int:
        cells = self._cells
        return sum(1 for mill in MILLS if all(cells[n] == player for n in mill))

    def count_potential_mills(self, player: Player) -> int:
        """Lines holding exactly two of player's pieces and an empty third node."""
        count = 0
        for mill in MILLS:
            vals = [self._cells[n] for n in mill]
            if vals.count(player) == 2 and vals.count(Player.EMPTY) == 1:
                count += 1
        return count

    def capturable(self, player: Player) -> List[int]:
        """
        Pieces of `player` the opponent may remove: those outside any mill,
        or every piece when all of them sit in mills.
        """
        own = self.pieces(player)
        free = [n for n in own if not self.is_in_mill(n, player)]
        return free if free else own

    # ---------- Move generation ----------

    def base_moves(self, player: Optional[Player] = None) -> List[MorrisMove]:
        """Placements/slides/flights for player, without capture choices."""
        player = player or self.current_player
        phase = self.phase_for(player)
        empty = self.empty_nodes()
        if phase == MorrisPhase.PLACING:
            return [MorrisMove.place(n) for n in empty]
        moves: List[MorrisMove] = []
        for origin in self.pieces(player):
            if phase == MorrisPhase.FLYING:
                moves.extend(MorrisMove.fly(origin, to) for to in empty)
            else:
                moves.extend(
                    MorrisMove.slide(origin, to)
                    for to in ADJACENCY[origin]
                    if self._cells[to] == Player.EMPTY
                )
        return moves

    def mobility(self, player: Player) -> int:
        return len(self.base_moves(player))

    def legal_moves(self) -> List[MorrisMove]:
        """
        Every legal move for the side to move, with each distinct set of
        capture choices expanded into its own move.
        """
        if self.winner is not None:
            return []
        player = self.current_player
        moves: List[MorrisMove] = []
        for base in self.base_moves(player):
            # preview in place, undone before the next move
            mills = self._move_piece(base, player)
            if mills == 0:
                moves.append(base)
            else:
                seen = set()
                for captures in self._capture_sequences(player.opponent(), mills):
                    key = frozenset(captures)
                    if key not in seen:
                        seen.add(key)
                        moves.append(replace(base, captures=captures))
            self._unmove_piece(base, player)
        return moves

    def _capture_sequences(self, victim: Player, count: int) -> List[Tuple[int, ...]]:
        if count == 0 or self.on_board[victim] == 0:
            return [()]
        out: List[Tuple[int, ...]] = []
        for node in self.capturable(victim):
            self._remove_piece(node)
            for rest in self._capture_sequences(victim, count - 1):
                out.append((node,) + rest)
            self._restore_piece(node, victim)
        return out

    # ---------- Validation / apply ----------

    def check_shape(self, move: MorrisMove) -> Optional[InvalidMove]:
        """Validate the placement/slide part of a move for the side to move."""
        player = self.current_player
        if self.winner is not None:
            return InvalidMove.GAME_OVER
        if not 0 <= move.to < NODE_COUNT:
            return InvalidMove.OUT_OF_BOUNDS
        phase = self.phase_for(player)
        if phase == MorrisPhase.PLACING:
            if move.kind != MorrisMoveKind.PLACE:
                return InvalidMove.WRONG_PHASE
        else:
            if move.kind == MorrisMoveKind.PLACE:
                return InvalidMove.WRONG_PHASE
            if move.origin is None or not 0 <= move.origin < NODE_COUNT:
                return InvalidMove.OUT_OF_BOUNDS
            if self._cells[move.origin] != player:
                return InvalidMove.NOT_OWN_PIECE
            if phase == MorrisPhase.MOVING:
                if move.kind == MorrisMoveKind.FLY:
                    return InvalidMove.WRONG_PHASE
                if move.to not in ADJACENCY[move.origin]:
                    return InvalidMove.NOT_ADJACENT
        if self._cells[move.to] != Player.EMPTY:
            return InvalidMove.OCCUPIED
        return None

    def apply(self, move: MorrisMove, selector: Optional[CaptureSelector] = None) -> MoveResult:
        """
        Validate and play a move for the current player.

        Captures come from move.captures when given; otherwise `selector`
        is asked once per completed mill, seeing the board after the move
        and the nodes currently eligible. Any problem rejects the whole
        move and leaves the board unchanged.
        """
        reason = self.check_shape(move)
        if reason is not None:
            return MoveResult.fail(reason)

        player = self.current_player
        victim = player.opponent()
        if self.can_fly(player):
            move = replace(move, kind=MorrisMoveKind.FLY)

        preview = self.copy()
        mills = preview._move_piece(move, player)
        owed = min(mills, preview.on_board[victim])

        if move.captures:
            if len(move.captures) != owed:
                return MoveResult.fail(InvalidMove.INVALID_CAPTURE)
            picks = list(move.captures)
        elif owed and selector is None:
            return MoveResult.fail(InvalidMove.INVALID_CAPTURE)
        else:
            picks = []

        for i in range(owed):
            eligible = preview.capturable(victim)
            pick = picks[i] if move.captures else selector(preview, list(eligible))
            if pick not in eligible:
                return MoveResult.fail(InvalidMove.INVALID_CAPTURE)
            preview._remove_piece(pick)
            if not move.captures:
                picks.append(pick)

        self.push(replace(move, captures=tuple(picks)))
        return MoveResult.ok(is_winning_move=self.winner == player)

    # ---------- Make / unmake ----------

    def push(self, move: MorrisMove) -> None:
        """Play a move known to be legal (from legal_moves or apply)."""
        player = self.current_player
        self._history.append(
            _Undo(move, player, self.winner, self.loss_reason, self.last_move)
        )
        self._move_piece(move, player)
        for node in move.captures:
            self._remove_piece(node)
        self.last_move = move
        self.current_player = player.opponent()
        self._update_result()

    def pop(self) -> MorrisMove:
        """Undo the last push."""
        undo = self._history.pop()
        move = undo.move
        victim = undo.player.opponent()
        for node in reversed(move.captures):
            self._restore_piece(node, victim)
        self._unmove_piece(move, undo.player)
        self.current_player = undo.player
        self.winner = undo.winner
        self.loss_reason = undo.loss_reason
        self.last_move = undo.last_move
        return move

    def _move_piece(self, move: MorrisMove, player: Player) -> int:
        """Place or relocate a piece. Returns the number of mills completed."""
        if move.kind == MorrisMoveKind.PLACE:
            self.in_hand[player] -= 1
            self.on_board[player] += 1
        else:
            self._cells[move.origin] = Player.EMPTY
        self._cells[move.to] = player
        return self.mills_through(move.to, player)

    def _unmove_piece(self, move: MorrisMove, player: Player) -> None:
        self._cells[move.to] = Player.EMPTY
        if move.kind == MorrisMoveKind.PLACE:
            self.on_board[player] -= 1
            self.in_hand[player] += 1
        else:
            self._cells[move.origin] = player

    def remove(self, node: int) -> None:
        """Take a piece off as a capture, outside any move (capture previews)."""
        self._remove_piece(node)

    def _remove_piece(self, node: int) -> None:
        victim = self._cells[node]
        if victim == Player.EMPTY:
            raise InvariantError("Capture of an empty node", context={"node": node})
        self._cells[node] = Player.EMPTY
        self.on_board[victim] -= 1
        self.captured[victim] += 1

    def _restore_piece(self, node: int, victim: Player) -> None:
        self._cells[node] = victim
        self.on_board[victim] += 1
        self.captured[victim] -= 1

    # ---------- Terminal ----------

    def _update_result(self) -> None:
        side = self.current_player
        if self.in_hand[side] == 0 and self.on_board[side] < FLYING_THRESHOLD:
            self.winner = side.opponent()
            self.loss_reason = LossReason.MILL_REDUCTION
        elif not self.base_moves(side):
            self.winner = side.opponent()
            self.loss_reason = LossReason.NO_LEGAL_MOVES

    def is_over(self) -> bool:
        return self.winner is not None

    def check_invariants(self) -> None:
        for player in (Player.BLACK, Player.WHITE):
            counted = self._cells.count(player)
            total = self.in_hand[player] + self.on_board[player] + self.captured[player]
            if counted != self.on_board[player] or total != PIECES_PER_PLAYER:
                raise InvariantError(
                    "Morris piece count mismatch",
                    context={
                        "player": player,
                        "cells": counted,
                        "on_board": self.on_board[player],
                        "in_hand": self.in_hand[player],
                        "captured": self.captured[player],
                    },
                )

    # ---------- Rendering ----------

    def to_cli(self) -> str:
        s = [p.symbol() for p in self._cells]
        return "\n".join([
            f"{s[0]}-----------{s[1]}-----------{s[2]}",
            "|           |           |",
            f"|   {s[3]}-------{s[4]}-------{s[5]}   |",
            "|   |       |       |   |",
            f"|   |   {s[6]}---{s[7]}---{s[8]}   |   |",
            "|   |   |       |   |   |",
            f"{s[9]}---{s[10]}---{s[11]}       {s[12]}---{s[13]}---{s[14]}",
            "|   |   |       |   |   |",
            f"|   |   {s[15]}---{s[16]}---{s[17]}   |   |",
            "|   |       |       |   |",
            f"|   {s[18]}-------{s[19]}-------{s[20]}   |",
            "|           |           |",
            f"{s[21]}-----------{s[22]}-----------{s[23]}",
        ])
