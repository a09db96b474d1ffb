from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from duels.core.go_board import GoBoard, GoMove
from duels.core.gomoku_board import GomokuGame
from duels.core.morris_board import CaptureSelector, MorrisBoard, MorrisMove
from duels.core.move import InvalidMove, MoveResult
from duels.core.position import Position
from duels.core.types import GameKind, GameResult, Player
from duels.errors import InvariantError
from duels.ai.config import SearchConfig
from duels.ai.go_mcts import MctsAI
from duels.ai.gomoku_minimax import MinimaxAI as GomokuMinimaxAI
from duels.ai.morris_minimax import MinimaxAI as MorrisMinimaxAI


class InputKind(Enum):
    MOVE = "move"
    PASS = "pass"
    RESIGN = "resign"
    CANCEL = "cancel"
    OTHER = "other"


@dataclass(frozen=True)
class SessionInput:
    """
    One human input. `move` is a Position (Go, Gomoku) or a MorrisMove,
    set only for MOVE.
    """
    kind: InputKind
    move: Any = None

    @staticmethod
    def play(move: Any) -> "SessionInput":
        return SessionInput(InputKind.MOVE, move)

    @staticmethod
    def pass_turn() -> "SessionInput":
        return SessionInput(InputKind.PASS)

    @staticmethod
    def resign() -> "SessionInput":
        return SessionInput(InputKind.RESIGN)

    @staticmethod
    def cancel() -> "SessionInput":
        return SessionInput(InputKind.CANCEL)

    @staticmethod
    def other() -> "SessionInput":
        return SessionInput(InputKind.OTHER)


class Match(ABC):
    """
    One game's rules plus its engine, behind the interface the session uses.

    Concrete matches implement:
      - apply_human(): validate and play a human input
      - choose_ai_move() / apply_ai(): ask the engine and play its answer
      - is_over() / result(): terminal check and result for a given side
      - rendering helpers for snapshots
    """

    kind: GameKind

    def __init__(self, config: SearchConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng

    @property
    @abstractmethod
    def current_player(self) -> Player:
        raise NotImplementedError

    @abstractmethod
    def apply_human(self, inp: SessionInput) -> MoveResult:
        raise NotImplementedError

    @abstractmethod
    def choose_ai_move(self) -> Any:
        """Raises NoLegalMovesError when the engine's side cannot move."""
        raise NotImplementedError

    @abstractmethod
    def apply_ai(self, move: Any) -> MoveResult:
        raise NotImplementedError

    @abstractmethod
    def is_over(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def result(self, player: Player) -> Tuple[GameResult, str]:
        """Result and reason of a finished game from `player`'s side."""
        raise NotImplementedError

    @abstractmethod
    def cells(self) -> Tuple:
        raise NotImplementedError

    @abstractmethod
    def board_text(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def last_move_text(self) -> Optional[str]:
        raise NotImplementedError

    def phase(self) -> Optional[str]:
        return None

    def check_invariants(self) -> None:
        pass


def _result_for(winner: Optional[Player], player: Player) -> GameResult:
    if winner is None:
        return GameResult.DRAW
    return GameResult.WIN if winner == player else GameResult.LOSS


class GoMatch(Match):
    kind = GameKind.GO

    def __init__(self, config: SearchConfig, rng: random.Random) -> None:
        super().__init__(config, rng)
        self.board = GoBoard()
        self.ai = MctsAI(config, rng)

    @property
    def current_player(self) -> Player:
        return self.board.current_player

    def apply_human(self, inp: SessionInput) -> MoveResult:
        if inp.kind == InputKind.PASS:
            return self.board.play(GoMove.pass_turn())
        if inp.kind == InputKind.RESIGN:
            return self.board.play(GoMove.resign())
        if not isinstance(inp.move, Position):
            return MoveResult.fail(InvalidMove.NOT_SUPPORTED)
        return self.board.play(GoMove.place(inp.move))

    def choose_ai_move(self) -> GoMove:
        return self.ai.get_best_move(self.board)

    def apply_ai(self, move: GoMove) -> MoveResult:
        return self.board.play(move)

    def is_over(self) -> bool:
        return self.board.is_over()

    def result(self, player: Player) -> Tuple[GameResult, str]:
        reason = "resignation" if self.board.resigned is not None else "score"
        return _result_for(self.board.winner(), player), reason

    def cells(self) -> Tuple:
        return tuple(tuple(row) for row in self.board.rows())

    def board_text(self) -> str:
        black, white = self.board.score()
        return f"{self.board.to_cli()}\n  area: black {black} / white {white}"

    def last_move_text(self) -> Optional[str]:
        return None if self.board.last_move is None else str(self.board.last_move)

    def check_invariants(self) -> None:
        self.board.check_invariants()


class GomokuMatch(Match):
    kind = GameKind.GOMOKU

    def __init__(self, config: SearchConfig, rng: random.Random) -> None:
        super().__init__(config, rng)
        self.game = GomokuGame()
        self.ai = GomokuMinimaxAI(config, rng)

    @property
    def current_player(self) -> Player:
        return self.game.current_player

    def apply_human(self, inp: SessionInput) -> MoveResult:
        if inp.kind != InputKind.MOVE or not isinstance(inp.move, Position):
            return MoveResult.fail(InvalidMove.NOT_SUPPORTED)
        return self.game.make_move(inp.move)

    def choose_ai_move(self) -> Position:
        return self.ai.get_best_move(self.game)

    def apply_ai(self, move: Position) -> MoveResult:
        return self.game.make_move(move)

    def is_over(self) -> bool:
        return self.game.is_game_over()

    def result(self, player: Player) -> Tuple[GameResult, str]:
        reason = "board_full" if self.game.is_draw else "five_in_row"
        return _result_for(self.game.winner, player), reason

    def cells(self) -> Tuple:
        return tuple(tuple(row) for row in self.game.board.rows())

    def board_text(self) -> str:
        return self.game.board.to_cli()

    def last_move_text(self) -> Optional[str]:
        return None if self.game.last_move is None else str(self.game.last_move)

    def check_invariants(self) -> None:
        # stones are write-once: every recorded move is still on the board
        board = self.game.board
        if board.moves != len(self.game.move_history):
            raise InvariantError(
                "Gomoku stone count mismatch",
                context={"stones": board.moves, "moves": len(self.game.move_history)},
            )
        for pos, player in self.game.move_history:
            if board.get(pos) != player:
                raise InvariantError("Gomoku stone changed", context={"position": pos})


class MorrisMatch(Match):
    kind = GameKind.MORRIS

    def __init__(
        self,
        config: SearchConfig,
        rng: random.Random,
        capture_selector: Optional[CaptureSelector] = None,
    ) -> None:
        super().__init__(config, rng)
        self.board = MorrisBoard()
        self.ai = MorrisMinimaxAI(config, rng)
        self.capture_selector = capture_selector

    @property
    def current_player(self) -> Player:
        return self.board.current_player

    def apply_human(self, inp: SessionInput) -> MoveResult:
        if inp.kind != InputKind.MOVE or not isinstance(inp.move, MorrisMove):
            return MoveResult.fail(InvalidMove.NOT_SUPPORTED)
        return self.board.apply(inp.move, self.capture_selector)

    def choose_ai_move(self) -> MorrisMove:
        return self.ai.get_best_move(self.board)

    def apply_ai(self, move: MorrisMove) -> MoveResult:
        return self.board.apply(move)

    def is_over(self) -> bool:
        return self.board.is_over()

    def result(self, player: Player) -> Tuple[GameResult, str]:
        reason = self.board.loss_reason.value if self.board.loss_reason else ""
        return _result_for(self.board.winner, player), reason

    def phase(self) -> Optional[str]:
        return self.board.phase.value

    def cells(self) -> Tuple:
        return self.board.cells

    def board_text(self) -> str:
        b = self.board
        return (
            f"{b.to_cli()}\n"
            f"  in hand: O {b.in_hand[Player.BLACK]} / X {b.in_hand[Player.WHITE]}"
            f"   on board: O {b.on_board[Player.BLACK]} / X {b.on_board[Player.WHITE]}"
        )

    def last_move_text(self) -> Optional[str]:
        return None if self.board.last_move is None else str(self.board.last_move)

    def check_invariants(self) -> None:
        self.board.check_invariants()


def new_match(
    kind: GameKind,
    config: SearchConfig,
    rng: random.Random,
    capture_selector: Optional[CaptureSelector] = None,
) -> Match:
    if kind == GameKind.GO:
        return GoMatch(config, rng)
    if kind == GameKind.GOMOKU:
        return GomokuMatch(config, rng)
    return MorrisMatch(config, rng, capture_selector)
