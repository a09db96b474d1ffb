from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from duels.app.matches import InputKind, Match, SessionInput, new_match
from duels.core.morris_board import CaptureSelector
from duels.core.move import InvalidMove, MoveResult
from duels.core.types import Difficulty, GameKind, GameResult, Outcome, Player
from duels.errors import InvariantError, NoLegalMovesError, SessionError
from duels.ai.config import SearchConfig, search_config

logger = logging.getLogger(__name__)


@dataclass
class SessionConfig:
    game: GameKind
    difficulty: Difficulty = Difficulty.NOVICE
    seed: Optional[int] = None
    # Morris only: picks captures for human moves that leave them out
    capture_selector: Optional[CaptureSelector] = None


class SessionState(Enum):
    AWAITING_HUMAN = "awaiting_human"
    AI_COMPUTING = "ai_computing"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of a session, produced after every state change."""
    game: GameKind
    difficulty: Difficulty
    cells: Tuple
    current_player: Player
    phase: Optional[str]
    forfeit_pending: bool
    state: SessionState
    last_move: Optional[str]
    outcome: Optional[Outcome]
    board_text: str


class Session:
    """
    Human vs engine session.

    Key rules:
      - The human plays BLACK and moves first; the engine plays WHITE.
      - handle() takes one human input while AWAITING_HUMAN. A legal move on
        a live board moves the session to AI_COMPUTING; run_ai_turn() then
        plays the engine's reply and hands the turn back.
      - Illegal moves are returned as MoveResult.fail and change nothing.
      - Cancel once sets forfeit_pending, cancel again forfeits. Any other
        input clears the flag first.
    """

    human: Player = Player.BLACK
    engine: Player = Player.WHITE

    def __init__(
        self,
        config: SessionConfig,
        on_change: Optional[Callable[[Snapshot], None]] = None,
    ) -> None:
        self.cfg = config
        self.on_change = on_change
        self.rng = random.Random(config.seed)
        self.search: SearchConfig = search_config(config.game, config.difficulty)
        self.match: Match = new_match(config.game, self.search, self.rng, config.capture_selector)

        self.state = SessionState.AWAITING_HUMAN
        self.forfeit_pending = False
        self.outcome: Optional[Outcome] = None

        logger.info(
            "session start: game=%s difficulty=%s seed=%s search=%s",
            config.game.value, config.difficulty.value, config.seed, self.search,
        )
        self._notify()

    # ---------- Public API ----------

    @property
    def is_over(self) -> bool:
        return self.state == SessionState.TERMINAL

    def snapshot(self) -> Snapshot:
        return Snapshot(
            game=self.cfg.game,
            difficulty=self.cfg.difficulty,
            cells=self.match.cells(),
            current_player=self.match.current_player,
            phase=self.match.phase(),
            forfeit_pending=self.forfeit_pending,
            state=self.state,
            last_move=self.match.last_move_text(),
            outcome=self.outcome,
            board_text=self.match.board_text(),
        )

    def handle(self, inp: SessionInput) -> MoveResult:
        """
        Process one human input.

        Returns:
            MoveResult of the attempted move (ok for cancel/other inputs).

        Raises:
            SessionError if called while the engine is to move.
        """
        if self.state == SessionState.TERMINAL:
            return MoveResult.fail(InvalidMove.GAME_OVER)
        if self.state != SessionState.AWAITING_HUMAN:
            raise SessionError("human input while the engine is to move", context={"state": self.state.value})

        if inp.kind == InputKind.CANCEL:
            if self.forfeit_pending:
                self._finish(GameResult.FORFEIT, "forfeit")
            else:
                self.forfeit_pending = True
                logger.info("forfeit requested; cancel again to confirm")
                self._notify()
            return MoveResult.ok()

        self.forfeit_pending = False
        if inp.kind == InputKind.OTHER:
            self._notify()
            return MoveResult.ok()

        result = self.match.apply_human(inp)
        if not result.success:
            logger.warning("rejected human input %s: %s", inp, result.error_message)
            self._notify()
            return result

        self.match.check_invariants()
        logger.debug("human played %s", self.match.last_move_text())
        if self.match.is_over():
            self._finish_from_board()
        else:
            self.state = SessionState.AI_COMPUTING
            self._notify()
        return result

    def run_ai_turn(self) -> Optional[str]:
        """
        Let the engine move.

        Returns:
            The engine's move as text, or None if it had no legal move.

        Raises:
            SessionError if it is not the engine's turn.
        """
        if self.state != SessionState.AI_COMPUTING:
            raise SessionError("engine turn requested out of order", context={"state": self.state.value})

        try:
            move = self.match.choose_ai_move()
        except NoLegalMovesError as e:
            logger.info("engine has no legal move: %s", e)
            self._finish(GameResult.WIN, "no_legal_moves")
            return None

        result = self.match.apply_ai(move)
        if not result.success:
            raise InvariantError(
                "engine produced an illegal move",
                context={"move": move, "reason": result.error_message},
            )
        self.match.check_invariants()
        logger.debug("engine played %s", move)

        if self.match.is_over():
            self._finish_from_board()
        else:
            self.state = SessionState.AWAITING_HUMAN
            self._notify()
        return str(move)

    def play(self, inp: SessionInput) -> MoveResult:
        """handle() followed by the engine's reply when one is due."""
        result = self.handle(inp)
        if self.state == SessionState.AI_COMPUTING:
            self.run_ai_turn()
        return result

    # ---------- Helpers ----------

    def _finish_from_board(self) -> None:
        result, reason = self.match.result(self.human)
        self._finish(result, reason)

    def _finish(self, result: GameResult, reason: str) -> None:
        self.outcome = Outcome(self.cfg.game, self.cfg.difficulty, result, reason)
        self.state = SessionState.TERMINAL
        self.forfeit_pending = False
        logger.info("session end: %s", self.outcome)
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.snapshot())
