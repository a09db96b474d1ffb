"""
Error hierarchy for the duels engines.

Rule violations by a player are NOT exceptions: they come back as
MoveResult.fail(InvalidMove...) and leave the board untouched. The classes
here cover the remaining cases:

  - NoLegalMovesError: a search was asked to move for a side with no moves
  - InvariantError:    internal bookkeeping broke (programming error)
  - SessionError:      the session driver was used out of order
"""

from typing import Any, Dict, Optional

__all__ = [
    "DuelError",
    "InvariantError",
    "NoLegalMovesError",
    "SessionError",
]


class DuelError(Exception):
    """Base exception for all duels errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra key/value details for logs
    """
    code: str = "DUEL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"


class InvariantError(DuelError):
    """Board bookkeeping is inconsistent. Never recovered from."""
    code: str = "INVARIANT"


class NoLegalMovesError(DuelError):
    """The side to move has no legal move (Morris mobility loss)."""
    code: str = "NO_LEGAL_MOVES"


class SessionError(DuelError):
    """Session driver called in a state that does not allow the call."""
    code: str = "SESSION"
