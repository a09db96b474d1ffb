from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from duels.app.matches import SessionInput
from duels.core.morris_board import NODE_COUNT, MorrisMove
from duels.core.position import Position
from duels.core.types import GameKind

_MORRIS_RE = re.compile(r"^(\d+)(?:-(\d+))?((?:x\d+)*)$")

CANCEL_WORDS = ("/forfeit", "esc", "/esc")


class CommandType(Enum):
    QUIT = "quit"
    HELP = "help"


@dataclass(frozen=True)
class Command:
    """Parsed host command from user input."""
    type: CommandType
    raw: str


@dataclass(frozen=True)
class ParseResult:
    """
    Result of parsing one line input.
    Exactly one of (command, input) should be set on success.
    """
    command: Optional[Command] = None
    input: Optional[SessionInput] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.error == "" and (self.command is not None or self.input is not None)


class CommandProcessor:
    """
    Parses a user input line into:
      - Command (/help, /quit) handled by the host
      - SessionInput: a move, pass, resign or cancel for the session

    This class does NOT execute anything. The host decides what to do.
    """

    def __init__(self, game: GameKind, board_size: int = 0) -> None:
        self.game = game
        if board_size <= 0:
            board_size = {GameKind.GO: 9, GameKind.GOMOKU: 15}.get(game, 0)
        self.board_size = board_size

    def help_text(self) -> str:
        if self.game == GameKind.MORRIS:
            moves = (
                f"Input: node '5' to place, '3-4' to slide/fly (nodes 0-{NODE_COUNT - 1}); "
                "add 'x7' per mill to capture node 7."
            )
        else:
            col_end = chr(ord("A") + self.board_size - 1)
            moves = f"Input: 'x y' (e.g. 5 5) or 'E5' (A-{col_end} + 1-{self.board_size})."
            if self.game == GameKind.GO:
                moves += " Also: pass, resign."
        return f"{moves}\nCommands: /help, /quit, /forfeit (twice to confirm)"

    # ---------- Public parse API ----------

    def parse(self, text: str) -> ParseResult:
        raw = (text or "").strip()
        if not raw:
            return ParseResult(error="")  # no-op line

        low = raw.lower()
        if low in CANCEL_WORDS:
            return ParseResult(input=SessionInput.cancel())
        if low.startswith("/"):
            if low == "/quit":
                return ParseResult(command=Command(CommandType.QUIT, raw))
            if low == "/help":
                return ParseResult(command=Command(CommandType.HELP, raw))
            return ParseResult(error=f"Unknown command: {raw}")

        if self.game == GameKind.GO:
            if low == "pass":
                return ParseResult(input=SessionInput.pass_turn())
            if low == "resign":
                return ParseResult(input=SessionInput.resign())

        if self.game == GameKind.MORRIS:
            return self._parse_morris(low)
        return self._parse_position(raw)

    # ---------- Helpers ----------

    def _parse_position(self, raw: str) -> ParseResult:
        # move: "x y"
        parts = raw.split()
        if len(parts) == 2 and parts[0].isdigit() and parts[1].isdigit():
            x, y = int(parts[0]), int(parts[1])
            if not self._is_in_bounds(x, y):
                return ParseResult(error=self._oob_msg(x, y))
            return ParseResult(input=SessionInput.play(Position(x, y)))

        # move: "H8"
        if len(raw) >= 2 and raw[0].isalpha():
            rest = raw[1:].strip()
            if rest.isdigit():
                x = ord(raw[0].upper()) - ord("A") + 1
                y = int(rest)
                if not self._is_in_bounds(x, y):
                    return ParseResult(error=self._oob_msg(x, y))
                return ParseResult(input=SessionInput.play(Position(x, y)))

        return ParseResult(error="Invalid input. Use 'x y' or 'H8' or /help")

    def _parse_morris(self, low: str) -> ParseResult:
        m = _MORRIS_RE.match(low.replace(" ", ""))
        if m is None:
            return ParseResult(error="Invalid input. Use '5', '3-4' or '3-4x7', or /help")
        first = int(m.group(1))
        second = int(m.group(2)) if m.group(2) is not None else None
        captures = tuple(int(c) for c in m.group(3).split("x") if c)

        nodes = [first] + ([second] if second is not None else []) + list(captures)
        bad = [n for n in nodes if not 0 <= n < NODE_COUNT]
        if bad:
            return ParseResult(error=f"Unknown node: {bad[0]} (must be 0..{NODE_COUNT - 1})")

        if second is None:
            move = MorrisMove.place(first, captures)
        else:
            # the board turns a slide into a flight when the mover may fly
            move = MorrisMove.slide(first, second, captures)
        return ParseResult(input=SessionInput.play(move))

    def _is_in_bounds(self, x: int, y: int) -> bool:
        return 1 <= x <= self.board_size and 1 <= y <= self.board_size

    def _oob_msg(self, x: int, y: int) -> str:
        return f"Out of bounds: {x}, {y} (must be 1..{self.board_size})"
