from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from duels.app.session import SessionState, Snapshot
from duels.core.types import GameResult, Player


# =========================
# Message types
# =========================

class MessageType(Enum):
    ERR = "ERR"
    INFO = "INFO"
    YOU_MOVE = "YOU MOVE"
    OPP_MOVE = "OPP MOVE"
    FORFEIT = "FORFEIT"
    QUIT = "QUIT"


@dataclass(frozen=True)
class Message:
    """
    A UI message shown between board and state.
    Examples:
      [ERR] Cell is already occupied.
      [OPP MOVE] E5
    """
    type: MessageType
    text: str = ""

    def render(self) -> str:
        if self.text:
            return f"[{self.type.value}] {self.text}"
        return f"[{self.type.value}]"


def clear_screen() -> None:
    os.system("cls" if os.name == "nt" else "clear")


# =========================
# View (board + message + state)
# =========================

class CliView:
    """
    Renders a session Snapshot: board, message, state line.
    It never touches the session itself.
    """

    def __init__(
        self,
        *,
        you_color: Player = Player.BLACK,
        opp_name: str = "CPU",
        prompt: str = "> ",
        clear: bool = True,
    ) -> None:
        self.you_color = you_color
        self.opp_color = you_color.opponent()
        self.opp_name = opp_name
        self.prompt = prompt
        self.clear = clear

        self._message: Optional[Message] = None

    # ---------- Message API ----------

    def set_message(self, msg: Optional[Message]) -> None:
        self._message = msg

    def set_error(self, text: str) -> None:
        self._message = Message(MessageType.ERR, text)

    def set_info(self, text: str = "") -> None:
        self._message = Message(MessageType.INFO, text) if text else None

    def set_move(self, text: str = "", is_you: bool = False) -> None:
        if text:
            t = MessageType.YOU_MOVE if is_you else MessageType.OPP_MOVE
            self._message = Message(t, text)
        else:
            self._message = None

    # ---------- Render ----------

    def render_text(self, snap: Snapshot) -> str:
        lines = [snap.board_text, ""]
        if snap.forfeit_pending:
            lines.append(Message(MessageType.FORFEIT, "Cancel again to forfeit.").render())
        elif self._message is not None:
            lines.append(self._message.render())
        else:
            lines.append("")
        lines.append(self.state_line(snap))
        return "\n".join(lines)

    def render(self, snap: Snapshot) -> None:
        if self.clear:
            clear_screen()
        print(self.render_text(snap))
        if snap.state == SessionState.AWAITING_HUMAN:
            print(self.prompt, end="", flush=True)

    def state_line(self, snap: Snapshot) -> str:
        parts = [self._turn_indicator(snap)]
        if snap.phase:
            parts.append(f"Phase: {snap.phase}")
        parts.append(f"You: {self.you_color.symbol()}")
        parts.append(f"Opponent: {self.opp_color.symbol()} ({self.opp_name}, {snap.difficulty.value})")
        return "   ".join(parts)

    def _turn_indicator(self, snap: Snapshot) -> str:
        if snap.outcome is not None:
            result = snap.outcome.result
            if result == GameResult.WIN:
                return "☆ YOU WON ☆"
            if result == GameResult.LOSS:
                return "♨ YOU LOST ♨"
            if result == GameResult.DRAW:
                return "DRAW"
            return "FORFEITED"
        if snap.state == SessionState.AI_COMPUTING:
            return ">>> OPP THINKING <<<"
        return ">>> YOUR TURN <<<"
