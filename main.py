from __future__ import annotations

import argparse
import logging

from duels.app.matches import InputKind, SessionInput
from duels.app.session import Session, SessionConfig
from duels.ai.morris_minimax import best_capture_selector
from duels.cli.commands import CommandProcessor, CommandType
from duels.cli.view import CliView, Message, MessageType
from duels.core.types import Difficulty, GameKind


def run_session(cfg: SessionConfig, *, clear: bool = True) -> None:
    session = Session(cfg)
    view = CliView(opp_name="CPU", clear=clear)
    cmd = CommandProcessor(cfg.game)
    view.set_info(f"{cfg.game.value.upper()} START  (/help for input)")
    view.render(session.snapshot())

    while not session.is_over:
        try:
            line = input()
        except EOFError:
            line = "/quit"

        parsed = cmd.parse(line)
        if parsed.command is not None:
            if parsed.command.type == CommandType.QUIT:
                view.set_message(Message(MessageType.QUIT, "Session abandoned."))
                view.render(session.snapshot())
                print()
                return
            view.set_info(cmd.help_text())
            session.handle(SessionInput.other())
            view.render(session.snapshot())
            continue

        if not parsed.ok:
            if parsed.error:
                view.set_error(parsed.error)
                session.handle(SessionInput.other())
                view.render(session.snapshot())
            continue

        inp = parsed.input
        result = session.handle(inp)
        if not result.success:
            view.set_error(result.error_message)
            view.render(session.snapshot())
            continue
        if inp.kind == InputKind.CANCEL:
            view.set_info("")
            view.render(session.snapshot())
            continue

        view.set_move(session.snapshot().last_move or "", is_you=True)
        if not session.is_over:
            view.render(session.snapshot())
            reply = session.run_ai_turn()
            view.set_move(reply or "no legal move", is_you=False)
        view.render(session.snapshot())

    print()
    print(f"Result: {session.outcome}")


def main():
    ap = argparse.ArgumentParser(description="Play Go, Gomoku or Nine Men's Morris against the computer.")
    ap.add_argument("game", choices=[g.value for g in GameKind])
    ap.add_argument(
        "--difficulty",
        type=Difficulty.parse,
        default=Difficulty.NOVICE,
        help="novice | apprentice | journeyman | master (or 1-4)",
    )
    ap.add_argument("--seed", type=int, default=None, help="Seed for reproducible engine play")
    ap.add_argument(
        "--auto-capture",
        action="store_true",
        help="Morris: let the engine pick captures you leave out",
    )
    ap.add_argument("--no-clear", action="store_true", help="Do not clear the screen between turns")
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    args = ap.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = SessionConfig(
        game=GameKind(args.game),
        difficulty=args.difficulty,
        seed=args.seed,
        capture_selector=best_capture_selector() if args.auto_capture else None,
    )
    run_session(cfg, clear=not args.no_clear)


if __name__ == "__main__":
    main()
