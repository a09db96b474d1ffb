import pytest

from duels.app.matches import SessionInput
from duels.app.session import Session, SessionConfig, SessionState
from duels.core.morris_board import MorrisBoard, MorrisMove
from duels.core.move import InvalidMove
from duels.core.position import Position
from duels.core.types import Difficulty, GameKind, GameResult, Player
from duels.errors import NoLegalMovesError, SessionError

from conftest import setup_gomoku

P = Position


def _session(game: GameKind, seed: int = 7, **kwargs):
    snaps = []
    session = Session(SessionConfig(game, seed=seed, **kwargs), on_change=snaps.append)
    return session, snaps


# ---------- Forfeit ----------

def test_double_cancel_forfeits_without_engine_turn():
    session, snaps = _session(GameKind.GOMOKU)

    session.handle(SessionInput.cancel())
    assert session.forfeit_pending
    assert session.state == SessionState.AWAITING_HUMAN

    session.handle(SessionInput.cancel())

    assert session.state == SessionState.TERMINAL
    assert session.outcome.result == GameResult.FORFEIT
    assert session.outcome.reason == "forfeit"
    assert session.outcome.game == GameKind.GOMOKU
    assert snaps[-1].outcome == session.outcome
    assert all(s.state != SessionState.AI_COMPUTING for s in snaps)


def test_other_input_between_cancels_resets_the_request():
    session, _ = _session(GameKind.MORRIS)

    session.handle(SessionInput.cancel())
    session.handle(SessionInput.other())
    assert not session.forfeit_pending

    session.handle(SessionInput.cancel())
    assert session.forfeit_pending
    assert not session.is_over


def test_a_move_clears_a_pending_forfeit():
    session, _ = _session(GameKind.GOMOKU)

    session.handle(SessionInput.cancel())
    assert session.handle(SessionInput.play(P(8, 8))).success

    assert not session.forfeit_pending
    assert session.state == SessionState.AI_COMPUTING


# ---------- Turn flow ----------

def test_human_move_then_engine_reply():
    session, snaps = _session(GameKind.GOMOKU)

    session.handle(SessionInput.play(P(8, 8)))
    assert session.state == SessionState.AI_COMPUTING
    assert snaps[-1].current_player == Player.WHITE

    reply = session.run_ai_turn()

    assert reply is not None
    assert session.state == SessionState.AWAITING_HUMAN
    assert snaps[-1].current_player == Player.BLACK
    assert snaps[-1].last_move == reply
    assert session.match.game.board.moves == 2


def test_illegal_move_changes_nothing():
    session, snaps = _session(GameKind.GOMOKU)
    session.play(SessionInput.play(P(8, 8)))
    before = session.snapshot()

    result = session.handle(SessionInput.play(P(8, 8)))

    assert result.reason == InvalidMove.OCCUPIED
    assert session.snapshot() == before
    assert snaps[-1] == before


def test_calls_out_of_order_raise():
    session, _ = _session(GameKind.GOMOKU)

    with pytest.raises(SessionError):
        session.run_ai_turn()

    session.handle(SessionInput.play(P(8, 8)))
    with pytest.raises(SessionError):
        session.handle(SessionInput.play(P(9, 9)))


def test_terminal_session_rejects_input():
    session, _ = _session(GameKind.GO)
    session.handle(SessionInput.resign())

    assert session.handle(SessionInput.play(P(5, 5))).reason == InvalidMove.GAME_OVER
    with pytest.raises(SessionError):
        session.run_ai_turn()


# ---------- Outcomes ----------

def test_go_resignation_is_a_loss():
    session, _ = _session(GameKind.GO)

    session.handle(SessionInput.resign())

    assert session.outcome.result == GameResult.LOSS
    assert session.outcome.reason == "resignation"


def test_pass_is_not_a_gomoku_input():
    session, _ = _session(GameKind.GOMOKU)

    result = session.handle(SessionInput.pass_turn())

    assert result.reason == InvalidMove.NOT_SUPPORTED
    assert session.state == SessionState.AWAITING_HUMAN


def test_gomoku_five_wins_the_session():
    session, _ = _session(GameKind.GOMOKU)
    setup_gomoku(
        session.match.game,
        black=[(1, 1), (2, 1), (3, 1), (4, 1)],
        white=[(1, 9), (2, 9), (3, 9), (5, 9)],
    )

    session.handle(SessionInput.play(P(5, 1)))

    assert session.is_over
    assert session.outcome.result == GameResult.WIN
    assert session.outcome.reason == "five_in_row"


def test_engine_completing_five_is_a_loss():
    session, _ = _session(GameKind.GOMOKU)
    setup_gomoku(
        session.match.game,
        black=[(1, 1), (3, 1), (5, 1), (7, 1)],
        white=[(1, 9), (2, 9), (3, 9), (4, 9)],
    )

    session.play(SessionInput.play(P(12, 12)))

    assert session.outcome.result == GameResult.LOSS
    assert session.outcome.reason == "five_in_row"
    assert session.match.game.last_move == P(5, 9)


def test_blocking_the_engine_in_morris_wins():
    session, _ = _session(GameKind.MORRIS)
    session.match.board = MorrisBoard.from_layout([1, 9, 14, 19], [0, 2, 21, 23])

    session.handle(SessionInput.play(MorrisMove.slide(19, 22)))

    assert session.outcome.result == GameResult.WIN
    assert session.outcome.reason == "no_legal_moves"


def test_engine_without_moves_ends_the_session(monkeypatch):
    session, _ = _session(GameKind.GOMOKU)
    session.handle(SessionInput.play(P(8, 8)))

    def stuck():
        raise NoLegalMovesError("stuck")

    monkeypatch.setattr(session.match, "choose_ai_move", stuck)

    assert session.run_ai_turn() is None
    assert session.outcome.result == GameResult.WIN
    assert session.outcome.reason == "no_legal_moves"


def test_morris_snapshot_reports_phase():
    session, snaps = _session(GameKind.MORRIS)

    assert snaps[0].phase == "placing"
    assert snaps[0].difficulty == Difficulty.NOVICE
    assert len(snaps[0].cells) == 24


def test_same_seed_replays_the_same_game():
    def replay():
        session, _ = _session(GameKind.MORRIS, seed=99)
        replies = []
        for node in (0, 3, 6):
            if session.match.board.get(node) != Player.EMPTY:
                break
            session.handle(SessionInput.play(MorrisMove.place(node)))
            replies.append(session.run_ai_turn())
        return replies

    assert replay() == replay()
