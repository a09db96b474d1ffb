from duels.app.matches import SessionInput
from duels.app.session import Session, SessionConfig
from duels.cli.view import CliView, Message, MessageType
from duels.core.types import GameKind


def _view():
    return CliView(clear=False)


def test_message_render():
    assert Message(MessageType.ERR, "Cell is already occupied.").render() == "[ERR] Cell is already occupied."
    assert Message(MessageType.QUIT).render() == "[QUIT]"


def test_state_line_shows_turn_phase_and_difficulty():
    session = Session(SessionConfig(GameKind.MORRIS, seed=1))

    line = _view().state_line(session.snapshot())

    assert line.startswith(">>> YOUR TURN <<<")
    assert "Phase: placing" in line
    assert "novice" in line


def test_pending_forfeit_replaces_the_message():
    session = Session(SessionConfig(GameKind.GOMOKU, seed=1))
    view = _view()
    view.set_error("boom")

    session.handle(SessionInput.cancel())
    text = view.render_text(session.snapshot())

    assert "[FORFEIT] Cancel again to forfeit." in text
    assert "boom" not in text


def test_finished_session_shows_the_result():
    session = Session(SessionConfig(GameKind.GO, seed=1))
    session.handle(SessionInput.resign())

    assert "YOU LOST" in _view().render_text(session.snapshot())
