import pytest

from duels.core.gomoku_board import GomokuBoard, GomokuGame
from duels.core.move import InvalidMove
from duels.core.position import Position
from duels.core.types import Player

from conftest import setup_gomoku

P = Position


@pytest.mark.parametrize(
    "stones, last",
    [
        ([(1, 1), (2, 1), (3, 1), (4, 1)], (5, 1)),            # top edge
        ([(15, 11), (15, 12), (15, 13), (15, 14)], (15, 15)),  # right edge into corner
        ([(1, 1), (2, 2), (3, 3), (4, 4)], (5, 5)),            # diagonal from corner
        ([(15, 1), (14, 2), (13, 3), (12, 4)], (11, 5)),       # anti-diagonal from corner
        ([(8, 8), (8, 9), (8, 11), (8, 12)], (8, 10)),         # gap filled in the middle
    ],
)
def test_five_in_a_row_wins_in_every_direction(gomoku_game, stones, last):
    setup_gomoku(gomoku_game, black=stones, to_move=Player.BLACK)

    assert gomoku_game.check_move(P(*last)).is_winning_move
    result = gomoku_game.make_move(P(*last))

    assert result.success
    assert result.is_winning_move
    assert gomoku_game.winner == Player.BLACK
    assert gomoku_game.is_game_over()


def test_four_is_not_a_win(gomoku_game):
    setup_gomoku(gomoku_game, white=[(1, 7), (2, 7), (3, 7)], to_move=Player.WHITE)

    result = gomoku_game.make_move(P(4, 7))

    assert result.success
    assert not result.is_winning_move
    assert gomoku_game.winner is None
    assert gomoku_game.current_player == Player.BLACK


def test_overline_also_wins(gomoku_game):
    setup_gomoku(gomoku_game, black=[(3, 3), (4, 3), (5, 3), (7, 3), (8, 3)])

    assert gomoku_game.make_move(P(6, 3)).is_winning_move


def test_rejected_moves_do_not_change_state(gomoku_game):
    gomoku_game.make_move(P(8, 8))
    before = gomoku_game.board.rows()

    occupied = gomoku_game.make_move(P(8, 8))
    outside = gomoku_game.make_move(P(16, 1))

    assert occupied.reason == InvalidMove.OCCUPIED
    assert outside.reason == InvalidMove.OUT_OF_BOUNDS
    assert gomoku_game.board.rows() == before
    assert gomoku_game.current_player == Player.WHITE
    assert len(gomoku_game.move_history) == 1


def test_no_moves_after_a_win(gomoku_game):
    setup_gomoku(gomoku_game, black=[(1, 1), (2, 1), (3, 1), (4, 1)])
    gomoku_game.make_move(P(5, 1))

    assert gomoku_game.make_move(P(9, 9)).reason == InvalidMove.GAME_OVER
    assert gomoku_game.get_valid_moves() == []


def test_full_board_without_five_is_a_draw():
    game = GomokuGame(board_size=2)
    for pos in (P(1, 1), P(2, 1), P(1, 2), P(2, 2)):
        assert game.make_move(pos).success

    assert game.is_draw
    assert game.winner is None
    assert game.is_game_over()


def test_candidates_on_empty_board_is_center():
    board = GomokuBoard()
    assert board.get_adjacent_positions() == [P(8, 8)]


def test_candidates_are_within_distance_two():
    board = GomokuBoard()
    board.place(P(8, 8), Player.BLACK)
    near = board.get_adjacent_positions(distance=2)

    assert len(near) == 24
    assert all(max(abs(p.x - 8), abs(p.y - 8)) <= 2 for p in near)
    assert P(8, 8) not in near


def test_candidates_clip_at_the_corner():
    board = GomokuBoard()
    board.place(P(1, 1), Player.WHITE)

    assert len(board.get_adjacent_positions(distance=2)) == 8


def test_lines_cover_rows_columns_and_long_diagonals():
    board = GomokuBoard()
    lines = board.lines()

    assert len(lines) == 15 + 15 + 2 * 21
    assert min(len(line) for line in lines) == 5


def test_place_and_unplace_keep_the_count(gomoku_game):
    board = gomoku_game.board.copy()
    board.place(P(3, 3), Player.BLACK)
    assert board.moves == 1
    board.unplace(P(3, 3))
    assert board.moves == 0
    with pytest.raises(ValueError):
        board.unplace(P(3, 3))
    # the game's own board was never touched
    assert gomoku_game.board.is_empty_board()
