import pytest

from duels.core.morris_board import (
    ADJACENCY,
    MILLS_BY_NODE,
    LossReason,
    MorrisBoard,
    MorrisMove,
    MorrisMoveKind,
    MorrisPhase,
)
from duels.core.move import InvalidMove
from duels.core.types import Player


def _counts(board: MorrisBoard):
    return (board.cells, dict(board.in_hand), dict(board.on_board), dict(board.captured))


# ---------- Topology ----------

def test_every_node_sits_on_two_mills():
    assert all(len(mills) == 2 for mills in MILLS_BY_NODE)


def test_adjacency_is_symmetric_with_32_edges():
    assert sum(len(adj) for adj in ADJACENCY) == 64
    for node, adj in enumerate(ADJACENCY):
        for other in adj:
            assert node in ADJACENCY[other]


# ---------- Placing ----------

def test_placing_moves_a_piece_from_hand_to_board(morris_board):
    result = morris_board.apply(MorrisMove.place(0))

    assert result.success
    assert morris_board.get(0) == Player.BLACK
    assert morris_board.in_hand[Player.BLACK] == 8
    assert morris_board.on_board[Player.BLACK] == 1
    assert morris_board.current_player == Player.WHITE


def test_placing_phase_rejects_slides_and_occupied_nodes(morris_board):
    morris_board.apply(MorrisMove.place(0))

    assert morris_board.apply(MorrisMove.place(0)).reason == InvalidMove.OCCUPIED
    assert morris_board.apply(MorrisMove.slide(0, 1)).reason == InvalidMove.WRONG_PHASE
    assert morris_board.apply(MorrisMove.place(24)).reason == InvalidMove.OUT_OF_BOUNDS
    assert morris_board.current_player == Player.WHITE


def test_phase_becomes_moving_after_all_pieces_are_placed(morris_board):
    for _ in range(18):
        move = next(m for m in morris_board.legal_moves() if not m.captures)
        morris_board.push(move)

    assert morris_board.in_hand == {Player.BLACK: 0, Player.WHITE: 0}
    assert morris_board.on_board == {Player.BLACK: 9, Player.WHITE: 9}
    assert morris_board.phase_for(Player.BLACK) == MorrisPhase.MOVING
    assert morris_board.phase_for(Player.WHITE) == MorrisPhase.MOVING
    morris_board.check_invariants()


# ---------- Captures ----------

def test_mill_needs_a_capture_choice():
    board = MorrisBoard.from_layout([0, 1], [5, 8], black_in_hand=7, white_in_hand=7)
    before = _counts(board)

    assert board.apply(MorrisMove.place(2)).reason == InvalidMove.INVALID_CAPTURE
    assert _counts(board) == before

    result = board.apply(MorrisMove.place(2, captures=(5,)))
    assert result.success
    assert board.get(5) == Player.EMPTY
    assert board.on_board[Player.WHITE] == 1
    assert board.captured[Player.WHITE] == 1
    assert str(board.last_move) == "2x5"
    board.check_invariants()


def test_pieces_in_a_mill_are_protected():
    board = MorrisBoard.from_layout([0, 1], [3, 4, 5, 8], black_in_hand=7, white_in_hand=5)

    assert board.apply(MorrisMove.place(2, captures=(4,))).reason == InvalidMove.INVALID_CAPTURE
    assert board.apply(MorrisMove.place(2, captures=(8,))).success


def test_mill_pieces_may_go_when_nothing_else_is_left():
    board = MorrisBoard.from_layout([0, 1], [3, 4, 5], black_in_hand=7, white_in_hand=6)

    assert board.capturable(Player.WHITE) == [3, 4, 5]
    assert board.apply(MorrisMove.place(2, captures=(4,))).success


def _double_mill_board() -> MorrisBoard:
    # placing at 0 closes 0-1-2 and 0-9-21 at once
    return MorrisBoard.from_layout([1, 2, 9, 21], [5, 8, 13], black_in_hand=5, white_in_hand=6)


def test_double_mill_takes_exactly_two_pieces():
    board = _double_mill_board()

    assert board.apply(MorrisMove.place(0, captures=(5,))).reason == InvalidMove.INVALID_CAPTURE
    assert board.apply(MorrisMove.place(0, captures=(5, 8, 13))).reason == InvalidMove.INVALID_CAPTURE
    assert board.apply(MorrisMove.place(0, captures=(5, 8))).success
    assert board.pieces(Player.WHITE) == [13]


def test_selector_is_asked_once_per_mill():
    board = _double_mill_board()
    calls = []

    def selector(preview, eligible):
        calls.append(list(eligible))
        return eligible[0]

    assert board.apply(MorrisMove.place(0), selector).success
    assert calls == [[5, 8, 13], [8, 13]]
    assert board.last_move.captures == (5, 8)


def test_legal_moves_expand_every_capture_set():
    board = _double_mill_board()

    at_zero = [m for m in board.legal_moves() if m.to == 0]

    assert len(at_zero) == 3
    assert all(len(m.captures) == 2 for m in at_zero)
    assert {frozenset(m.captures) for m in at_zero} == {
        frozenset({5, 8}), frozenset({5, 13}), frozenset({8, 13}),
    }


def test_free_pieces_are_exhausted_before_mill_pieces():
    board = MorrisBoard.from_layout([1, 2, 9, 21], [5, 12, 13, 14], black_in_hand=5, white_in_hand=5)

    assert board.apply(MorrisMove.place(0, captures=(13, 5))).reason == InvalidMove.INVALID_CAPTURE
    assert board.apply(MorrisMove.place(0, captures=(5, 13))).success
    assert board.pieces(Player.WHITE) == [12, 14]


# ---------- Moving / flying ----------

def test_three_pieces_may_fly_anywhere():
    board = MorrisBoard.from_layout([0, 4, 20], [6, 15, 17, 23])
    assert board.phase == MorrisPhase.FLYING
    assert board.can_fly(Player.BLACK)
    assert not board.can_fly(Player.WHITE)

    result = board.apply(MorrisMove.slide(0, 16))

    assert result.success
    assert board.get(16) == Player.BLACK
    assert board.last_move.kind == MorrisMoveKind.FLY


def test_four_pieces_must_slide_to_a_neighbour():
    board = MorrisBoard.from_layout([0, 4, 10, 20], [6, 15, 17, 23])
    assert board.phase == MorrisPhase.MOVING
    assert not board.can_fly(Player.BLACK)

    assert board.apply(MorrisMove.slide(0, 16)).reason == InvalidMove.NOT_ADJACENT
    assert board.apply(MorrisMove.fly(0, 16)).reason == InvalidMove.WRONG_PHASE
    assert board.apply(MorrisMove.slide(6, 7)).reason == InvalidMove.NOT_OWN_PIECE
    assert board.apply(MorrisMove.slide(0, 1)).success


def test_sliding_into_a_mill_offers_only_free_pieces():
    board = MorrisBoard.from_layout(
        [0, 1, 2, 16, 18, 20], [5, 8, 21, 22, 23], to_move=Player.WHITE,
    )
    assert board.apply(MorrisMove.slide(5, 4)).success

    offered = []

    def selector(preview, eligible):
        offered.append(list(eligible))
        return eligible[0]

    assert board.apply(MorrisMove.slide(16, 19), selector).success
    assert offered == [[4, 8]]
    assert board.on_board[Player.WHITE] == 4
    assert board.winner is None


# ---------- Terminal ----------

def test_reducing_opponent_to_two_pieces_wins():
    board = MorrisBoard.from_layout([1, 2, 9, 13], [6, 15, 23])

    result = board.apply(MorrisMove.slide(9, 0, captures=(6,)))

    assert result.success
    assert result.is_winning_move
    assert board.winner == Player.BLACK
    assert board.loss_reason == LossReason.MILL_REDUCTION
    assert board.apply(MorrisMove.slide(15, 16)).reason == InvalidMove.GAME_OVER


def test_blocking_every_piece_wins():
    board = MorrisBoard.from_layout([1, 9, 14, 19], [0, 2, 21, 23])

    assert board.apply(MorrisMove.slide(19, 22)).success

    assert board.winner == Player.BLACK
    assert board.loss_reason == LossReason.NO_LEGAL_MOVES
    assert board.legal_moves() == []


# ---------- Make / unmake ----------

@pytest.mark.parametrize(
    "board",
    [
        _double_mill_board(),
        MorrisBoard.from_layout([0, 4, 20], [6, 15, 17, 23]),
        # sliding 22-23 closes 2-14-23
        MorrisBoard.from_layout([0, 1, 16, 18], [2, 5, 14, 22], to_move=Player.WHITE),
    ],
)
def test_listing_moves_leaves_the_position_untouched(board):
    before = _counts(board) + (board.current_player, board.phase, board.last_move)

    moves = board.legal_moves()

    assert moves
    assert _counts(board) + (board.current_player, board.phase, board.last_move) == before
    board.check_invariants()
    assert board.legal_moves() == moves


def test_push_pop_restores_everything():
    board = _double_mill_board()
    before = _counts(board) + (board.current_player, board.winner, board.last_move)

    for move in board.legal_moves():
        board.push(move)
        board.check_invariants()
        board.pop()
        assert _counts(board) + (board.current_player, board.winner, board.last_move) == before


def test_from_layout_rejects_duplicates_and_bad_counts():
    with pytest.raises(ValueError):
        MorrisBoard.from_layout([0, 0], [])
    with pytest.raises(ValueError):
        MorrisBoard.from_layout(list(range(10)), [])
