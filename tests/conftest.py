"""
Shared pytest fixtures for the duels tests.

Board fixtures are function-scoped so every test starts from a fresh
position. Randomness always comes from a seeded random.Random.
"""

import random
from typing import Iterable, Tuple

import pytest

from duels.core.go_board import GoBoard
from duels.core.gomoku_board import GomokuGame
from duels.core.morris_board import MorrisBoard
from duels.core.position import Position
from duels.core.types import Player


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def go_board() -> GoBoard:
    return GoBoard()


@pytest.fixture
def gomoku_game() -> GomokuGame:
    return GomokuGame()


@pytest.fixture
def morris_board() -> MorrisBoard:
    return MorrisBoard()


def setup_go(
    board: GoBoard,
    black: Iterable[Tuple[int, int]] = (),
    white: Iterable[Tuple[int, int]] = (),
    to_move: Player = Player.BLACK,
) -> GoBoard:
    """Put stones on a Go board by (x, y) and set the side to move."""
    for x, y in black:
        board.set_stone(Position(x, y), Player.BLACK)
    for x, y in white:
        board.set_stone(Position(x, y), Player.WHITE)
    board.current_player = to_move
    return board


def setup_gomoku(
    game: GomokuGame,
    black: Iterable[Tuple[int, int]] = (),
    white: Iterable[Tuple[int, int]] = (),
    to_move: Player = Player.BLACK,
) -> GomokuGame:
    """Put stones on a Gomoku board by (x, y) and set the side to move."""
    for x, y in black:
        game.board.place(Position(x, y), Player.BLACK)
        game.move_history.append((Position(x, y), Player.BLACK))
    for x, y in white:
        game.board.place(Position(x, y), Player.WHITE)
        game.move_history.append((Position(x, y), Player.WHITE))
    game.current_player = to_move
    return game
