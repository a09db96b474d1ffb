import dataclasses

import pytest

from duels.ai.config import DIFFICULTY_TABLE, SearchConfig, search_config
from duels.core.types import Difficulty, GameKind


@pytest.mark.parametrize(
    "difficulty, sims, gomoku_depth, morris_depth, morris_random",
    [
        (Difficulty.NOVICE, 500, 2, 2, 0.5),
        (Difficulty.APPRENTICE, 2_000, 3, 3, 0.0),
        (Difficulty.JOURNEYMAN, 8_000, 4, 4, 0.0),
        (Difficulty.MASTER, 20_000, 5, 5, 0.0),
    ],
)
def test_difficulty_table(difficulty, sims, gomoku_depth, morris_depth, morris_random):
    assert search_config(GameKind.GO, difficulty) == SearchConfig(simulations=sims)
    assert search_config(GameKind.GOMOKU, difficulty) == SearchConfig(depth=gomoku_depth)
    assert search_config(GameKind.MORRIS, difficulty) == SearchConfig(
        depth=morris_depth, random_move_probability=morris_random,
    )


def test_table_covers_every_tier():
    assert set(DIFFICULTY_TABLE) == set(Difficulty)


def test_search_config_is_frozen():
    config = search_config(GameKind.GOMOKU, Difficulty.MASTER)

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.depth = 9


@pytest.mark.parametrize(
    "text, expected",
    [
        ("novice", Difficulty.NOVICE),
        (" Master ", Difficulty.MASTER),
        ("2", Difficulty.APPRENTICE),
        ("4", Difficulty.MASTER),
    ],
)
def test_difficulty_parse(text, expected):
    assert Difficulty.parse(text) == expected


@pytest.mark.parametrize("text", ["0", "5", "grandmaster"])
def test_difficulty_parse_rejects_unknown(text):
    with pytest.raises(ValueError):
        Difficulty.parse(text)
