from dataclasses import dataclass
from typing import Dict

from duels.core.types import Difficulty, GameKind


# Gomoku pattern weights (per player, subtracted for the opponent)
SCORE_FIVE = 100_000
SCORE_OPEN_FOUR = 10_000
SCORE_CLOSED_FOUR = 1_000
SCORE_OPEN_THREE = 500
SCORE_CLOSED_THREE = 100
SCORE_OPEN_TWO = 50
SCORE_CENTER_STEP = 1
# Gomoku move generation
SEARCH_DISTANCE = 2
MAX_CANDIDATES = 15

# Morris evaluation weights
MORRIS_WIN = 10_000
WEIGHT_PIECE = 100
WEIGHT_MILL = 50
WEIGHT_POTENTIAL_MILL = 25
WEIGHT_MOBILITY = 5
WEIGHT_JUNCTION = 10  # piece on a four-way node

# Go MCTS
UCT_C = 1.4
MAX_PLAYOUT_MOVES = 120
TOP_MOVES_LIMIT = 15


@dataclass(frozen=True)
class SearchConfig:
    """Search parameters for one session. Never changes once resolved."""
    depth: int = 0
    simulations: int = 0
    random_move_probability: float = 0.0


@dataclass(frozen=True)
class TierRow:
    go_simulations: int
    gomoku_depth: int
    morris_depth: int
    morris_random: float


DIFFICULTY_TABLE: Dict[Difficulty, TierRow] = {
    Difficulty.NOVICE: TierRow(go_simulations=500, gomoku_depth=2, morris_depth=2, morris_random=0.5),
    Difficulty.APPRENTICE: TierRow(go_simulations=2_000, gomoku_depth=3, morris_depth=3, morris_random=0.0),
    Difficulty.JOURNEYMAN: TierRow(go_simulations=8_000, gomoku_depth=4, morris_depth=4, morris_random=0.0),
    Difficulty.MASTER: TierRow(go_simulations=20_000, gomoku_depth=5, morris_depth=5, morris_random=0.0),
}


def search_config(game: GameKind, difficulty: Difficulty) -> SearchConfig:
    """Resolve the search parameters for a game at a difficulty tier."""
    row = DIFFICULTY_TABLE[difficulty]
    if game == GameKind.GO:
        return SearchConfig(simulations=row.go_simulations)
    if game == GameKind.GOMOKU:
        return SearchConfig(depth=row.gomoku_depth)
    return SearchConfig(depth=row.morris_depth, random_move_probability=row.morris_random)
