"""Adversarial board-game opponents: Go, Gomoku and Nine Men's Morris."""

from duels.core.types import Difficulty, GameKind, GameResult, Outcome, Player

__all__ = ["Difficulty", "GameKind", "GameResult", "Outcome", "Player"]
