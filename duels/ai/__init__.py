"""Search engines, evaluators and difficulty tables."""

from duels.ai.config import SearchConfig, search_config

__all__ = ["SearchConfig", "search_config"]
