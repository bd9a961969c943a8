"""Exception types raised by the level engine."""
from __future__ import annotations


class LevelGenerationError(Exception):
    """Base class for level engine errors."""


class LevelConfigError(LevelGenerationError, ValueError):
    """Invalid generation parameters (dimensions, difficulty, options)."""


class SearchBudgetExhausted(LevelGenerationError):
    """The joint-state search visited more states than its budget allows.

    Treated by the generator as "no solution found within budget" for the
    candidate layout, never as a crash.
    """

    def __init__(self, explored: int, limit: int):
        super().__init__(f"search budget exhausted after {explored} states (limit {limit})")
        self.explored = explored
        self.limit = limit


__all__ = ["LevelGenerationError", "LevelConfigError", "SearchBudgetExhausted"]
