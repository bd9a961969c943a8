"""Public level-generation package interface."""

from .config import GenerationConfig, LevelOptions
from .errors import LevelConfigError, LevelGenerationError, SearchBudgetExhausted
from .grid import Position
from .pipeline import LevelData, LevelGenerator, generate
from .rules import SearchState, replay, step
from .solver import Solution, solve
from .tiles import (
    CHEST,
    DOOR,
    EMPTY,
    GOAL,
    KEY,
    LEVER,
    LEVER_GATE,
    OBSTACLE,
    START,
    WALL,
)  # noqa: F401

__all__ = [
    "generate",
    "LevelData",
    "LevelGenerator",
    "GenerationConfig",
    "LevelOptions",
    "Position",
    "SearchState",
    "step",
    "replay",
    "solve",
    "Solution",
    "LevelGenerationError",
    "LevelConfigError",
    "SearchBudgetExhausted",
    "EMPTY",
    "WALL",
    "START",
    "OBSTACLE",
    "GOAL",
    "KEY",
    "DOOR",
    "CHEST",
    "LEVER",
    "LEVER_GATE",
]
