from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .errors import LevelConfigError

# Terrain synthesis
BASE_WALL_CHANCE = 0.10
WALL_CHANCE_SLOPE = 0.03
MIN_WALL_CHANCE = 0.05
WALL_DECAY_CHANCE = 0.30
WALL_GROWTH_SLOPE = 0.02

# Placement
PLACEMENT_ATTEMPTS = 100
# Re-rolls for a key cell the lever gate can seal off
GATE_PLACEMENT_RETRIES = 10
MECHANISM_SEPARATION = 3
OBSTACLE_START_DISTANCE = 2
MAX_OBSTACLES = 3

# Orchestration / search budgets
MAX_ATTEMPTS = 200
RELAX_AFTER = (50, 100)
RELAX_STEP = 0.05
MAX_SEARCH_STATES = 60_000
# Default per-candidate budget scales with the board: states per cell, capped above
SEARCH_STATES_PER_CELL = 150
MIN_SEARCH_STATES = 2_000

MIN_SIZE = 3
MAX_DIFFICULTY = 10.0

# Accepted spellings for option keys coming from JSON / UI payloads
_OPTION_ALIASES = {
    'enable_keys': 'enable_keys',
    'enableKeys': 'enable_keys',
    'keys': 'enable_keys',
    'enable_levers': 'enable_levers',
    'enableLevers': 'enable_levers',
    'levers': 'enable_levers',
    'enable_obstacles': 'enable_obstacles',
    'enableObstacles': 'enable_obstacles',
    'obstacles': 'enable_obstacles',
}


@dataclass(frozen=True)
class LevelOptions:
    enable_keys: bool = True
    enable_levers: bool = True
    enable_obstacles: bool = True

    @classmethod
    def coerce(cls, value: "LevelOptions | Mapping[str, Any] | None") -> "LevelOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise LevelConfigError(f"options must be a mapping, got {type(value).__name__}")
        kwargs = {}
        for k, v in value.items():
            name = _OPTION_ALIASES.get(k)
            if name is None:
                raise LevelConfigError(f"unknown option {k!r}")
            kwargs[name] = bool(v)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            'enable_keys': self.enable_keys,
            'enable_levers': self.enable_levers,
            'enable_obstacles': self.enable_obstacles,
        }


@dataclass
class GenerationConfig:
    width: int = 10
    height: int = 10
    difficulty: float = 5
    options: LevelOptions = field(default_factory=LevelOptions)
    seed: Optional[int] = None
    max_attempts: int = MAX_ATTEMPTS
    max_search_states: Optional[int] = None
    prune_unused: bool = True

    def validate(self) -> None:
        if self.width < MIN_SIZE or self.height < MIN_SIZE:
            raise LevelConfigError(f"grid must be at least {MIN_SIZE}x{MIN_SIZE}, got {self.width}x{self.height}")
        if not (0 <= self.difficulty <= MAX_DIFFICULTY):
            raise LevelConfigError(f"difficulty must be within 0..{MAX_DIFFICULTY:g}, got {self.difficulty}")
        if self.max_attempts < 1:
            raise LevelConfigError("max_attempts must be positive")
        if self.max_search_states is not None and self.max_search_states < 1:
            raise LevelConfigError("max_search_states must be positive")

    @property
    def obstacle_count(self) -> int:
        if not self.options.enable_obstacles:
            return 0
        return min(MAX_OBSTACLES, 1 + int(self.difficulty) // 4)

    @property
    def search_budget(self) -> int:
        """Explicit ``max_search_states``, else a cap scaled to the grid area."""
        if self.max_search_states is not None:
            return self.max_search_states
        area = self.width * self.height
        return max(MIN_SEARCH_STATES, min(MAX_SEARCH_STATES, SEARCH_STATES_PER_CELL * area))

    @property
    def goal_distance(self) -> int:
        return max(2, (self.width + self.height) // 3)


__all__ = ["LevelOptions", "GenerationConfig"]
