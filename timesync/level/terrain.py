"""Terrain synthesis: random past walls and the decayed/overgrown future."""
from __future__ import annotations
import random
from typing import NamedTuple

from .config import BASE_WALL_CHANCE, MIN_WALL_CHANCE, WALL_CHANCE_SLOPE, WALL_DECAY_CHANCE, WALL_GROWTH_SLOPE
from .grid import Grid, new_grid
from .tiles import EMPTY, WALL


class TerrainOutputs(NamedTuple):
    past: Grid
    future: Grid
    wall_chance: float


def wall_chance(difficulty: float, adjustment: float = 0.0) -> float:
    return max(MIN_WALL_CHANCE, BASE_WALL_CHANCE + difficulty * WALL_CHANCE_SLOPE + adjustment)


class TerrainSynthesizer:
    def __init__(self, width: int, height: int, difficulty: float, rng: random.Random, adjustment: float = 0.0):
        self.width = width
        self.height = height
        self.difficulty = difficulty
        self.adjustment = adjustment
        self.rng = rng

    def synthesize_past(self, chance: float) -> Grid:
        grid = new_grid(self.width, self.height, EMPTY)
        for x in range(self.width):
            for y in range(self.height):
                if self.rng.random() < chance:
                    grid[x][y] = WALL
        return grid

    def derive_future(self, past: Grid) -> Grid:
        """Walls partially collapse over time while open ground may cave in.

        Every cell is rolled independently; this asymmetry is what makes the
        two timelines reach different places.
        """
        growth = WALL_GROWTH_SLOPE * self.difficulty
        future = new_grid(self.width, self.height, EMPTY)
        for x in range(self.width):
            for y in range(self.height):
                tile = past[x][y]
                if tile == WALL and self.rng.random() < WALL_DECAY_CHANCE:
                    tile = EMPTY
                elif tile == EMPTY and self.rng.random() < growth:
                    tile = WALL
                future[x][y] = tile
        return future

    def run(self) -> TerrainOutputs:
        chance = wall_chance(self.difficulty, self.adjustment)
        past = self.synthesize_past(chance)
        future = self.derive_future(past)
        return TerrainOutputs(past, future, chance)
