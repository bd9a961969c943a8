import random

import pytest

from timesync.level.config import MIN_WALL_CHANCE
from timesync.level.grid import grid_size
from timesync.level.terrain import TerrainSynthesizer, wall_chance
from timesync.level.tiles import EMPTY, WALL


def test_wall_chance_scales_with_difficulty():
    assert wall_chance(0) == pytest.approx(0.10)
    assert wall_chance(10) == pytest.approx(0.40)
    assert wall_chance(5, -0.05) == pytest.approx(0.20)


def test_wall_chance_never_drops_below_floor():
    assert wall_chance(0, -0.10) == pytest.approx(MIN_WALL_CHANCE)


def test_terrain_dimensions_and_codes():
    out = TerrainSynthesizer(7, 5, 5, random.Random(3)).run()
    assert grid_size(out.past) == (7, 5)
    assert grid_size(out.future) == (7, 5)
    for grid in (out.past, out.future):
        assert {code for col in grid for code in col} <= {EMPTY, WALL}


def test_terrain_is_deterministic_per_seed():
    a = TerrainSynthesizer(12, 9, 6, random.Random(99)).run()
    b = TerrainSynthesizer(12, 9, 6, random.Random(99)).run()
    assert a.past == b.past
    assert a.future == b.future


def test_zero_difficulty_future_only_loses_walls():
    out = TerrainSynthesizer(20, 20, 0, random.Random(5)).run()
    for x in range(20):
        for y in range(20):
            if out.future[x][y] == WALL:
                assert out.past[x][y] == WALL


def test_wall_density_tracks_chance():
    out = TerrainSynthesizer(40, 40, 10, random.Random(1234)).run()
    walls = sum(col.count(WALL) for col in out.past)
    assert 0.30 < walls / 1600 < 0.50
    assert out.wall_chance == pytest.approx(0.40)


def test_relaxation_lowers_recorded_chance():
    out = TerrainSynthesizer(6, 6, 5, random.Random(1), adjustment=-0.10).run()
    assert out.wall_chance == pytest.approx(0.15)
