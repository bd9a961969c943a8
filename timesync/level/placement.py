"""Object placement: start, goal, mechanisms, gates and obstacles.

Placement mutates the attempt's freshly synthesized grids in place. Every
chosen cell is recorded in a shared exclusion set so later placements never
land on an earlier one.

Gating: an objective (the goal, or the key) has its orthogonal neighbours
walled off except one, which receives the gate tile (DOOR or LEVER_GATE).
Only the start is exempt. The objective then has exactly one controlled
entrance, so the mechanism that opens it has to be used. An objective that
cannot be sealed is reported in ``Placement.ungated`` and the attempt is
discarded.
"""
from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from .config import (
    GATE_PLACEMENT_RETRIES,
    GenerationConfig,
    MECHANISM_SEPARATION,
    OBSTACLE_START_DISTANCE,
    PLACEMENT_ATTEMPTS,
)
from .connectivity import find_bottlenecks, find_critical_tiles
from .grid import Grid, Position, grid_size, manhattan, neighbors4
from .tiles import CHEST, DOOR, EMPTY, GOAL, KEY, LEVER, LEVER_GATE, PROTECTED_TILES, START, WALL

log = get_logger("timesync.level.placement")

ORIGIN = Position(0, 0)


@dataclass
class PlacementConstraints:
    claimed: Set[Position] = field(default_factory=set)
    anchor: Optional[Position] = None
    min_distance: int = 0

    def near(self, anchor: Optional[Position], min_distance: int) -> "PlacementConstraints":
        """Same exclusion set (shared, not copied) with a distance constraint."""
        return PlacementConstraints(self.claimed, anchor, min_distance)

    def permits(self, pos: Position) -> bool:
        if pos in self.claimed:
            return False
        if self.anchor is not None and manhattan(pos, self.anchor) < self.min_distance:
            return False
        return True

    def claim(self, *positions: Position) -> None:
        self.claimed.update(positions)


def find_empty_spot(
    grid: Grid,
    rng: random.Random,
    constraints: PlacementConstraints,
    *,
    also_empty: Sequence[Grid] = (),
    attempts: int = PLACEMENT_ATTEMPTS,
    metrics: Optional[Dict] = None,
) -> Position:
    """Probe random cells for one that is EMPTY and allowed by ``constraints``.

    ``also_empty`` lists further grids the cell must be EMPTY in. When the
    attempt budget runs out the origin is returned as a best-effort cell; the
    solver catches any layout that this makes unplayable.
    """
    width, height = grid_size(grid)
    for _ in range(attempts):
        pos = Position(rng.randrange(width), rng.randrange(height))
        if not constraints.permits(pos):
            continue
        if grid[pos.x][pos.y] != EMPTY:
            continue
        if any(g[pos.x][pos.y] != EMPTY for g in also_empty):
            continue
        return pos
    log.warn(event="placement_exhausted", attempts=attempts, anchor=constraints.anchor, min_distance=constraints.min_distance)
    if metrics is not None:
        metrics['placement_fallbacks'] = metrics.get('placement_fallbacks', 0) + 1
    return ORIGIN


class Placement(NamedTuple):
    start: Position
    goal: Position
    obstacles: List[Position]
    mechanisms: Dict[str, Position]
    # objectives left without a sealed approach ('goal', 'key')
    ungated: Tuple[str, ...] = ()


class ObjectPlacer:
    def __init__(self, past: Grid, future: Grid, config: GenerationConfig, rng: random.Random, metrics: Optional[Dict] = None):
        self.past = past
        self.future = future
        self.config = config
        self.options = config.options
        self.rng = rng
        self.metrics = metrics if metrics is not None else {}
        self.constraints = PlacementConstraints()
        self.mechanisms: Dict[str, Position] = {}
        self.ungated: List[str] = []
        self.start = ORIGIN
        self.goal = ORIGIN

    def _spot(self, anchor: Optional[Position] = None, min_distance: int = 0, also_empty: Sequence[Grid] = ()) -> Position:
        return find_empty_spot(
            self.past,
            self.rng,
            self.constraints.near(anchor, min_distance),
            also_empty=also_empty,
            metrics=self.metrics,
        )

    def _stamp(self, grid: Grid, pos: Position, code: int) -> None:
        # A best-effort fallback cell may already be claimed; never overwrite it.
        if pos in self.constraints.claimed:
            return
        grid[pos.x][pos.y] = code

    def place_start_and_goal(self) -> None:
        self.start = self._spot()
        self._stamp(self.past, self.start, START)
        self._stamp(self.future, self.start, START)
        self.constraints.claim(self.start)
        self.goal = self._spot(self.start, self.config.goal_distance)
        if self.goal in self.constraints.claimed:
            return
        self._stamp(self.past, self.goal, GOAL)
        self._stamp(self.future, self.goal, GOAL)
        self.constraints.claim(self.goal)

    def is_gateable(self, grid: Grid, target: Position) -> bool:
        """A target can be sealed when no neighbour other than the start holds a protected tile."""
        if target == self.start:
            return False
        approaches = [n for n in neighbors4(grid, target) if n != self.start]
        return bool(approaches) and all(grid[n.x][n.y] not in PROTECTED_TILES for n in approaches)

    def gate_target(self, grid: Grid, target: Position, gate_tile: int) -> Optional[Position]:
        """Leave ``target`` a single entrance in ``grid`` stamped with ``gate_tile``.

        Every other in-bounds neighbour becomes WALL in ``grid``; only the
        start is left as it is. Returns the gate position, or None when the
        target cannot be sealed (see :meth:`is_gateable`).
        """
        if not self.is_gateable(grid, target):
            return None
        approaches = [n for n in neighbors4(grid, target) if n != self.start]
        unclaimed = [n for n in approaches if n not in self.constraints.claimed]
        gate = self.rng.choice(unclaimed or approaches)
        for n in approaches:
            grid[n.x][n.y] = WALL
        grid[gate.x][gate.y] = gate_tile
        self.constraints.claim(*approaches)
        return gate

    def place_key_mechanisms(self) -> None:
        door = self.gate_target(self.future, self.goal, DOOR)
        if door is not None:
            self.mechanisms['door'] = door
        else:
            self.ungated.append('goal')
        key = self._spot(self.start, MECHANISM_SEPARATION)
        if self.options.enable_levers:
            # The lever gate will seal the key, so re-roll cells it cannot seal
            for _ in range(GATE_PLACEMENT_RETRIES):
                if self.is_gateable(self.past, key):
                    break
                key = self._spot(self.start, MECHANISM_SEPARATION)
        self._stamp(self.past, key, KEY)
        self.constraints.claim(key)
        self.mechanisms['key'] = key
        chest = self._spot(key, MECHANISM_SEPARATION)
        self._stamp(self.past, chest, CHEST)
        self._stamp(self.future, chest, CHEST)
        self.constraints.claim(chest)
        self.mechanisms['chest'] = chest

    def place_lever_mechanisms(self) -> None:
        # The gate protects the key when there is one, otherwise the past goal.
        protected = 'key' if 'key' in self.mechanisms else 'goal'
        gate = self.gate_target(self.past, self.mechanisms.get('key', self.goal), LEVER_GATE)
        if gate is not None:
            self.mechanisms['lever_gate'] = gate
        else:
            self.ungated.append(protected)
        lever = self._spot(self.mechanisms.get('key', self.start), MECHANISM_SEPARATION)
        self._stamp(self.past, lever, LEVER)
        self.constraints.claim(lever)
        self.mechanisms['lever'] = lever

    def obstacle_candidates(self) -> List[Position]:
        """Critical tiles first, then corridor bottlenecks, each tier shuffled."""
        claimed = self.constraints.claimed
        critical: List[Position] = []
        for grid in (self.past, self.future):
            for pos in find_critical_tiles(grid, self.start, self.goal, claimed):
                if pos not in critical:
                    critical.append(pos)
        bottlenecks = [p for p in find_bottlenecks(self.past) if p not in critical]
        self.rng.shuffle(critical)
        self.rng.shuffle(bottlenecks)
        return [
            p for p in critical + bottlenecks
            if p not in claimed and self.past[p.x][p.y] == EMPTY and self.future[p.x][p.y] == EMPTY
        ]

    def place_obstacles(self, count: int) -> List[Position]:
        obstacles: List[Position] = []
        for pos in self.obstacle_candidates():
            if len(obstacles) >= count:
                break
            if pos in self.constraints.claimed:
                continue
            obstacles.append(pos)
            self.constraints.claim(pos)
        while len(obstacles) < count:
            pos = self._spot(self.start, OBSTACLE_START_DISTANCE, also_empty=(self.future,))
            if not self.constraints.permits(pos) or self.past[pos.x][pos.y] != EMPTY or self.future[pos.x][pos.y] != EMPTY:
                break
            obstacles.append(pos)
            self.constraints.claim(pos)
        return obstacles

    def run(self) -> Placement:
        self.place_start_and_goal()
        if self.options.enable_keys:
            self.place_key_mechanisms()
        if self.options.enable_levers:
            self.place_lever_mechanisms()
        obstacles = self.place_obstacles(self.config.obstacle_count) if self.options.enable_obstacles else []
        return Placement(self.start, self.goal, obstacles, dict(self.mechanisms), tuple(self.ungated))


__all__ = ["PlacementConstraints", "find_empty_spot", "Placement", "ObjectPlacer", "ORIGIN"]
