"""Solution-footprint pruning.

After a layout is accepted, every floor cell the accepted solution never
touches is walled off. Pruning only ever adds walls on cells no agent or
obstacle visited, so the stored solution replays identically afterwards and
no shorter-or-equal path is lost.
"""
from __future__ import annotations
from typing import Dict, Iterable, NamedTuple, Sequence, Set

from .grid import Grid, Position, grid_size
from .rules import replay
from .tiles import EMPTY, WALL


class Footprint(NamedTuple):
    past: Set[Position]
    future: Set[Position]


class PruneResult(NamedTuple):
    past: int
    future: int

    @property
    def total(self) -> int:
        return self.past + self.future


def solution_footprint(
    past: Grid,
    future: Grid,
    start: Position,
    obstacles: Iterable[Position],
    path: Sequence[str],
) -> Footprint:
    """Cells occupied per timeline while replaying ``path``.

    Obstacles exist in both timelines, so their cells count for both.
    """
    past_cells: Set[Position] = set()
    future_cells: Set[Position] = set()
    for state in replay(past, future, start, obstacles, path):
        past_cells.add(state.past)
        future_cells.add(state.future)
        past_cells.update(state.obstacles)
        future_cells.update(state.obstacles)
    return Footprint(past_cells, future_cells)


def prune_unvisited(grid: Grid, visited: Set[Position]) -> int:
    """Wall off EMPTY cells outside ``visited``. Returns the number converted."""
    width, height = grid_size(grid)
    pruned = 0
    for x in range(width):
        for y in range(height):
            # only bare floor converts; PROTECTED_TILES are never EMPTY
            if grid[x][y] != EMPTY:
                continue
            if Position(x, y) in visited:
                continue
            grid[x][y] = WALL
            pruned += 1
    return pruned


def prune_to_solution(
    past: Grid,
    future: Grid,
    start: Position,
    obstacles: Iterable[Position],
    path: Sequence[str],
    metrics: Dict | None = None,
) -> PruneResult:
    """Prune both grids in place to the accepted solution's footprint."""
    footprint = solution_footprint(past, future, start, list(obstacles), path)
    result = PruneResult(prune_unvisited(past, footprint.past), prune_unvisited(future, footprint.future))
    if metrics is not None:
        metrics['tiles_pruned_past'] = metrics.get('tiles_pruned_past', 0) + result.past
        metrics['tiles_pruned_future'] = metrics.get('tiles_pruned_future', 0) + result.future
    return result


__all__ = ["Footprint", "PruneResult", "solution_footprint", "prune_unvisited", "prune_to_solution"]
