"""Single-timeline connectivity analysis.

Flood fill, shortest path, critical-tile and bottleneck detection. These
ignore the dual-timeline and mechanism rules entirely: they only bias where
obstacles are placed, the joint-state solver remains the authority on
solvability.
"""
from __future__ import annotations
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from .grid import Grid, Position, copy_grid, grid_size, in_bounds, is_blocked, neighbors4
from .tiles import EMPTY, WALL


def flood_reachable(grid: Grid, start: Position, blocking: Iterable[int] = (WALL,)) -> Set[Position]:
    """Return every cell reachable from ``start`` without entering a ``blocking`` tile."""
    blocking = frozenset(blocking)
    if not in_bounds(grid, start) or grid[start.x][start.y] in blocking:
        return set()
    q = deque([start])
    visited = {start}
    while q:
        cur = q.popleft()
        for n in neighbors4(grid, cur):
            if n not in visited and grid[n.x][n.y] not in blocking:
                visited.add(n)
                q.append(n)
    return visited


def shortest_path(grid: Grid, start: Position, goal: Position) -> Optional[List[Position]]:
    """Plain BFS shortest path (start and goal included) or None."""
    if is_blocked(grid, start) or is_blocked(grid, goal):
        return None
    q = deque([start])
    parent: Dict[Position, Optional[Position]] = {start: None}
    while q:
        cur = q.popleft()
        if cur == goal:
            path = []
            node: Optional[Position] = cur
            while node is not None:
                path.append(node)
                node = parent[node]
            path.reverse()
            return path
        for n in neighbors4(grid, cur):
            if n not in parent and grid[n.x][n.y] != WALL:
                parent[n] = cur
                q.append(n)
    return None


def is_connected(grid: Grid, start: Position, goal: Position) -> bool:
    return shortest_path(grid, start, goal) is not None


def find_critical_tiles(
    grid: Grid,
    start: Position,
    goal: Position,
    excluded: Iterable[Position] = (),
) -> List[Position]:
    """Tiles on the shortest path whose removal disconnects start from goal.

    Each candidate is walled off in a scratch copy; the caller's grid is never
    touched. Returned in path order.
    """
    path = shortest_path(grid, start, goal)
    if not path:
        return []
    skip = set(excluded) | {start, goal}
    scratch = copy_grid(grid)
    critical = []
    for pos in path:
        if pos in skip:
            continue
        original = scratch[pos.x][pos.y]
        scratch[pos.x][pos.y] = WALL
        if not is_connected(scratch, start, goal):
            critical.append(pos)
        scratch[pos.x][pos.y] = original
    return critical


def _open(grid: Grid, pos: Position) -> bool:
    return in_bounds(grid, pos) and grid[pos.x][pos.y] != WALL


def find_bottlenecks(grid: Grid) -> List[Position]:
    """One-tile-wide corridor cells.

    An EMPTY cell qualifies when both vertical neighbours are blocking and
    both horizontal neighbours are open, or the transpose. Out of bounds
    counts as blocking.
    """
    width, height = grid_size(grid)
    found = []
    for x in range(width):
        for y in range(height):
            if grid[x][y] != EMPTY:
                continue
            p = Position(x, y)
            up, down = p.shifted(0, -1), p.shifted(0, 1)
            left, right = p.shifted(-1, 0), p.shifted(1, 0)
            vertical_walls = not _open(grid, up) and not _open(grid, down)
            horizontal_walls = not _open(grid, left) and not _open(grid, right)
            vertical_open = _open(grid, up) and _open(grid, down)
            horizontal_open = _open(grid, left) and _open(grid, right)
            if (vertical_walls and horizontal_open) or (horizontal_walls and vertical_open):
                found.append(p)
    return found


__all__ = [
    "flood_reachable",
    "shortest_path",
    "is_connected",
    "find_critical_tiles",
    "find_bottlenecks",
]
