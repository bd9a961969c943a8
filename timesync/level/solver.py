"""Breadth-first search over the joint state of both timelines.

The solver is the only authority on whether a candidate level is playable.
BFS order guarantees the returned path is a shortest one in move count.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .config import MAX_SEARCH_STATES
from .connectivity import flood_reachable
from .errors import SearchBudgetExhausted
from .grid import Grid, Position
from .rules import DIRECTIONS, SearchState, initial_state, is_goal, step
from .tiles import DOOR, LEVER_GATE, WALL


@dataclass(frozen=True)
class Solution:
    steps: int
    path: Tuple[str, ...]
    boxes_pushed: int
    states_explored: int = 0


# parent pointer: (previous state, direction name, pushed)
_Parent = Optional[Tuple[SearchState, str, bool]]


def _unwind(parents: Dict[SearchState, _Parent], state: SearchState, explored: int) -> Solution:
    path = []
    pushes = 0
    link = parents[state]
    while link is not None:
        prev, name, pushed = link
        path.append(name)
        pushes += pushed
        link = parents[prev]
    path.reverse()
    return Solution(steps=len(path), path=tuple(path), boxes_pushed=pushes, states_explored=explored)


def solve(
    past_grid: Grid,
    future_grid: Grid,
    start: Position,
    goal: Position,
    obstacles: Iterable[Position] = (),
    *,
    max_states: int = MAX_SEARCH_STATES,
) -> Optional[Solution]:
    """Return the shortest joint solution, or None if the layout is unsolvable.

    Raises SearchBudgetExhausted once more than ``max_states`` distinct states
    have been discovered.
    """
    root = initial_state(start, obstacles)
    parents: Dict[SearchState, _Parent] = {root: None}
    if is_goal(root, goal):
        return _unwind(parents, root, 1)
    q = deque([root])
    while q:
        current = q.popleft()
        for direction in DIRECTIONS:
            nxt, pushed = step(past_grid, future_grid, current, direction)
            if nxt == current or nxt in parents:
                continue
            parents[nxt] = (current, direction.name, pushed)
            if is_goal(nxt, goal):
                return _unwind(parents, nxt, len(parents))
            if len(parents) > max_states:
                raise SearchBudgetExhausted(len(parents), max_states)
            q.append(nxt)
    return None


def plausibly_solvable(
    past_grid: Grid,
    future_grid: Grid,
    start: Position,
    goal: Position,
    mechanisms: Mapping[str, Position],
) -> bool:
    """Cheap planar screen run before the joint search.

    Obstacles are ignored, so a False here means no joint path can exist;
    True only means the search is worth running.
    """
    blocking = {WALL}
    lever = mechanisms.get('lever')
    if 'lever_gate' in mechanisms and lever not in flood_reachable(past_grid, start, (WALL, LEVER_GATE)):
        # the lever can never be engaged, so every gate stays shut
        blocking.add(LEVER_GATE)
    past_reach = flood_reachable(past_grid, start, blocking)
    if goal not in past_reach:
        return False
    future_reach = flood_reachable(future_grid, start, blocking | {DOOR})
    if goal in future_reach:
        return True
    key, chest = mechanisms.get('key'), mechanisms.get('chest')
    if 'door' not in mechanisms or key is None or chest is None:
        return False
    # The door has to open: key and chest in the past, chest in the future
    if key not in past_reach or chest not in past_reach or chest not in future_reach:
        return False
    return goal in flood_reachable(future_grid, start, blocking)


__all__ = ["Solution", "solve", "plausibly_solvable"]
