"""Joint-move transition rules for the two timelines.

Every consumer that needs to know what a move does (the solver, the pruner,
path verification) goes through :func:`step`, so the rules live in exactly one
place.

Per move, the past agent resolves first:
  * out of bounds / WALL cancels the move; LEVER_GATE cancels it unless the
    lever is engaged;
  * stepping into an obstacle pushes it one cell further. The push needs
    floor in *both* grids at the destination, no other obstacle there and not
    the future agent's cell (pushing an obstacle onto the other timeline's
    agent would be a paradox). A refused push cancels the move;
  * after a move: pick up KEY (unless held or already deposited), deposit
    into CHEST (when holding), engage LEVER (one-way).
The future agent then resolves against the updated obstacles and flags:
  * out of bounds / WALL cancels; DOOR cancels without the retrieved key;
    LEVER_GATE cancels unless engaged; any obstacle cancels (it never pushes);
  * after a move: CHEST with a deposited key hands the key to the future.
"""
from __future__ import annotations

from typing import Iterable, List, NamedTuple, Sequence, Tuple

from .grid import Grid, Position, in_bounds, is_blocked
from .tiles import CHEST, DOOR, FLOOR_TILES, KEY, LEVER, LEVER_GATE


class Direction(NamedTuple):
    name: str
    dx: int
    dy: int


UP = Direction('up', 0, -1)
DOWN = Direction('down', 0, 1)
LEFT = Direction('left', -1, 0)
RIGHT = Direction('right', 1, 0)
DIRECTIONS = (UP, DOWN, LEFT, RIGHT)
DIRECTIONS_BY_NAME = {d.name: d for d in DIRECTIONS}


def direction_named(name: str) -> Direction:
    try:
        return DIRECTIONS_BY_NAME[name.lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"unknown direction {name!r}") from None


class _StateFields(NamedTuple):
    past: Position
    future: Position
    holds_key: bool
    key_deposited: bool
    future_holds_key: bool
    lever_engaged: bool
    obstacles: Tuple[Position, ...]


class SearchState(_StateFields):
    """Joint configuration of both timelines.

    Obstacles are stored as a sorted tuple so equality and hashing do not
    depend on the order they were supplied in. The constructor sorts them;
    :func:`step` already produces a sorted tuple and builds its result with
    ``_make``, which skips that work on the search hot path.
    """
    __slots__ = ()

    def __new__(
        cls,
        past: Position,
        future: Position,
        holds_key: bool = False,
        key_deposited: bool = False,
        future_holds_key: bool = False,
        lever_engaged: bool = False,
        obstacles: Iterable[Position] = (),
    ):
        canonical = tuple(sorted(Position(*o) for o in obstacles))
        return super().__new__(cls, Position(*past), Position(*future), holds_key, key_deposited, future_holds_key, lever_engaged, canonical)

    def flags(self) -> dict:
        return {
            'holds_key': self.holds_key,
            'key_deposited': self.key_deposited,
            'future_holds_key': self.future_holds_key,
            'lever_engaged': self.lever_engaged,
        }

    def to_dict(self) -> dict:
        return {
            'past': list(self.past),
            'future': list(self.future),
            'obstacles': [list(o) for o in self.obstacles],
            **self.flags(),
        }


class Transition(NamedTuple):
    state: SearchState
    pushed: bool


def initial_state(start: Position, obstacles: Iterable[Position] = ()) -> SearchState:
    return SearchState(past=start, future=start, obstacles=tuple(obstacles))


def is_goal(state: SearchState, goal: Position) -> bool:
    return state.past == goal and state.future == goal


def _can_push(past_grid: Grid, future_grid: Grid, dest: Position, obstacles: Tuple[Position, ...], future_agent: Position) -> bool:
    if not in_bounds(past_grid, dest):
        return False
    if past_grid[dest.x][dest.y] not in FLOOR_TILES or future_grid[dest.x][dest.y] not in FLOOR_TILES:
        return False
    if dest in obstacles:
        return False
    return dest != future_agent


def step(past_grid: Grid, future_grid: Grid, state: SearchState, direction: Direction) -> Transition:
    """Apply one joint move and return the resulting state."""
    holds_key = state.holds_key
    deposited = state.key_deposited
    future_key = state.future_holds_key
    lever = state.lever_engaged
    obstacles = state.obstacles
    pushed = False

    past = state.past
    target = past.shifted(direction.dx, direction.dy)
    if not is_blocked(past_grid, target) and (past_grid[target.x][target.y] != LEVER_GATE or lever):
        if target in obstacles:
            dest = target.shifted(direction.dx, direction.dy)
            if _can_push(past_grid, future_grid, dest, obstacles, state.future):
                obstacles = tuple(sorted(dest if o == target else o for o in obstacles))
                pushed = True
                past = target
        else:
            past = target
        if past == target:
            tile = past_grid[past.x][past.y]
            if tile == KEY and not holds_key and not deposited:
                holds_key = True
            elif tile == CHEST and holds_key:
                holds_key = False
                deposited = True
            elif tile == LEVER and not lever:
                lever = True

    future = state.future
    target = future.shifted(direction.dx, direction.dy)
    if not is_blocked(future_grid, target) and target not in obstacles:
        tile = future_grid[target.x][target.y]
        if not ((tile == DOOR and not future_key) or (tile == LEVER_GATE and not lever)):
            future = target
            if tile == CHEST and deposited and not future_key:
                future_key = True

    nxt = SearchState._make((past, future, holds_key, deposited, future_key, lever, obstacles))
    return Transition(nxt, pushed)


def replay(
    past_grid: Grid,
    future_grid: Grid,
    start: Position,
    obstacles: Iterable[Position],
    path: Sequence[str],
) -> List[SearchState]:
    """Simulate ``path`` and return every state visited, the initial one included."""
    state = initial_state(start, obstacles)
    states = [state]
    for name in path:
        state = step(past_grid, future_grid, state, direction_named(name)).state
        states.append(state)
    return states


def count_pushes(
    past_grid: Grid,
    future_grid: Grid,
    start: Position,
    obstacles: Iterable[Position],
    path: Sequence[str],
) -> int:
    state = initial_state(start, obstacles)
    pushes = 0
    for name in path:
        state, pushed = step(past_grid, future_grid, state, direction_named(name))
        pushes += pushed
    return pushes


__all__ = [
    "Direction",
    "UP",
    "DOWN",
    "LEFT",
    "RIGHT",
    "DIRECTIONS",
    "direction_named",
    "SearchState",
    "Transition",
    "initial_state",
    "is_goal",
    "step",
    "replay",
    "count_pushes",
]
