import pytest

from timesync.level.grid import Position
from timesync.level.rules import (
    DOWN,
    LEFT,
    RIGHT,
    UP,
    SearchState,
    count_pushes,
    direction_named,
    initial_state,
    replay,
    step,
)
from tests.level_test_utils import grids_from_ascii


def test_move_into_bounds_edge_is_cancelled():
    past, future, _ = grids_from_ascii(["S..", "...", "..."])
    state = initial_state(Position(0, 0))
    nxt, pushed = step(past, future, state, UP)
    assert nxt == state
    assert pushed is False


def test_wall_blocks_only_its_own_timeline():
    past, future, _ = grids_from_ascii(["S#.", "..."], ["S..", "..."])
    nxt, _ = step(past, future, initial_state(Position(0, 0)), RIGHT)
    assert nxt.past == (0, 0)
    assert nxt.future == (1, 0)


def test_push_moves_obstacle_and_agent():
    past, future, obstacles = grids_from_ascii(["SB.."])
    state = initial_state(Position(0, 0), obstacles)
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is True
    assert nxt.past == (1, 0)
    assert nxt.obstacles == ((2, 0),)
    # the future agent resolves against the pushed position
    assert nxt.future == (1, 0)


def test_push_into_wall_cancels_move():
    past, future, obstacles = grids_from_ascii(["SB#"])
    state = initial_state(Position(0, 0), obstacles)
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is False
    assert nxt == state


def test_push_needs_floor_in_both_timelines():
    past, future, obstacles = grids_from_ascii(["SB.."], ["S.#."])
    state = initial_state(Position(0, 0), obstacles)
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is False
    assert nxt.past == (0, 0)


def test_push_onto_other_obstacle_cancels():
    past, future, obstacles = grids_from_ascii(["SBB."])
    state = initial_state(Position(0, 0), obstacles)
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is False
    assert nxt.obstacles == ((1, 0), (2, 0))


def test_push_onto_future_agent_is_a_paradox():
    past, future, _ = grids_from_ascii(["....", "...."])
    state = SearchState(past=Position(0, 0), future=Position(2, 0), obstacles=(Position(1, 0),))
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is False
    assert nxt.past == (0, 0)
    assert nxt.obstacles == ((1, 0),)
    # the future agent still moves on its own
    assert nxt.future == (3, 0)


def test_future_agent_never_pushes():
    past, future, _ = grids_from_ascii(["...", "..."])
    state = SearchState(past=Position(0, 1), future=Position(0, 0), obstacles=(Position(1, 0),))
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is False
    assert nxt.past == (1, 1)
    assert nxt.future == (0, 0)
    assert nxt.obstacles == ((1, 0),)


def test_key_pickup_and_deposit_reach_future_same_step():
    past, future, _ = grids_from_ascii(["SkC"], ["S.C"])
    s0 = initial_state(Position(0, 0))
    s1, _ = step(past, future, s0, RIGHT)
    assert s1.holds_key is True
    assert s1.key_deposited is False
    s2, _ = step(past, future, s1, RIGHT)
    assert s2.holds_key is False
    assert s2.key_deposited is True
    # future agent lands on the chest on the deposit move
    assert s2.future == (2, 0)
    assert s2.future_holds_key is True


def test_key_not_picked_up_again_after_deposit():
    past, future, _ = grids_from_ascii(["SkC"], ["S.C"])
    state = initial_state(Position(0, 0))
    for d in (RIGHT, RIGHT, LEFT):
        state, _ = step(past, future, state, d)
    assert state.past == (1, 0)
    assert state.holds_key is False
    assert state.key_deposited is True


def test_chest_without_key_does_nothing():
    past, future, _ = grids_from_ascii(["SC"], ["SC"])
    nxt, _ = step(past, future, initial_state(Position(0, 0)), RIGHT)
    assert nxt.key_deposited is False
    assert nxt.future_holds_key is False


def test_door_blocks_future_without_key():
    past, future, _ = grids_from_ascii(["S.."], ["S.D"])
    state = initial_state(Position(0, 0))
    state, _ = step(past, future, state, RIGHT)
    state, _ = step(past, future, state, RIGHT)
    assert state.past == (2, 0)
    assert state.future == (1, 0)


def test_door_opens_for_future_key_holder():
    past, future, _ = grids_from_ascii(["S..."], ["S.D."])
    state = SearchState(past=Position(1, 0), future=Position(1, 0), future_holds_key=True)
    nxt, _ = step(past, future, state, RIGHT)
    assert nxt.future == (2, 0)


def test_lever_gate_blocks_until_engaged():
    past, future, _ = grids_from_ascii(["S|."], ["S.."])
    nxt, _ = step(past, future, initial_state(Position(0, 0)), RIGHT)
    assert nxt.past == (0, 0)
    assert nxt.future == (1, 0)


def test_lever_is_one_way_and_opens_gates_in_both_timelines():
    past, future, _ = grids_from_ascii(["Sl|."], ["S.|."])
    state = initial_state(Position(0, 0))
    state, _ = step(past, future, state, RIGHT)
    assert state.lever_engaged is True
    state, _ = step(past, future, state, LEFT)
    assert state.lever_engaged is True
    state, _ = step(past, future, state, RIGHT)
    state, _ = step(past, future, state, RIGHT)
    assert state.past == (2, 0)
    assert state.future == (2, 0)


def test_search_state_obstacle_order_is_canonical():
    a = SearchState(Position(0, 0), Position(0, 0), obstacles=[(2, 2), (1, 1)])
    b = SearchState(Position(0, 0), Position(0, 0), obstacles=[(1, 1), (2, 2)])
    assert a == b
    assert hash(a) == hash(b)
    assert all(isinstance(o, Position) for o in a.obstacles)
    assert len({a, b}) == 1


def test_state_to_dict_shape():
    s = SearchState(Position(1, 2), Position(3, 4), holds_key=True, obstacles=[(0, 1)])
    d = s.to_dict()
    assert d["past"] == [1, 2]
    assert d["future"] == [3, 4]
    assert d["obstacles"] == [[0, 1]]
    assert d["holds_key"] is True
    assert d["lever_engaged"] is False


def test_direction_named_accepts_any_case():
    assert direction_named("UP") is UP
    assert direction_named("down") is DOWN
    with pytest.raises(ValueError):
        direction_named("north")


def test_replay_includes_initial_state_and_counts_pushes():
    past, future, obstacles = grids_from_ascii(["SB.."])
    path = ["right", "right"]
    states = replay(past, future, Position(0, 0), obstacles, path)
    assert len(states) == len(path) + 1
    assert states[0].past == (0, 0)
    assert states[-1].past == (2, 0)
    assert states[-1].obstacles == ((3, 0),)
    assert count_pushes(past, future, Position(0, 0), obstacles, path) == 2


def test_push_keeps_obstacles_canonical():
    past, future, obstacles = grids_from_ascii(["..B.", "SB..", "...."])
    state = initial_state(Position(0, 1), obstacles)
    assert state.obstacles == ((1, 1), (2, 0))
    nxt, pushed = step(past, future, state, RIGHT)
    assert pushed is True
    assert nxt.obstacles == ((2, 0), (2, 1))
    rebuilt = SearchState(nxt.past, nxt.future, obstacles=[(2, 1), (2, 0)])
    assert nxt == rebuilt
    assert hash(nxt) == hash(rebuilt)
    assert {nxt, rebuilt} == {rebuilt}
