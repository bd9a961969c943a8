"""
project: TimeSync
module: level_api.py
License: MIT

Level generation and verification API routes.

Endpoints are stateless: every request carries its own seed or layout. Levels
for explicit seeds are memoized in a small in-process cache, since the same
seed and parameters always yield the same level.
"""

import copy
import hashlib
import os
import random
import threading

from flask import Blueprint, jsonify, request

from timesync.level import LevelOptions, Position, generate
from timesync.level.api_helpers.solution import compress_solution, format_hint
from timesync.level.api_helpers.tiles import tile_legend
from timesync.level.grid import from_rows, grid_size, in_bounds
from timesync.level.rules import direction_named, initial_state, is_goal, step
from timesync.logging_utils import get_logger

log = get_logger("timesync.routes.level_api")

bp_level = Blueprint("level_api", __name__)

MAX_SEED = 9223372036854775807
MIN_DIMENSION = 3
MAX_DIMENSION = 40
SIZE_PRESETS = {1: 10, 2: 15, 3: 20}
DEFAULT_SIZE = 10
DEFAULT_DIFFICULTY = 5.0

_FALSE_STRINGS = {"0", "false", "no", "off", ""}

# Simple in-process cache key->level dict. Guarded by a lock for threaded servers.
_level_cache = {}
_level_cache_lock = threading.Lock()
_LEVEL_CACHE_MAX = 16  # small LRU-ish manual cap


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into a bounded non-negative int."""
    if payload_seed is None or isinstance(payload_seed, bool):
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, int):
        return payload_seed % MAX_SEED
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % MAX_SEED
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % MAX_SEED
    raise ValueError(f"seed must be an integer or string, got {type(payload_seed).__name__}")


def get_cached_level(seed: int, width: int, height: int, difficulty: float, options: LevelOptions) -> dict:
    """Return ``LevelData.to_dict()`` for an explicit seed, memoized.

    Each caller gets its own copy, so mutating a response never leaks into
    the cache.
    """
    if os.environ.get("TIMESYNC_DISABLE_CACHE") == "1":
        return generate(width, height, difficulty, options, seed=seed).to_dict()
    key = (seed, width, height, difficulty, options)
    with _level_cache_lock:
        cached = _level_cache.get(key)
        if cached is not None:
            return copy.deepcopy(cached)
    payload = generate(width, height, difficulty, options, seed=seed).to_dict()
    with _level_cache_lock:
        _level_cache[key] = payload
        if len(_level_cache) > _LEVEL_CACHE_MAX:
            first_key = next(iter(_level_cache.keys()))
            if first_key != key:
                _level_cache.pop(first_key, None)
    return copy.deepcopy(payload)


def _request_params() -> dict:
    """Merge query-string parameters with an optional JSON body (body wins)."""
    params = dict(request.args.items())
    if request.method == "POST":
        body = request.get_json(silent=True)
        if body is not None and not isinstance(body, dict):
            raise ValueError("JSON body must be an object")
        params.update(body or {})
    return params


def _int_param(params: dict, name: str, default=None):
    raw = params.get(name)
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer") from None


def _float_param(params: dict, name: str, default: float) -> float:
    raw = params.get(name)
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        raise ValueError(f"{name} must be a number")
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number") from None


def _bool_param(params: dict, name: str, default: bool = True) -> bool:
    raw = params.get(name)
    if raw is None:
        return default
    if isinstance(raw, str):
        return raw.strip().lower() not in _FALSE_STRINGS
    return bool(raw)


def _dimensions(params: dict) -> tuple[int, int]:
    size = _int_param(params, "size")
    if size is not None and size not in SIZE_PRESETS:
        raise ValueError(f"size must be one of {sorted(SIZE_PRESETS)}")
    base = SIZE_PRESETS.get(size, DEFAULT_SIZE)
    width = _int_param(params, "width", base)
    height = _int_param(params, "height", base)
    for name, value in (("width", width), ("height", height)):
        if not (MIN_DIMENSION <= value <= MAX_DIMENSION):
            raise ValueError(f"{name} must be within {MIN_DIMENSION}..{MAX_DIMENSION}")
    return width, height


def _position(value, name: str) -> Position:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{name} must be an [x, y] pair")
    try:
        return Position(int(value[0]), int(value[1]))
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an [x, y] pair") from None


def _grid(rows, name: str):
    if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
        raise ValueError(f"{name} must be a list of rows")
    try:
        return from_rows(rows)
    except TypeError:
        raise ValueError(f"{name} must contain integer tile codes") from None


@bp_level.errorhandler(ValueError)
def bad_request(e):
    return jsonify({"error": str(e)}), 400


@bp_level.route("/api/level/generate", methods=["GET", "POST"])
def generate_level():
    """Generate (or fetch from cache) a solvable level.

    Parameters (query string or JSON body, all optional):
      width, height (3..40) or size preset (1|2|3), difficulty (0..10),
      seed (int or string), enable_keys, enable_levers, enable_obstacles.

    Response: LevelData.to_dict() plus ``hint`` and ``hint_steps``.
    """
    params = _request_params()
    width, height = _dimensions(params)
    difficulty = _float_param(params, "difficulty", DEFAULT_DIFFICULTY)
    options = LevelOptions(
        enable_keys=_bool_param(params, "enable_keys"),
        enable_levers=_bool_param(params, "enable_levers"),
        enable_obstacles=_bool_param(params, "enable_obstacles"),
    )
    provided = params.get("seed")
    seed = _coerce_seed(provided)
    if provided is None or provided == "":
        payload = generate(width, height, difficulty, options, seed=seed).to_dict()
    else:
        payload = get_cached_level(seed, width, height, difficulty, options)
    payload["hint"] = format_hint(payload["solution_path"])
    payload["hint_steps"] = compress_solution(payload["solution_path"])
    return jsonify(payload)


@bp_level.route("/api/level/tiles")
def level_tiles():
    """Return the tile-code legend shared by both timelines."""
    return jsonify({"tiles": tile_legend()})


@bp_level.route("/api/level/verify", methods=["POST"])
def verify_level():
    """Replay a move sequence against a supplied layout.

    Body JSON:
      { "past": [[...]], "future": [[...]], "start": [x, y], "goal": [x, y],
        "obstacles": [[x, y], ...], "path": ["up", "left", ...] }
    Grids are row-major (rows[y][x]), the same shape /generate returns.

    Response: { "solved": bool, "steps": n, "boxes_pushed": n, "final": {...} }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("JSON body required")
    for field in ("past", "future", "start", "goal", "path"):
        if field not in data:
            raise ValueError(f"missing field: {field}")
    past = _grid(data["past"], "past")
    future = _grid(data["future"], "future")
    if grid_size(past) != grid_size(future):
        raise ValueError("past and future grids must have identical dimensions")
    start = _position(data["start"], "start")
    goal = _position(data["goal"], "goal")
    obstacles = [_position(o, "obstacle") for o in data.get("obstacles") or []]
    for name, pos in [("start", start), ("goal", goal)] + [("obstacle", o) for o in obstacles]:
        if not in_bounds(past, pos):
            raise ValueError(f"{name} {list(pos)} is out of bounds")
    path = data["path"]
    if not isinstance(path, list):
        raise ValueError("path must be a list of directions")
    directions = [direction_named(name) for name in path]

    state = initial_state(start, obstacles)
    pushes = 0
    for direction in directions:
        state, pushed = step(past, future, state, direction)
        pushes += pushed
    solved = is_goal(state, goal)
    log.debug(event="path_verified", steps=len(directions), solved=solved)
    return jsonify({"solved": solved, "steps": len(directions), "boxes_pushed": pushes, "final": state.to_dict()})
