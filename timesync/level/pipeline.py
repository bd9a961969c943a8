"""Pipeline orchestration for level generation.

``generate`` (and the ``LevelGenerator`` behind it) drives a bounded retry
loop: synthesize terrain, place objects, ask the joint-state solver whether
the candidate is playable, and prune the accepted layout down to the cells
its solution uses. Every attempt builds its own grids from scratch; nothing
from a rejected attempt is carried into the next one.

After repeated failures the wall density is relaxed in two steps. If every
attempt fails, a trivially solvable open room is returned instead, so the
caller always receives usable LevelData.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional
import os
import random
import time

from ..logging_utils import get_logger
from .config import GenerationConfig, LevelOptions, RELAX_AFTER, RELAX_STEP
from .errors import LevelConfigError, SearchBudgetExhausted
from .grid import Grid, Position, new_grid, render_ascii, to_rows
from .metrics import init_metrics
from .placement import ObjectPlacer
from .pruning import prune_to_solution
from .solver import Solution, plausibly_solvable, solve
from .terrain import TerrainSynthesizer
from .tiles import EMPTY, GOAL, OBSTACLE, START

log = get_logger("timesync.level")


@dataclass
class LevelData:
    past: Grid
    future: Grid
    start: Position
    goal: Position
    min_moves: int
    solution_path: List[str]
    obstacles: List[Position] = field(default_factory=list)
    boxes_pushed: int = 0
    options: LevelOptions = field(default_factory=LevelOptions)
    seed: Optional[int] = None
    difficulty: float = 0
    attempts: int = 0
    fallback: bool = False
    mechanisms: Dict[str, Position] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return len(self.past)

    @property
    def height(self) -> int:
        return len(self.past[0])

    def grid_for(self, timeline: str) -> Grid:
        if timeline == 'past':
            return self.past
        if timeline == 'future':
            return self.future
        raise ValueError(f"unknown timeline {timeline!r}")

    def tile_rows(self, timeline: str, overlay_obstacles: bool = False) -> List[List[int]]:
        """Row-major tiles for a renderer, optionally with obstacles stamped in."""
        rows = to_rows(self.grid_for(timeline))
        if overlay_obstacles:
            for o in self.obstacles:
                rows[o.y][o.x] = OBSTACLE
        return rows

    def render(self, timeline: str) -> str:
        return render_ascii(self.grid_for(timeline), self.obstacles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'width': self.width,
            'height': self.height,
            'past': self.tile_rows('past'),
            'future': self.tile_rows('future'),
            'start': list(self.start),
            'goal': list(self.goal),
            'obstacles': [list(o) for o in self.obstacles],
            'mechanisms': {k: list(v) for k, v in self.mechanisms.items()},
            'min_moves': self.min_moves,
            'solution_path': list(self.solution_path),
            'boxes_pushed': self.boxes_pushed,
            'options': self.options.to_dict(),
            'seed': self.seed,
            'difficulty': self.difficulty,
            'attempts': self.attempts,
            'fallback': self.fallback,
            'metrics': dict(self.metrics),
        }


def density_adjustment(failures: int) -> float:
    """Wall-density relaxation schedule: two downward steps."""
    if failures >= RELAX_AFTER[1]:
        return -2 * RELAX_STEP
    if failures >= RELAX_AFTER[0]:
        return -RELAX_STEP
    return 0.0


def build_fallback_level(width: int, height: int, options: LevelOptions) -> LevelData:
    """Open room with start and goal in opposite corners.

    With obstacles enabled one obstacle sits directly below the start and the
    path shoves it down the first column before heading across, so the push
    requirement still holds. Either way the path length is the Manhattan
    distance between the corners.
    """
    past = new_grid(width, height, EMPTY)
    future = new_grid(width, height, EMPTY)
    start = Position(0, 0)
    goal = Position(width - 1, height - 1)
    for grid in (past, future):
        grid[start.x][start.y] = START
        grid[goal.x][goal.y] = GOAL
    if options.enable_obstacles:
        obstacles = [Position(0, 1)]
        path = ['down'] * (height - 2) + ['right'] * (width - 1) + ['down']
        pushed = height - 2
    else:
        obstacles = []
        path = ['right'] * (width - 1) + ['down'] * (height - 1)
        pushed = 0
    return LevelData(
        past=past,
        future=future,
        start=start,
        goal=goal,
        min_moves=len(path),
        solution_path=path,
        obstacles=obstacles,
        boxes_pushed=pushed,
        options=options,
        fallback=True,
    )


@dataclass
class LevelGenerator:
    config: GenerationConfig = field(default_factory=GenerationConfig)
    enable_metrics: bool = True

    def __post_init__(self):
        # Never mutate the caller's config object
        self.config = replace(self.config)
        env_map = {
            'TIMESYNC_MAX_ATTEMPTS': 'max_attempts',
            'TIMESYNC_MAX_SEARCH_STATES': 'max_search_states',
        }
        for env_key, attr in env_map.items():
            raw = os.environ.get(env_key)
            if raw:
                try:
                    setattr(self.config, attr, int(raw))
                except ValueError:
                    raise LevelConfigError(f"{env_key} must be an integer, got {raw!r}") from None
        if 'TIMESYNC_ENABLE_GENERATION_METRICS' in os.environ:
            val = os.environ.get('TIMESYNC_ENABLE_GENERATION_METRICS', '').lower()
            self.enable_metrics = val not in {'0', 'false', 'no', ''}
        # Flask app config overrides (highest precedence) when generating inside a request
        from flask import current_app, has_app_context
        if has_app_context():
            cfg = current_app.config
            if cfg.get('TIMESYNC_MAX_ATTEMPTS'):
                self.config.max_attempts = int(cfg['TIMESYNC_MAX_ATTEMPTS'])
            if cfg.get('TIMESYNC_MAX_SEARCH_STATES'):
                self.config.max_search_states = int(cfg['TIMESYNC_MAX_SEARCH_STATES'])
            if 'TIMESYNC_ENABLE_GENERATION_METRICS' in cfg:
                self.enable_metrics = bool(cfg['TIMESYNC_ENABLE_GENERATION_METRICS'])
        self.config.options = LevelOptions.coerce(self.config.options)
        self.config.validate()
        # 0 is a valid deterministic seed; None => random
        if self.config.seed is None:
            self.config.seed = random.randint(1, 1_000_000)
        self.seed = self.config.seed
        self.rng = random.Random(self.seed)
        self.metrics: Dict[str, Any] = init_metrics() if self.enable_metrics else {}
        self._phase_ms: Dict[str, float] = {}

    def _bump(self, key: str, amount: int = 1) -> None:
        if self.enable_metrics:
            self.metrics[key] += amount

    def _phase(self, label: str, fn: Callable, *a, **k):
        if not self.enable_metrics:
            return fn(*a, **k)
        ps = time.perf_counter()
        try:
            return fn(*a, **k)
        finally:
            self._phase_ms[label] = self._phase_ms.get(label, 0.0) + (time.perf_counter() - ps) * 1000

    def _attempt(self, attempt: int, adjustment: float) -> Optional[LevelData]:
        cfg = self.config
        tracked = self.metrics if self.enable_metrics else None
        terrain = self._phase('terrain', TerrainSynthesizer(cfg.width, cfg.height, cfg.difficulty, self.rng, adjustment).run)
        past, future = terrain.past, terrain.future
        placement = self._phase('placement', ObjectPlacer(past, future, cfg, self.rng, tracked).run)
        if placement.ungated:
            self._bump('rejected_ungated')
            log.debug(event="attempt_rejected", attempt=attempt, reason="ungated", objectives=",".join(placement.ungated))
            return None
        plausible = self._phase(
            'precheck', plausibly_solvable, past, future, placement.start, placement.goal, placement.mechanisms,
        )
        if not plausible:
            self._bump('rejected_unsolvable')
            log.debug(event="attempt_rejected", attempt=attempt, reason="disconnected")
            return None
        try:
            solution: Optional[Solution] = self._phase(
                'solve', solve, past, future, placement.start, placement.goal, placement.obstacles,
                max_states=cfg.search_budget,
            )
        except SearchBudgetExhausted as exc:
            self._bump('rejected_budget')
            self._bump('states_explored', exc.explored)
            log.debug(event="search_budget_exhausted", attempt=attempt, explored=exc.explored, limit=exc.limit)
            return None
        if solution is None:
            self._bump('rejected_unsolvable')
            log.debug(event="attempt_rejected", attempt=attempt, reason="unsolvable")
            return None
        self._bump('states_explored', solution.states_explored)
        if solution.steps == 0 or (cfg.options.enable_obstacles and solution.boxes_pushed == 0):
            self._bump('rejected_trivial')
            log.debug(event="attempt_rejected", attempt=attempt, reason="trivial", steps=solution.steps)
            return None
        if cfg.prune_unused:
            self._phase('prune', prune_to_solution, past, future, placement.start, placement.obstacles, solution.path, tracked)
        return LevelData(
            past=past,
            future=future,
            start=placement.start,
            goal=placement.goal,
            min_moves=solution.steps,
            solution_path=list(solution.path),
            obstacles=list(placement.obstacles),
            boxes_pushed=solution.boxes_pushed,
            options=cfg.options,
            seed=self.seed,
            difficulty=cfg.difficulty,
            attempts=attempt,
            mechanisms=placement.mechanisms,
        )

    def run(self) -> LevelData:
        cfg = self.config
        began = time.perf_counter()
        level = None
        current_adjustment = 0.0
        for attempt in range(1, cfg.max_attempts + 1):
            adjustment = density_adjustment(attempt - 1)
            if adjustment != current_adjustment:
                current_adjustment = adjustment
                self._bump('density_relaxations')
            self._bump('attempts')
            level = self._attempt(attempt, adjustment)
            if level is not None:
                break
        if level is None:
            log.warn(event="generation_fallback", seed=self.seed, attempts=cfg.max_attempts, width=cfg.width, height=cfg.height)
            level = build_fallback_level(cfg.width, cfg.height, cfg.options)
            level.seed = self.seed
            level.difficulty = cfg.difficulty
            level.attempts = cfg.max_attempts
            if self.enable_metrics:
                self.metrics['fallback_used'] = True
        if self.enable_metrics:
            self.metrics['runtime_ms'] = int((time.perf_counter() - began) * 1000)
            self.metrics['phase_ms'] = {k: int(v) for k, v in self._phase_ms.items()}
            level.metrics = self.metrics
        log.info(
            event="level_generated",
            seed=self.seed,
            attempts=level.attempts,
            min_moves=level.min_moves,
            boxes_pushed=level.boxes_pushed,
            fallback=level.fallback,
        )
        return level


def generate(
    width: int,
    height: int,
    difficulty: float = 5,
    options: LevelOptions | Mapping[str, Any] | None = None,
    *,
    seed: Optional[int] = None,
    **overrides,
) -> LevelData:
    """Generate a verified-solvable level.

    ``overrides`` are forwarded to GenerationConfig (``max_attempts``,
    ``max_search_states``, ``prune_unused``).
    """
    config = GenerationConfig(
        width=width,
        height=height,
        difficulty=difficulty,
        options=LevelOptions.coerce(options),
        seed=seed,
        **overrides,
    )
    return LevelGenerator(config).run()


__all__ = ["LevelData", "LevelGenerator", "generate", "build_fallback_level", "density_adjustment"]
