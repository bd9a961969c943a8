"""Grid model helpers.

Grids are column-major (``grid[x][y]``) lists of integer tile codes, the same
layout the generator has always used. Row-major output is produced only at the
JSON/CLI boundary via :func:`to_rows`.
"""
from __future__ import annotations

from typing import Iterable, Iterator, List, NamedTuple, Sequence

from .tiles import EMPTY, WALL, CHAR_TILES, OBSTACLE, tile_char


class Position(NamedTuple):
    x: int
    y: int

    def shifted(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


Grid = List[List[int]]

ORTHOGONAL = ((0, -1), (0, 1), (-1, 0), (1, 0))


def new_grid(width: int, height: int, fill: int = EMPTY) -> Grid:
    return [[fill for _ in range(height)] for _ in range(width)]


def copy_grid(grid: Grid) -> Grid:
    return [list(col) for col in grid]


def grid_size(grid: Grid) -> tuple[int, int]:
    return len(grid), len(grid[0]) if grid else 0


def in_bounds(grid: Grid, pos: Position) -> bool:
    return 0 <= pos.x < len(grid) and 0 <= pos.y < len(grid[0])


def tile_at(grid: Grid, pos: Position) -> int:
    return grid[pos.x][pos.y]


def set_tile(grid: Grid, pos: Position, code: int) -> None:
    grid[pos.x][pos.y] = code


def is_blocked(grid: Grid, pos: Position) -> bool:
    """Out of bounds or wall."""
    return not in_bounds(grid, pos) or grid[pos.x][pos.y] == WALL


def manhattan(a: Position, b: Position) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def neighbors4(grid: Grid, pos: Position) -> Iterator[Position]:
    """In-bounds orthogonal neighbours."""
    for dx, dy in ORTHOGONAL:
        n = pos.shifted(dx, dy)
        if in_bounds(grid, n):
            yield n


def iter_cells(grid: Grid) -> Iterator[Position]:
    width, height = grid_size(grid)
    for x in range(width):
        for y in range(height):
            yield Position(x, y)


def count_tiles(grid: Grid, code: int) -> int:
    return sum(col.count(code) for col in grid)


def to_rows(grid: Grid) -> List[List[int]]:
    """Row-major copy (``rows[y][x]``) for renderers and JSON payloads."""
    width, height = grid_size(grid)
    return [[grid[x][y] for x in range(width)] for y in range(height)]


def from_rows(rows: Sequence[Sequence[int]]) -> Grid:
    if not rows or not rows[0]:
        raise ValueError("grid rows must be non-empty")
    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise ValueError("grid rows must all have the same length")
    return [[int(rows[y][x]) for y in range(len(rows))] for x in range(width)]


def parse_ascii(lines: Iterable[str]) -> tuple[Grid, List[Position]]:
    """Build a grid from ASCII art (see ``tiles.TILE_CHARS``).

    Obstacle glyphs are lifted out into a position list and leave floor
    behind, since obstacles never live inside a grid.
    """
    rows: List[List[int]] = []
    obstacles: List[Position] = []
    for y, line in enumerate(l.strip() for l in lines if l.strip()):
        row = []
        for x, ch in enumerate(line):
            if ch not in CHAR_TILES:
                raise ValueError(f"unknown tile glyph {ch!r} at {(x, y)}")
            code = CHAR_TILES[ch]
            if code == OBSTACLE:
                obstacles.append(Position(x, y))
                code = EMPTY
            row.append(code)
        rows.append(row)
    return from_rows(rows), obstacles


def render_ascii(grid: Grid, obstacles: Iterable[Position] = (), agent: Position | None = None) -> str:
    width, height = grid_size(grid)
    boxes = set(obstacles)
    lines = []
    for y in range(height):
        chars = []
        for x in range(width):
            p = Position(x, y)
            if agent is not None and p == agent:
                chars.append("@")
            elif p in boxes:
                chars.append(tile_char(OBSTACLE))
            else:
                chars.append(tile_char(grid[x][y]))
        lines.append("".join(chars))
    return "\n".join(lines)


__all__ = [
    "Position",
    "Grid",
    "ORTHOGONAL",
    "new_grid",
    "copy_grid",
    "grid_size",
    "in_bounds",
    "tile_at",
    "set_tile",
    "is_blocked",
    "manhattan",
    "neighbors4",
    "iter_cells",
    "count_tiles",
    "to_rows",
    "from_rows",
    "parse_ascii",
    "render_ascii",
]
