# Tile code constants shared by every timeline grid and by renderers.
# Codes are part of the external contract; never renumber them.
EMPTY = 0
WALL = 1
START = 2
OBSTACLE = 3  # overlay only; obstacles are tracked as positions, not grid cells
GOAL = 4
KEY = 5
DOOR = 6
CHEST = 7
LEVER = 8
LEVER_GATE = 9

TILE_NAMES = {
    EMPTY: "empty",
    WALL: "wall",
    START: "start",
    OBSTACLE: "obstacle",
    GOAL: "goal",
    KEY: "key",
    DOOR: "door",
    CHEST: "chest",
    LEVER: "lever",
    LEVER_GATE: "lever_gate",
}

# ASCII glyphs for CLI output and test fixtures
TILE_CHARS = {
    EMPTY: ".",
    WALL: "#",
    START: "S",
    OBSTACLE: "B",
    GOAL: "G",
    KEY: "k",
    DOOR: "D",
    CHEST: "C",
    LEVER: "l",
    LEVER_GATE: "|",
}
CHAR_TILES = {ch: code for code, ch in TILE_CHARS.items()}

# Tiles an obstacle may be pushed onto (must hold in both timelines)
FLOOR_TILES = frozenset({EMPTY, START})
# Tiles the pruner must never convert to wall
PROTECTED_TILES = frozenset({START, GOAL, KEY, DOOR, CHEST, LEVER, LEVER_GATE})
KEY_TILES = frozenset({KEY, DOOR, CHEST})
LEVER_TILES = frozenset({LEVER, LEVER_GATE})


def tile_name(code: int) -> str:
    """Name for a tile code; unknown codes read as empty floor."""
    return TILE_NAMES.get(code, TILE_NAMES[EMPTY])


def tile_char(code: int) -> str:
    return TILE_CHARS.get(code, TILE_CHARS[EMPTY])


__all__ = [
    "EMPTY",
    "WALL",
    "START",
    "OBSTACLE",
    "GOAL",
    "KEY",
    "DOOR",
    "CHEST",
    "LEVER",
    "LEVER_GATE",
    "TILE_NAMES",
    "TILE_CHARS",
    "CHAR_TILES",
    "FLOOR_TILES",
    "PROTECTED_TILES",
    "KEY_TILES",
    "LEVER_TILES",
    "tile_name",
    "tile_char",
]
