"""Tile legend helpers for the level API.

Isolated from the route module so the CLI can print the same legend.
"""

from timesync.level.tiles import TILE_CHARS, TILE_NAMES


def tile_legend() -> list[dict]:
    return [{"code": code, "name": TILE_NAMES[code], "char": TILE_CHARS[code]} for code in sorted(TILE_NAMES)]
