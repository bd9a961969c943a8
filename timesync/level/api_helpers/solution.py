"""Solution path formatting for hints.

A solution is stored as one direction name per move. Players read hints as
runs, so consecutive repeats collapse into ``RIGHT X3`` style steps.
"""

from typing import List, Sequence


def compress_solution(path: Sequence[str]) -> List[str]:
    """Collapse repeated directions: ['right', 'right', 'down'] -> ['RIGHT X2', 'DOWN']."""
    steps: List[str] = []
    prev = None
    run = 0
    for name in path:
        name = name.upper()
        if name == prev:
            run += 1
            continue
        if prev is not None:
            steps.append(prev if run == 1 else f"{prev} X{run}")
        prev, run = name, 1
    if prev is not None:
        steps.append(prev if run == 1 else f"{prev} X{run}")
    return steps


def format_hint(path: Sequence[str], limit: int | None = None) -> str:
    """Human readable hint; ``limit`` reveals only the first N compressed steps."""
    steps = compress_solution(path)
    if limit is not None and limit < len(steps):
        return ", ".join(steps[:limit]) + ", ..."
    return ", ".join(steps)
