from typing import Dict


def init_metrics() -> Dict[str, int | float | bool | dict]:
    return {
        'attempts': 0,
        'rejected_unsolvable': 0,
        'rejected_budget': 0,
        'rejected_trivial': 0,
        'rejected_ungated': 0,
        'density_relaxations': 0,
        'placement_fallbacks': 0,
        'states_explored': 0,
        'tiles_pruned_past': 0,
        'tiles_pruned_future': 0,
        'fallback_used': False,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
