"""Score resolution and lineup optimization."""

from .lineup_optimizer import FLEX_CATEGORIES, LineupOptimizer, optimize
from .score_resolver import ScoreResolver, compute_from_raw_stats, resolve_batch, resolve_points

__all__ = [
    "FLEX_CATEGORIES",
    "LineupOptimizer",
    "ScoreResolver",
    "compute_from_raw_stats",
    "optimize",
    "resolve_batch",
    "resolve_points",
]
