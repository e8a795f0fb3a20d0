"""
Resolution, ranking and dose-equivalence over a built catalog index.
"""

from omeq.process.equivalence import (
    OmeqCalculator,
    compute_omeq,
    default_calculator,
    infer_route,
)
from omeq.process.ranking import rank, rank_simple, score_options
from omeq.process.resolution import Resolution, resolve
from omeq.process.row import RowEvaluation, evaluate_row, format_omeq, parse_dose

__all__ = [
    "OmeqCalculator",
    "Resolution",
    "RowEvaluation",
    "compute_omeq",
    "default_calculator",
    "evaluate_row",
    "format_omeq",
    "infer_route",
    "parse_dose",
    "rank",
    "rank_simple",
    "resolve",
    "score_options",
]
