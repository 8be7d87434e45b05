"""
ACT Score Percentiles

Bin ACT scores into a probability table, derive percentile ranks, attach
them to student records and relate score to average GPA.
"""

__version__ = "0.1.0"

from .calculators.probability_table import (
    ScorePercentile,
    bin_edges,
    score_probability_table,
    lookup_percentile,
    make_lookup,
)
from .calculators.score_groups import (
    TrendLine,
    join_probability_table,
    mean_by_score,
    fit_trend_line,
)
from .datasets import load_dataset

__all__ = [
    "ScorePercentile",
    "bin_edges",
    "score_probability_table",
    "lookup_percentile",
    "make_lookup",
    "TrendLine",
    "join_probability_table",
    "mean_by_score",
    "fit_trend_line",
    "load_dataset",
]
