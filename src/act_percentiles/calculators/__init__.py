from .probability_table import (
    ScorePercentile,
    bin_edges,
    bin_counts,
    build_probability_table,
    add_percentiles,
    score_probability_table,
    lookup_percentile,
    make_lookup,
)
from .score_groups import (
    TrendLine,
    join_probability_table,
    mean_by_score,
    fit_trend_line,
    summarize_scores,
)
