"""
Score Probability Table Calculator

This module turns a column of discrete scores into a probability table:
one row per possible score with its observed share, cumulative share and
display-ready percentage/percentile strings.

Bin membership is half-open: a value belongs to the first bin with
edge_low <= value < edge_high, and the final bin also includes its upper
edge. Every value must land in exactly one bin.
"""

from dataclasses import dataclass
import logging
from typing import Callable, Optional, Sequence, Union
import numpy as np
import pandas as pd

from act_percentiles.utilities.common import format_share

logger = logging.getLogger(__name__)

TABLE_COLUMNS = [
    'score',
    'count',
    'probability',
    'percentage',
    'cumulative_probability',
    'percentile',
]


@dataclass(frozen=True)
class ScorePercentile:
    """Display values for a single score."""
    percentage: str
    percentile: str


def bin_edges(lo: int, hi: int) -> np.ndarray:
    """
    Build unit-width integer edges for scores in [lo, hi]

    Each score owns the bin that starts at it, so the edges run one past
    the highest score.

    Example:
        >>> bin_edges(25, 28).tolist()
        [25, 26, 27, 28, 29]
    """
    if hi < lo:
        raise ValueError(f"Score range is empty: lo={lo}, hi={hi}")

    return np.arange(int(lo), int(hi) + 2)


def _validate_edges(edges: Sequence[Union[int, float]]) -> np.ndarray:
    edges = np.asarray(edges)

    if edges.ndim != 1 or len(edges) < 2:
        raise ValueError(f"Need at least two bin edges, got {edges.tolist()}")

    if not np.all(np.equal(np.mod(edges, 1), 0)):
        raise ValueError(f"Bin edges must be integers, got {edges.tolist()}")

    if not np.all(np.diff(edges) == 1):
        raise ValueError(
            f"Bin edges must be contiguous unit-width integers, got {edges.tolist()}"
        )

    return edges.astype(int)


def bin_counts(
    values: Union[Sequence[float], pd.Series, np.ndarray],
    edges: Sequence[int]
) -> np.ndarray:
    """
    Count values per bin

    Args:
        values: Raw discrete values
        edges: Ascending unit-width integer edges (n edges -> n - 1 bins)

    Returns:
        Array of counts, one per bin

    Raises:
        ValueError: If edges are malformed, or a value is missing or falls
            outside [edges[0], edges[-1]]
    """
    edges = _validate_edges(edges)
    values = np.asarray(values, dtype=float)

    n_bins = len(edges) - 1
    counts = np.zeros(n_bins, dtype=int)
    assigned = np.zeros(len(values), dtype=bool)

    for i in range(n_bins):
        low, high = edges[i], edges[i + 1]
        if i == n_bins - 1:
            in_bin = (values >= low) & (values <= high)
        else:
            in_bin = (values >= low) & (values < high)

        # first matching bin wins
        in_bin &= ~assigned
        counts[i] = int(in_bin.sum())
        assigned |= in_bin

    if not assigned.all():
        uncovered = sorted(set(values[~assigned].tolist()), key=str)
        raise ValueError(
            f"{int((~assigned).sum())} value(s) fall outside bin edges "
            f"[{edges[0]}, {edges[-1]}]: {uncovered}"
        )

    return counts


def build_probability_table(
    values: Union[Sequence[float], pd.Series, np.ndarray],
    edges: Sequence[int]
) -> pd.DataFrame:
    """
    Build the per-score probability table

    Rows are keyed by each bin's lower edge. Scores with no observations
    are kept with a count and probability of zero.

    Args:
        values: Raw discrete scores
        edges: Ascending unit-width integer edges

    Returns:
        DataFrame with columns score, count, probability

    Raises:
        ValueError: If a value is missing, fractional, or has no score row
            in [edges[0], edges[-2]]
    """
    values = np.asarray(values, dtype=float)

    if len(values) == 0:
        raise ValueError("Cannot build a probability table from zero values")

    edges = _validate_edges(edges)
    lo, hi = edges[0], edges[-2]

    # every value must be a score key of the table
    is_score = (values >= lo) & (values <= hi) & (np.mod(values, 1) == 0)
    if not is_score.all():
        bad = sorted(set(values[~is_score].tolist()), key=str)
        raise ValueError(
            f"{int((~is_score).sum())} value(s) fall outside the scores "
            f"{lo}-{hi} or are not whole scores: {bad}"
        )

    counts = bin_counts(np.sort(values), edges)
    total = int(counts.sum())

    table = pd.DataFrame({
        'score': edges[:-1],
        'count': counts,
        'probability': counts / total,
    })

    empty = table.loc[table['count'] == 0, 'score'].tolist()
    if empty:
        logger.debug(f"Scores with no observations: {empty}")

    logger.info(
        f"Binned {total:,} values into {len(table)} scores "
        f"({table['score'].min()}-{table['score'].max()})"
    )
    return table


def add_percentiles(table: pd.DataFrame, decimals: int = 3) -> pd.DataFrame:
    """
    Add cumulative probability and display columns

    cumulative_probability is the running sum of probability in ascending
    score order. percentage and percentile are display strings built from
    the probabilities rounded to `decimals` places; the numeric columns keep
    full precision.

    Args:
        table: Output of build_probability_table
        decimals: Rounding applied before scaling to a percentage

    Returns:
        New DataFrame with columns in TABLE_COLUMNS order
    """
    table = table.sort_values('score').reset_index(drop=True)

    table['cumulative_probability'] = table['probability'].cumsum()
    table['percentage'] = table['probability'].apply(
        lambda p: format_share(p, decimals, suffix='%')
    )
    table['percentile'] = table['cumulative_probability'].apply(
        lambda p: format_share(p, decimals, suffix=' th')
    )

    return table[TABLE_COLUMNS]


def score_probability_table(
    values: Union[Sequence[float], pd.Series, np.ndarray],
    edges: Sequence[int],
    decimals: int = 3
) -> pd.DataFrame:
    """Bin scores and derive percentiles in one call."""
    return add_percentiles(build_probability_table(values, edges), decimals)


def lookup_percentile(table: pd.DataFrame, score: int) -> Optional[ScorePercentile]:
    """
    Look up the display percentage and percentile for a score

    Args:
        table: Probability table with percentage/percentile columns
        score: Score to look up

    Returns:
        ScorePercentile, or None if the score has no row in the table

    Example:
        >>> table = score_probability_table([26, 27, 27, 28], [26, 27, 28, 29])
        >>> lookup_percentile(table, 27)
        ScorePercentile(percentage='50%', percentile='75 th')
        >>> lookup_percentile(table, 10) is None
        True
    """
    match = table.loc[table['score'] == score, ['percentage', 'percentile']]

    if match.empty:
        logger.debug(f"No probability row for score {score}")
        return None

    row = match.iloc[0]
    return ScorePercentile(percentage=row['percentage'], percentile=row['percentile'])


def make_lookup(table: pd.DataFrame) -> Callable[[int], Optional[ScorePercentile]]:
    """Bind lookup_percentile to a table."""
    def lookup(score: int) -> Optional[ScorePercentile]:
        return lookup_percentile(table, score)

    return lookup
