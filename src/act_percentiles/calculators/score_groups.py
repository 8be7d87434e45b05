"""
Score group calculations

Attaches the probability table to raw records, averages an outcome per
score and fits a least-squares trend through the per-score means.
"""

from dataclasses import dataclass
import logging
from typing import Dict, Union
import numpy as np
import pandas as pd
from scipy import stats

from act_percentiles.utilities.common import validate_required_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendLine:
    """Ordinary least squares fit y = intercept + slope * x"""
    slope: float
    intercept: float
    r_value: float
    p_value: float
    stderr: float

    def predict(self, x: Union[float, np.ndarray, pd.Series]):
        return self.intercept + self.slope * np.asarray(x, dtype=float)


def join_probability_table(
    raw: pd.DataFrame,
    table: pd.DataFrame,
    score_column: str = 'act'
) -> pd.DataFrame:
    """
    Left-join the probability table onto raw records by score

    Every raw row is kept, in its original order. Table rows that match
    no raw row are dropped.

    Args:
        raw: Raw records
        table: Probability table keyed by 'score'
        score_column: Score column in the raw records

    Returns:
        Raw columns followed by the probability table columns
    """
    if not validate_required_columns(raw, [score_column], "raw records"):
        raise ValueError(f"Raw records have no '{score_column}' column")

    if table['score'].duplicated().any():
        raise ValueError("Probability table has duplicate scores")

    joined = raw.merge(
        table,
        how='left',
        left_on=score_column,
        right_on='score',
        validate='many_to_one',
    )

    if score_column != 'score':
        joined = joined.drop(columns=['score'])

    unmatched = int(joined['probability'].isna().sum())
    if unmatched:
        logger.warning(f"{unmatched:,} records have no probability row")

    logger.info(f"Joined probability table onto {len(joined):,} records")
    return joined


def mean_by_score(
    joined: pd.DataFrame,
    score_column: str = 'act',
    value_column: str = 'gpa'
) -> pd.DataFrame:
    """
    Average an outcome per observed score

    Missing values are left out of both the sum and the count. Only
    scores that occur in `joined` get a row.

    Args:
        joined: Records with a score and an outcome column
        score_column: Grouping column
        value_column: Column to average

    Returns:
        DataFrame with the score column, mean_<value_column> and n
        (non-missing values per score), ascending by score
    """
    required = [score_column, value_column]
    if not validate_required_columns(joined, required, "joined records"):
        raise ValueError(f"Joined records need columns {required}")

    aggregate = joined.groupby(score_column, as_index=False, sort=True).agg(
        **{
            f'mean_{value_column}': (value_column, 'mean'),
            'n': (value_column, 'count'),
        }
    )

    logger.info(f"Averaged {value_column} over {len(aggregate)} observed scores")
    return aggregate


def fit_trend_line(
    aggregate: pd.DataFrame,
    x_column: str = 'act',
    y_column: str = 'mean_gpa'
) -> TrendLine:
    """
    Fit an ordinary least squares line through the aggregate table

    Rows with a missing y are skipped.

    Raises:
        ValueError: If fewer than two usable points remain
    """
    points = aggregate[[x_column, y_column]].dropna()

    if len(points) < 2:
        raise ValueError(
            f"Need at least two points to fit a trend line, got {len(points)}"
        )

    result = stats.linregress(points[x_column].astype(float), points[y_column].astype(float))

    trend = TrendLine(
        slope=float(result.slope),
        intercept=float(result.intercept),
        r_value=float(result.rvalue),
        p_value=float(result.pvalue),
        stderr=float(result.stderr),
    )
    logger.info(
        f"Trend line: {y_column} = {trend.intercept:.3f} + {trend.slope:.3f} * {x_column} "
        f"(r = {trend.r_value:.3f})"
    )
    return trend


def summarize_scores(
    raw: pd.DataFrame,
    score_column: str = 'act',
    value_column: str = 'gpa'
) -> Dict[str, float]:
    """
    Generate summary statistics for the score and outcome columns

    Args:
        raw: Raw records
        score_column: Score column
        value_column: Outcome column

    Returns:
        Dictionary of summary statistics
    """
    scores = raw[score_column].dropna()
    values = raw[value_column]

    return {
        'n_records': len(raw),
        f'n_missing_{value_column}': int(values.isna().sum()),
        f'min_{score_column}': float(scores.min()) if len(scores) > 0 else 0,
        f'max_{score_column}': float(scores.max()) if len(scores) > 0 else 0,
        f'mean_{score_column}': float(scores.mean()) if len(scores) > 0 else 0,
        f'median_{score_column}': float(scores.median()) if len(scores) > 0 else 0,
        f'std_{score_column}': float(scores.std()) if len(scores) > 1 else 0,
        f'mean_{value_column}': float(values.mean()) if values.notna().any() else 0,
    }
