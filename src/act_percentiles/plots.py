import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from act_percentiles.calculators.score_groups import TrendLine

logger = logging.getLogger(__name__)

# -------------------- Plots --------------------

def scatter_with_trend(
    aggregate: pd.DataFrame,
    x_col: str,
    y_col: str,
    trend: TrendLine | None = None,
    title: str | None = None,
    xlabel: str | None = None,
    ylabel: str | None = None,
    figsize: tuple = (10, 6),
    point_color: str = "steelblue",
    line_color: str = "darkred",
    point_size: float = 60,
    grid_y: bool = True,
    output_path: str | Path | None = None,
):
    """
    Parameters
    ----------
    aggregate : pandas.DataFrame
        One row per score with the averaged outcome.

    x_col : str
        Column name for the score (x-axis).

    y_col : str
        Column name for the averaged outcome (y-axis).

    trend : TrendLine, optional
        Least squares fit drawn across the observed x range.

    title, xlabel, ylabel : str, optional
        Text labels. If None, column names are used.

    figsize : tuple
        Figure size in inches.

    point_color, line_color : str
        Colors for the scatter points and the trend line.

    point_size : float
        Marker area for the points.

    grid_y : bool
        If True, add a faint horizontal grid.

    output_path : str or Path, optional
        Save the figure here instead of showing it.
    """
    sns.set(style = "whitegrid", font_scale = 1.2)

    fig, ax = plt.subplots(figsize = figsize)

    sns.scatterplot(
        data = aggregate,
        x = x_col,
        y = y_col,
        color = point_color,
        s = point_size,
        ax = ax,
    )

    # trend line over the observed range
    if trend is not None and len(aggregate) > 0:
        xs = np.linspace(aggregate[x_col].min(), aggregate[x_col].max(), 100)
        ax.plot(xs, trend.predict(xs), color = line_color, linewidth = 2,
                label = f"y = {trend.intercept:.2f} + {trend.slope:.3f}x")
        ax.legend(loc = "upper left")

    ax.set_xlabel(xlabel if xlabel is not None else x_col)
    ax.set_ylabel(ylabel if ylabel is not None else y_col)

    if grid_y:
        ax.grid(True, axis = "y", linestyle = "--", alpha = 0.2)

    ax.set_title(title if title is not None else f"{y_col} by {x_col}",
                 pad = 15, fontweight = "bold")

    fig.tight_layout()
    _finish(fig, output_path)
    return fig


def probability_bars(
    table: pd.DataFrame,
    title: str | None = None,
    xlabel: str = "score",
    figsize: tuple = (12, 5),
    palette: str = "pastel",
    output_path: str | Path | None = None,
):
    """
    Parameters
    ----------
    table : pandas.DataFrame
        Probability table with "score" and "probability" columns.

    title, xlabel : str, optional
        Text labels.

    figsize : tuple
        Figure size in inches.

    palette : str
        Seaborn palette name, sized to the number of scores.

    output_path : str or Path, optional
        Save the figure here instead of showing it.
    """
    sns.set(style = "whitegrid", font_scale = 1.2)

    fig, ax = plt.subplots(figsize = figsize)

    sns.barplot(
        data = table,
        x = "score",
        y = "probability",
        hue = "score",
        palette = sns.color_palette(palette, n_colors = len(table)),
        legend = False,
        ax = ax,
    )

    ax.set_xlabel(xlabel)
    ax.set_ylabel("probability")
    ax.set_title(title if title is not None else "Score distribution",
                 pad = 15, fontweight = "bold")

    fig.tight_layout()
    _finish(fig, output_path)
    return fig


# -------------------- Helper --------------------

def _finish(fig, output_path: str | Path | None):
    if output_path is None:
        plt.show()
        return

    path = Path(output_path)
    path.parent.mkdir(parents = True, exist_ok = True)
    fig.savefig(path, dpi = 150)
    logger.info(f"Saved figure to {path}")
